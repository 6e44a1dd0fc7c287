"""FastAPI application for the notepad.

Endpoints:
  GET    /notes                   — List notes (``?q=`` filters titles, newest first)
  POST   /notes                   — Create a note and make it active
  GET    /notes/active            — The active note
  GET    /notes/{id}              — A single note
  POST   /notes/{id}/select       — Make a note active
  PATCH  /notes/{id}              — Rename a note
  PUT    /notes/{id}/content      — Replace a note's plaintext
  DELETE /notes/{id}              — Delete a note
  GET    /notes/{id}/stats        — Word/character/line counts
  GET    /notes/{id}/export       — Download as .txt (PDF/DOCX not available)
  POST   /notes/{id}/transform    — Run a text utility, optionally saving the result
  POST   /transform               — Run a text utility on arbitrary text
  GET    /session                 — Edit session state
  POST   /session/edits           — Feed editing-surface content to the session
  POST   /session/flush           — Commit a pending edit immediately
  GET    /health                  — Service health
  GET    /metrics                 — Prometheus metrics
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any, Optional
from urllib.parse import quote

from fastapi import Depends, FastAPI, HTTPException, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from starlette.middleware.base import BaseHTTPMiddleware

from notepad.config import Settings, settings as default_settings
from notepad.export import ExportFormat, ExportNotSupportedError, export_note
from notepad.metrics import HTTP_DURATION, HTTP_REQUESTS, TEXT_TRANSFORMS
from notepad.models import CamelModel, Note
from notepad.normalizer import TextOperation, document_stats, transform
from notepad.persistence import KeyValueStore, PersistenceAdapter, build_key_value_store
from notepad.session import EditSessionController, SessionState
from notepad.store import NoteStore
from notepad.timers import AsyncioScheduler, Scheduler

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)

# Endpoints excluded from HTTP metrics
_METRICS_EXCLUDE = {"/metrics", "/openapi.json", "/docs", "/redoc"}


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request count and duration for Prometheus."""

    async def dispatch(self, request: Request, call_next):
        """Wrap each request with timing and counting."""
        path = request.url.path
        if path in _METRICS_EXCLUDE:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        # Label by route template so note ids don't explode cardinality
        route = request.scope.get("route")
        endpoint = getattr(route, "path", path)
        HTTP_REQUESTS.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        HTTP_DURATION.labels(endpoint=endpoint).observe(elapsed)
        return response


# --- Request / Response models ---


class CreateNoteRequest(CamelModel):
    """Create-note body; a blank title gets a generated placeholder."""

    title: Optional[str] = None


class RenameRequest(CamelModel):
    title: str


class ContentRequest(CamelModel):
    """Replacement content, already canonical plaintext."""

    content: str


class EditRequest(CamelModel):
    """Raw editing-surface content (markup with ``<br>`` line breaks)."""

    content: str


class TransformRequest(CamelModel):
    text: str
    operation: TextOperation


class NoteTransformRequest(CamelModel):
    operation: TextOperation
    apply: bool = False


class NoteListResponse(CamelModel):
    notes: list[Note]
    active_id: str
    count: int


class NoteStateResponse(CamelModel):
    """Result of a mutation: the affected note plus selection and durability."""

    note: Optional[Note]
    active_id: str
    durable: bool


class TransformResponse(CamelModel):
    operation: TextOperation
    text: str
    applied: bool = False
    durable: Optional[bool] = None


class StatsResponse(CamelModel):
    words: int
    characters: int
    lines: int
    reading_minutes: int
    reading_label: str


class SessionResponse(CamelModel):
    note_id: Optional[str]
    state: SessionState
    has_pending: bool
    is_saving: bool
    commit_count: int
    editable_content: str
    committed: Optional[bool] = None
    durable: bool


# --- Dependencies ---


def get_store(request: Request) -> NoteStore:
    return request.app.state.store


def get_session(request: Request) -> EditSessionController:
    return request.app.state.session


def _require_note(store: NoteStore, note_id: str) -> Note:
    note = store.get(note_id)
    if note is None:
        raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
    return note


def _state(store: NoteStore, note: Optional[Note]) -> NoteStateResponse:
    return NoteStateResponse(note=note, active_id=store.active_id, durable=store.durable)


def _session_state(
    session: EditSessionController,
    store: NoteStore,
    committed: Optional[bool] = None,
) -> SessionResponse:
    return SessionResponse(
        note_id=session.note_id,
        state=session.state,
        has_pending=session.has_pending,
        is_saving=session.is_saving,
        commit_count=session.commit_count,
        editable_content=session.editable_content,
        committed=committed,
        durable=store.durable,
    )


# --- Application factory ---


def create_app(
    config: Optional[Settings] = None,
    kv: Optional[KeyValueStore] = None,
    scheduler: Optional[Scheduler] = None,
) -> FastAPI:
    """Build the API with its own store, persistence adapter and edit session."""
    config = config or default_settings
    persistence = PersistenceAdapter(
        kv if kv is not None else build_key_value_store(config),
        notes_key=config.notes_key,
        active_key=config.active_key,
    )
    store = NoteStore(persistence)
    session = EditSessionController(
        store,
        scheduler or AsyncioScheduler(),
        debounce_ms=config.debounce_ms,
        saving_indicator_ms=config.saving_indicator_ms,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup: hydrate the store and bind the edit session."""
        logger.info("Hydrating note store...")
        active = store.initialize()
        session.attach()
        logger.info("Note store ready — %d notes, active=%s", store.count, active.id)
        yield
        if session.flush():
            logger.info("Committed pending edit on shutdown.")
        logger.info("Notepad API shut down.")

    app = FastAPI(title="Notepad API", version="1.0.0", lifespan=lifespan)
    app.state.settings = config
    app.state.store = store
    app.state.session = session

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:
    # --- Notes ---

    @app.get("/notes", response_model=NoteListResponse)
    async def list_notes(
        q: Optional[str] = None,
        store: NoteStore = Depends(get_store),
    ) -> NoteListResponse:
        """List notes in tab order, or title matches newest first when ``q`` is set."""
        notes = store.search(q) if q is not None else store.notes
        return NoteListResponse(notes=notes, active_id=store.active_id, count=len(notes))

    @app.post("/notes", response_model=NoteStateResponse, status_code=201)
    async def create_note(
        request: CreateNoteRequest,
        store: NoteStore = Depends(get_store),
        session: EditSessionController = Depends(get_session),
    ) -> NoteStateResponse:
        """Create a note and switch the edit session to it."""
        session.flush()
        note = store.create(request.title)
        session.attach()
        return _state(store, note)

    @app.get("/notes/active", response_model=Note)
    async def get_active_note(store: NoteStore = Depends(get_store)) -> Note:
        """The note targeted by the editor and the text utilities."""
        note = store.active_note()
        if note is None:
            raise HTTPException(status_code=503, detail="Note store not initialized")
        return note

    @app.get("/notes/{note_id}", response_model=Note)
    async def get_note(note_id: str, store: NoteStore = Depends(get_store)) -> Note:
        return _require_note(store, note_id)

    @app.post("/notes/{note_id}/select", response_model=NoteStateResponse)
    async def select_note(
        note_id: str,
        store: NoteStore = Depends(get_store),
        session: EditSessionController = Depends(get_session),
    ) -> NoteStateResponse:
        """Make a note active; pending edits for the previous note are committed first."""
        session.flush()
        if not store.select(note_id):
            raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
        session.attach()
        return _state(store, store.active_note())

    @app.patch("/notes/{note_id}", response_model=NoteStateResponse)
    async def rename_note(
        note_id: str,
        request: RenameRequest,
        store: NoteStore = Depends(get_store),
    ) -> NoteStateResponse:
        """Rename a note; a blank title keeps the current one."""
        note = store.rename(note_id, request.title)
        if note is None:
            raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
        return _state(store, note)

    @app.put("/notes/{note_id}/content", response_model=NoteStateResponse)
    async def replace_content(
        note_id: str,
        request: ContentRequest,
        store: NoteStore = Depends(get_store),
        session: EditSessionController = Depends(get_session),
    ) -> NoteStateResponse:
        """Overwrite a note's plaintext; supersedes any pending edit for that note."""
        attached = note_id == session.note_id
        if attached:
            session.discard()
        note = store.update_content(note_id, request.content)
        if note is None:
            raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
        if attached:
            session.attach()
        return _state(store, note)

    @app.delete("/notes/{note_id}", response_model=NoteStateResponse)
    async def delete_note(
        note_id: str,
        store: NoteStore = Depends(get_store),
        session: EditSessionController = Depends(get_session),
    ) -> NoteStateResponse:
        """Delete a note; the collection is never left empty."""
        if note_id == session.note_id:
            session.discard()
        if not store.delete(note_id):
            raise HTTPException(status_code=404, detail=f"Note {note_id} not found")
        session.attach()
        return _state(store, store.active_note())

    @app.get("/notes/{note_id}/stats", response_model=StatsResponse)
    async def note_stats(note_id: str, store: NoteStore = Depends(get_store)) -> StatsResponse:
        stats = document_stats(_require_note(store, note_id).content)
        return StatsResponse(
            words=stats.words,
            characters=stats.characters,
            lines=stats.lines,
            reading_minutes=stats.reading_minutes,
            reading_label=stats.reading_label,
        )

    @app.get("/notes/{note_id}/export")
    async def export(
        note_id: str,
        fmt: ExportFormat = Query(ExportFormat.TXT, alias="format"),
        store: NoteStore = Depends(get_store),
    ) -> Response:
        """Download a note's plaintext."""
        note = _require_note(store, note_id)
        try:
            exported = export_note(note, fmt)
        except ExportNotSupportedError as exc:
            raise HTTPException(status_code=501, detail=str(exc)) from exc
        disposition = f"attachment; filename*=UTF-8''{quote(exported.filename)}"
        return Response(
            content=exported.body,
            media_type=exported.media_type,
            headers={"Content-Disposition": disposition},
        )

    @app.post("/notes/{note_id}/transform", response_model=TransformResponse)
    async def transform_note(
        note_id: str,
        request: NoteTransformRequest,
        store: NoteStore = Depends(get_store),
        session: EditSessionController = Depends(get_session),
    ) -> TransformResponse:
        """Preview a text utility on a note, or save the result with ``apply``."""
        attached = note_id == session.note_id
        if attached:
            session.flush()
        note = _require_note(store, note_id)
        TEXT_TRANSFORMS.labels(operation=request.operation.value).inc()
        result = transform(note.content, request.operation)
        if not request.apply:
            return TransformResponse(operation=request.operation, text=result)

        store.update_content(note_id, result)
        if attached:
            session.attach()
        return TransformResponse(
            operation=request.operation,
            text=result,
            applied=True,
            durable=store.durable,
        )

    @app.post("/transform", response_model=TransformResponse)
    async def transform_text(request: TransformRequest) -> TransformResponse:
        """Run a text utility on arbitrary text; nothing is stored."""
        TEXT_TRANSFORMS.labels(operation=request.operation.value).inc()
        return TransformResponse(
            operation=request.operation,
            text=transform(request.text, request.operation),
        )

    # --- Edit session ---

    @app.get("/session", response_model=SessionResponse)
    async def get_session_state(
        store: NoteStore = Depends(get_store),
        session: EditSessionController = Depends(get_session),
    ) -> SessionResponse:
        return _session_state(session, store)

    @app.post("/session/edits", response_model=SessionResponse)
    async def push_edit(
        request: EditRequest,
        store: NoteStore = Depends(get_store),
        session: EditSessionController = Depends(get_session),
    ) -> SessionResponse:
        """Buffer the surface's current content; it is committed after a quiet period."""
        session.handle_input(request.content)
        return _session_state(session, store)

    @app.post("/session/flush", response_model=SessionResponse)
    async def flush_session(
        store: NoteStore = Depends(get_store),
        session: EditSessionController = Depends(get_session),
    ) -> SessionResponse:
        committed = session.flush()
        return _session_state(session, store, committed=committed)

    # --- Operations ---

    @app.get("/health")
    async def health(request: Request) -> dict[str, Any]:
        """Service health, including whether the last write was persisted."""
        store: NoteStore = request.app.state.store
        return {
            "status": "healthy" if store.durable else "degraded",
            "service": "notepad",
            "backend": request.app.state.settings.storage_backend,
            "total_notes": store.count,
            "durable": store.durable,
            "timestamp": datetime.now(UTC).isoformat(),
        }

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.api_host, port=default_settings.api_port)
