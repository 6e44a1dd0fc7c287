"""Notepad configuration loaded from environment variables."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from .env file (``NOTEPAD_`` prefix)."""

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "NOTEPAD_",
    }

    # Key-value session persistence
    storage_backend: Literal["memory", "file", "redis"] = "memory"
    storage_path: Path = Path("notes_data.json")
    redis_url: str = "redis://localhost:6379"
    redis_prefix: str = "notepad:"
    session_ttl_seconds: Optional[int] = None
    notes_key: str = "onlinetext-notes"
    active_key: str = "onlinetext-active-note"

    # Edit session timing (milliseconds)
    debounce_ms: int = 500
    saving_indicator_ms: int = 300

    # Servers
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    mcp_host: str = "0.0.0.0"
    mcp_port: int = 8001


settings = Settings()
