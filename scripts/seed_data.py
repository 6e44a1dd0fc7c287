"""Seed a running notepad API with realistic notes for screenshots.

Creates a handful of notes, fills them through the edit session (so the
debounced commit path is exercised) and runs a text utility on one of them.

Usage:
    python scripts/seed_data.py [--base-url http://localhost:8000]
"""

from __future__ import annotations

import argparse
import html
import sys
import time

import requests

DEFAULT_BASE_URL = "http://localhost:8000"
TIMEOUT = 10

# Each entry: (title, content)
NOTES: list[tuple[str, str]] = [
    (
        "Meeting Notes",
        "Discussed migrating the monolith to services.\n"
        "Key decision: keep the note store authoritative.\n"
        "Follow up with the storage team on Redis TTLs.",
    ),
    (
        "Shopping List",
        "eggs\nmilk\nbread\nmilk\ncoffee\neggs",
    ),
    (
        "Reading List",
        "attention is all you need\nreact: synergizing reasoning and acting\n"
        "toolformer",
    ),
    (
        "",
        "A scratch note with    uneven   spacing   that\nspans\nseveral lines.",
    ),
]


def check_health(base_url: str) -> bool:
    """Verify the API is reachable."""
    try:
        resp = requests.get(f"{base_url}/health", timeout=TIMEOUT)
        return resp.json().get("service") == "notepad"
    except Exception as e:
        print(f"  Health check failed: {e}")
        return False


def write_through_session(base_url: str, content: str) -> dict:
    """Type *content* into the active note line by line, then flush."""
    lines = content.split("\n")
    for i in range(1, len(lines) + 1):
        rich = "<br>".join(html.escape(line, quote=False) for line in lines[:i])
        resp = requests.post(
            f"{base_url}/session/edits", json={"content": rich}, timeout=TIMEOUT
        )
        resp.raise_for_status()
    resp = requests.post(f"{base_url}/session/flush", timeout=TIMEOUT)
    resp.raise_for_status()
    return resp.json()


def main() -> None:
    """Create all seed notes sequentially."""
    parser = argparse.ArgumentParser(description="Seed notes for screenshots")
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Notepad API base URL (default: {DEFAULT_BASE_URL})",
    )
    args = parser.parse_args()
    base_url = args.base_url.rstrip("/")

    print(f"\n  Seeding notes via {base_url}")
    print("  " + "=" * 58)

    print("\n  [0] Checking API health...")
    if not check_health(base_url):
        print("  FAIL: Notepad API is not reachable. Is it running?")
        sys.exit(1)
    print("  OK: API is healthy.\n")

    start = time.time()
    created: list[dict] = []
    for i, (title, content) in enumerate(NOTES, 1):
        resp = requests.post(f"{base_url}/notes", json={"title": title}, timeout=TIMEOUT)
        resp.raise_for_status()
        note = resp.json()["note"]
        session = write_through_session(base_url, content)
        created.append(note)
        print(f"  [{i}/{len(NOTES)}] {note['title']}")
        print(f"         Id:      {note['id']}")
        print(f"         Commits: {session['commitCount']}")

    shopping = created[1]
    resp = requests.post(
        f"{base_url}/notes/{shopping['id']}/transform",
        json={"operation": "removeDuplicateLines", "apply": True},
        timeout=TIMEOUT,
    )
    resp.raise_for_status()
    print(f"\n  Deduplicated '{shopping['title']}': {resp.json()['text']!r}")

    print("\n  " + "=" * 58)
    print(f"  Done! {len(created)} notes created in {time.time() - start:.1f}s.")
    print("    - Streamlit UI:   http://localhost:8501")
    print("    - API Docs:       http://localhost:8000/docs")
    print()


if __name__ == "__main__":
    main()
