"""
adapters.cli.session - Local session credential storage.

Credentials (user id, role + JWT access_token) are stored in
~/.trainer-marketplace/session.json so the user stays logged in between
CLI invocations without re-entering their password every time.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, asdict
from pathlib import Path

_SESSION_DIR  = Path.home() / ".trainer-marketplace"
_SESSION_FILE = _SESSION_DIR / "session.json"


@dataclass
class Session:
    user_id: str
    access_token: str
    email: str = ""
    role: str = "client"


def load_session(path: Path = _SESSION_FILE) -> Session | None:
    """Return the stored session, or None if the user is not logged in."""
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        return Session(**data)
    except (OSError, ValueError, TypeError):
        # unreadable or from an older layout: treat as logged out
        return None


def save_session(session: Session, path: Path = _SESSION_FILE) -> None:
    """Persist session credentials to disk."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(asdict(session), indent=2), encoding="utf-8"
    )


def clear_session(path: Path = _SESSION_FILE) -> None:
    """Delete stored credentials (logout)."""
    if path.exists():
        path.unlink()
