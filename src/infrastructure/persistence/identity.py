"""
infrastructure.persistence.identity - Id and timestamp assignment.

Both storage backends stamp entities the same way so that records written
by one backend sort and compare identically to records from the other.
"""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4


def new_id() -> str:
    return uuid4().hex


def now_iso() -> str:
    """UTC timestamp with fixed microsecond precision (lexicographically sortable)."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")
