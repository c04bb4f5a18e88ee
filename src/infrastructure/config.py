"""
infrastructure.config - Typed, injectable configuration.

A frozen dataclass that can be constructed from the environment (after
loading a .env file) or passed explicitly in tests.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

STORAGE_BACKENDS = ("sqlite", "json")


@dataclass(frozen=True)
class Settings:
    """Centralized configuration for the trainer marketplace.

    No module-level globals: construct via from_env() or pass explicitly
    in tests.
    """
    project_root: Path

    # ── Storage ─────────────────────────────────────────────────
    # "sqlite" = relational store (one transaction per operation)
    # "json"   = single document rewritten on every mutation
    storage_backend: str = "sqlite"
    db_path: str = "marketplace.db"
    json_db_path: str = "db.json"

    # JWT
    jwt_secret: str = "change-me-in-production"
    jwt_expiry_hours: int = 24

    # Admin account seeded at startup (skipped when email/password empty)
    admin_email: str = ""
    admin_password: str = ""
    admin_name: str = "Administrator"

    # HTTP
    cors_origins: tuple[str, ...] = ("*",)
    log_level: str = "INFO"

    # Client side (CLI / ApiClient)
    api_base_url: str = "http://localhost:8000"
    chat_poll_interval: float = 5.0

    def __post_init__(self) -> None:
        if self.storage_backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"Unknown storage backend '{self.storage_backend}'. "
                f"Allowed: {', '.join(STORAGE_BACKENDS)}"
            )

    @property
    def ws_url(self) -> str:
        """WebSocket URL of the live chat channel derived from api_base_url."""
        base = self.api_base_url.rstrip("/")
        if base.startswith("https://"):
            return "wss://" + base[len("https://"):] + "/ws"
        if base.startswith("http://"):
            return "ws://" + base[len("http://"):] + "/ws"
        return base + "/ws"

    @classmethod
    def from_env(cls, project_root: Optional[Path] = None) -> Settings:
        """Build Settings from environment variables and an optional .env file."""
        from dotenv import load_dotenv
        load_dotenv()

        root = project_root or Path(__file__).resolve().parent.parent.parent
        origins = os.getenv("CORS_ORIGINS", "*")

        return cls(
            project_root=root,
            storage_backend=os.getenv("STORAGE_BACKEND", "sqlite").lower(),
            db_path=os.getenv("DB_PATH", "marketplace.db"),
            json_db_path=os.getenv("JSON_DB_PATH", "db.json"),
            jwt_secret=os.getenv("JWT_SECRET", "change-me-in-production"),
            jwt_expiry_hours=int(os.getenv("JWT_EXPIRY_HOURS", "24")),
            admin_email=os.getenv("ADMIN_EMAIL", ""),
            admin_password=os.getenv("ADMIN_PASSWORD", ""),
            admin_name=os.getenv("ADMIN_NAME", "Administrator"),
            cors_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            api_base_url=os.getenv("API_BASE_URL", "http://localhost:8000"),
            chat_poll_interval=float(os.getenv("CHAT_POLL_INTERVAL", "5")),
        )
