"""
FastAPI application - REST and WebSocket adapter for the trainer marketplace.

Usage:
    python run_api.py

Or directly:
    uvicorn adapters.rest.app:app --host 0.0.0.0 --port 8000 --reload
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Ensure src/ is on sys.path when invoked via uvicorn directly
_src_dir = Path(__file__).resolve().parent.parent.parent
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

from infrastructure.config import Settings
from factory import ServiceFactory
from domain.exceptions import DomainError
from adapters.rest.dependencies import set_factory, get_factory, domain_error_response
from adapters.rest.routers import (
    auth, users, trainers, chat, chat_ws, clients, plans, admin,
)

APP_VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application. Tests pass explicit Settings."""
    config = settings or Settings.from_env(project_root=_src_dir.parent)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize ServiceFactory on startup."""
        logging.basicConfig(
            level=config.log_level,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        factory = ServiceFactory(config)
        await factory.initialize()
        set_factory(factory)
        logger.info("API started (storage=%s)", config.storage_backend)
        yield
        set_factory(None)

    app = FastAPI(
        title="Trainer Marketplace",
        version=APP_VERSION,
        description="Clients hire personal trainers and chat with them.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DomainError, domain_error_response)

    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(trainers.router)
    app.include_router(chat.router)
    app.include_router(chat_ws.router)
    app.include_router(clients.router)
    app.include_router(plans.router)
    app.include_router(admin.router)

    @app.get("/health", tags=["health"])
    async def health():
        return {
            "status": "ok",
            "version": APP_VERSION,
            "storage": get_factory().config.storage_backend,
        }

    return app


app = create_app()
