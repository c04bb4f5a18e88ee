"""
factory - Composition root for the trainer marketplace.

ALL dependency wiring happens here. No other module constructs its own
dependencies. Adapters (REST, WebSocket, CLI) call this factory to get
fully configured services.

Usage:
    from factory import ServiceFactory
    from infrastructure.config import Settings

    config = Settings.from_env()
    factory = ServiceFactory(config)
    await factory.initialize()  # one-time startup

    hiring = factory.create_hiring_service()
    outcome = await hiring.request_hire(client_id, trainer_id)
"""

from __future__ import annotations

import logging
from typing import Optional

from domain.ports import (
    UserStore,
    HireRequestStore,
    ChatStore,
    ProfileStore,
    PlanStore,
)
from infrastructure.config import Settings
from infrastructure.persistence.connection import AsyncSQLiteConnection
from infrastructure.persistence.migrations import run_migrations
from infrastructure.persistence.user_repo import SQLiteUserStore
from infrastructure.persistence.hire_request_repo import SQLiteHireRequestStore
from infrastructure.persistence.chat_message_repo import SQLiteChatStore
from infrastructure.persistence.profile_repo import SQLiteProfileStore
from infrastructure.persistence.plan_repo import SQLitePlanStore
from infrastructure.persistence.json_document import JsonDocument
from infrastructure.persistence.json_stores import (
    JsonUserStore,
    JsonHireRequestStore,
    JsonChatStore,
    JsonProfileStore,
    JsonPlanStore,
)
from infrastructure.realtime.registry import ConnectionRegistry
from application.services.access_guard import AccessGuard
from application.services.authentication import AuthenticationService
from application.services.chat import ChatService
from application.services.hiring import HiringService
from application.services.plans import PlanService
from application.services.profile import ProfileService
from application.services.users import UserService

logger = logging.getLogger(__name__)


class ServiceFactory:
    """Composition root. Wires services to the configured storage backend.

    Call initialize() once at startup, then create services as needed.
    The connection registry is a process-wide singleton owned by the
    factory.
    """

    def __init__(self, config: Settings):
        self._config = config
        self._registry = ConnectionRegistry()
        self._connection: Optional[AsyncSQLiteConnection] = None
        self._document: Optional[JsonDocument] = None

        if config.storage_backend == "json":
            self._document = JsonDocument(config.json_db_path)
        else:
            self._connection = AsyncSQLiteConnection(config.db_path)
        self._initialized = False

    @property
    def config(self) -> Settings:
        return self._config

    @property
    def registry(self) -> ConnectionRegistry:
        return self._registry

    async def initialize(self) -> None:
        """One-time startup: prepare storage, seed the admin account."""
        logger.info(
            "Initializing ServiceFactory (storage=%s)...", self._config.storage_backend,
        )
        if self._connection is not None:
            await run_migrations(self._connection)
            logger.info("Database migrations complete (%s)", self._config.db_path)
        if self._document is not None:
            await self._document.load()
            logger.info("JSON document ready (%s)", self._config.json_db_path)

        if self._config.admin_email and self._config.admin_password:
            await self.create_authentication_service().ensure_admin(
                self._config.admin_email,
                self._config.admin_password,
                self._config.admin_name,
            )

        self._initialized = True
        logger.info("ServiceFactory ready")

    # ------------------------------------------------------------------
    # Stores
    # ------------------------------------------------------------------

    def create_user_store(self) -> UserStore:
        if self._document is not None:
            return JsonUserStore(self._document)
        return SQLiteUserStore(self._connection)

    def create_hire_request_store(self) -> HireRequestStore:
        if self._document is not None:
            return JsonHireRequestStore(self._document)
        return SQLiteHireRequestStore(self._connection)

    def create_chat_store(self) -> ChatStore:
        if self._document is not None:
            return JsonChatStore(self._document)
        return SQLiteChatStore(self._connection)

    def create_profile_store(self) -> ProfileStore:
        if self._document is not None:
            return JsonProfileStore(self._document)
        return SQLiteProfileStore(self._connection)

    def create_plan_store(self) -> PlanStore:
        if self._document is not None:
            return JsonPlanStore(self._document)
        return SQLitePlanStore(self._connection)

    # ------------------------------------------------------------------
    # Service creation
    # ------------------------------------------------------------------

    def create_authentication_service(self) -> AuthenticationService:
        return AuthenticationService(
            user_store=self.create_user_store(),
            jwt_secret=self._config.jwt_secret,
            jwt_expiry_hours=self._config.jwt_expiry_hours,
        )

    def create_access_guard(self) -> AccessGuard:
        return AccessGuard(self.create_user_store())

    def create_hiring_service(self) -> HiringService:
        self._ensure_initialized()
        return HiringService(
            user_store=self.create_user_store(),
            request_store=self.create_hire_request_store(),
        )

    def create_chat_service(self) -> ChatService:
        """ChatService that relays new messages through the registry."""
        self._ensure_initialized()
        return ChatService(
            chat_store=self.create_chat_store(),
            guard=self.create_access_guard(),
            live_channel=self._registry,
        )

    def create_user_service(self) -> UserService:
        self._ensure_initialized()
        return UserService(self.create_user_store())

    def create_profile_service(self) -> ProfileService:
        self._ensure_initialized()
        return ProfileService(
            profile_store=self.create_profile_store(),
            user_store=self.create_user_store(),
        )

    def create_plan_service(self) -> PlanService:
        self._ensure_initialized()
        return PlanService(
            plan_store=self.create_plan_store(),
            guard=self.create_access_guard(),
        )

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError(
                "ServiceFactory not initialized. Call await factory.initialize() first."
            )
