"""
infrastructure.persistence.migrations - Database schema creation.

Called once at startup by the factory. Hire requests and chat messages
carry no foreign keys: they are an audit trail and outlive deleted users.
"""

from __future__ import annotations

import logging

from infrastructure.persistence.connection import AsyncSQLiteConnection

logger = logging.getLogger(__name__)

_TABLES = [
    """CREATE TABLE IF NOT EXISTS users (
        id TEXT PRIMARY KEY,
        email TEXT UNIQUE NOT NULL,
        name TEXT,
        role TEXT NOT NULL,
        password_hash TEXT,
        image_url TEXT,
        trainer_id TEXT,
        trainer_status TEXT NOT NULL DEFAULT 'none',
        bio TEXT,
        specialties TEXT,
        certifications TEXT,
        location TEXT,
        created_at TEXT,
        updated_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS hire_requests (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        trainer_id TEXT NOT NULL,
        status TEXT NOT NULL,
        created_at TEXT,
        updated_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS chat_messages (
        id TEXT PRIMARY KEY,
        sender_id TEXT NOT NULL,
        receiver_id TEXT NOT NULL,
        text TEXT NOT NULL,
        timestamp TEXT NOT NULL
    )""",
    """CREATE TABLE IF NOT EXISTS client_profiles (
        user_id TEXT PRIMARY KEY,
        weight REAL,
        height REAL,
        goal TEXT,
        activity_level TEXT,
        medical_conditions TEXT,
        updated_at TEXT,
        FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
    )""",
    """CREATE TABLE IF NOT EXISTS training_plans (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        trainer_id TEXT NOT NULL,
        exercises TEXT,
        created_at TEXT
    )""",
    """CREATE TABLE IF NOT EXISTS diet_plans (
        id TEXT PRIMARY KEY,
        client_id TEXT NOT NULL,
        trainer_id TEXT NOT NULL,
        meals TEXT,
        created_at TEXT
    )""",
    "CREATE INDEX IF NOT EXISTS idx_users_trainer ON users (trainer_id, trainer_status)",
    "CREATE INDEX IF NOT EXISTS idx_hire_requests_trainer ON hire_requests (trainer_id, status)",
    "CREATE INDEX IF NOT EXISTS idx_chat_pair ON chat_messages (sender_id, receiver_id)",
]


async def run_migrations(connection: AsyncSQLiteConnection) -> None:
    """Create all tables if they don't exist.

    Safe to call multiple times (uses IF NOT EXISTS).
    """
    async with connection.acquire() as conn:
        for ddl in _TABLES:
            await conn.execute(ddl)
    logger.info("All tables created (or already exist).")
