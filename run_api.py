"""
Run the Trainer Marketplace REST + WebSocket API.

Usage:
    python run_api.py

Environment variables (all optional):
    STORAGE_BACKEND     "sqlite" or "json" (default: sqlite)
    DB_PATH             SQLite database file path (default: marketplace.db)
    JSON_DB_PATH        JSON document path when STORAGE_BACKEND=json (default: db.json)
    JWT_SECRET          Secret key for signing JWT tokens (change in production!)
    JWT_EXPIRY_HOURS    Token lifetime in hours (default: 24)
    ADMIN_EMAIL         Admin account seeded at startup (with ADMIN_PASSWORD)
    CORS_ORIGINS        Comma-separated allowed origins (default: *)
    LOG_LEVEL           Logging level (default: INFO)
"""

import sys
from pathlib import Path

# Ensure src/ is importable
sys.path.insert(0, str(Path(__file__).parent / "src"))

import uvicorn

if __name__ == "__main__":
    uvicorn.run(
        "adapters.rest.app:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
