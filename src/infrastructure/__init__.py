"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: SQLite (aiosqlite), the JSON document
store, and the process-local WebSocket connection registry.
Depends on domain/ only (implements ports). Never imported by application/.
"""
