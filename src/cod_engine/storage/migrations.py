"""Idempotent database schema creation."""

from __future__ import annotations

import aiosqlite

SETTINGS_TABLE = """
CREATE TABLE IF NOT EXISTS settings (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


async def initialize_settings_db(db_path: str) -> None:
    async with aiosqlite.connect(db_path) as db:
        await db.execute(SETTINGS_TABLE)
        await db.commit()
