"""SQLite-backed store for the caller-facing reasoning and sampling settings.

The engine itself never reads this store; routes resolve a full config from it
per request. All writes go through one lock so concurrent partial updates
cannot interleave their read-modify-write cycles.
"""

from __future__ import annotations

import asyncio
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

import aiosqlite

from cod_engine.models.domain import ReasoningConfig, ReflectionSettings, SamplingParams
from cod_engine.storage.migrations import initialize_settings_db

SETTINGS_KEY = "cod_settings"


@dataclass(frozen=True)
class StoredSettings:
    reasoning: ReasoningConfig = field(default_factory=ReasoningConfig)
    sampling: SamplingParams = field(default_factory=SamplingParams)
    model: str = "deepseek-v3-0324"

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, raw: str) -> StoredSettings:
        data = json.loads(raw)
        reasoning = dict(data["reasoning"])
        reasoning["reflection"] = ReflectionSettings(**reasoning["reflection"])
        return cls(
            reasoning=ReasoningConfig(**reasoning),
            sampling=SamplingParams(**data["sampling"]),
            model=data["model"],
        )


class SQLiteSettingsStore:
    def __init__(self, db_path: str, defaults: StoredSettings | None = None) -> None:
        self._db_path = db_path
        self._defaults = defaults or StoredSettings()
        self._write_lock = asyncio.Lock()

    @property
    def defaults(self) -> StoredSettings:
        return self._defaults

    async def initialize(self) -> None:
        await initialize_settings_db(self._db_path)

    async def get(self) -> StoredSettings:
        async with aiosqlite.connect(self._db_path) as db:
            async with db.execute(
                "SELECT value FROM settings WHERE key = ?", (SETTINGS_KEY,)
            ) as cursor:
                row = await cursor.fetchone()
        if row is None:
            return self._defaults
        return StoredSettings.from_json(row[0])

    async def _save(self, settings: StoredSettings) -> None:
        async with aiosqlite.connect(self._db_path) as db:
            await db.execute(
                "INSERT OR REPLACE INTO settings (key, value, updated_at) VALUES (?, ?, ?)",
                (
                    SETTINGS_KEY,
                    settings.to_json(),
                    datetime.now(timezone.utc).isoformat(),
                ),
            )
            await db.commit()

    async def update(self, updater) -> StoredSettings:
        """Apply ``updater(current) -> new`` atomically and persist the result."""
        async with self._write_lock:
            updated = updater(await self.get())
            await self._save(updated)
            return updated

    async def reset(self) -> StoredSettings:
        async with self._write_lock:
            async with aiosqlite.connect(self._db_path) as db:
                await db.execute("DELETE FROM settings WHERE key = ?", (SETTINGS_KEY,))
                await db.commit()
            return self._defaults
