"""Integration tests for the SQLite settings store."""

import asyncio
import tempfile
from dataclasses import replace
from pathlib import Path

import pytest

from cod_engine.models.domain import ReasoningConfig, SamplingParams
from cod_engine.storage.sqlite_settings_store import SQLiteSettingsStore, StoredSettings


@pytest.fixture
def db_path():
    tmp = tempfile.mkdtemp()
    return str(Path(tmp) / "settings.db")


@pytest.fixture
async def store(db_path):
    s = SQLiteSettingsStore(db_path)
    await s.initialize()
    return s


async def test_get_returns_defaults_when_empty(store):
    assert await store.get() == StoredSettings()


async def test_custom_defaults(db_path):
    defaults = StoredSettings(model="firefunction-v2")
    store = SQLiteSettingsStore(db_path, defaults=defaults)
    await store.initialize()
    assert (await store.get()).model == "firefunction-v2"
    assert store.defaults is defaults


async def test_update_persists_across_instances(store, db_path):
    await store.update(
        lambda current: replace(
            current,
            reasoning=ReasoningConfig(word_limit=9, reasoning_enhancement="adaptive"),
            sampling=SamplingParams(temperature=0.8),
        )
    )
    reopened = SQLiteSettingsStore(db_path)
    await reopened.initialize()
    stored = await reopened.get()
    assert stored.reasoning.word_limit == 9
    assert stored.reasoning.reasoning_enhancement == "adaptive"
    assert stored.reasoning.reflection.verification_depth == "standard"
    assert stored.sampling.temperature == 0.8


async def test_reset_restores_defaults(store):
    await store.update(lambda current: replace(current, model="deepseek-v3"))
    assert (await store.get()).model == "deepseek-v3"
    assert await store.reset() == StoredSettings()
    assert await store.get() == StoredSettings()


async def test_concurrent_updates_do_not_interleave(store):
    def bump(current: StoredSettings) -> StoredSettings:
        reasoning = replace(current.reasoning, word_limit=current.reasoning.word_limit + 1)
        return replace(current, reasoning=reasoning)

    await asyncio.gather(*(store.update(bump) for _ in range(10)))
    assert (await store.get()).reasoning.word_limit == 15


async def test_initialize_is_idempotent(store):
    await store.initialize()
    assert await store.get() == StoredSettings()
