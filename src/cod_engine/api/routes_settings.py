"""Persisted reasoning and sampling settings endpoints."""

from __future__ import annotations

from dataclasses import replace

from fastapi import APIRouter, Depends

from cod_engine.api.dependencies import get_settings_store
from cod_engine.config.constants import CONFIG_EXPORT_VERSION
from cod_engine.models.domain import utc_timestamp
from cod_engine.models.schemas import (
    ReasoningConfigOut,
    SamplingConfigOut,
    SettingsExport,
    SettingsImport,
    SettingsUpdate,
    StoredSettingsOut,
)
from cod_engine.observability.logger import get_logger
from cod_engine.storage.sqlite_settings_store import SQLiteSettingsStore, StoredSettings

logger = get_logger("routes_settings")

router = APIRouter(prefix="/settings", tags=["settings"])


def to_out(stored: StoredSettings) -> StoredSettingsOut:
    return StoredSettingsOut(
        cod_config=ReasoningConfigOut.from_domain(stored.reasoning),
        fireworks_config=SamplingConfigOut(
            temperature=stored.sampling.temperature,
            top_p=stored.sampling.top_p,
            top_k=stored.sampling.top_k,
            max_tokens=stored.sampling.max_tokens,
            selected_model=stored.model,
        ),
    )


def apply_update(stored: StoredSettings, update: SettingsUpdate) -> StoredSettings:
    reasoning = stored.reasoning
    sampling = stored.sampling
    model = stored.model
    if update.cod_config is not None:
        reasoning = update.cod_config.apply(reasoning)
    if update.fireworks_config is not None:
        sampling = update.fireworks_config.apply(sampling)
        model = update.fireworks_config.selected_model or model
    return replace(stored, reasoning=reasoning, sampling=sampling, model=model)


@router.get("", response_model=StoredSettingsOut)
async def get_settings(store: SQLiteSettingsStore = Depends(get_settings_store)):
    return to_out(await store.get())


@router.put("", response_model=StoredSettingsOut)
async def update_settings(
    update: SettingsUpdate,
    store: SQLiteSettingsStore = Depends(get_settings_store),
):
    stored = await store.update(lambda current: apply_update(current, update))
    logger.info("settings_updated")
    return to_out(stored)


@router.delete("", response_model=StoredSettingsOut)
async def reset_settings(store: SQLiteSettingsStore = Depends(get_settings_store)):
    stored = await store.reset()
    logger.info("settings_reset")
    return to_out(stored)


@router.get("/export", response_model=SettingsExport)
async def export_settings(store: SQLiteSettingsStore = Depends(get_settings_store)):
    return SettingsExport(
        timestamp=utc_timestamp(),
        version=CONFIG_EXPORT_VERSION,
        config=to_out(await store.get()),
    )


@router.post("/import", response_model=StoredSettingsOut)
async def import_settings(
    body: SettingsImport,
    store: SQLiteSettingsStore = Depends(get_settings_store),
):
    stored = await store.update(lambda current: apply_update(current, body.config))
    logger.info("settings_imported")
    return to_out(stored)
