"""FastAPI dependency injection helpers."""

from __future__ import annotations

from fastapi import Request

from cod_engine.config.settings import Settings
from cod_engine.pipeline.cod_pipeline import CoDPipeline
from cod_engine.storage.sqlite_settings_store import SQLiteSettingsStore


def get_pipeline(request: Request) -> CoDPipeline:
    return request.app.state.pipeline


def get_settings_store(request: Request) -> SQLiteSettingsStore:
    return request.app.state.settings_store


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
