"""Health check endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from cod_engine.api.dependencies import get_settings
from cod_engine.config.settings import Settings
from cod_engine.models.schemas import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)) -> HealthResponse:
    default_model = (
        settings.gemini_model if settings.llm_provider == "gemini" else settings.default_model
    )
    return HealthResponse(
        status="ok",
        provider=settings.llm_provider,
        default_model=default_model,
    )
