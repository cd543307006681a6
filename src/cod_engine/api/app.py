"""FastAPI application factory with lifespan management."""

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI

from cod_engine.api.middleware import RequestTimingMiddleware
from cod_engine.api.routes_cod import router as cod_router
from cod_engine.api.routes_health import router as health_router
from cod_engine.api.routes_settings import router as settings_router
from cod_engine.config.settings import Settings
from cod_engine.generation.provider_factory import create_model_client
from cod_engine.media.processor import MediaProcessor
from cod_engine.models.domain import SamplingParams
from cod_engine.observability.logger import get_logger, setup_logging
from cod_engine.pipeline.cod_pipeline import CoDPipeline
from cod_engine.reasoning.adaptive import AdaptiveSettingsResolver
from cod_engine.reasoning.complexity import ComplexityAnalyzer
from cod_engine.storage.sqlite_settings_store import SQLiteSettingsStore, StoredSettings

logger = get_logger("app")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = getattr(app.state, "settings", None) or Settings()
    setup_logging(settings.log_level, settings.log_json)

    Path(settings.settings_db_path).parent.mkdir(parents=True, exist_ok=True)

    # LLM
    llm, default_model, vision_model = create_model_client(settings)

    # Reasoning
    analyzer = ComplexityAnalyzer()
    resolver = AdaptiveSettingsResolver(analyzer)

    # Media
    media_processor = MediaProcessor(
        llm=llm,
        vision_model=vision_model,
        vision_params=SamplingParams(
            temperature=settings.vision_temperature,
            max_tokens=settings.vision_max_tokens,
        ),
    )

    # Pipeline
    pipeline = CoDPipeline(
        llm=llm,
        default_model=default_model,
        media_processor=media_processor,
        analyzer=analyzer,
        resolver=resolver,
    )

    # Settings store
    defaults = StoredSettings(
        sampling=SamplingParams(
            temperature=settings.temperature,
            top_p=settings.top_p,
            top_k=settings.top_k,
            max_tokens=settings.max_tokens,
        ),
        model=default_model,
    )
    settings_store = SQLiteSettingsStore(settings.settings_db_path, defaults=defaults)
    await settings_store.initialize()

    # Attach to app state
    app.state.pipeline = pipeline
    app.state.settings_store = settings_store
    app.state.settings = settings

    logger.info(
        "startup_complete",
        provider=settings.llm_provider,
        default_model=default_model,
        vision_model=vision_model,
    )

    yield

    logger.info("shutdown_complete")


def create_app(settings: Settings | None = None) -> FastAPI:
    app = FastAPI(
        title="Chain of Draft Engine",
        version="1.0.0",
        description="Complexity-adaptive two-stage Chain of Draft reasoning service",
        lifespan=lifespan,
    )
    if settings is not None:
        app.state.settings = settings
    app.add_middleware(RequestTimingMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(cod_router, tags=["cod"])
    app.include_router(settings_router)
    return app
