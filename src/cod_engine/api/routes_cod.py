"""Chain of Draft endpoints."""

from __future__ import annotations

import json
import time

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse

from cod_engine.api.dependencies import get_pipeline, get_settings_store
from cod_engine.config.constants import LEVEL_DESCRIPTIONS
from cod_engine.exceptions import CoDEngineError, MessageValidationError, UpstreamCallError
from cod_engine.formatting.renderer import format_stage
from cod_engine.models.domain import (
    ComplexityProfile,
    ReasoningConfig,
    SamplingParams,
    StageResult,
    StreamEvent,
)
from cod_engine.models.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    CoDRequest,
    CoDResponse,
    CoDResponseData,
    ComplexityOut,
    EffectiveSettingsOut,
    FormattedStageOut,
    ProcessedMediaOut,
    StageRawOut,
)
from cod_engine.observability.logger import get_logger
from cod_engine.pipeline.cod_pipeline import CoDPipeline
from cod_engine.storage.sqlite_settings_store import SQLiteSettingsStore, StoredSettings

logger = get_logger("routes_cod")

router = APIRouter()


def resolve_request_config(
    stored: StoredSettings, request: CoDRequest
) -> tuple[ReasoningConfig, SamplingParams, str]:
    """Defaults <- stored settings <- request overrides."""
    config = request.cod_config.apply(stored.reasoning)
    params = request.fireworks_config.apply(stored.sampling)
    model = request.fireworks_config.selected_model or stored.model
    return config, params, model


def _complexity_out(profile: ComplexityProfile | None) -> ComplexityOut | None:
    if profile is None:
        return None
    return ComplexityOut.from_domain(profile, LEVEL_DESCRIPTIONS.get(profile.level))


def _formatted(stage: StageResult) -> FormattedStageOut:
    return FormattedStageOut.from_domain(format_stage(stage))


def event_payload(event: StreamEvent) -> dict:
    """Turn a pipeline event into its JSON-ready wire payload."""
    if event.event == "stage1_complete":
        stage1 = event.data["stage1"]
        return {
            "stage1": _formatted(stage1).model_dump(),
            "complexity": _dump(_complexity_out(stage1.complexity)),
            "word_limit": stage1.word_limit,
            "settings": EffectiveSettingsOut.from_domain(event.data["settings"]).model_dump(),
        }
    if event.event == "complete":
        session = event.data["session"]
        return {
            "stage1": _formatted(session.stage1).model_dump(),
            "stage2": _formatted(session.stage2).model_dump(),
            "complexity": _dump(_complexity_out(session.stage1.complexity)),
            "total_time_ms": event.data["elapsed_ms"],
            "settings": EffectiveSettingsOut.from_domain(session.settings).model_dump(),
        }
    return dict(event.data)


def _dump(model) -> dict | None:
    return model.model_dump() if model is not None else None


def sse_line(event: str, payload: dict) -> str:
    return f"event: {event}\ndata: {json.dumps(payload)}\n\n"


@router.post("/cod", response_model=CoDResponse)
async def run_cod(
    request: CoDRequest,
    pipeline: CoDPipeline = Depends(get_pipeline),
    store: SQLiteSettingsStore = Depends(get_settings_store),
):
    try:
        message = pipeline.validate_message(request.message)
    except MessageValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    config, params, model = resolve_request_config(await store.get(), request)
    history = [m.to_domain() for m in request.conversation_history]
    media = [m.to_domain() for m in request.media]

    if request.enable_streaming:
        return _stream_response(pipeline, message, history, config, params, model, media)

    start = time.monotonic()
    try:
        session = await pipeline.execute(
            message, history, config, params, model=model, media=media
        )
    except UpstreamCallError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except CoDEngineError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return CoDResponse(
        data=CoDResponseData(
            stage1=_formatted(session.stage1),
            stage2=_formatted(session.stage2) if session.stage2 else None,
            complexity=_complexity_out(session.stage1.complexity),
            processing_time_ms=round((time.monotonic() - start) * 1000, 2),
            total_time_ms=session.total_time_ms,
            adaptive_settings=EffectiveSettingsOut.from_domain(session.settings),
            stage1_raw=StageRawOut(
                content=session.stage1.content,
                timestamp=session.stage1.timestamp,
                word_limit=session.stage1.word_limit,
            ),
            stage2_raw=StageRawOut(
                content=session.stage2.content if session.stage2 else None,
                timestamp=session.stage2.timestamp if session.stage2 else None,
            ),
            media=[
                ProcessedMediaOut(
                    description=p.description,
                    format=p.metadata.format,
                    failed=p.failed,
                    analysis=p.analysis,
                )
                for p in session.media
            ],
        )
    )


def _stream_response(pipeline, message, history, config, params, model, media):
    """Stream the session via Server-Sent Events."""

    async def event_generator():
        try:
            async for event in pipeline.execute_stream(
                message, history, config, params, model=model, media=media
            ):
                yield sse_line(event.event, event_payload(event))
        except CoDEngineError as e:
            logger.error("stream_failed", error=str(e))
            yield sse_line("error", {"error": str(e)})

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@router.post("/cod/analyze", response_model=AnalyzeResponse)
async def analyze(
    request: AnalyzeRequest,
    pipeline: CoDPipeline = Depends(get_pipeline),
    store: SQLiteSettingsStore = Depends(get_settings_store),
) -> AnalyzeResponse:
    """Complexity and effective settings for a message, without calling the model."""
    config = request.cod_config.apply((await store.get()).reasoning)
    profile, settings = pipeline.analyze(request.message, config)
    return AnalyzeResponse(
        complexity=_complexity_out(profile),
        settings=EffectiveSettingsOut.from_domain(settings),
    )
