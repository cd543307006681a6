"""Metric recording helpers for CoD sessions."""

from __future__ import annotations

from cod_engine.models.domain import ComplexityProfile, EffectiveSettings
from cod_engine.observability.logger import get_logger

logger = get_logger("metrics")


def log_complexity_metrics(trace_id: str, profile: ComplexityProfile) -> None:
    logger.info(
        "complexity_metrics",
        trace_id=trace_id,
        level=profile.level,
        score=profile.score,
        signals=profile.active_signals(),
        word_count=profile.word_count,
    )


def log_settings_metrics(trace_id: str, settings: EffectiveSettings) -> None:
    logger.info(
        "effective_settings",
        trace_id=trace_id,
        word_limit=settings.word_limit,
        verification_depth=settings.verification_depth,
        adapted=settings.adapted,
    )


def log_stage_metrics(trace_id: str, stage: int, content_len: int, streamed: bool) -> None:
    logger.info(
        "stage_metrics",
        trace_id=trace_id,
        stage=stage,
        content_len=content_len,
        streamed=streamed,
    )


def log_latency(trace_id: str, stage: str, duration_ms: float) -> None:
    logger.info(
        "latency",
        trace_id=trace_id,
        stage=stage,
        duration_ms=round(duration_ms, 2),
    )
