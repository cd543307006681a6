"""Two-stage Chain of Draft orchestrator: the heart of the request path."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import AsyncGenerator, Awaitable, Callable
from enum import Enum

from cod_engine.exceptions import MessageValidationError, UpstreamCallError
from cod_engine.generation.prompt_templates import (
    STAGE2_PROCEED_INSTRUCTION,
    STAGE2_VERIFICATION_SYSTEM,
    build_media_enhanced_prompt,
    build_stage1_system,
)
from cod_engine.media.processor import MediaProcessor
from cod_engine.models.domain import (
    ChatMessage,
    EffectiveSettings,
    MediaInput,
    ProcessedMedia,
    ReasoningConfig,
    SamplingParams,
    SessionResult,
    StageResult,
    StreamEvent,
)
from cod_engine.observability.logger import get_logger
from cod_engine.observability.metrics import (
    log_complexity_metrics,
    log_latency,
    log_settings_metrics,
    log_stage_metrics,
)
from cod_engine.observability.tracing import TraceContext
from cod_engine.protocols.llm import ModelClient
from cod_engine.reasoning.adaptive import AdaptiveSettingsResolver
from cod_engine.reasoning.complexity import ComplexityAnalyzer

logger = get_logger("cod_pipeline")

ChunkCallback = Callable[[str], "Awaitable[None] | None"]


class PipelineState(str, Enum):
    IDLE = "idle"
    STAGE1 = "stage1"
    STAGE2 = "stage2"
    COMPLETE = "complete"
    ERROR = "error"


def build_stage1_messages(
    user_message: str, history: list[ChatMessage], word_limit: int
) -> list[ChatMessage]:
    return [
        ChatMessage(role="system", content=build_stage1_system(word_limit)),
        *history,
        ChatMessage(role="user", content=user_message),
    ]


def build_stage2_messages(
    user_message: str, stage1_content: str, history: list[ChatMessage]
) -> list[ChatMessage]:
    """Stage 1 output goes back as an assistant turn, never inside the user turn."""
    return [
        ChatMessage(role="system", content=STAGE2_VERIFICATION_SYSTEM),
        *history,
        ChatMessage(role="user", content=user_message),
        ChatMessage(role="assistant", content=stage1_content),
        ChatMessage(role="user", content=STAGE2_PROCEED_INSTRUCTION),
    ]


class _Stage2Done:
    def __init__(self, result: StageResult) -> None:
        self.result = result


class CoDPipeline:
    def __init__(
        self,
        llm: ModelClient,
        default_model: str,
        media_processor: MediaProcessor | None = None,
        analyzer: ComplexityAnalyzer | None = None,
        resolver: AdaptiveSettingsResolver | None = None,
    ) -> None:
        self._llm = llm
        self._default_model = default_model
        self._media = media_processor
        self._analyzer = analyzer or ComplexityAnalyzer()
        self._resolver = resolver or AdaptiveSettingsResolver(self._analyzer)

    @staticmethod
    def validate_message(message: str | None) -> str:
        if message is None or not message.strip():
            raise MessageValidationError("Message is required")
        return message

    def analyze(self, message: str, config: ReasoningConfig):
        """Complexity and effective settings for a message, without model calls."""
        return self._analyzer.analyze(message), self._resolver.resolve(message, config)

    async def _prepare(
        self,
        message: str,
        config: ReasoningConfig,
        media: list[MediaInput] | None,
        trace: TraceContext,
    ) -> tuple[str, EffectiveSettings, list[ProcessedMedia]]:
        processed: list[ProcessedMedia] = []
        enhanced = message
        if media and self._media is not None:
            with trace.span("media", count=len(media)):
                processed = await self._media.process_all(media)
            enhanced = build_media_enhanced_prompt(message, processed)
        elif media:
            logger.warning("media_ignored_no_processor", count=len(media))

        settings = self._resolver.resolve(message, config)
        log_settings_metrics(trace.trace_id, settings)
        return enhanced, settings, processed

    async def run_stage1(
        self,
        message: str,
        enhanced_message: str,
        history: list[ChatMessage],
        word_limit: int,
        params: SamplingParams,
        model: str,
    ) -> StageResult:
        messages = build_stage1_messages(enhanced_message, history, word_limit)
        try:
            content = await self._llm.generate_text(messages, params, model)
        except Exception as e:
            raise UpstreamCallError(1, str(e)) from e
        return StageResult(
            stage=1,
            content=content,
            word_limit=word_limit,
            complexity=self._analyzer.analyze(message),
        )

    async def run_stage2(
        self,
        enhanced_message: str,
        stage1_content: str,
        history: list[ChatMessage],
        params: SamplingParams,
        model: str,
    ) -> StageResult:
        messages = build_stage2_messages(enhanced_message, stage1_content, history)
        try:
            content = await self._llm.generate_text(messages, params, model)
        except Exception as e:
            raise UpstreamCallError(2, str(e)) from e
        return StageResult(stage=2, content=content)

    async def stream_stage2(
        self,
        enhanced_message: str,
        stage1_content: str,
        history: list[ChatMessage],
        params: SamplingParams,
        model: str,
        on_chunk: ChunkCallback | None = None,
    ) -> StageResult:
        """Stream stage 2, forwarding each chunk in arrival order, then return the whole text."""
        messages = build_stage2_messages(enhanced_message, stage1_content, history)
        parts: list[str] = []
        try:
            async for chunk in self._llm.stream_text(messages, params, model):
                parts.append(chunk)
                if on_chunk is not None:
                    outcome = on_chunk(chunk)
                    if inspect.isawaitable(outcome):
                        await outcome
        except Exception as e:
            raise UpstreamCallError(2, str(e)) from e
        return StageResult(stage=2, content="".join(parts))

    async def execute(
        self,
        message: str,
        history: list[ChatMessage] | None = None,
        config: ReasoningConfig | None = None,
        params: SamplingParams | None = None,
        model: str | None = None,
        media: list[MediaInput] | None = None,
    ) -> SessionResult:
        """Run both stages to completion. Stage 2 starts only after stage 1 returns."""
        message = self.validate_message(message)
        history = history or []
        config = config or ReasoningConfig()
        params = params or SamplingParams()
        model = model or self._default_model
        trace = TraceContext()
        state = PipelineState.IDLE

        try:
            enhanced, settings, processed = await self._prepare(message, config, media, trace)

            state = self._transition(trace, state, PipelineState.STAGE1)
            with trace.span("stage1") as span:
                stage1 = await self.run_stage1(
                    message, enhanced, history, settings.word_limit, params, model
                )
            log_latency(trace.trace_id, "stage1", span.duration_ms)
            log_stage_metrics(trace.trace_id, 1, len(stage1.content), streamed=False)
            log_complexity_metrics(trace.trace_id, stage1.complexity)

            state = self._transition(trace, state, PipelineState.STAGE2)
            with trace.span("stage2") as span:
                stage2 = await self.run_stage2(enhanced, stage1.content, history, params, model)
            log_latency(trace.trace_id, "stage2", span.duration_ms)
            log_stage_metrics(trace.trace_id, 2, len(stage2.content), streamed=False)
        except UpstreamCallError as e:
            self._transition(trace, state, PipelineState.ERROR, error=str(e))
            raise

        self._transition(trace, state, PipelineState.COMPLETE)
        total_ms = trace.elapsed_ms
        logger.info(
            "cod_completed",
            trace_id=trace.trace_id,
            total_ms=round(total_ms, 2),
            spans=trace.summary(),
        )
        return SessionResult(
            stage1=stage1,
            stage2=stage2,
            settings=settings,
            total_time_ms=total_ms,
            media=processed,
        )

    async def execute_stream(
        self,
        message: str,
        history: list[ChatMessage] | None = None,
        config: ReasoningConfig | None = None,
        params: SamplingParams | None = None,
        model: str | None = None,
        media: list[MediaInput] | None = None,
    ) -> AsyncGenerator[StreamEvent, None]:
        """Stage 1 in batch, stage 2 streamed. Yields events:
        - stage1_complete (once)
        - stage2_chunk (per text fragment, in order)
        - complete or error (exactly one, last)
        """
        message = self.validate_message(message)
        history = history or []
        config = config or ReasoningConfig()
        params = params or SamplingParams()
        model = model or self._default_model
        trace = TraceContext()
        state = PipelineState.IDLE

        try:
            enhanced, settings, processed = await self._prepare(message, config, media, trace)
            state = self._transition(trace, state, PipelineState.STAGE1)
            with trace.span("stage1") as span:
                stage1 = await self.run_stage1(
                    message, enhanced, history, settings.word_limit, params, model
                )
            log_latency(trace.trace_id, "stage1", span.duration_ms)
            log_stage_metrics(trace.trace_id, 1, len(stage1.content), streamed=False)
            log_complexity_metrics(trace.trace_id, stage1.complexity)
        except UpstreamCallError as e:
            self._transition(trace, state, PipelineState.ERROR, error=str(e))
            yield StreamEvent("error", {"error": str(e), "stage": e.stage})
            return

        yield StreamEvent("stage1_complete", {"stage1": stage1, "settings": settings})

        state = self._transition(trace, state, PipelineState.STAGE2)
        channel: asyncio.Queue = asyncio.Queue(maxsize=1)

        async def produce() -> None:
            try:
                result = await self.stream_stage2(
                    enhanced, stage1.content, history, params, model, on_chunk=channel.put
                )
                await channel.put(_Stage2Done(result))
            except UpstreamCallError as e:
                await channel.put(e)

        producer = asyncio.create_task(produce())
        stage2: StageResult | None = None
        try:
            with trace.span("stage2") as span:
                while stage2 is None:
                    item = await channel.get()
                    if isinstance(item, str):
                        yield StreamEvent("stage2_chunk", {"chunk": item})
                    elif isinstance(item, _Stage2Done):
                        stage2 = item.result
                    else:
                        self._transition(trace, state, PipelineState.ERROR, error=str(item))
                        yield StreamEvent("error", {"error": str(item), "stage": item.stage})
                        return
        finally:
            # Consumer may stop early; do not leave the upstream stream running
            if not producer.done():
                producer.cancel()

        log_latency(trace.trace_id, "stage2", span.duration_ms)
        log_stage_metrics(trace.trace_id, 2, len(stage2.content), streamed=True)
        self._transition(trace, state, PipelineState.COMPLETE)
        logger.info(
            "cod_completed",
            trace_id=trace.trace_id,
            total_ms=round(trace.elapsed_ms, 2),
            spans=trace.summary(),
        )

        session = SessionResult(stage1=stage1, stage2=stage2, settings=settings, media=processed)
        yield StreamEvent(
            "complete",
            {"session": session, "elapsed_ms": round(trace.elapsed_ms, 2)},
        )

    @staticmethod
    def _transition(
        trace: TraceContext, current: PipelineState, target: PipelineState, **fields
    ) -> PipelineState:
        log = logger.error if target is PipelineState.ERROR else logger.info
        log(
            "state_transition",
            trace_id=trace.trace_id,
            from_state=current.value,
            to_state=target.value,
            **fields,
        )
        return target
