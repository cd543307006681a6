"""Tests for the two-stage orchestrator with a scripted model client."""

import pytest
from structlog.testing import capture_logs
from fakes import FakeModelClient

from cod_engine.exceptions import MessageValidationError, UpstreamCallError
from cod_engine.generation.prompt_templates import (
    MEDIA_CONTEXT_HEADER,
    STAGE2_PROCEED_INSTRUCTION,
    STAGE2_VERIFICATION_SYSTEM,
    build_stage1_system,
)
from cod_engine.media.processor import MediaProcessor
from cod_engine.models.domain import ChatMessage, ReasoningConfig, SamplingParams
from cod_engine.pipeline.cod_pipeline import (
    CoDPipeline,
    build_stage1_messages,
    build_stage2_messages,
)
from cod_engine.reasoning.complexity import count_words


def _pipeline(llm: FakeModelClient, **kwargs) -> CoDPipeline:
    return CoDPipeline(llm=llm, default_model="test-model", **kwargs)


async def _collect(agen) -> list:
    return [event async for event in agen]


def test_stage1_messages():
    history = [ChatMessage(role="user", content="earlier"), ChatMessage(role="assistant", content="ok")]
    messages = build_stage1_messages("Q", history, word_limit=7)
    assert [m.role for m in messages] == ["system", "user", "assistant", "user"]
    assert messages[0].content == build_stage1_system(7)
    assert messages[-1].content == "Q"


def test_stage2_messages_carry_stage1_as_assistant_turn():
    history = [ChatMessage(role="user", content="H")]
    messages = build_stage2_messages("Y", "X", history)
    assert [(m.role, m.content) for m in messages] == [
        ("system", STAGE2_VERIFICATION_SYSTEM),
        ("user", "H"),
        ("user", "Y"),
        ("assistant", "X"),
        ("user", STAGE2_PROCEED_INSTRUCTION),
    ]


def test_validate_message():
    with pytest.raises(MessageValidationError):
        CoDPipeline.validate_message(None)
    with pytest.raises(MessageValidationError):
        CoDPipeline.validate_message("   \n")
    assert CoDPipeline.validate_message("hi") == "hi"


async def test_execute_runs_both_stages(stage1_text, stage2_text):
    llm = FakeModelClient(responses=[stage1_text, stage2_text])
    session = await _pipeline(llm).execute("What is 2+2?")

    assert session.stage1.content == stage1_text
    assert session.stage2.content == stage2_text
    assert session.stage1.word_limit == 5
    assert session.stage1.complexity.level == "moderate"
    assert session.total_time_ms is not None and session.total_time_ms >= 0
    assert session.settings.adapted is False

    assert len(llm.calls) == 2
    assert llm.calls[0]["model"] == "test-model"
    assert llm.calls[0]["messages"][-1].content == "What is 2+2?"
    stage2_messages = llm.calls[1]["messages"]
    assert [m.role for m in stage2_messages] == ["system", "user", "assistant", "user"]
    assert stage2_messages[2].content == stage1_text


async def test_execute_uses_overrides():
    llm = FakeModelClient()
    params = SamplingParams(temperature=0.9, top_k=10)
    await _pipeline(llm).execute("hello", params=params, model="firefunction-v2")
    assert all(c["model"] == "firefunction-v2" for c in llm.calls)
    assert all(c["params"] is params for c in llm.calls)


async def test_adaptive_word_limit_reaches_stage1_prompt():
    llm = FakeModelClient()
    message = "Research the hypothesis on the ethics of clinical trials"
    session = await _pipeline(llm).execute(
        message, config=ReasoningConfig(reasoning_enhancement="adaptive")
    )
    assert session.settings.word_limit == 15
    assert session.stage1.word_limit == 15
    assert llm.calls[0]["messages"][0].content == build_stage1_system(15)


async def test_history_is_forwarded_to_both_stages():
    llm = FakeModelClient()
    history = [ChatMessage(role="user", content="context turn")]
    await _pipeline(llm).execute("hello", history=history)
    for call in llm.calls:
        assert call["messages"][1].content == "context turn"


async def test_stage1_failure_skips_stage2():
    llm = FakeModelClient(fail_on_call=0)
    with pytest.raises(UpstreamCallError) as exc_info:
        await _pipeline(llm).execute("hello")
    assert exc_info.value.stage == 1
    assert str(exc_info.value).startswith("Stage 1 failed")
    assert len(llm.calls) == 1


async def test_stage2_failure_is_tagged():
    llm = FakeModelClient(fail_on_call=1)
    with pytest.raises(UpstreamCallError) as exc_info:
        await _pipeline(llm).execute("hello")
    assert exc_info.value.stage == 2


async def test_blank_message_rejected_before_model_call():
    llm = FakeModelClient()
    with pytest.raises(MessageValidationError):
        await _pipeline(llm).execute("  ")
    assert llm.calls == []


async def test_media_enhances_prompt_but_not_complexity(text_file):
    llm = FakeModelClient()
    pipeline = _pipeline(llm, media_processor=MediaProcessor(llm, "vision-model"))
    message = "Summarize the attached file"
    session = await pipeline.execute(message, media=[text_file])

    user_turn = llm.calls[0]["messages"][-1].content
    assert user_turn.startswith("\n\n" + MEDIA_CONTEXT_HEADER)
    assert user_turn.endswith(message)
    assert "hello world" in user_turn
    assert session.stage1.complexity.word_count == count_words(message)
    assert len(session.media) == 1


async def test_stream_stage2_forwards_chunks_in_order():
    llm = FakeModelClient(stream_chunks=["Hello", " ", "World"])
    seen: list[str] = []
    result = await _pipeline(llm).stream_stage2(
        "Q", "draft", [], SamplingParams(), "test-model", on_chunk=seen.append
    )
    assert seen == ["Hello", " ", "World"]
    assert result.content == "Hello World"
    assert result.stage == 2


async def test_stream_stage2_accepts_async_callback():
    llm = FakeModelClient(stream_chunks=["a", "b"])
    seen: list[str] = []

    async def on_chunk(chunk: str) -> None:
        seen.append(chunk)

    await _pipeline(llm).stream_stage2(
        "Q", "draft", [], SamplingParams(), "test-model", on_chunk=on_chunk
    )
    assert seen == ["a", "b"]


async def test_execute_stream_event_order(stage1_text):
    llm = FakeModelClient(responses=[stage1_text], stream_chunks=["Hello", " ", "World"])
    events = await _collect(_pipeline(llm).execute_stream("What is 2+2?"))

    assert [e.event for e in events] == [
        "stage1_complete",
        "stage2_chunk",
        "stage2_chunk",
        "stage2_chunk",
        "complete",
    ]
    assert events[0].data["stage1"].content == stage1_text
    assert [e.data["chunk"] for e in events[1:4]] == ["Hello", " ", "World"]
    session = events[-1].data["session"]
    assert session.stage2.content == "Hello World"
    assert session.total_time_ms is None
    assert events[-1].data["elapsed_ms"] >= 0
    assert [c["kind"] for c in llm.calls] == ["generate", "stream"]


async def test_execute_stream_stage1_failure():
    llm = FakeModelClient(fail_on_call=0, stream_chunks=["never"])
    events = await _collect(_pipeline(llm).execute_stream("hello"))
    assert [e.event for e in events] == ["error"]
    assert events[0].data["stage"] == 1
    assert len(llm.calls) == 1


async def test_execute_stream_stage2_failure_after_partial_output():
    llm = FakeModelClient(stream_chunks=["Hello", "World"], fail_stream_after=1)
    events = await _collect(_pipeline(llm).execute_stream("hello"))
    assert [e.event for e in events] == ["stage1_complete", "stage2_chunk", "error"]
    assert events[-1].data["stage"] == 2
    assert events[-1].data["error"].startswith("Stage 2 failed")


async def test_execute_stream_consumer_can_stop_early():
    llm = FakeModelClient(stream_chunks=["a", "b", "c", "d"])
    agen = _pipeline(llm).execute_stream("hello")
    first = await agen.__anext__()
    second = await agen.__anext__()
    assert first.event == "stage1_complete"
    assert second.event == "stage2_chunk"
    await agen.aclose()


def test_analyze_makes_no_model_calls():
    llm = FakeModelClient()
    profile, settings = _pipeline(llm).analyze(
        "What is 2+2?", ReasoningConfig(reasoning_enhancement="adaptive")
    )
    assert profile.level == "moderate"
    assert settings.complexity == profile
    assert llm.calls == []


async def test_completion_log_carries_stage_spans():
    llm = FakeModelClient()
    with capture_logs() as logs:
        await _pipeline(llm).execute("hello")
    completed = [entry for entry in logs if entry["event"] == "cod_completed"]
    assert len(completed) == 1
    assert [s["name"] for s in completed[0]["spans"]] == ["stage1", "stage2"]


async def test_stream_completion_log_carries_stage_spans():
    llm = FakeModelClient(stream_chunks=["a"])
    with capture_logs() as logs:
        await _collect(_pipeline(llm).execute_stream("hello"))
    completed = [entry for entry in logs if entry["event"] == "cod_completed"]
    assert [s["name"] for s in completed[0]["spans"]] == ["stage1", "stage2"]
