"""Tests for request parsing and config merging."""

import pytest
from pydantic import ValidationError

from cod_engine.api.routes_cod import resolve_request_config
from cod_engine.models.domain import ReasoningConfig, SamplingParams
from cod_engine.models.schemas import (
    CoDRequest,
    ComplexityOut,
    ReasoningConfigOut,
    SamplingConfigPatch,
)
from cod_engine.reasoning.complexity import ComplexityAnalyzer
from cod_engine.storage.sqlite_settings_store import StoredSettings


def test_camel_case_request():
    request = CoDRequest.model_validate(
        {
            "message": "hi",
            "enableStreaming": True,
            "conversationHistory": [{"role": "user", "content": "before"}],
            "codConfig": {
                "codWordLimit": 9,
                "reasoningEnhancement": "adaptive",
                "reflectionSettings": {"verificationDepth": "deep"},
            },
            "fireworksConfig": {"topK": 20, "selectedModel": "firefunction-v2"},
            "media": [{"type": "file", "data": "aGk=", "mimeType": "text/plain"}],
        }
    )
    assert request.enable_streaming is True
    assert request.conversation_history[0].to_domain().content == "before"
    assert request.media[0].to_domain().mime_type == "text/plain"

    config = request.cod_config.apply(ReasoningConfig())
    assert config.word_limit == 9
    assert config.reasoning_enhancement == "adaptive"
    assert config.reflection.verification_depth == "deep"
    assert config.reflection.enable_error_detection is True

    params = request.fireworks_config.apply(SamplingParams())
    assert params == SamplingParams(top_k=20)


def test_snake_case_request():
    request = CoDRequest.model_validate(
        {"message": "hi", "enable_streaming": True, "cod_config": {"cod_word_limit": 3}}
    )
    assert request.enable_streaming is True
    assert request.cod_config.cod_word_limit == 3


def test_missing_message_parses_as_none():
    assert CoDRequest.model_validate({}).message is None


def test_invalid_word_limit_rejected():
    with pytest.raises(ValidationError):
        CoDRequest.model_validate({"message": "hi", "codConfig": {"codWordLimit": 0}})


def test_invalid_top_p_rejected():
    with pytest.raises(ValidationError):
        SamplingConfigPatch(top_p=1.5)


def test_empty_patch_keeps_base():
    base = ReasoningConfig(word_limit=11)
    request = CoDRequest(message="hi")
    assert request.cod_config.apply(base) == base


def test_resolve_request_config_layers_overrides():
    stored = StoredSettings(
        reasoning=ReasoningConfig(word_limit=8),
        sampling=SamplingParams(temperature=0.5),
        model="deepseek-v3",
    )
    request = CoDRequest.model_validate(
        {"message": "hi", "fireworksConfig": {"maxTokens": 100}}
    )
    config, params, model = resolve_request_config(stored, request)
    assert config.word_limit == 8
    assert params.temperature == 0.5
    assert params.max_tokens == 100
    assert model == "deepseek-v3"

    request = CoDRequest.model_validate(
        {"message": "hi", "fireworksConfig": {"selectedModel": "firefunction-v2"}}
    )
    assert resolve_request_config(stored, request)[2] == "firefunction-v2"


def test_complexity_out_from_domain():
    profile = ComplexityAnalyzer().analyze("What is 2+2?")
    out = ComplexityOut.from_domain(profile, "desc")
    assert out.level == "moderate"
    assert out.has_math is True
    assert out.description == "desc"
    assert ComplexityOut.from_domain(None) is None


def test_reasoning_config_out_uses_wire_names():
    out = ReasoningConfigOut.from_domain(ReasoningConfig(word_limit=6))
    assert out.cod_word_limit == 6
    assert out.reflection_settings["verification_depth"] == "standard"
