"""Tests for provider wire conversion, the model registry and the factory."""

import pytest

from cod_engine.config.model_registry import MODEL_REGISTRY, resolve_model
from cod_engine.exceptions import ConfigurationError
from cod_engine.generation.fireworks_provider import FireworksProvider, to_openai_messages
from cod_engine.generation.gemini_provider import GeminiProvider, to_gemini_contents
from cod_engine.generation.provider_factory import create_model_client
from cod_engine.models.domain import ChatMessage, ImagePart, SamplingParams, TextPart


def test_resolve_model_by_key_and_path():
    spec = resolve_model("deepseek-v3-0324")
    assert spec.path == "accounts/fireworks/models/deepseek-v3-0324"
    assert resolve_model(spec.path) is spec
    assert MODEL_REGISTRY["qwen2p5-vl-32b-instruct"].supports_vision is True


def test_resolve_unknown_model_passes_through():
    spec = resolve_model("accounts/acme/models/custom")
    assert spec.path == "accounts/acme/models/custom"
    assert spec.supports_vision is False


def test_openai_messages_with_image_parts():
    messages = [
        ChatMessage(role="system", content="sys"),
        ChatMessage(
            role="user",
            content=[TextPart("describe"), ImagePart("data:image/png;base64,AAA", "image/png")],
        ),
    ]
    converted = to_openai_messages(messages)
    assert converted[0] == {"role": "system", "content": "sys"}
    assert converted[1]["content"] == [
        {"type": "text", "text": "describe"},
        {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAA"}},
    ]


def test_fireworks_request_kwargs():
    provider = FireworksProvider(api_key="test-key")
    kwargs = provider._request_kwargs(
        [ChatMessage(role="user", content="hi")], SamplingParams(top_k=17), "deepseek-v3"
    )
    assert kwargs["model"] == "accounts/fireworks/models/deepseek-v3"
    assert kwargs["extra_body"] == {"top_k": 17}
    assert kwargs["temperature"] == 0.3
    assert kwargs["max_tokens"] == 8192


def test_gemini_contents_split_system_and_roles():
    system, contents = to_gemini_contents(
        [
            ChatMessage(role="system", content="be brief"),
            ChatMessage(role="user", content="Q"),
            ChatMessage(role="assistant", content="draft"),
            ChatMessage(role="user", content="continue"),
        ]
    )
    assert system == "be brief"
    assert [c.role for c in contents] == ["user", "model", "user"]
    assert contents[1].parts[0].text == "draft"


def test_gemini_contents_without_system():
    system, contents = to_gemini_contents([ChatMessage(role="user", content="Q")])
    assert system is None
    assert len(contents) == 1


def test_factory_builds_fireworks(settings):
    client, default_model, vision_model = create_model_client(settings)
    assert isinstance(client, FireworksProvider)
    assert default_model == "deepseek-v3-0324"
    assert vision_model == "qwen2p5-vl-32b-instruct"


def test_factory_builds_gemini(settings):
    settings.llm_provider = "gemini"
    client, default_model, vision_model = create_model_client(settings)
    assert isinstance(client, GeminiProvider)
    assert default_model == vision_model == "gemini-2.0-flash"


def test_factory_rejects_unknown_provider(settings):
    settings.llm_provider = "acme"
    with pytest.raises(ConfigurationError):
        create_model_client(settings)


def test_factory_allows_missing_api_key(settings):
    settings.fireworks_api_key = ""
    client, _, _ = create_model_client(settings)
    assert isinstance(client, FireworksProvider)
