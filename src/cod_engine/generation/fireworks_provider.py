"""Fireworks provider over the OpenAI-compatible chat completions API."""

from __future__ import annotations

from collections.abc import AsyncIterator

from openai import AsyncOpenAI

from cod_engine.config.model_registry import resolve_model
from cod_engine.exceptions import GenerationError
from cod_engine.models.domain import ChatMessage, ImagePart, SamplingParams, TextPart
from cod_engine.observability.logger import get_logger

logger = get_logger("fireworks")


def to_openai_messages(messages: list[ChatMessage]) -> list[dict]:
    """Convert domain messages to the chat-completions wire format."""
    converted = []
    for msg in messages:
        if isinstance(msg.content, str):
            converted.append({"role": msg.role, "content": msg.content})
            continue
        parts = []
        for part in msg.content:
            if isinstance(part, TextPart):
                parts.append({"type": "text", "text": part.text})
            elif isinstance(part, ImagePart):
                parts.append({"type": "image_url", "image_url": {"url": part.data_url}})
        converted.append({"role": msg.role, "content": parts})
    return converted


class FireworksProvider:
    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.fireworks.ai/inference/v1",
        timeout: float = 120.0,
    ) -> None:
        self._client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    def _request_kwargs(
        self, messages: list[ChatMessage], params: SamplingParams, model: str
    ) -> dict:
        return {
            "model": resolve_model(model).path,
            "messages": to_openai_messages(messages),
            "temperature": params.temperature,
            "top_p": params.top_p,
            "max_tokens": params.max_tokens,
            # top_k is a Fireworks extension to the OpenAI schema
            "extra_body": {"top_k": params.top_k},
        }

    async def generate_text(
        self,
        messages: list[ChatMessage],
        params: SamplingParams,
        model: str,
    ) -> str:
        try:
            response = await self._client.chat.completions.create(
                **self._request_kwargs(messages, params, model)
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            raise GenerationError(f"Fireworks generation failed: {e}") from e

    async def stream_text(
        self,
        messages: list[ChatMessage],
        params: SamplingParams,
        model: str,
    ) -> AsyncIterator[str]:
        try:
            stream = await self._client.chat.completions.create(
                **self._request_kwargs(messages, params, model), stream=True
            )
            async for event in stream:
                if not event.choices:
                    continue
                delta = event.choices[0].delta.content
                if delta:
                    yield delta
        except Exception as e:
            raise GenerationError(f"Fireworks streaming failed: {e}") from e
