"""Google Gemini provider using the google-genai SDK."""

from __future__ import annotations

import base64
from collections.abc import AsyncIterator

from google import genai
from google.genai import types

from cod_engine.exceptions import GenerationError
from cod_engine.models.domain import ChatMessage, ImagePart, SamplingParams, TextPart
from cod_engine.observability.logger import get_logger

logger = get_logger("gemini")


def to_gemini_contents(messages: list[ChatMessage]) -> tuple[str | None, list[types.Content]]:
    """Split system turns into a system instruction and map the rest to contents.

    Gemini names the assistant role ``model``.
    """
    system_parts: list[str] = []
    contents: list[types.Content] = []
    for msg in messages:
        if msg.role == "system":
            system_parts.append(msg.content if isinstance(msg.content, str) else "")
            continue
        role = "model" if msg.role == "assistant" else "user"
        if isinstance(msg.content, str):
            parts = [types.Part.from_text(text=msg.content)]
        else:
            parts = []
            for part in msg.content:
                if isinstance(part, TextPart):
                    parts.append(types.Part.from_text(text=part.text))
                elif isinstance(part, ImagePart):
                    payload = part.data_url.split(",", 1)[-1]
                    parts.append(
                        types.Part.from_bytes(
                            data=base64.b64decode(payload), mime_type=part.mime_type
                        )
                    )
        contents.append(types.Content(role=role, parts=parts))
    system = "\n\n".join(p for p in system_parts if p) or None
    return system, contents


class GeminiProvider:
    def __init__(self, api_key: str) -> None:
        self._client = genai.Client(api_key=api_key)

    @staticmethod
    def _config(system: str | None, params: SamplingParams) -> types.GenerateContentConfig:
        config = types.GenerateContentConfig(
            temperature=params.temperature,
            top_p=params.top_p,
            top_k=params.top_k,
            max_output_tokens=params.max_tokens,
        )
        if system:
            config.system_instruction = system
        return config

    async def generate_text(
        self,
        messages: list[ChatMessage],
        params: SamplingParams,
        model: str,
    ) -> str:
        try:
            system, contents = to_gemini_contents(messages)
            response = await self._client.aio.models.generate_content(
                model=model,
                contents=contents,
                config=self._config(system, params),
            )
            return response.text or ""
        except Exception as e:
            raise GenerationError(f"Gemini generation failed: {e}") from e

    async def stream_text(
        self,
        messages: list[ChatMessage],
        params: SamplingParams,
        model: str,
    ) -> AsyncIterator[str]:
        try:
            system, contents = to_gemini_contents(messages)
            stream = await self._client.aio.models.generate_content_stream(
                model=model,
                contents=contents,
                config=self._config(system, params),
            )
            async for chunk in stream:
                if chunk.text:
                    yield chunk.text
        except Exception as e:
            raise GenerationError(f"Gemini streaming failed: {e}") from e
