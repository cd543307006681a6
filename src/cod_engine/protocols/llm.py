"""Protocol for model-call providers."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol

from cod_engine.models.domain import ChatMessage, SamplingParams


class ModelClient(Protocol):
    async def generate_text(
        self,
        messages: list[ChatMessage],
        params: SamplingParams,
        model: str,
    ) -> str: ...

    def stream_text(
        self,
        messages: list[ChatMessage],
        params: SamplingParams,
        model: str,
    ) -> AsyncIterator[str]: ...
