"""Known hosted models and their capabilities."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ModelSpec:
    key: str
    path: str
    supports_vision: bool = False
    supports_tools: bool = False
    supports_streaming: bool = True
    context_length: int = 4096


MODEL_REGISTRY: dict[str, ModelSpec] = {
    spec.key: spec
    for spec in [
        ModelSpec(
            "deepseek-v3-0324",
            "accounts/fireworks/models/deepseek-v3-0324",
            supports_tools=True,
            context_length=64000,
        ),
        ModelSpec(
            "deepseek-v3",
            "accounts/fireworks/models/deepseek-v3",
            supports_tools=True,
            context_length=64000,
        ),
        ModelSpec(
            "qwen2p5-vl-32b-instruct",
            "accounts/fireworks/models/qwen2p5-vl-32b-instruct",
            supports_vision=True,
            supports_tools=True,
            context_length=32768,
        ),
        ModelSpec(
            "firellava-13b",
            "accounts/fireworks/models/firellava-13b",
            supports_vision=True,
        ),
        ModelSpec(
            "llava-v1.5-7b-fireworks",
            "accounts/fireworks/models/llava-v1.5-7b-fireworks",
            supports_vision=True,
        ),
        ModelSpec(
            "firefunction-v2",
            "accounts/fireworks/models/firefunction-v2",
            supports_tools=True,
            context_length=8192,
        ),
    ]
}


def resolve_model(model: str) -> ModelSpec:
    """Look up a model by short key or full path; unknown ids pass through verbatim."""
    spec = MODEL_REGISTRY.get(model)
    if spec is not None:
        return spec
    for candidate in MODEL_REGISTRY.values():
        if candidate.path == model:
            return candidate
    return ModelSpec(key=model, path=model)
