"""Build the configured model client."""

from __future__ import annotations

from cod_engine.config.settings import Settings
from cod_engine.exceptions import ConfigurationError
from cod_engine.generation.fireworks_provider import FireworksProvider
from cod_engine.generation.gemini_provider import GeminiProvider
from cod_engine.observability.logger import get_logger
from cod_engine.protocols.llm import ModelClient

logger = get_logger("provider_factory")


def create_model_client(settings: Settings) -> tuple[ModelClient, str, str]:
    """Return ``(client, default_model, vision_model)`` for the configured provider."""
    if settings.llm_provider == "fireworks":
        if not settings.fireworks_api_key:
            logger.warning("missing_api_key", provider="fireworks")
        client = FireworksProvider(
            api_key=settings.fireworks_api_key,
            base_url=settings.fireworks_base_url,
            timeout=settings.request_timeout_s,
        )
        return client, settings.default_model, settings.vision_model
    if settings.llm_provider == "gemini":
        if not settings.google_api_key:
            logger.warning("missing_api_key", provider="gemini")
        client = GeminiProvider(api_key=settings.google_api_key)
        return client, settings.gemini_model, settings.gemini_model
    raise ConfigurationError(f"Unknown llm_provider '{settings.llm_provider}'")
