"""Custom exception hierarchy for the Chain of Draft engine."""

from __future__ import annotations


class CoDEngineError(Exception):
    """Base exception for all CoD engine errors."""


class MessageValidationError(CoDEngineError):
    """The request message is missing or blank."""


class GenerationError(CoDEngineError):
    """The model provider failed to produce text."""


class UpstreamCallError(CoDEngineError):
    """A stage's model call failed. Carries the stage number."""

    def __init__(self, stage: int, message: str) -> None:
        super().__init__(f"Stage {stage} failed: {message}")
        self.stage = stage


class MediaProcessingError(CoDEngineError):
    """A single media conversion failed."""


class ParseWarning(CoDEngineError):
    """Content could not be parsed; callers log it and continue."""


class ConfigurationError(CoDEngineError):
    """Error in system configuration."""
