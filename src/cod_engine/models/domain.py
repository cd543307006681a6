"""Core domain objects used throughout the system."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Literal, Union

from cod_engine.config.constants import (
    DEFAULT_ENHANCEMENT,
    DEFAULT_REASONING_METHOD,
    DEFAULT_VERIFICATION_DEPTH,
    DEFAULT_WORD_LIMIT,
)

ComplexityLevel = Literal["simple", "moderate", "complex", "highly_complex", "research_grade"]
VerificationDepth = Literal["basic", "standard", "deep", "research"]
Role = Literal["system", "user", "assistant"]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ComplexityProfile:
    level: ComplexityLevel
    score: int
    recommended_word_limit: int
    recommended_verification_depth: VerificationDepth
    has_math: bool
    has_logic: bool
    multi_step: bool
    has_research: bool
    has_scientific: bool
    has_coding: bool
    has_engineering: bool
    has_philosophy: bool
    has_economics: bool
    has_medicine: bool
    word_count: int
    sentence_count: int
    question_words: int
    is_long: bool
    has_multiple_questions: bool

    def active_signals(self) -> list[str]:
        """Names of the topical/structural detectors that fired."""
        names = [
            "has_math",
            "has_logic",
            "multi_step",
            "has_research",
            "has_scientific",
            "has_coding",
            "has_engineering",
            "has_philosophy",
            "has_economics",
            "has_medicine",
        ]
        return [n for n in names if getattr(self, n)]


@dataclass(frozen=True)
class ReflectionSettings:
    enable_self_verification: bool = True
    enable_error_detection: bool = True
    enable_alternative_search: bool = True
    enable_confidence_assessment: bool = True
    verification_depth: VerificationDepth = DEFAULT_VERIFICATION_DEPTH


@dataclass(frozen=True)
class ReasoningConfig:
    reasoning_method: Literal["standard", "enhanced_cod"] = DEFAULT_REASONING_METHOD
    word_limit: int = DEFAULT_WORD_LIMIT
    reasoning_enhancement: Literal["fixed", "adaptive"] = DEFAULT_ENHANCEMENT
    reflection: ReflectionSettings = field(default_factory=ReflectionSettings)


@dataclass(frozen=True)
class SamplingParams:
    temperature: float = 0.3
    top_p: float = 0.9
    top_k: int = 40
    max_tokens: int = 8192


@dataclass(frozen=True)
class EffectiveSettings:
    method: str
    word_limit: int
    verification_depth: VerificationDepth
    adapted: bool
    complexity: ComplexityProfile | None = None
    rationale: str | None = None


@dataclass(frozen=True)
class TextPart:
    text: str


@dataclass(frozen=True)
class ImagePart:
    data_url: str
    mime_type: str


@dataclass(frozen=True)
class ChatMessage:
    role: Role
    content: Union[str, list[Union[TextPart, ImagePart]]]


@dataclass(frozen=True)
class StageResult:
    stage: Literal[1, 2]
    content: str
    timestamp: str = field(default_factory=utc_timestamp)
    word_limit: int | None = None
    complexity: ComplexityProfile | None = None


@dataclass
class SessionResult:
    stage1: StageResult
    settings: EffectiveSettings
    stage2: StageResult | None = None
    total_time_ms: float | None = None
    media: list[ProcessedMedia] = field(default_factory=list)


@dataclass(frozen=True)
class MediaInput:
    type: Literal["image", "audio", "file"]
    data: str  # base64 payload or data URL
    mime_type: str
    filename: str | None = None
    size: int | None = None


@dataclass(frozen=True)
class MediaMetadata:
    type: str
    format: str
    size: int | None = None


@dataclass(frozen=True)
class ProcessedMedia:
    description: str
    metadata: MediaMetadata
    extracted_text: str | None = None
    analysis: str | None = None
    failed: bool = False


@dataclass(frozen=True)
class Section:
    key: str
    label: str
    body: str
    html: str


@dataclass(frozen=True)
class FormattedStage:
    stage: int
    title: str
    sections: list[Section]
    word_limit: int | None = None


@dataclass(frozen=True)
class StreamEvent:
    event: Literal["stage1_complete", "stage2_chunk", "complete", "error"]
    data: dict
