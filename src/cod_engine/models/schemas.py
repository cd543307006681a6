"""Pydantic models for API request/response serialization."""

from __future__ import annotations

from dataclasses import asdict, replace
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cod_engine.models.domain import (
    ChatMessage,
    ComplexityProfile,
    EffectiveSettings,
    FormattedStage,
    MediaInput,
    ReasoningConfig,
    SamplingParams,
)


class CamelModel(BaseModel):
    """Accepts both camelCase (browser clients) and snake_case field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Request side -----------------------------------------------------------


class ReflectionSettingsPatch(CamelModel):
    enable_self_verification: bool | None = None
    enable_error_detection: bool | None = None
    enable_alternative_search: bool | None = None
    enable_confidence_assessment: bool | None = None
    verification_depth: Literal["basic", "standard", "deep", "research"] | None = None


class ReasoningConfigPatch(CamelModel):
    reasoning_method: Literal["standard", "enhanced_cod"] | None = None
    cod_word_limit: int | None = Field(default=None, gt=0)
    reasoning_enhancement: Literal["fixed", "adaptive"] | None = None
    reflection_settings: ReflectionSettingsPatch | None = None

    def apply(self, base: ReasoningConfig) -> ReasoningConfig:
        """Merge the set fields onto ``base``; unset fields keep their base value."""
        updates: dict[str, Any] = {}
        if self.reasoning_method is not None:
            updates["reasoning_method"] = self.reasoning_method
        if self.cod_word_limit is not None:
            updates["word_limit"] = self.cod_word_limit
        if self.reasoning_enhancement is not None:
            updates["reasoning_enhancement"] = self.reasoning_enhancement
        if self.reflection_settings is not None:
            reflection_updates = self.reflection_settings.model_dump(exclude_none=True)
            updates["reflection"] = replace(base.reflection, **reflection_updates)
        return replace(base, **updates)


class SamplingConfigPatch(CamelModel):
    temperature: float | None = Field(default=None, ge=0.0)
    top_p: float | None = Field(default=None, ge=0.0, le=1.0)
    top_k: int | None = Field(default=None, ge=0)
    max_tokens: int | None = Field(default=None, gt=0)
    selected_model: str | None = None

    def apply(self, base: SamplingParams) -> SamplingParams:
        return replace(
            base,
            **self.model_dump(exclude_none=True, exclude={"selected_model"}),
        )


class HistoryMessage(BaseModel):
    role: Literal["system", "user", "assistant"]
    content: str

    def to_domain(self) -> ChatMessage:
        return ChatMessage(role=self.role, content=self.content)


class MediaInputSchema(CamelModel):
    type: Literal["image", "audio", "file"]
    data: str
    mime_type: str
    filename: str | None = None
    size: int | None = None

    def to_domain(self) -> MediaInput:
        return MediaInput(**self.model_dump())


class CoDRequest(CamelModel):
    # Optional here so a missing message maps to 400, not a schema error
    message: str | None = None
    conversation_history: list[HistoryMessage] = Field(default_factory=list)
    enable_streaming: bool = False
    cod_config: ReasoningConfigPatch = Field(default_factory=ReasoningConfigPatch)
    fireworks_config: SamplingConfigPatch = Field(default_factory=SamplingConfigPatch)
    media: list[MediaInputSchema] = Field(default_factory=list)


class AnalyzeRequest(CamelModel):
    message: str
    cod_config: ReasoningConfigPatch = Field(default_factory=ReasoningConfigPatch)


# --- Response side ----------------------------------------------------------


class ComplexityOut(BaseModel):
    level: str
    score: int
    recommended_word_limit: int
    recommended_verification_depth: str
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
    description: str | None = None

    @classmethod
    def from_domain(
        cls, profile: ComplexityProfile | None, description: str | None = None
    ) -> ComplexityOut | None:
        if profile is None:
            return None
        return cls(**asdict(profile), description=description)


class EffectiveSettingsOut(BaseModel):
    method: str
    word_limit: int
    verification_depth: str
    adapted: bool
    rationale: str | None = None

    @classmethod
    def from_domain(cls, settings: EffectiveSettings) -> EffectiveSettingsOut:
        return cls(
            method=settings.method,
            word_limit=settings.word_limit,
            verification_depth=settings.verification_depth,
            adapted=settings.adapted,
            rationale=settings.rationale,
        )


class SectionOut(BaseModel):
    key: str
    label: str
    body: str
    html: str


class FormattedStageOut(BaseModel):
    stage: int
    title: str
    word_limit: int | None = None
    sections: list[SectionOut]

    @classmethod
    def from_domain(cls, formatted: FormattedStage) -> FormattedStageOut:
        return cls(
            stage=formatted.stage,
            title=formatted.title,
            word_limit=formatted.word_limit,
            sections=[SectionOut(**asdict(s)) for s in formatted.sections],
        )


class StageRawOut(BaseModel):
    content: str | None = None
    timestamp: str | None = None
    word_limit: int | None = None


class ProcessedMediaOut(BaseModel):
    description: str
    format: str
    failed: bool
    analysis: str | None = None


class CoDResponseData(BaseModel):
    stage1: FormattedStageOut
    stage2: FormattedStageOut | None
    complexity: ComplexityOut | None
    processing_time_ms: float
    total_time_ms: float | None
    adaptive_settings: EffectiveSettingsOut
    stage1_raw: StageRawOut
    stage2_raw: StageRawOut
    media: list[ProcessedMediaOut] = Field(default_factory=list)


class CoDResponse(BaseModel):
    success: bool = True
    data: CoDResponseData


class AnalyzeResponse(BaseModel):
    complexity: ComplexityOut
    settings: EffectiveSettingsOut


class ReasoningConfigOut(BaseModel):
    reasoning_method: str
    cod_word_limit: int
    reasoning_enhancement: str
    reflection_settings: dict

    @classmethod
    def from_domain(cls, config: ReasoningConfig) -> ReasoningConfigOut:
        return cls(
            reasoning_method=config.reasoning_method,
            cod_word_limit=config.word_limit,
            reasoning_enhancement=config.reasoning_enhancement,
            reflection_settings=asdict(config.reflection),
        )


class SamplingConfigOut(BaseModel):
    temperature: float
    top_p: float
    top_k: int
    max_tokens: int
    selected_model: str


class StoredSettingsOut(BaseModel):
    cod_config: ReasoningConfigOut
    fireworks_config: SamplingConfigOut


class SettingsUpdate(CamelModel):
    cod_config: ReasoningConfigPatch | None = None
    fireworks_config: SamplingConfigPatch | None = None


class SettingsExport(BaseModel):
    timestamp: str
    version: str
    config: StoredSettingsOut


class SettingsImport(BaseModel):
    config: SettingsUpdate


class HealthResponse(BaseModel):
    status: str
    provider: str
    default_model: str
