"""Resolve effective word limit and verification depth for a request."""

from __future__ import annotations

from cod_engine.config.constants import LEVEL_RATIONALES
from cod_engine.models.domain import EffectiveSettings, ReasoningConfig
from cod_engine.reasoning.complexity import ComplexityAnalyzer


class AdaptiveSettingsResolver:
    def __init__(self, analyzer: ComplexityAnalyzer | None = None) -> None:
        self._analyzer = analyzer or ComplexityAnalyzer()

    def resolve(self, message: str, config: ReasoningConfig) -> EffectiveSettings:
        if config.reasoning_enhancement != "adaptive":
            return EffectiveSettings(
                method=config.reasoning_method,
                word_limit=config.word_limit,
                verification_depth=config.reflection.verification_depth,
                adapted=False,
            )

        complexity = self._analyzer.analyze(message)
        word_limit = complexity.recommended_word_limit
        depth = complexity.recommended_verification_depth
        return EffectiveSettings(
            method=config.reasoning_method,
            word_limit=word_limit,
            verification_depth=depth,
            adapted=(
                word_limit != config.word_limit
                or depth != config.reflection.verification_depth
            ),
            complexity=complexity,
            rationale=LEVEL_RATIONALES[complexity.level],
        )
