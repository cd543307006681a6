"""Heuristic complexity classification of an input message."""

from __future__ import annotations

import re

from cod_engine.config.constants import (
    LEVEL_RECOMMENDATIONS,
    LEVEL_THRESHOLDS,
    LONG_MESSAGE_CHARS,
    QUESTION_WORDS_BONUS_ABOVE,
    SENTENCES_BONUS_ABOVE,
    SIGNAL_WEIGHTS,
)
from cod_engine.models.domain import ComplexityProfile
from cod_engine.observability.logger import get_logger

logger = get_logger("complexity")

# Detector order matches the scoring table
DETECTORS: dict[str, re.Pattern] = {
    "has_math": re.compile(r"[\d+\-*/=()^%√∫∑∏]"),
    "has_logic": re.compile(
        r"\b(if|then|else|because|therefore|since|implies|prove|logic|reasoning"
        r"|analyze|compare|evaluate|assess)\b",
        re.I,
    ),
    "multi_step": re.compile(
        r"\b(first|next|then|after|finally|step|calculate|find|determine|process"
        r"|stages?|phases?)\b",
        re.I,
    ),
    "has_research": re.compile(
        r"\b(research|study|investigate|explore|examine|review|analysis|synthesis"
        r"|comprehensive|methodology)\b",
        re.I,
    ),
    "has_scientific": re.compile(
        r"\b(hypothesis|theory|experiment|data|statistical|scientific|empirical"
        r"|peer.review|literature)\b",
        re.I,
    ),
    "has_coding": re.compile(
        r"\b(code|programming|algorithm|function|class|variable|debug|implement"
        r"|develop|software)\b",
        re.I,
    ),
    "has_engineering": re.compile(
        r"\b(design|optimization|system|architecture|performance|efficiency|scalability)\b",
        re.I,
    ),
    "has_philosophy": re.compile(
        r"\b(ethics|moral|philosophical|ontology|epistemology|metaphysics|consciousness)\b",
        re.I,
    ),
    "has_economics": re.compile(
        r"\b(economic|financial|market|trade|investment|fiscal|monetary|GDP|inflation)\b",
        re.I,
    ),
    "has_medicine": re.compile(
        r"\b(medical|clinical|diagnosis|treatment|patient|therapy|pharmaceutical|biological)\b",
        re.I,
    ),
}

_FENCED_CODE = re.compile(r"```[\s\S]*?```")
_EQUATION = re.compile(r"\b\w+\s*=\s*[\d\w+\-*/()]+")
_FRACTION = re.compile(r"\b\d+/\d+\b")
_OPERATORS = re.compile(r"[+\-*/=<>]+")
_SENTENCE_END = re.compile(r"[.!?]+")
_QUESTION_WORD = re.compile(r"\b(what|how|why|when|where|which|who)\b", re.I)


def normalize_for_word_count(text: str) -> str:
    """Strip fenced code and collapse equations, fractions and operators."""
    text = _FENCED_CODE.sub("", text)
    text = _EQUATION.sub("EQUATION", text)
    text = _FRACTION.sub("FRACTION", text)
    return _OPERATORS.sub(" ", text)


def count_words(text: str) -> int:
    if not text:
        return 0
    return len(normalize_for_word_count(text).split())


def level_for_score(score: int) -> str:
    for minimum, level in LEVEL_THRESHOLDS:
        if score >= minimum:
            return level
    return LEVEL_THRESHOLDS[-1][1]


def score_signals(signals: dict[str, bool], question_words: int, sentence_count: int) -> int:
    score = sum(SIGNAL_WEIGHTS[name] for name, fired in signals.items() if fired)
    if question_words > QUESTION_WORDS_BONUS_ABOVE:
        score += 1
    if sentence_count > SENTENCES_BONUS_ABOVE:
        score += 1
    return score


class ComplexityAnalyzer:
    def analyze(self, message: str) -> ComplexityProfile:
        """Classify a message. Total: blank input yields a ``simple`` profile."""
        message = message or ""

        signals = {name: bool(pattern.search(message)) for name, pattern in DETECTORS.items()}
        sentence_count = len(_SENTENCE_END.findall(message))
        question_words = len(_QUESTION_WORD.findall(message))
        signals["is_long"] = len(message) > LONG_MESSAGE_CHARS
        signals["has_multiple_questions"] = message.count("?") > 1

        score = score_signals(signals, question_words, sentence_count)
        level = level_for_score(score)
        word_limit, depth = LEVEL_RECOMMENDATIONS[level]

        profile = ComplexityProfile(
            level=level,
            score=score,
            recommended_word_limit=word_limit,
            recommended_verification_depth=depth,
            word_count=count_words(message),
            sentence_count=sentence_count,
            question_words=question_words,
            **signals,
        )
        logger.debug("complexity_analyzed", level=level, score=score)
        return profile
