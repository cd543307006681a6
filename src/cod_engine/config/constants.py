"""Fixed heuristics, lookup tables and defaults for the CoD engine."""

from __future__ import annotations

# Complexity scoring weights
SIGNAL_WEIGHTS: dict[str, int] = {
    "has_math": 2,
    "has_logic": 1,
    "multi_step": 1,
    "has_research": 3,
    "has_scientific": 2,
    "has_coding": 1,
    "has_engineering": 1,
    "has_philosophy": 2,
    "has_economics": 1,
    "has_medicine": 2,
    "is_long": 1,
    "has_multiple_questions": 1,
}
QUESTION_WORDS_BONUS_ABOVE = 3
SENTENCES_BONUS_ABOVE = 10
LONG_MESSAGE_CHARS = 300

# (min score, level), evaluated highest first
LEVEL_THRESHOLDS: list[tuple[int, str]] = [
    (8, "research_grade"),
    (6, "highly_complex"),
    (4, "complex"),
    (2, "moderate"),
    (0, "simple"),
]

LEVEL_ORDER: list[str] = [
    "simple",
    "moderate",
    "complex",
    "highly_complex",
    "research_grade",
]

# level -> (word limit per CoD step, verification depth)
LEVEL_RECOMMENDATIONS: dict[str, tuple[int, str]] = {
    "research_grade": (15, "research"),
    "highly_complex": (12, "deep"),
    "complex": (8, "standard"),
    "moderate": (5, "standard"),
    "simple": (5, "basic"),
}

LEVEL_RATIONALES: dict[str, str] = {
    "research_grade": (
        "Research-grade complexity detected - using extensive CoD steps with deep verification"
    ),
    "highly_complex": (
        "Highly complex problem detected - using expanded CoD with comprehensive verification"
    ),
    "complex": (
        "Complex problem detected - using moderate CoD expansion with standard verification"
    ),
    "moderate": "Moderate complexity detected - using balanced CoD approach",
    "simple": "Simple problem detected - using concise CoD steps",
}

LEVEL_DESCRIPTIONS: dict[str, str] = {
    "research_grade": "Requires extensive research-level analysis with 15 words per CoD step",
    "highly_complex": "Complex multi-faceted problem requiring 12 words per CoD step",
    "complex": "Multi-step problem requiring 8 words per CoD step",
    "moderate": "Standard complexity with 5 words per CoD step",
    "simple": "Simple problem with 5 words per CoD step",
}

# Reasoning config defaults
DEFAULT_REASONING_METHOD = "enhanced_cod"
DEFAULT_WORD_LIMIT = 5
DEFAULT_ENHANCEMENT = "fixed"
DEFAULT_VERIFICATION_DEPTH = "standard"

# Sections
SECTION_DELIMITER = "####"

# (key, display label, header text as emitted by the model)
STAGE1_SECTIONS: list[tuple[str, str, str]] = [
    ("problem_analysis", "Problem Analysis", "PROBLEM ANALYSIS"),
    ("cod_steps", "Chain of Draft Steps", "CHAIN OF DRAFT STEPS"),
    ("initial_reflection", "Initial Reflection", "INITIAL REFLECTION"),
    ("draft_solution", "Draft Solution", "DRAFT SOLUTION"),
]

STAGE2_SECTIONS: list[tuple[str, str, str]] = [
    ("verification", "Deep Verification", "STAGE 2 VERIFICATION"),
    ("error_detection", "Error Detection & Correction", "ERROR DETECTION & CORRECTION"),
    ("alternatives", "Alternative Approaches", "ALTERNATIVE APPROACH ANALYSIS"),
    ("confidence", "Confidence Assessment", "CONFIDENCE ASSESSMENT"),
    ("final_answer", "Final Answer", "FINAL COMPREHENSIVE ANSWER"),
    ("reflection_summary", "Reflection Summary", "REFLECTION SUMMARY"),
]

STAGE_TITLES: dict[int, str] = {
    1: "Problem Analysis & Chain of Draft",
    2: "Deep Verification & Final Answer",
}

# Media
MEDIA_EXCERPT_CHARS = 500

# Settings export
CONFIG_EXPORT_VERSION = "1.0.0"
