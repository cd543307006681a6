"""All prompt templates for the two-stage Chain of Draft process."""

from __future__ import annotations

from cod_engine.config.constants import MEDIA_EXCERPT_CHARS
from cod_engine.models.domain import ProcessedMedia

STAGE1_ANALYSIS_COD_SYSTEM = """You are an advanced reasoning model. This is STAGE 1 of a two-stage enhanced reasoning process.

CRITICAL INSTRUCTIONS:
1. First, analyze the problem's complexity and structure. Cover every aspect of the task: how it will be carried out, which issues could arise and how to solve them.
2. Then apply the Chain of Draft (CoD) methodology with EXACTLY {word_limit} words per step, unless more steps or words are needed to cover the task completely.
3. End with a draft solution that lists the steps, the issues that could arise and how you would solve them.

FORMAT:
#### PROBLEM ANALYSIS
[Analyze complexity, identify key components, determine approach]

#### CHAIN OF DRAFT STEPS
CoD Step 1: [{word_limit} words maximum]
CoD Step 2: [{word_limit} words maximum]
CoD Step 3: [{word_limit} words maximum]
[Continue as needed...]

#### INITIAL REFLECTION
[Reflect on reasoning quality, identify potential issues, assess confidence, and look for any edge case or requirement the reasoning above missed or handled incorrectly]

#### DRAFT SOLUTION
[Provide initial solution based on CoD analysis]

Remember: This is STAGE 1. Be thorough but prepare for STAGE 2 verification."""

STAGE2_VERIFICATION_SYSTEM = """You are in STAGE 2 of enhanced reasoning. You will now perform deep verification of the Stage 1 reasoning and provide the final comprehensive answer. Consider the full question, including small edge cases that may have been missed. If you are not certain about any point, keep reasoning until you are, explain what was wrong and correct it. Your final answer is not limited by the Chain of Draft word budget: it must address every part of the user's request completely. Then write full code that fulfills every single part of the user's request and handles every issue that could arise, however many lines it takes.

Your task:
1. CRITICALLY EXAMINE the Stage 1 analysis and CoD steps without skipping minor or unlikely issues.
2. VERIFY each reasoning step for accuracy and logical consistency, including edge cases and choices that would cause problems in later steps.
3. CHECK for mathematical errors, logical fallacies, or incomplete reasoning.
4. EXPLORE alternative approaches if needed.
5. PROVIDE a comprehensive final answer that takes everything above into account, followed by complete code covering every part and subpart of the request.

VERIFICATION CHECKLIST:
- Are all CoD steps logically sound?
- Are there any mathematical or computational errors?
- Are assumptions clearly stated and reasonable?
- Have alternative approaches been considered?
- Is the reasoning complete and comprehensive?
- Are there any gaps or weaknesses in the logic?

FORMAT:
#### STAGE 2 VERIFICATION
[Critical analysis of Stage 1 reasoning]

#### ERROR DETECTION & CORRECTION
[Identify and correct any errors found]

#### ALTERNATIVE APPROACH ANALYSIS
[Consider alternative solution paths]

#### CONFIDENCE ASSESSMENT
[Evaluate confidence levels and identify uncertainties]

#### FINAL COMPREHENSIVE ANSWER
[Definitive, well-reasoned solution with full explanation]

#### REFLECTION SUMMARY
[Key insights, lessons learned, and reasoning quality assessment]"""

STAGE2_PROCEED_INSTRUCTION = (
    "Now proceed with STAGE 2 verification of the above analysis "
    "and provide the final comprehensive answer."
)

IMAGE_ANALYSIS_PROMPT = (
    "Analyze this image in detail. Describe what you see, including objects, people, "
    "text, colors, composition, and any relevant details that would be useful for "
    "further reasoning or analysis."
)

MEDIA_CONTEXT_HEADER = "=== MULTIMEDIA CONTEXT ==="
MEDIA_CONTEXT_FOOTER = "=== END MULTIMEDIA CONTEXT ==="
MEDIA_CONTEXT_INSTRUCTION = (
    "Please consider the above multimedia context when performing your "
    "Chain of Draft analysis."
)


def build_stage1_system(word_limit: int) -> str:
    return STAGE1_ANALYSIS_COD_SYSTEM.format(word_limit=word_limit)


def truncate_excerpt(text: str, limit: int = MEDIA_EXCERPT_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."


def format_media_context(processed: list[ProcessedMedia]) -> str:
    """Format processed media as a delimited context block. Empty input gives ''."""
    if not processed:
        return ""
    lines = ["", "", MEDIA_CONTEXT_HEADER]
    for i, media in enumerate(processed, 1):
        lines.append("")
        lines.append(f"{i}. {media.description}")
        lines.append(f"   Format: {media.metadata.format}")
        if media.extracted_text:
            lines.append(f"   Content: {truncate_excerpt(media.extracted_text)}")
        if media.analysis:
            lines.append(f"   Analysis: {media.analysis}")
    lines += ["", MEDIA_CONTEXT_FOOTER, "", MEDIA_CONTEXT_INSTRUCTION, "", ""]
    return "\n".join(lines)


def build_media_enhanced_prompt(prompt: str, processed: list[ProcessedMedia]) -> str:
    """Prepend the media context block to the prompt when there is any media."""
    context = format_media_context(processed)
    return context + prompt if context else prompt
