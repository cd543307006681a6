"""Render section bodies and whole stages into display-ready HTML."""

from __future__ import annotations

import html
import re

from cod_engine.config.constants import STAGE_TITLES
from cod_engine.formatting.segmenter import SegmentMode, segment_sections
from cod_engine.models.domain import FormattedStage, Section, SessionResult, StageResult

_FENCED = re.compile(r"```(?:[\w+-]*\n)?([\s\S]*?)```")
_INLINE_CODE = re.compile(r"`([^`\n]+?)`")
_BOLD = re.compile(r"\*\*(.+?)\*\*")
_ITALIC = re.compile(r"\*(.+?)\*")
_PLACEHOLDER = re.compile(r"\x00(\d+)\x00")


def render_inline(text: str) -> str:
    """Minimal markup: bold, italic, code spans, fenced code, paragraphs."""
    protected: list[str] = []

    def _protect(fragment: str) -> str:
        protected.append(fragment)
        return f"\x00{len(protected) - 1}\x00"

    out = html.escape(text, quote=False)
    out = _FENCED.sub(lambda m: _protect(f"<pre><code>{m.group(1)}</code></pre>"), out)
    out = _INLINE_CODE.sub(lambda m: _protect(f"<code>{m.group(1)}</code>"), out)
    out = _BOLD.sub(r"<strong>\1</strong>", out)
    out = _ITALIC.sub(r"<em>\1</em>", out)
    out = out.replace("\n\n", "</p><p>").replace("\n", "<br>")
    out = f"<p>{out}</p>"
    return _PLACEHOLDER.sub(lambda m: protected[int(m.group(1))], out)


def format_stage(result: StageResult, mode: SegmentMode = "tagged") -> FormattedStage:
    sections = [
        Section(key=key, label=label, body=body, html=render_inline(body))
        for key, label, body in segment_sections(result.content, result.stage, mode=mode)
    ]
    return FormattedStage(
        stage=result.stage,
        title=STAGE_TITLES[result.stage],
        sections=sections,
        word_limit=result.word_limit,
    )


def format_session(session: SessionResult, mode: SegmentMode = "tagged") -> dict:
    return {
        "stage1": format_stage(session.stage1, mode),
        "stage2": format_stage(session.stage2, mode) if session.stage2 else None,
        "metadata": {
            "total_time_ms": session.total_time_ms,
            "word_limit": session.stage1.word_limit,
            "complexity": session.stage1.complexity,
            "settings": session.settings,
        },
    }
