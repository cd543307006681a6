"""Split stage output into named sections on the ``####`` delimiter."""

from __future__ import annotations

import re
from typing import Literal

from cod_engine.config.constants import SECTION_DELIMITER, STAGE1_SECTIONS, STAGE2_SECTIONS

SegmentMode = Literal["tagged", "positional"]

SCHEDULES: dict[int, list[tuple[str, str, str]]] = {
    1: STAGE1_SECTIONS,
    2: STAGE2_SECTIONS,
}


def schedule_for(stage: int) -> list[tuple[str, str, str]]:
    try:
        return SCHEDULES[stage]
    except KeyError:
        raise ValueError(f"Unknown stage: {stage}") from None


def _header_line(header: str) -> re.Pattern:
    """The whole header line, with any surrounding ``#``, ``*`` or ``:`` markup."""
    return re.compile(rf"^[\s#:*]*{re.escape(header)}[ \t*:]*\r?\n?", re.I)


def _match_header(part: str, schedule: list[tuple[str, str, str]]) -> tuple[str, str, str] | None:
    head = part.lstrip(" \t\r\n#:*").upper()
    for entry in schedule:
        if head.startswith(entry[2]):
            return entry
    return None


def segment_sections(
    raw_text: str,
    stage: int,
    delimiter: str = SECTION_DELIMITER,
    mode: SegmentMode = "tagged",
) -> list[tuple[str, str, str]]:
    """Return ``(key, label, body)`` triples in document order.

    The text before the first delimiter is preamble and dropped. In ``tagged``
    mode a section's own header decides its label, falling back to its position
    when no known header is present; ``positional`` mode maps by index only.
    Missing sections are omitted, surplus ones ignored.
    """
    schedule = schedule_for(stage)
    parts = raw_text.split(delimiter)
    sections: list[tuple[str, str, str]] = []

    for index, part in enumerate(parts[1:]):
        if not part:
            continue
        entry = _match_header(part, schedule) if mode == "tagged" else None
        if entry is None:
            if index >= len(schedule):
                continue
            entry = schedule[index]
        key, label, header = entry
        if mode == "tagged":
            body = _header_line(header).sub("", part, count=1).strip()
        else:
            body = part.replace(header, "", 1).strip()
        sections.append((key, label, body))
    return sections


def segment(
    raw_text: str,
    stage: int,
    delimiter: str = SECTION_DELIMITER,
    mode: SegmentMode = "tagged",
) -> list[tuple[str, str]]:
    """Ordered ``(label, body)`` pairs for a stage's raw output."""
    return [
        (label, body)
        for _, label, body in segment_sections(raw_text, stage, delimiter, mode)
    ]
