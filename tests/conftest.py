"""Shared test fixtures."""

from __future__ import annotations

import base64
import tempfile
from pathlib import Path

import pytest

from cod_engine.config.settings import Settings
from cod_engine.models.domain import MediaInput

STAGE1_TEXT = """Let me work through this.
#### PROBLEM ANALYSIS
The question asks for a **simple** sum.

#### CHAIN OF DRAFT STEPS
CoD Step 1: add two and two
CoD Step 2: result is four

#### INITIAL REFLECTION
Arithmetic is *trivial* here.

#### DRAFT SOLUTION
The answer is `4`.
"""

STAGE2_TEXT = """#### STAGE 2 VERIFICATION
Stage 1 is correct.

#### ERROR DETECTION & CORRECTION
No errors found.

#### ALTERNATIVE APPROACH ANALYSIS
Counting on fingers gives the same result.

#### CONFIDENCE ASSESSMENT
Very high.

#### FINAL COMPREHENSIVE ANSWER
2 + 2 = 4

#### REFLECTION SUMMARY
Simple problems need little verification.
"""


def b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


@pytest.fixture
def settings():
    """Test settings with temp paths."""
    tmp = tempfile.mkdtemp()
    return Settings(
        fireworks_api_key="test-key",
        google_api_key="test-key",
        settings_db_path=str(Path(tmp) / "test_settings.db"),
        log_json=False,
    )


@pytest.fixture
def stage1_text():
    return STAGE1_TEXT


@pytest.fixture
def stage2_text():
    return STAGE2_TEXT


@pytest.fixture
def text_file():
    return MediaInput(type="file", data=b64("hello world"), mime_type="text/plain", filename="a.txt")


@pytest.fixture
def audio_file():
    return MediaInput(type="audio", data=b64("RIFF"), mime_type="audio/wav", filename="note.wav")


@pytest.fixture
def image_file():
    return MediaInput(type="image", data=b64("PNGDATA"), mime_type="image/png", filename="pic.png")
