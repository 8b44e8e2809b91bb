"""
Shared fixtures and fakes for the whiteboard pipeline tests.

The fakes stand in for Tesseract so the pipeline can be tested without
the binary installed.
"""

import asyncio
import sys
from pathlib import Path

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))


class FakeAdapter:
    """In-process stand-in for TesseractAdapter."""

    def __init__(self, name, text="", error=None, ready=True, before=None):
        self.name = name
        self.text = text
        self.error = error
        self._ready = ready
        self.before = before
        self.images = []

    @property
    def is_ready(self):
        return self._ready

    async def initialize(self):
        self._ready = True

    async def recognize(self, image):
        from aura_board.utils.ocr_text import RecognitionResult

        self.images.append(image)
        if self.before is not None:
            await self.before()
        if self.error is not None:
            raise self.error
        return RecognitionResult(text=self.text.strip(), profile=self.name)


class FakeTesseract:
    """Minimal pytesseract module replacement."""

    class TesseractError(RuntimeError):
        pass

    def __init__(self, text="", error=None, version_error=None):
        self.text = text
        self.error = error
        self.version_error = version_error
        self.calls = []

    def get_tesseract_version(self):
        if self.version_error is not None:
            raise self.version_error
        return "5.3.0"

    def image_to_string(self, image, lang="eng", config="", timeout=0):
        self.calls.append({"image": image, "lang": lang, "config": config, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.text


def make_extractor(standard_text="", math_text="", **kwargs):
    """Build a DualPassExtractor over two fake adapters."""
    from aura_board.utils.extractor import DualPassExtractor

    standard = FakeAdapter("standard", standard_text)
    math = FakeAdapter("math", math_text)
    return DualPassExtractor(standard, math, **kwargs)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def white_image():
    """Blank white whiteboard."""
    from aura_board.utils.images import RasterImage

    return RasterImage.blank(120, 80)


@pytest.fixture
def stroke_image():
    """White board with a dark horizontal stroke and a mid-gray patch."""
    from aura_board.utils.images import RasterImage

    pixels = np.full((80, 120, 4), 255, dtype=np.uint8)
    pixels[20:25, 10:110, :3] = 0
    pixels[50:60, 30:60, :3] = 145
    return RasterImage(pixels)
