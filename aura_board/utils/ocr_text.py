"""
Text OCR module for the whiteboard pipeline.

Provides:
- Recognition profiles (character whitelist, page segmentation mode)
- Tesseract adapter bound to a single profile
- Startup helper that builds and warms up both adapters
"""

import asyncio
import logging
import string
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Any, Optional, Tuple

from ..config import OCRConfig
from ..errors import EngineStartupError, EngineNotReady, RecognitionFailure
from .images import RasterImage

logger = logging.getLogger(__name__)


# ============================================================================
# Recognition Profiles
# ============================================================================

class PageSegMode(Enum):
    """Tesseract page segmentation modes used by the pipeline."""
    SINGLE_BLOCK = 6   # Assume a single uniform block of text
    SPARSE_TEXT = 11   # Find as much text as possible in no particular order


STANDARD_CHARSET = string.digits + string.ascii_letters + "+-*/()=.,?!:;%$#@&<>[]{}"
MATH_SYMBOLS = "×÷∫∑√π∞≤≥≠±^"


@dataclass(frozen=True)
class RecognitionProfile:
    """Configuration for one recognition engine instance."""
    name: str
    whitelist: str
    page_seg_mode: PageSegMode
    preserve_interword_spaces: bool = True

    def tesseract_config(self, oem: int = 1) -> str:
        """Build the tesseract command-line config for this profile."""
        parts = [
            f"--oem {oem}",
            f"--psm {self.page_seg_mode.value}",
            f"-c tessedit_char_whitelist={self.whitelist}",
        ]
        if self.preserve_interword_spaces:
            parts.append("-c preserve_interword_spaces=1")
        return " ".join(parts)


STANDARD_PROFILE = RecognitionProfile(
    name="standard",
    whitelist=STANDARD_CHARSET,
    page_seg_mode=PageSegMode.SINGLE_BLOCK,
)

MATH_PROFILE = RecognitionProfile(
    name="math",
    whitelist=STANDARD_CHARSET + MATH_SYMBOLS,
    page_seg_mode=PageSegMode.SPARSE_TEXT,
)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass
class RecognitionResult:
    """Output of one engine pass."""
    text: str
    profile: str
    elapsed: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.text

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "profile": self.profile,
            "elapsed": round(self.elapsed, 3),
            "metadata": self.metadata
        }


# ============================================================================
# Tesseract Adapter
# ============================================================================

class TesseractAdapter:
    """
    Tesseract instance bound to one recognition profile.

    The profile and the derived config string are fixed for the adapter's
    lifetime. Create adapters once at startup, call initialize() once, and
    reuse them for every extraction request.
    """

    def __init__(
        self,
        profile: RecognitionProfile,
        config: Optional[OCRConfig] = None
    ):
        try:
            import pytesseract
            self.pytesseract = pytesseract
        except ImportError:
            raise EngineStartupError(
                "pytesseract not available. Install with: pip install pytesseract"
            )

        self.profile = profile
        self.ocr_config = config or OCRConfig()
        self.config = profile.tesseract_config(self.ocr_config.tesseract_oem)

        if self.ocr_config.tesseract_cmd:
            self.pytesseract.pytesseract.tesseract_cmd = self.ocr_config.tesseract_cmd

        self._ready = False

    @property
    def name(self) -> str:
        return self.profile.name

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def initialize(self) -> None:
        """
        Warm up the engine.

        Raises:
            EngineStartupError: If the tesseract binary cannot be run
        """
        if self._ready:
            return

        try:
            version = await asyncio.to_thread(self.pytesseract.get_tesseract_version)
        except Exception as e:
            raise EngineStartupError(
                f"Tesseract not available for profile '{self.name}': {e}\n"
                "Install Tesseract: https://github.com/tesseract-ocr/tesseract"
            ) from e

        self._ready = True
        logger.info(f"Initialized {self.name} OCR engine (tesseract {version}, {self.config!r})")

    async def recognize(self, image: RasterImage) -> RecognitionResult:
        """
        Recognize text in an image.

        Args:
            image: Filtered image to read

        Returns:
            RecognitionResult with trimmed text

        Raises:
            EngineNotReady: If initialize() has not completed
            RecognitionFailure: If tesseract errors or times out
        """
        if not self._ready:
            raise EngineNotReady(f"OCR engine '{self.name}' is not initialized")

        start = time.perf_counter()
        try:
            text = await asyncio.to_thread(
                self.pytesseract.image_to_string,
                image.to_pil(),
                lang=self.ocr_config.tesseract_lang,
                config=self.config,
                timeout=self.ocr_config.engine_timeout
            )
        except self.pytesseract.TesseractError as e:
            raise RecognitionFailure(self.name, str(e)) from e
        except RuntimeError as e:
            # pytesseract reports its own timeout as a bare RuntimeError
            raise RecognitionFailure(self.name, f"timed out: {e}") from e
        except Exception as e:
            raise RecognitionFailure(self.name, str(e)) from e

        elapsed = time.perf_counter() - start
        result = RecognitionResult(text=text.strip(), profile=self.name, elapsed=elapsed)
        logger.debug(f"{self.name} pass read {len(result.text)} chars in {elapsed:.2f}s")
        return result


# ============================================================================
# Startup
# ============================================================================

async def create_adapters(
    config: Optional[OCRConfig] = None
) -> Tuple[TesseractAdapter, TesseractAdapter]:
    """
    Build and warm up the standard and math adapters.

    Both adapters initialize concurrently.

    Returns:
        (standard_adapter, math_adapter)

    Raises:
        EngineStartupError: If either adapter fails to start
    """
    standard = TesseractAdapter(STANDARD_PROFILE, config)
    math = TesseractAdapter(MATH_PROFILE, config)
    await asyncio.gather(standard.initialize(), math.initialize())
    return standard, math
