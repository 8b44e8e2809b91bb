"""
Configuration and constants for the whiteboard pipeline.

This module provides:
- Global configuration settings
- OCR engine settings
- Extraction confidence thresholds
- Answer service configuration
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple
import logging

# ============================================================================
# Logging Configuration
# ============================================================================

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("aura_board")


# ============================================================================
# Processing Configuration
# ============================================================================

@dataclass
class OCRConfig:
    """Tesseract configuration shared by both recognition profiles."""
    tesseract_lang: str = "eng"
    # 1 = LSTM only
    tesseract_oem: int = 1
    # Path to the tesseract binary (None = found on PATH)
    tesseract_cmd: Optional[str] = None
    # Seconds; 0 = no timeout. Enforced by pytesseract, not by the adapter.
    engine_timeout: float = 0


@dataclass
class ExtractionConfig:
    """Thresholds below which fused OCR text is treated as unreadable."""
    min_chars: int = 5
    min_tokens: int = 2


@dataclass
class SurfaceConfig:
    """Drawing surface configuration."""
    width: int = 800
    height: int = 500
    # RGB
    background: Tuple[int, int, int] = (255, 255, 255)


@dataclass
class AnswerConfig:
    """Generative answer service configuration."""
    api_url: str = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
    model: str = "gemini-2.0-flash"
    api_key: Optional[str] = None
    request_timeout: float = 60.0
    jpeg_quality: int = 95


@dataclass
class AppConfig:
    """Main application configuration."""
    ocr: OCRConfig = field(default_factory=OCRConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    surface: SurfaceConfig = field(default_factory=SurfaceConfig)
    answer: AnswerConfig = field(default_factory=AnswerConfig)

    debug_mode: bool = False


# ============================================================================
# Default Configuration Instance
# ============================================================================

def get_config() -> AppConfig:
    """Get the default application configuration with environment overrides."""
    config = AppConfig()

    if os.environ.get("AURA_DEBUG", "").lower() == "true":
        config.debug_mode = True

    if os.environ.get("AURA_TESSERACT_CMD"):
        config.ocr.tesseract_cmd = os.environ["AURA_TESSERACT_CMD"]

    if os.environ.get("AURA_OCR_TIMEOUT"):
        config.ocr.engine_timeout = float(os.environ["AURA_OCR_TIMEOUT"])

    if os.environ.get("AURA_MIN_CHARS"):
        config.extraction.min_chars = int(os.environ["AURA_MIN_CHARS"])

    if os.environ.get("AURA_MIN_TOKENS"):
        config.extraction.min_tokens = int(os.environ["AURA_MIN_TOKENS"])

    # Answer service credentials from environment
    config.answer.api_key = os.environ.get("GEMINI_API_KEY")
    if os.environ.get("AURA_GEMINI_MODEL"):
        config.answer.model = os.environ["AURA_GEMINI_MODEL"]

    return config


# ============================================================================
# Utility Functions
# ============================================================================

def check_tesseract_available(tesseract_cmd: Optional[str] = None) -> bool:
    """Check if the Tesseract binary can be found and run."""
    try:
        import pytesseract
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        pytesseract.get_tesseract_version()
        return True
    except (ImportError, OSError):
        return False
