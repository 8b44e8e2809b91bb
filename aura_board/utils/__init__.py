"""
Utility modules for the whiteboard pipeline.
"""

from .io import load_image, save_image, save_json, ensure_dir
from .images import RasterImage, FilterProfile, STANDARD_FILTER, MATH_FILTER, apply_filter
from .ocr_text import (
    TesseractAdapter, RecognitionProfile, RecognitionResult, PageSegMode,
    STANDARD_PROFILE, MATH_PROFILE, create_adapters,
)
from .extractor import DualPassExtractor, ExtractionOutcome, FusionDecision, fuse
from .orchestrator import ExtractionOrchestrator
from .surface import Stroke, StrokeLog, DrawingSurface, ImageFileSurface
from .answer import AnswerClient, AnswerRequest, AnswerResult, build_prompt

__all__ = [
    # IO
    "load_image", "save_image", "save_json", "ensure_dir",
    # Images
    "RasterImage", "FilterProfile", "STANDARD_FILTER", "MATH_FILTER", "apply_filter",
    # OCR
    "TesseractAdapter", "RecognitionProfile", "RecognitionResult", "PageSegMode",
    "STANDARD_PROFILE", "MATH_PROFILE", "create_adapters",
    # Extraction
    "DualPassExtractor", "ExtractionOutcome", "FusionDecision", "fuse",
    "ExtractionOrchestrator",
    # Surface
    "Stroke", "StrokeLog", "DrawingSurface", "ImageFileSurface",
    # Answer service
    "AnswerClient", "AnswerRequest", "AnswerResult", "build_prompt",
]
