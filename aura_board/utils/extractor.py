"""
Dual-pass extraction for whiteboard images.

Provides:
- ExtractionOutcome (recognized text or the "unrecognized" sentinel)
- Fusion rule table for picking between the standard and math passes
- DualPassExtractor, which filters, recognizes and fuses
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple, Dict, Any

from ..config import ExtractionConfig
from .images import RasterImage, FilterProfile, STANDARD_FILTER, MATH_FILTER, apply_filter
from .ocr_text import TesseractAdapter

logger = logging.getLogger(__name__)


# ============================================================================
# Outcomes
# ============================================================================

class OutcomeStatus:
    """Outcome status identifiers."""
    RECOGNIZED = "recognized"
    LOW_CONFIDENCE = "low_confidence"
    NOT_READY = "not_ready"
    RASTERIZATION_FAILED = "rasterization_failed"


UNRECOGNIZED_MESSAGE = "Could not recognize the whiteboard content as text."


@dataclass(frozen=True)
class ExtractionOutcome:
    """
    Final result of an extraction request.

    text is None for the "unrecognized" sentinel; downstream code checks
    is_recognized and falls back to image-based prompting.
    """
    text: Optional[str]
    status: str = OutcomeStatus.RECOGNIZED
    profile: Optional[str] = None
    message: str = ""

    @property
    def is_recognized(self) -> bool:
        return self.text is not None

    @classmethod
    def recognized(cls, text: str, profile: Optional[str] = None) -> "ExtractionOutcome":
        return cls(text=text, status=OutcomeStatus.RECOGNIZED, profile=profile)

    @classmethod
    def unrecognized(
        cls,
        status: str = OutcomeStatus.LOW_CONFIDENCE,
        message: str = UNRECOGNIZED_MESSAGE,
        profile: Optional[str] = None
    ) -> "ExtractionOutcome":
        return cls(text=None, status=status, profile=profile, message=message)

    def display_text(self) -> str:
        """Text to show in the UI."""
        return self.text if self.text is not None else self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "status": self.status,
            "profile": self.profile,
            "message": self.message
        }


# ============================================================================
# Fusion
# ============================================================================

MATH_OPERATORS = ("=", "+", "-", "×", "÷", "∫", "∑")


@dataclass(frozen=True)
class FusionDecision:
    """Selected text and the pass it came from."""
    text: str
    profile: str
    rule: str


@dataclass(frozen=True)
class FusionRule:
    """Predicate over (standard_text, math_text) and the pass it selects."""
    name: str
    predicate: Callable[[str, str], bool]
    selects: str  # "standard" or "math"


def _math_has_operator(standard: str, math: str) -> bool:
    return any(op in math for op in MATH_OPERATORS)


def _standard_is_longer(standard: str, math: str) -> bool:
    return len(standard) > len(math)


def _always(standard: str, math: str) -> bool:
    return True


# Evaluated in order; first match wins
FUSION_RULES: List[FusionRule] = [
    FusionRule("math_operator", _math_has_operator, "math"),
    FusionRule("standard_longer", _standard_is_longer, "standard"),
    FusionRule("math_default", _always, "math"),
]


def fuse(
    standard_text: str,
    math_text: str,
    rules: Optional[List[FusionRule]] = None
) -> FusionDecision:
    """
    Pick one pass result using the fusion rule table.

    Args:
        standard_text: Trimmed text from the standard pass ("" if it failed)
        math_text: Trimmed text from the math pass ("" if it failed)
        rules: Rule table (default FUSION_RULES)

    Returns:
        FusionDecision naming the selected pass and the rule that fired
    """
    for rule in rules or FUSION_RULES:
        if rule.predicate(standard_text, math_text):
            text = math_text if rule.selects == "math" else standard_text
            return FusionDecision(text=text, profile=rule.selects, rule=rule.name)

    # The default table always ends in a catch-all
    return FusionDecision(text=math_text, profile="math", rule="none")


def is_low_confidence(text: str, min_chars: int = 5, min_tokens: int = 2) -> bool:
    """Short or sparse OCR output is treated as unreliable."""
    return len(text) < min_chars or len(text.split()) < min_tokens


# ============================================================================
# Dual-Pass Extractor
# ============================================================================

@dataclass
class PassReport:
    """Per-request trace of both passes, kept for debugging and the CLI."""
    standard_text: str = ""
    math_text: str = ""
    errors: Dict[str, str] = field(default_factory=dict)
    decision: Optional[FusionDecision] = None


class DualPassExtractor:
    """
    Runs the standard and math OCR passes and fuses their output.

    Both adapters are owned by the caller and shared across requests;
    the extractor itself keeps no per-request state.
    """

    def __init__(
        self,
        standard_adapter: TesseractAdapter,
        math_adapter: TesseractAdapter,
        config: Optional[ExtractionConfig] = None,
        standard_filter: FilterProfile = STANDARD_FILTER,
        math_filter: FilterProfile = MATH_FILTER
    ):
        self.standard_adapter = standard_adapter
        self.math_adapter = math_adapter
        self.config = config or ExtractionConfig()
        self.standard_filter = standard_filter
        self.math_filter = math_filter

    @property
    def is_ready(self) -> bool:
        return self.standard_adapter.is_ready and self.math_adapter.is_ready

    async def run_passes(self, image: RasterImage) -> PassReport:
        """
        Filter the image twice and recognize both variants concurrently.

        A failed pass contributes empty text; its error is recorded in
        the report instead of being raised.
        """
        standard_image = apply_filter(image, self.standard_filter)
        math_image = apply_filter(image, self.math_filter)

        results = await asyncio.gather(
            self.standard_adapter.recognize(standard_image),
            self.math_adapter.recognize(math_image),
            return_exceptions=True
        )

        report = PassReport()
        texts: List[str] = []
        for adapter, result in zip((self.standard_adapter, self.math_adapter), results):
            if isinstance(result, Exception):
                logger.warning(f"{adapter.name} pass failed: {result}")
                report.errors[adapter.name] = str(result)
                texts.append("")
            else:
                texts.append(result.text.strip())

        report.standard_text, report.math_text = texts
        return report

    async def extract(self, image: RasterImage) -> ExtractionOutcome:
        """
        Extract text from a rasterized whiteboard.

        Returns:
            Recognized text, or the "unrecognized" sentinel when the fused
            text is shorter than min_chars or has fewer than min_tokens
            tokens
        """
        outcome, _ = await self.extract_with_report(image)
        return outcome

    async def extract_with_report(
        self,
        image: RasterImage
    ) -> Tuple[ExtractionOutcome, PassReport]:
        """Same as extract(), also returning the per-pass trace."""
        report = await self.run_passes(image)

        decision = fuse(report.standard_text, report.math_text)
        report.decision = decision
        text = decision.text.strip()

        logger.debug(
            f"Fusion picked {decision.profile} pass via {decision.rule}: {text!r}"
        )

        if is_low_confidence(text, self.config.min_chars, self.config.min_tokens):
            logger.info(f"Low-confidence OCR result ({len(text)} chars), falling back to image")
            return ExtractionOutcome.unrecognized(profile=decision.profile), report

        return ExtractionOutcome.recognized(text, profile=decision.profile), report
