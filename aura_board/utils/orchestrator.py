"""
Extraction orchestration.

Drives a single extraction request: readiness check, rasterization,
dual-pass extraction, and publication of the extracted text. Every
pipeline failure is converted into the "unrecognized" outcome.
"""

import logging
from typing import Callable, List, Optional, Protocol, Tuple

from .extractor import DualPassExtractor, ExtractionOutcome, OutcomeStatus
from .images import RasterImage

logger = logging.getLogger(__name__)

NOT_READY_MESSAGE = "The recognition engines are still loading. Please try again."
RASTERIZATION_MESSAGE = "Could not read the whiteboard."


class Surface(Protocol):
    async def rasterize(self) -> RasterImage:
        ...


class ExtractionOrchestrator:
    """
    Connects a drawing surface to the dual-pass extractor.

    extracted_text holds the most recent outcome for display; listeners
    registered with subscribe() are called each time it changes.
    """

    def __init__(self, surface: Surface, extractor: DualPassExtractor):
        self.surface = surface
        self.extractor = extractor
        self.extracted_text: Optional[ExtractionOutcome] = None
        self._listeners: List[Callable[[ExtractionOutcome], None]] = []

    def subscribe(self, listener: Callable[[ExtractionOutcome], None]):
        """Register a callback for extracted-text updates."""
        self._listeners.append(listener)

    def _publish(self, outcome: ExtractionOutcome):
        self.extracted_text = outcome
        for listener in self._listeners:
            try:
                listener(outcome)
            except Exception:
                logger.exception("Extracted-text listener failed")

    async def extract_from_surface(self) -> ExtractionOutcome:
        """
        Rasterize the surface and extract its text.

        Returns:
            ExtractionOutcome; never raises for pipeline failures
        """
        outcome, _ = await self.extract_with_image()
        return outcome

    async def extract_with_image(self) -> Tuple[ExtractionOutcome, Optional[RasterImage]]:
        """
        Same as extract_from_surface(), also returning the rasterized image.

        The image is None when extraction stopped before rasterization
        succeeded.
        """
        if not self.extractor.is_ready:
            logger.warning("Extraction requested before OCR engines were ready")
            return ExtractionOutcome.unrecognized(
                status=OutcomeStatus.NOT_READY,
                message=NOT_READY_MESSAGE
            ), None

        try:
            image = await self.surface.rasterize()
        except Exception as e:
            logger.error(f"Rasterization failed: {e}")
            outcome = ExtractionOutcome.unrecognized(
                status=OutcomeStatus.RASTERIZATION_FAILED,
                message=RASTERIZATION_MESSAGE
            )
            self._publish(outcome)
            return outcome, None

        outcome = await self.extractor.extract(image)
        self._publish(outcome)
        return outcome, image
