"""
Whiteboard session.

Owns the long-lived pieces (OCR adapters, extractor, orchestrator,
answer client) and exposes the "generate answer" action the UI shell
binds to its button.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .config import AppConfig, get_config
from .utils.answer import AnswerClient, AnswerResult
from .utils.extractor import DualPassExtractor, ExtractionOutcome
from .utils.ocr_text import create_adapters
from .utils.orchestrator import ExtractionOrchestrator, Surface
from .utils.surface import DrawingSurface

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "Already working on the previous request."
NOT_STARTED_MESSAGE = "The whiteboard is still starting up. Please try again."


@dataclass
class SessionAnswer:
    """Outcome of one generate_answer() call."""
    extraction: Optional[ExtractionOutcome]
    answer: AnswerResult


class WhiteboardSession:
    """
    Wires a surface to the extraction pipeline and the answer service.

    Call start() once; it builds and warms up both OCR adapters. A
    generate_answer() issued while another is running returns a busy
    result instead of starting a second request.
    """

    def __init__(
        self,
        surface: Optional[Surface] = None,
        config: Optional[AppConfig] = None,
        answer_client: Optional[AnswerClient] = None
    ):
        self.config = config or get_config()
        self.surface = surface or DrawingSurface(self.config.surface)
        self.answer_client = answer_client or AnswerClient(self.config.answer)
        self.orchestrator: Optional[ExtractionOrchestrator] = None
        self._in_flight = False

    @property
    def is_started(self) -> bool:
        return self.orchestrator is not None

    @property
    def is_busy(self) -> bool:
        return self._in_flight

    async def start(self):
        """
        Create and warm up the OCR adapters.

        Raises:
            EngineStartupError: If tesseract cannot be started
        """
        if self.is_started:
            return
        standard, math = await create_adapters(self.config.ocr)
        self.attach(DualPassExtractor(standard, math, self.config.extraction))
        logger.info("Whiteboard session started")

    def attach(self, extractor: DualPassExtractor):
        """Use an already-built extractor."""
        self.orchestrator = ExtractionOrchestrator(self.surface, extractor)

    async def generate_answer(self) -> SessionAnswer:
        """Extract the whiteboard text and ask the answer service about it."""
        if not self.is_started:
            return SessionAnswer(None, AnswerResult(error_message=NOT_STARTED_MESSAGE))
        if self._in_flight:
            return SessionAnswer(None, AnswerResult(error_message=BUSY_MESSAGE))

        self._in_flight = True
        try:
            outcome, image = await self.orchestrator.extract_with_image()
            if image is None:
                # Nothing was captured; show the pipeline's own message
                return SessionAnswer(outcome, AnswerResult(error_message=outcome.message))
            answer = await self.answer_client.ask(outcome, image)
            return SessionAnswer(outcome, answer)
        finally:
            self._in_flight = False
