"""
Answer service client.

Builds the prompt from an extraction outcome, attaches the raw
whiteboard image, and calls the Gemini generateContent REST endpoint.
"""

import asyncio
import base64
import logging
from dataclasses import dataclass
from typing import Optional, Dict, Any

import requests

from ..config import AnswerConfig
from ..errors import AnswerServiceError
from .extractor import ExtractionOutcome
from .images import RasterImage

logger = logging.getLogger(__name__)


TEXT_PROMPT = (
    "Answer this question or solve this problem: {text}. "
    "Provide a clear, step-by-step explanation."
)

IMAGE_PROMPT = (
    "The handwriting on the attached whiteboard image could not be read as text. "
    "Interpret the image directly, then answer the question or solve the problem it shows. "
    "Provide a clear, step-by-step explanation."
)

NO_INPUT_MESSAGE = "No text detected on the whiteboard. Please write your question clearly."
EMPTY_ANSWER_MESSAGE = "Sorry, I couldn't generate an answer. Please try rephrasing your question."
TRANSPORT_ERROR_MESSAGE = "An error occurred while generating the answer. Please try again."


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True)
class InlineImage:
    """Base64 image payload."""
    data: str
    mime_type: str = "image/jpeg"


@dataclass(frozen=True)
class AnswerRequest:
    """Request sent to the answer service."""
    prompt_text: str
    inline_image: Optional[InlineImage] = None

    def to_payload(self) -> Dict[str, Any]:
        """Gemini generateContent request body."""
        parts: list = [{"text": self.prompt_text}]
        if self.inline_image is not None:
            parts.append({
                "inline_data": {
                    "mime_type": self.inline_image.mime_type,
                    "data": self.inline_image.data
                }
            })
        return {"contents": [{"parts": parts}]}


@dataclass(frozen=True)
class AnswerResult:
    """Answer text or the error message to show to the user."""
    answer_text: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.answer_text is not None

    def display_text(self) -> str:
        return self.answer_text if self.answer_text is not None else (self.error_message or "")


# ============================================================================
# Request Building
# ============================================================================

def build_prompt(outcome: ExtractionOutcome) -> str:
    """Text prompt for an outcome; the sentinel asks for image interpretation."""
    if outcome.is_recognized:
        return TEXT_PROMPT.format(text=outcome.text)
    return IMAGE_PROMPT


def build_request(
    outcome: ExtractionOutcome,
    image: Optional[RasterImage] = None,
    jpeg_quality: int = 95
) -> AnswerRequest:
    """
    Build the answer request for an extraction outcome.

    Args:
        outcome: Result of the extraction pipeline
        image: Raw (unfiltered) whiteboard image, attached when given
        jpeg_quality: JPEG quality for the attached image

    Returns:
        AnswerRequest
    """
    inline = None
    if image is not None:
        data = base64.b64encode(image.to_jpeg(jpeg_quality)).decode('utf-8')
        inline = InlineImage(data=data)
    return AnswerRequest(prompt_text=build_prompt(outcome), inline_image=inline)


def parse_response(data: Any) -> str:
    """
    Pull the answer text out of a generateContent response.

    Some error replies arrive wrapped in a one-element list.

    Raises:
        AnswerServiceError: If the service reported an error or the body
            has an unexpected shape
    """
    if isinstance(data, list) and len(data) == 1:
        data = data[0]
    if not isinstance(data, dict):
        raise AnswerServiceError("Unexpected response from answer service")

    error = data.get("error")
    if error:
        if isinstance(error, dict):
            message = error.get("message") or "Failed to generate answer"
        else:
            message = str(error)
        raise AnswerServiceError(message)

    try:
        return data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return ""


# ============================================================================
# Client
# ============================================================================

class AnswerClient:
    """Gemini answer service client."""

    def __init__(
        self,
        config: Optional[AnswerConfig] = None,
        session: Optional[requests.Session] = None
    ):
        self.config = config or AnswerConfig()
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return self.config.api_url.format(model=self.config.model)

    def _post(self, request: AnswerRequest) -> str:
        if not self.config.api_key:
            raise AnswerServiceError("No API key configured (set GEMINI_API_KEY)")

        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.config.api_key
        }
        response = self.session.post(
            self.url,
            headers=headers,
            json=request.to_payload(),
            timeout=self.config.request_timeout
        )

        try:
            data = response.json()
        except ValueError:
            response.raise_for_status()
            raise AnswerServiceError(f"Unexpected response from answer service ({response.status_code})")

        return parse_response(data)

    async def send(self, request: AnswerRequest) -> AnswerResult:
        """Send a prepared request."""
        try:
            text = await asyncio.to_thread(self._post, request)
        except AnswerServiceError as e:
            logger.error(f"Answer service error: {e}")
            return AnswerResult(error_message=f"Error: {e}")
        except requests.exceptions.RequestException as e:
            logger.error(f"Answer service request failed: {e}")
            return AnswerResult(error_message=TRANSPORT_ERROR_MESSAGE)

        if not text:
            return AnswerResult(error_message=EMPTY_ANSWER_MESSAGE)
        return AnswerResult(answer_text=text)

    async def ask(
        self,
        outcome: ExtractionOutcome,
        image: Optional[RasterImage] = None
    ) -> AnswerResult:
        """
        Ask the service about the whiteboard.

        Args:
            outcome: Extraction outcome (text or sentinel)
            image: Raw whiteboard image

        Returns:
            AnswerResult; transport and service failures become an
            error_message instead of raising
        """
        if not outcome.is_recognized and image is None:
            return AnswerResult(error_message=NO_INPUT_MESSAGE)

        request = build_request(outcome, image, self.config.jpeg_quality)
        logger.info(
            f"Requesting answer ({'text' if outcome.is_recognized else 'image'} prompt, "
            f"image={'yes' if request.inline_image else 'no'})"
        )
        return await self.send(request)
