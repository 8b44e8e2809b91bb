"""
Exception hierarchy for the whiteboard pipeline.

Only EngineStartupError is expected to reach application code; the
others are raised inside the extraction pipeline and absorbed into the
"unrecognized" outcome.
"""


class AuraBoardError(Exception):
    """Base class for all pipeline errors."""
    pass


class EngineStartupError(AuraBoardError):
    """A recognition engine could not be constructed or warmed up."""
    pass


class EngineNotReady(AuraBoardError):
    """A recognition engine was used before initialization completed."""
    pass


class RecognitionFailure(AuraBoardError):
    """One engine pass errored or timed out."""

    def __init__(self, profile: str, message: str):
        super().__init__(f"{profile}: {message}")
        self.profile = profile


class RasterizationFailure(AuraBoardError):
    """The drawing surface could not be captured as an image."""
    pass


class AnswerServiceError(AuraBoardError):
    """The generative answer service returned an error."""
    pass
