"""
Drawing surface for the whiteboard.

Provides:
- Stroke data model
- StrokeLog, a versioned snapshot log with cursor-based undo/redo
- DrawingSurface, which rasterizes the current strokes
- ImageFileSurface, which rasterizes by loading an image file
"""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple, Union
import numpy as np

from ..config import SurfaceConfig
from ..errors import RasterizationFailure
from .images import RasterImage

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

class Tool:
    """Stroke tool identifiers."""
    PEN = "pen"
    ERASER = "eraser"


@dataclass(frozen=True)
class Stroke:
    """A single freehand stroke."""
    points: Tuple[Tuple[float, float], ...]
    color: str = "#000000"
    width: int = 3
    tool: str = Tool.PEN

    @classmethod
    def from_flat(
        cls,
        flat_points: List[float],
        color: str = "#000000",
        width: int = 3,
        tool: str = Tool.PEN
    ) -> "Stroke":
        """Build a stroke from a flat [x0, y0, x1, y1, ...] list."""
        if len(flat_points) % 2:
            raise ValueError("Flat point list must have an even length")
        points = tuple(zip(flat_points[0::2], flat_points[1::2]))
        return cls(points=points, color=color, width=width, tool=tool)


def parse_hex_color(color: str) -> Tuple[int, int, int]:
    """Parse '#RRGGBB' (or '#RGB') into an (R, G, B) tuple."""
    value = color.lstrip('#')
    if len(value) == 3:
        value = ''.join(c * 2 for c in value)
    if len(value) != 6:
        raise ValueError(f"Invalid color: {color}")
    return tuple(int(value[i:i + 2], 16) for i in (0, 2, 4))


# ============================================================================
# Stroke Log
# ============================================================================

class StrokeLog:
    """
    Versioned drawing history.

    Every edit appends a full snapshot of the visible strokes; undo and
    redo move a cursor over the snapshots. Pushing after an undo drops
    the redo tail. Snapshots are tuples and never mutated.
    """

    def __init__(self):
        self._snapshots: List[Tuple[Stroke, ...]] = [()]
        self._cursor = 0
        self._version = 0

    @property
    def strokes(self) -> Tuple[Stroke, ...]:
        """Strokes visible at the cursor."""
        return self._snapshots[self._cursor]

    @property
    def version(self) -> int:
        """Incremented on every change to the visible strokes."""
        return self._version

    @property
    def can_undo(self) -> bool:
        return self._cursor > 0

    @property
    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def _append(self, snapshot: Tuple[Stroke, ...]):
        del self._snapshots[self._cursor + 1:]
        self._snapshots.append(snapshot)
        self._cursor += 1
        self._version += 1

    def push(self, stroke: Stroke):
        """Add a finished stroke."""
        self._append(self.strokes + (stroke,))

    def clear(self):
        """Clear the board (undoable)."""
        self._append(())

    def undo(self) -> bool:
        """
        Step back one edit.

        Returns:
            True if the cursor moved
        """
        if not self.can_undo:
            return False
        self._cursor -= 1
        self._version += 1
        return True

    def redo(self) -> bool:
        """
        Step forward one edit.

        Returns:
            True if the cursor moved
        """
        if not self.can_redo:
            return False
        self._cursor += 1
        self._version += 1
        return True

    def __len__(self) -> int:
        return len(self.strokes)


# ============================================================================
# Surfaces
# ============================================================================

@dataclass
class DrawingSurface:
    """Headless whiteboard canvas backed by a StrokeLog."""
    config: SurfaceConfig = field(default_factory=SurfaceConfig)
    log: StrokeLog = field(default_factory=StrokeLog)

    def render(self) -> RasterImage:
        """Rasterize the visible strokes synchronously."""
        import cv2

        cfg = self.config
        canvas = np.empty((cfg.height, cfg.width, 3), dtype=np.uint8)
        canvas[:] = cfg.background

        for stroke in self.log.strokes:
            if not stroke.points:
                continue
            if stroke.tool == Tool.ERASER:
                color = cfg.background
            else:
                color = parse_hex_color(stroke.color)
            pts = np.round(np.array(stroke.points, dtype=np.float64)).astype(np.int32)

            if len(pts) == 1:
                cv2.circle(canvas, tuple(int(v) for v in pts[0]), max(stroke.width // 2, 1),
                           color, -1, cv2.LINE_AA)
            else:
                cv2.polylines(canvas, [pts.reshape(-1, 1, 2)], False, color,
                              max(stroke.width, 1), cv2.LINE_AA)

        rgba = np.dstack([canvas, np.full(canvas.shape[:2], 255, dtype=np.uint8)])
        return RasterImage(rgba)

    async def rasterize(self) -> RasterImage:
        """
        Rasterize the visible strokes.

        Raises:
            RasterizationFailure: If rendering fails
        """
        try:
            return await asyncio.to_thread(self.render)
        except Exception as e:
            raise RasterizationFailure(f"Could not render drawing: {e}") from e


@dataclass
class ImageFileSurface:
    """Surface whose contents come from an image file."""
    path: Union[str, Path]

    async def rasterize(self) -> RasterImage:
        """
        Load the image file.

        Raises:
            RasterizationFailure: If the file is missing or cannot be decoded
        """
        from .io import load_image

        try:
            image = await asyncio.to_thread(load_image, self.path)
        except (FileNotFoundError, ValueError) as e:
            raise RasterizationFailure(str(e)) from e
        return RasterImage.from_cv2(image)
