"""
Image utilities for the whiteboard OCR pipeline.

Provides:
- RasterImage, an immutable RGBA pixel grid
- Filter profiles (grayscale weights, contrast gain, threshold)
- Contrast gain, weighted grayscale and binarization
- Conversions to PIL images and JPEG bytes
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple
import numpy as np

logger = logging.getLogger(__name__)


# ============================================================================
# Data Classes
# ============================================================================

@dataclass(frozen=True, eq=False)
class RasterImage:
    """
    Immutable 2-D grid of RGBA samples.

    The pixel array is copied on construction and marked read-only, so a
    RasterImage can be shared between concurrent filters without copying.
    """
    pixels: np.ndarray

    def __post_init__(self):
        pixels = np.asarray(self.pixels)
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected an HxWx4 RGBA array, got shape {pixels.shape}")
        pixels = np.array(pixels, dtype=np.uint8, copy=True)
        pixels.setflags(write=False)
        object.__setattr__(self, "pixels", pixels)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.height, self.width

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        color: Tuple[int, int, int] = (255, 255, 255)
    ) -> "RasterImage":
        """Create a single-color opaque image."""
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[..., :3] = color
        pixels[..., 3] = 255
        return cls(pixels)

    @classmethod
    def from_cv2(cls, image: np.ndarray) -> "RasterImage":
        """
        Build a RasterImage from an OpenCV array.

        Args:
            image: Grayscale, BGR or BGRA image

        Returns:
            Opaque RGBA RasterImage (alpha kept for BGRA input)
        """
        import cv2

        if image.ndim == 2:
            rgba = cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
        elif image.ndim == 3 and image.shape[2] == 3:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
        elif image.ndim == 3 and image.shape[2] == 4:
            rgba = cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
        else:
            raise ValueError(f"Unsupported image shape: {image.shape}")
        return cls(rgba)

    def to_pil(self):
        """Convert to an RGB PIL image (the form the OCR engine expects)."""
        from PIL import Image

        return Image.fromarray(np.ascontiguousarray(self.pixels[..., :3]))

    def to_jpeg(self, quality: int = 95) -> bytes:
        """Encode as JPEG, flattening alpha onto white."""
        import cv2

        rgb = self.pixels[..., :3].astype(np.float32)
        alpha = self.pixels[..., 3:4].astype(np.float32) / 255.0
        flattened = (rgb * alpha + 255.0 * (1.0 - alpha)).round().astype(np.uint8)
        bgr = cv2.cvtColor(flattened, cv2.COLOR_RGB2BGR)

        ok, buffer = cv2.imencode('.jpg', bgr, [cv2.IMWRITE_JPEG_QUALITY, quality])
        if not ok:
            raise ValueError("JPEG encoding failed")
        return buffer.tobytes()


@dataclass(frozen=True)
class FilterProfile:
    """Named pixel filter policy."""
    name: str
    weights: Tuple[float, float, float] = (0.299, 0.587, 0.114)
    threshold: int = 180
    contrast_gain: Optional[float] = None


STANDARD_FILTER = FilterProfile(name="standard", threshold=180)
MATH_FILTER = FilterProfile(name="math_enhanced", threshold=150, contrast_gain=1.5)


# ============================================================================
# Core Filter Functions
# ============================================================================

def apply_contrast_gain(rgb: np.ndarray, gain: float) -> np.ndarray:
    """
    Stretch each channel around mid-gray.

    Args:
        rgb: HxWx3 channel values
        gain: Contrast factor (1.0 = unchanged)

    Returns:
        float32 array with values clamped to [0, 255]
    """
    stretched = 128.0 + gain * (rgb.astype(np.float32) - 128.0)
    return np.clip(stretched, 0.0, 255.0)


def weighted_grayscale(
    rgb: np.ndarray,
    weights: Tuple[float, float, float] = (0.299, 0.587, 0.114)
) -> np.ndarray:
    """Weighted sum of the R, G and B channels as float32."""
    r, g, b = weights
    rgb = rgb.astype(np.float32)
    return rgb[..., 0] * r + rgb[..., 1] * g + rgb[..., 2] * b


def binarize(gray: np.ndarray, threshold: int) -> np.ndarray:
    """
    Fixed-threshold binarization.

    Pixels strictly above the threshold become 255, everything else 0.
    """
    import cv2

    _, binary = cv2.threshold(
        np.ascontiguousarray(gray, dtype=np.float32), float(threshold), 255.0, cv2.THRESH_BINARY
    )
    return binary.astype(np.uint8)


def apply_filter(image: RasterImage, profile: FilterProfile) -> RasterImage:
    """
    Run a filter profile over an image.

    Contrast gain (if any) is applied per channel before grayscale, then
    the grayscale value is binarized against the profile threshold. The
    result is pure black or white with opaque alpha.

    Args:
        image: Source image (not modified)
        profile: Filter profile to apply

    Returns:
        New binarized RasterImage
    """
    rgb = image.pixels[..., :3]
    if profile.contrast_gain is not None:
        rgb = apply_contrast_gain(rgb, profile.contrast_gain)

    gray = weighted_grayscale(rgb, profile.weights)
    binary = binarize(gray, profile.threshold)

    out = np.empty((image.height, image.width, 4), dtype=np.uint8)
    out[..., :3] = binary[..., np.newaxis]
    out[..., 3] = 255

    logger.debug(f"Applied {profile.name} filter (threshold={profile.threshold})")
    return RasterImage(out)

