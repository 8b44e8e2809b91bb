"""
Tests for image filtering module.
"""

import pytest
import numpy as np


class TestRasterImage:
    """Test RasterImage class."""

    def test_pixels_are_read_only(self, stroke_image):
        """Test that pixel data cannot be modified in place."""
        with pytest.raises(ValueError):
            stroke_image.pixels[0, 0, 0] = 12

    def test_source_array_is_copied(self):
        """Test that later changes to the source array don't leak in."""
        from aura_board.utils.images import RasterImage

        source = np.full((4, 4, 4), 255, dtype=np.uint8)
        image = RasterImage(source)
        source[:] = 0

        assert image.pixels.min() == 255

    def test_rejects_non_rgba(self):
        """Test shape validation."""
        from aura_board.utils.images import RasterImage

        with pytest.raises(ValueError):
            RasterImage(np.zeros((10, 10, 3), dtype=np.uint8))

    def test_dimensions(self, white_image):
        """Test width/height accessors."""
        assert white_image.width == 120
        assert white_image.height == 80
        assert white_image.shape == (80, 120)

    def test_from_cv2_bgr(self):
        """Test BGR to RGBA conversion."""
        from aura_board.utils.images import RasterImage

        bgr = np.zeros((2, 2, 3), dtype=np.uint8)
        bgr[..., 0] = 255  # blue in BGR

        image = RasterImage.from_cv2(bgr)

        assert tuple(image.pixels[0, 0]) == (0, 0, 255, 255)

    def test_from_cv2_grayscale(self):
        """Test grayscale to RGBA conversion."""
        from aura_board.utils.images import RasterImage

        gray = np.full((3, 5), 77, dtype=np.uint8)
        image = RasterImage.from_cv2(gray)

        assert image.shape == (3, 5)
        assert tuple(image.pixels[1, 1]) == (77, 77, 77, 255)

    def test_to_jpeg(self, stroke_image):
        """Test JPEG encoding."""
        data = stroke_image.to_jpeg()

        assert data[:2] == b"\xff\xd8"

    def test_to_pil(self, stroke_image):
        """Test PIL conversion drops alpha."""
        pil_image = stroke_image.to_pil()

        assert pil_image.mode == "RGB"
        assert pil_image.size == (120, 80)


class TestFilterProfiles:
    """Test the two built-in filter profiles."""

    def test_standard_profile(self):
        """Test standard profile values."""
        from aura_board.utils.images import STANDARD_FILTER

        assert STANDARD_FILTER.weights == (0.299, 0.587, 0.114)
        assert STANDARD_FILTER.threshold == 180
        assert STANDARD_FILTER.contrast_gain is None

    def test_math_profile(self):
        """Test math-enhanced profile values."""
        from aura_board.utils.images import MATH_FILTER

        assert MATH_FILTER.weights == (0.299, 0.587, 0.114)
        assert MATH_FILTER.threshold == 150
        assert MATH_FILTER.contrast_gain == 1.5


class TestApplyFilter:
    """Test apply_filter."""

    @pytest.fixture
    def random_image(self):
        from aura_board.utils.images import RasterImage

        rng = np.random.default_rng(7)
        return RasterImage(rng.integers(0, 256, size=(40, 60, 4), dtype=np.uint8))

    def test_output_is_binary(self, random_image):
        """Test output contains only pure black and pure white."""
        from aura_board.utils.images import apply_filter, STANDARD_FILTER, MATH_FILTER

        for profile in (STANDARD_FILTER, MATH_FILTER):
            result = apply_filter(random_image, profile)
            rgb = result.pixels[..., :3]

            assert set(np.unique(rgb)) <= {0, 255}
            # All three channels agree
            assert np.all(rgb[..., 0] == rgb[..., 1])
            assert np.all(rgb[..., 1] == rgb[..., 2])

    def test_alpha_is_opaque(self, random_image):
        """Test output alpha is always 255."""
        from aura_board.utils.images import apply_filter, STANDARD_FILTER

        result = apply_filter(random_image, STANDARD_FILTER)

        assert np.all(result.pixels[..., 3] == 255)

    def test_idempotent(self, random_image):
        """Test re-filtering a filter's own output changes nothing."""
        from aura_board.utils.images import apply_filter, STANDARD_FILTER, MATH_FILTER

        for profile in (STANDARD_FILTER, MATH_FILTER):
            once = apply_filter(random_image, profile)
            twice = apply_filter(once, profile)

            np.testing.assert_array_equal(once.pixels, twice.pixels)

    def test_white_image_unchanged(self, white_image):
        """Test a blank board stays white under both profiles."""
        from aura_board.utils.images import apply_filter, STANDARD_FILTER, MATH_FILTER

        for profile in (STANDARD_FILTER, MATH_FILTER):
            result = apply_filter(white_image, profile)

            np.testing.assert_array_equal(result.pixels, white_image.pixels)

    def test_returns_new_image(self, stroke_image):
        """Test the source image is left untouched."""
        from aura_board.utils.images import apply_filter, STANDARD_FILTER

        before = stroke_image.pixels.copy()
        result = apply_filter(stroke_image, STANDARD_FILTER)

        assert result is not stroke_image
        np.testing.assert_array_equal(stroke_image.pixels, before)

    def test_standard_threshold_is_strict(self):
        """Test gray values just above/below the standard threshold."""
        from aura_board.utils.images import RasterImage, apply_filter, STANDARD_FILTER

        pixels = np.full((1, 2, 4), 255, dtype=np.uint8)
        pixels[0, 0, :3] = 181
        pixels[0, 1, :3] = 179

        result = apply_filter(RasterImage(pixels), STANDARD_FILTER)

        assert tuple(result.pixels[0, 0, :3]) == (255, 255, 255)
        assert tuple(result.pixels[0, 1, :3]) == (0, 0, 0)

    def test_math_gain_applied_before_threshold(self, stroke_image):
        """Test contrast gain pushes mid-gray over the math threshold."""
        from aura_board.utils.images import apply_filter, STANDARD_FILTER, MATH_FILTER

        # gray 145: 128 + 1.5 * 17 = 153.5 > 150 -> white under math,
        # 145 < 180 -> black under standard
        standard = apply_filter(stroke_image, STANDARD_FILTER)
        math = apply_filter(stroke_image, MATH_FILTER)

        assert tuple(standard.pixels[55, 40, :3]) == (0, 0, 0)
        assert tuple(math.pixels[55, 40, :3]) == (255, 255, 255)

    def test_dark_stroke_stays_black(self, stroke_image):
        """Test ink survives both profiles."""
        from aura_board.utils.images import apply_filter, STANDARD_FILTER, MATH_FILTER

        for profile in (STANDARD_FILTER, MATH_FILTER):
            result = apply_filter(stroke_image, profile)
            assert tuple(result.pixels[22, 50, :3]) == (0, 0, 0)
            assert tuple(result.pixels[5, 5, :3]) == (255, 255, 255)

    def test_grayscale_weights(self):
        """Test weighted grayscale uses the profile's coefficients."""
        from aura_board.utils.images import RasterImage, FilterProfile, apply_filter

        pixels = np.zeros((1, 1, 4), dtype=np.uint8)
        pixels[0, 0] = (255, 0, 0, 255)  # gray = 0.299 * 255 = 76.2
        image = RasterImage(pixels)

        red_heavy = FilterProfile(name="red", weights=(1.0, 0.0, 0.0), threshold=100)
        standard_weights = FilterProfile(name="std", threshold=100)

        assert apply_filter(image, red_heavy).pixels[0, 0, 0] == 255
        assert apply_filter(image, standard_weights).pixels[0, 0, 0] == 0


class TestContrastGain:
    """Test contrast gain helper."""

    def test_clamped(self):
        """Test stretched values are clamped to [0, 255]."""
        from aura_board.utils.images import apply_contrast_gain

        rgb = np.array([[[0, 128, 255]]], dtype=np.uint8)
        result = apply_contrast_gain(rgb, 1.5)

        np.testing.assert_allclose(result[0, 0], [0.0, 128.0, 255.0])

    def test_midrange(self):
        """Test values inside the range are stretched around 128."""
        from aura_board.utils.images import apply_contrast_gain

        rgb = np.array([[[100, 160, 145]]], dtype=np.uint8)
        result = apply_contrast_gain(rgb, 1.5)

        np.testing.assert_allclose(result[0, 0], [86.0, 176.0, 153.5])


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
