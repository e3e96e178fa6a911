"""
Tests for frame_ocr/ocr/preprocess.py and the PixelBuffer conversions.
"""

from io import BytesIO

import numpy as np
import pytest
from PIL import Image

from frame_ocr.ocr.errors import InvalidArgument
from frame_ocr.ocr.pixels import PixelBuffer
from frame_ocr.ocr.preprocess import adjust_contrast, scale, to_grayscale


def _solid(r, g, b, a=255, size=(3, 2)):
    w, h = size
    px = np.zeros((h, w, 4), dtype=np.uint8)
    px[:, :] = (r, g, b, a)
    return PixelBuffer(px)


class TestAdjustContrast:
    def test_factor_one_is_identity(self, rgba_buffer):
        before = rgba_buffer.pixels.copy()
        adjust_contrast(rgba_buffer, 1.0)
        assert np.array_equal(rgba_buffer.pixels, before)

    def test_identity_for_every_channel_value(self):
        px = np.zeros((1, 256, 4), dtype=np.uint8)
        px[0, :, 0] = np.arange(256)
        px[0, :, 1] = np.arange(256)[::-1]
        px[0, :, 2] = np.arange(256)
        px[0, :, 3] = 255
        buf = PixelBuffer(px.copy())
        adjust_contrast(buf, 1.0)
        assert np.array_equal(buf.pixels, px)

    def test_mutates_in_place(self, rgba_buffer):
        arr = rgba_buffer.pixels
        out = adjust_contrast(rgba_buffer, 1.5)
        assert out is rgba_buffer
        assert out.pixels is arr

    def test_known_values(self):
        buf = _solid(100, 200, 10)
        adjust_contrast(buf, 1.5)
        # (100-128)*1.5+128 = 86; (200-128)*1.5+128 = 236; (10-128)*1.5+128 = -49 -> 0
        assert tuple(buf.pixels[0, 0]) == (86, 236, 0, 255)

    def test_clamps_high_and_low(self):
        buf = _solid(250, 5, 128)
        adjust_contrast(buf, 10.0)
        assert tuple(buf.pixels[0, 0, :3]) == (255, 0, 128)

    @pytest.mark.parametrize("factor", [-3.0, -1.0, 0.0, 0.25, 2.0, 50.0])
    def test_matches_formula_for_any_factor(self, rgba_buffer, factor):
        rgb = rgba_buffer.pixels[:, :, :3].astype(np.float64)
        expected = np.clip(np.rint((rgb - 128) * factor + 128), 0, 255)
        adjust_contrast(rgba_buffer, factor)
        assert np.abs(rgba_buffer.pixels[:, :, :3].astype(np.float64) - expected).max() <= 1

    def test_alpha_untouched(self, rgba_buffer):
        alpha = rgba_buffer.pixels[:, :, 3].copy()
        adjust_contrast(rgba_buffer, 2.0)
        assert np.array_equal(rgba_buffer.pixels[:, :, 3], alpha)

    def test_negative_factor_inverts(self):
        buf = _solid(0, 255, 128)
        adjust_contrast(buf, -1.0)
        assert tuple(buf.pixels[0, 0, :3]) == (255, 1, 128)

    def test_zero_factor_flattens_to_mid_grey(self, rgba_buffer):
        adjust_contrast(rgba_buffer, 0.0)
        assert (rgba_buffer.pixels[:, :, :3] == 128).all()


class TestToGrayscale:
    def test_channels_equal(self, rgba_buffer):
        g = to_grayscale(rgba_buffer)
        px = g.pixels.astype(int)
        assert (np.abs(px[:, :, 0] - px[:, :, 1]) <= 1).all()
        assert (np.abs(px[:, :, 1] - px[:, :, 2]) <= 1).all()

    def test_alpha_and_dimensions_preserved(self, rgba_buffer):
        g = to_grayscale(rgba_buffer)
        assert g.size == rgba_buffer.size
        assert g.mode == "RGBA"
        assert np.array_equal(g.pixels[:, :, 3], rgba_buffer.pixels[:, :, 3])

    def test_returns_new_buffer(self, rgba_buffer):
        before = rgba_buffer.pixels.copy()
        g = to_grayscale(rgba_buffer)
        assert g is not rgba_buffer
        assert not np.shares_memory(g.pixels, rgba_buffer.pixels)
        assert np.array_equal(rgba_buffer.pixels, before)

    def test_luminance_weights(self):
        assert tuple(to_grayscale(_solid(255, 0, 0)).pixels[0, 0, :3]) == (54, 54, 54)
        assert tuple(to_grayscale(_solid(0, 255, 0)).pixels[0, 0, :3]) == (182, 182, 182)
        assert tuple(to_grayscale(_solid(255, 255, 255)).pixels[0, 0, :3]) == (255, 255, 255)

    def test_idempotent(self, rgba_buffer):
        once = to_grayscale(rgba_buffer)
        twice = to_grayscale(once)
        diff = np.abs(once.pixels.astype(int) - twice.pixels.astype(int))
        assert diff.max() <= 1


class TestScale:
    def test_double(self, rgba_buffer):
        out = scale(rgba_buffer, 2.0, 2.0)
        assert out.width == rgba_buffer.width * 2
        assert out.height == rgba_buffer.height * 2
        assert out.mode == "RGBA"

    def test_rounds_dimensions(self):
        buf = _solid(1, 2, 3, size=(10, 10))
        out = scale(buf, 0.33, 1.26)
        assert out.size == (3, 13)

    def test_never_below_one_pixel(self):
        out = scale(_solid(1, 2, 3, size=(3, 2)), 0.01, 0.01)
        assert out.size == (1, 1)

    def test_uniform_color_stays_uniform(self):
        out = scale(_solid(37, 90, 200, 255, size=(5, 4)), 2.0, 2.0)
        assert (out.pixels == np.array([37, 90, 200, 255], dtype=np.uint8)).all()

    def test_source_untouched(self, rgba_buffer):
        before = rgba_buffer.pixels.copy()
        out = scale(rgba_buffer, 1.0, 1.0)
        assert out is not rgba_buffer
        assert np.array_equal(out.pixels, before)
        assert np.array_equal(rgba_buffer.pixels, before)

    @pytest.mark.parametrize("fx,fy", [(0.0, 1.0), (1.0, 0.0), (-2.0, 2.0), (2.0, -0.5)])
    def test_rejects_non_positive(self, rgba_buffer, fx, fy):
        with pytest.raises(InvalidArgument):
            scale(rgba_buffer, fx, fy)

    def test_invalid_argument_is_value_error(self, rgba_buffer):
        with pytest.raises(ValueError):
            scale(rgba_buffer, 0, 0)


class TestPixelBuffer:
    def test_from_array_gray(self):
        buf = PixelBuffer.from_array(np.full((2, 3), 77, dtype=np.uint8))
        assert buf.size == (3, 2)
        assert tuple(buf.pixels[0, 0]) == (77, 77, 77, 255)

    def test_from_array_rgb_adds_opaque_alpha(self):
        buf = PixelBuffer.from_array(np.zeros((2, 2, 3), dtype=np.uint8))
        assert (buf.pixels[:, :, 3] == 255).all()

    def test_from_array_rejects_bad_shape(self):
        with pytest.raises(InvalidArgument):
            PixelBuffer.from_array(np.zeros((2, 2, 2), dtype=np.uint8))

    def test_copy_does_not_alias(self, rgba_buffer):
        c = rgba_buffer.copy()
        c.pixels[0, 0, 0] ^= 0xFF
        assert c.pixels[0, 0, 0] != rgba_buffer.pixels[0, 0, 0]

    def test_bad_shape_is_a_programming_error(self):
        with pytest.raises(AssertionError):
            PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))

    def test_from_bytes_rotation(self):
        out = BytesIO()
        Image.new("RGB", (40, 10), "white").save(out, format="PNG")
        buf = PixelBuffer.from_bytes(out.getvalue(), rotation_degrees=90)
        assert buf.size == (10, 40)
        assert buf.mode == "RGBA"

    def test_from_bytes_rotation_direction(self):
        im = Image.new("RGB", (4, 2), "white")
        im.putpixel((0, 0), (0, 0, 0))
        out = BytesIO()
        im.save(out, format="PNG")
        buf = PixelBuffer.from_bytes(out.getvalue(), rotation_degrees=90)
        # clockwise: top-left corner moves to top-right
        assert tuple(buf.pixels[0, buf.width - 1, :3]) == (0, 0, 0)

    def test_from_bytes_rejects_garbage(self):
        with pytest.raises(InvalidArgument):
            PixelBuffer.from_bytes(b"not an image")

    def test_from_bytes_rejects_decompression_bomb(self, monkeypatch):
        out = BytesIO()
        Image.new("RGB", (100, 100), "white").save(out, format="PNG")
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
        with pytest.raises(InvalidArgument):
            PixelBuffer.from_bytes(out.getvalue())
