from __future__ import annotations

import numpy as np
import cv2 as cv

from .errors import InvalidArgument
from .pixels import PixelBuffer

# Row of a zero-saturation color matrix: every output channel gets this luminance.
LUMA_WEIGHTS = np.array([0.213, 0.715, 0.072], dtype=np.float32)

CONTRAST_PIVOT = 128.0


def _round_clip(x: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(x), 0, 255).astype(np.uint8)


def to_grayscale(buf: PixelBuffer) -> PixelBuffer:
    """Desaturate preserving luminance. Returns a new buffer; alpha is kept."""
    rgb = buf.pixels[:, :, :3].astype(np.float32)
    lum = _round_clip(rgb @ LUMA_WEIGHTS)
    out = buf.pixels.copy()
    out[:, :, 0] = lum
    out[:, :, 1] = lum
    out[:, :, 2] = lum
    return PixelBuffer(out)


def adjust_contrast(buf: PixelBuffer, factor: float) -> PixelBuffer:
    """
    Stretch R, G and B independently around mid-grey, in place.

    c' = clamp(0, 255, round((c - 128) * factor + 128)). factor 1.0 is the
    identity, values in (0, 1) flatten, negative values invert. Alpha untouched.
    """
    f = float(factor)
    if f == 1.0:
        return buf
    rgb = buf.pixels[:, :, :3].astype(np.float32)
    buf.pixels[:, :, :3] = _round_clip((rgb - CONTRAST_PIVOT) * f + CONTRAST_PIVOT)
    return buf


def scaled_size(width: int, height: int, factor_x: float, factor_y: float) -> tuple[int, int]:
    if not (factor_x > 0 and factor_y > 0):
        raise InvalidArgument(f"scale factors must be > 0 (got {factor_x}, {factor_y})")
    return max(1, int(round(width * factor_x))), max(1, int(round(height * factor_y)))


def scale(buf: PixelBuffer, factor_x: float, factor_y: float) -> PixelBuffer:
    """Bilinear resample to round(w*fx) x round(h*fy). Returns a new buffer."""
    new_w, new_h = scaled_size(buf.width, buf.height, factor_x, factor_y)
    if (new_w, new_h) == buf.size:
        return buf.copy()
    resized = cv.resize(buf.pixels, (new_w, new_h), interpolation=cv.INTER_LINEAR)
    return PixelBuffer(np.ascontiguousarray(resized, dtype=np.uint8))


def enhance_for_ocr(buf: PixelBuffer, contrast: float = 1.5) -> PixelBuffer:
    """Default enhanced variant: grayscale, then contrast."""
    return adjust_contrast(to_grayscale(buf), contrast)
