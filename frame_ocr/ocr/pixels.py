from __future__ import annotations

from dataclasses import dataclass
from io import BytesIO

import numpy as np
from PIL import Image, ImageFile, UnidentifiedImageError

from .errors import InvalidArgument

ImageFile.LOAD_TRUNCATED_IMAGES = True

RGBA = "RGBA"


@dataclass
class PixelBuffer:
    """
    Interleaved 8-bit RGBA pixels, shape (height, width, 4).

    A buffer is owned by whoever holds it. Transforms either mutate the
    array they were given or return a new buffer; use copy() to share.
    """

    pixels: np.ndarray
    mode: str = RGBA

    def __post_init__(self) -> None:
        assert self.mode == RGBA, f"unsupported pixel format {self.mode!r}"
        assert self.pixels.dtype == np.uint8, "expect uint8 samples"
        assert self.pixels.ndim == 3 and self.pixels.shape[2] == 4, "expect (H,W,4)"

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels.copy(), self.mode)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.pixels)

    @staticmethod
    def from_pil(im: Image.Image) -> "PixelBuffer":
        rgba = im if im.mode == RGBA else im.convert(RGBA)
        # np.array (not asarray) so the buffer never aliases PIL memory
        return PixelBuffer(np.array(rgba, dtype=np.uint8))

    @staticmethod
    def from_array(arr: np.ndarray) -> "PixelBuffer":
        """Accept grayscale (H,W), RGB (H,W,3) or RGBA (H,W,4) uint8 arrays."""
        a = np.asarray(arr, dtype=np.uint8)
        if a.ndim == 2:
            a = np.stack([a, a, a], axis=-1)
        if a.ndim != 3 or a.shape[2] not in (3, 4):
            raise InvalidArgument(f"unsupported array shape {a.shape}")
        if a.shape[2] == 3:
            alpha = np.full(a.shape[:2] + (1,), 255, dtype=np.uint8)
            a = np.concatenate([a, alpha], axis=-1)
        return PixelBuffer(np.ascontiguousarray(a).copy())

    @staticmethod
    def from_bytes(image_bytes: bytes, rotation_degrees: int = 0) -> "PixelBuffer":
        """Decode an encoded frame, rotate it clockwise upright, normalize to RGBA."""
        try:
            im = Image.open(BytesIO(image_bytes))
            im.load()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
            raise InvalidArgument(f"invalid image bytes: {e}") from e
        deg = int(rotation_degrees) % 360
        if deg:
            im = im.rotate(-deg, expand=True)
        return PixelBuffer.from_pil(im)
