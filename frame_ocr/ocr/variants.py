from __future__ import annotations

from typing import List, NamedTuple

from .pixels import PixelBuffer
from .preprocess import adjust_contrast, enhance_for_ocr, scale

IDENTITY = "identity"
GRAYSCALE_CONTRAST = "grayscale_contrast"
HIGH_CONTRAST = "high_contrast"
UPSCALED = "upscaled"

# Evaluation order matters: early exit must never be biased by a later variant.
VARIANT_ORDER = [IDENTITY, GRAYSCALE_CONTRAST, HIGH_CONTRAST, UPSCALED]


class EnhancementVariant(NamedTuple):
    label: str
    buffer: PixelBuffer


def generate_variants(
    source: PixelBuffer,
    *,
    multiple_attempts: bool = True,
    enhance_contrast: float = 1.5,
    high_contrast: float = 2.0,
    upscale: float = 2.0,
) -> List[EnhancementVariant]:
    """
    Returns the candidate images for one frame, in evaluation order.

    Single-attempt mode yields only the grayscale+contrast variant. The source
    buffer is never modified; every variant owns its pixels.
    """
    if not multiple_attempts:
        return [EnhancementVariant(GRAYSCALE_CONTRAST, enhance_for_ocr(source, enhance_contrast))]

    return [
        EnhancementVariant(IDENTITY, source.copy()),
        EnhancementVariant(GRAYSCALE_CONTRAST, enhance_for_ocr(source, enhance_contrast)),
        EnhancementVariant(HIGH_CONTRAST, adjust_contrast(source.copy(), high_contrast)),
        EnhancementVariant(UPSCALED, scale(source, upscale, upscale)),
    ]
