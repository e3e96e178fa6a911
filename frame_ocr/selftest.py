from __future__ import annotations

import logging

import numpy as np

from .ocr.pixels import PixelBuffer
from .ocr.schema import Block, Line, StructuredText, Word
from .ocr.scoring import block_score, score
from .ocr.variants import VARIANT_ORDER, generate_variants

logger = logging.getLogger("frameocr")


def _sample_text() -> StructuredText:
    blocks = []
    for i in range(3):
        y = 10 + 30 * i
        words = [Word("Sample", (10, y, 60, 20)), Word(f"line{i}", (80, y, 50, 20))]
        line = Line(f"Sample line{i}", (10, y, 120, 20), words)
        blocks.append(Block(line.text, (10, y, 120, 20), [line]))
    return StructuredText("\n".join(b.text for b in blocks), blocks)


def run_pipeline_selftest() -> None:
    """Smoke-test enhancement and scoring at startup.

    Catches broken numpy/OpenCV/Pillow installs before the first frame arrives.
    Raises on failure.
    """
    pixels = np.zeros((8, 12, 4), dtype=np.uint8)
    pixels[:, :, 0] = 200
    pixels[:, 6:, 1] = 40
    pixels[:, :, 3] = 255
    src = PixelBuffer(pixels)

    variants = generate_variants(src)
    labels = [v.label for v in variants]
    if labels != VARIANT_ORDER:
        raise RuntimeError(f"variant order broken: {labels}")
    if variants[-1].buffer.size != (24, 16):
        raise RuntimeError(f"upscale broken: {variants[-1].buffer.size}")

    text = _sample_text()
    s = score(text)
    if not 0.0 < s <= 1.0:
        raise RuntimeError(f"score out of range: {s}")
    for b in text.blocks:
        if not 0.0 < block_score(b) <= 1.0:
            raise RuntimeError("block score out of range")

    logger.info("Pipeline self-test passed (%d variants, score %.2f).", len(variants), s)
