"""
Shared fixtures: synthetic frames and deterministic stand-in recognizers.
"""

from io import BytesIO
from typing import List

import numpy as np
import pytest
from PIL import Image, ImageDraw

from frame_ocr.ocr.pixels import PixelBuffer
from frame_ocr.ocr.schema import Block, Line, StructuredText, Word


class ProjectionRecognizer:
    """
    Finds text lines by horizontal projection of dark pixels and labels them
    with canned strings, one block for the whole page. Blank frames read as "".
    """

    def __init__(self, texts: List[str]):
        self.texts = texts
        self.calls = 0

    def recognize(self, buf: PixelBuffer) -> StructuredText:
        self.calls += 1
        luma = buf.pixels[:, :, :3].mean(axis=2)
        ink = luma < 128
        rows = ink.sum(axis=1)

        lines: List[Line] = []
        run, y0 = False, 0
        for y, v in enumerate(rows.tolist() + [0]):
            if v > 0 and not run:
                run, y0 = True, y
            elif v == 0 and run:
                run = False
                xs = np.where(ink[y0:y].any(axis=0))[0]
                x0, x1 = int(xs.min()), int(xs.max()) + 1
                text = self.texts[len(lines) % len(self.texts)]
                bbox = (x0, y0, x1 - x0, y - y0)
                words = [Word(tok) for tok in text.split()]
                lines.append(Line(text, bbox, words))

        if not lines:
            return StructuredText("")
        x0 = min(ln.bbox[0] for ln in lines)
        y0 = min(ln.bbox[1] for ln in lines)
        x1 = max(ln.bbox[0] + ln.bbox[2] for ln in lines)
        y1 = max(ln.bbox[1] + ln.bbox[3] for ln in lines)
        block_text = "\n".join(ln.text for ln in lines)
        return StructuredText(block_text, [Block(block_text, (x0, y0, x1 - x0, y1 - y0), lines)])


class ScriptedRecognizer:
    """Returns (or raises) one scripted result per call, in order."""

    def __init__(self, results):
        self.results = list(results)
        self.calls = 0
        self.seen: List[PixelBuffer] = []

    def recognize(self, buf: PixelBuffer) -> StructuredText:
        self.seen.append(buf)
        item = self.results[self.calls]
        self.calls += 1
        if isinstance(item, Exception):
            raise item
        return item


def make_text(text: str, n_blocks: int = 1, boxed: int = 0, lines_per_block: int = 1) -> StructuredText:
    blocks = []
    for i in range(n_blocks):
        bbox = (0, 20 * i, 100, 18) if i < boxed else None
        lines = [Line(f"l{j}") for j in range(lines_per_block)]
        blocks.append(Block(f"b{i}", bbox, lines))
    return StructuredText(text, blocks)


def _draw_frame(lines: List[str], size=(240, 80)) -> Image.Image:
    im = Image.new("RGB", size, "white")
    draw = ImageDraw.Draw(im)
    for i, s in enumerate(lines):
        draw.text((10, 10 + 30 * i), s, fill="black")
    return im


@pytest.fixture
def rgba_buffer():
    rng = np.random.default_rng(0)
    return PixelBuffer(rng.integers(0, 256, size=(6, 9, 4), dtype=np.uint8))


@pytest.fixture
def text_frame() -> PixelBuffer:
    return PixelBuffer.from_pil(_draw_frame(["HELLO WORLD", "PRINTED TEXT"]))


@pytest.fixture
def blank_frame() -> PixelBuffer:
    return PixelBuffer.from_pil(Image.new("RGB", (240, 80), "white"))


@pytest.fixture
def text_frame_png() -> bytes:
    out = BytesIO()
    _draw_frame(["HELLO WORLD", "PRINTED TEXT"]).save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def blank_frame_png() -> bytes:
    out = BytesIO()
    Image.new("RGB", (240, 80), "white").save(out, format="PNG")
    return out.getvalue()


@pytest.fixture
def projection_recognizer():
    return ProjectionRecognizer(["HELLO WORLD", "PRINTED TEXT"])


@pytest.fixture
def scripted():
    return ScriptedRecognizer


@pytest.fixture
def text_factory():
    return make_text
