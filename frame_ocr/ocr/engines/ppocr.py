from typing import Any, Iterable, List, Optional

import numpy as np
from rapidocr_onnxruntime import RapidOCR

from ..errors import RecognizerFailure
from ..pixels import PixelBuffer
from ..schema import BBox, Block, Line, StructuredText, Word
from .itxt import ITxtRecognizer


def _poly_bbox(poly: Iterable[Iterable[float]]) -> BBox:
    xs = [int(p[0]) for p in poly]
    ys = [int(p[1]) for p in poly]
    return (min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))


def _to_structured(result: Optional[List[Any]]) -> StructuredText:
    """One detected text line per block; words carry no boxes of their own."""
    blocks: List[Block] = []
    for item in result or []:
        poly, text = item[0], item[1]
        t = (text or "").strip()
        if not t:
            continue
        bbox = _poly_bbox(poly)
        words = [Word(text=tok) for tok in t.split()]
        blocks.append(Block(text=t, bbox=bbox, lines=[Line(text=t, bbox=bbox, words=words)]))
    return StructuredText(text="\n".join(b.text for b in blocks), blocks=blocks)


class RapidOCRRecognizer(ITxtRecognizer):
    name = "ppocr"

    def __init__(self):
        # Downloads tiny models on first use; keep one instance
        self.ocr = RapidOCR()

    def recognize(self, buf: PixelBuffer) -> StructuredText:
        # RapidOCR reads 3-channel arrays as BGR (OpenCV order)
        bgr = np.ascontiguousarray(buf.pixels[:, :, 2::-1])
        try:
            result, _elapse = self.ocr(bgr)
        except Exception as e:
            raise RecognizerFailure(f"rapidocr failed: {e}") from e
        return _to_structured(result)
