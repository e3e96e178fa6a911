import os
import shutil
from typing import Any, Dict, List, Tuple

import numpy as np

import pytesseract
from pytesseract import Output  # type: ignore

from ..errors import RecognizerFailure
from ..pixels import PixelBuffer
from ..schema import BBox, Block, Line, StructuredText, Word, union_bbox
from .itxt import ITxtRecognizer

# Allow override on Windows (desktop dev)
if os.name == "nt":
    tpath = os.getenv("TESSERACT_PATH")
    if tpath and os.path.exists(tpath):
        pytesseract.pytesseract.tesseract_cmd = tpath

WORD_LEVEL = 5


def _cfg(psm: int = 3) -> str:
    # psm 3 = fully automatic page segmentation; camera frames have no fixed layout.
    return f"--oem 3 --psm {psm} -c preserve_interword_spaces=1"


def _safe_float(x) -> float:
    try:
        return float(x)
    except (TypeError, ValueError):
        return float("nan")


def _token_bbox(data: Dict[str, List[Any]], i: int) -> BBox:
    return (
        int(data["left"][i]),
        int(data["top"][i]),
        int(data["width"][i]),
        int(data["height"][i]),
    )


def _group_tokens(data: Dict[str, List[Any]]) -> StructuredText:
    """
    Regroup image_to_data word tokens into blocks and lines.

    Blocks are keyed by block_num, lines by (block_num, par_num, line_num).
    Boxes are the union of the word boxes they contain. Tokens with negative
    confidence are layout rows, not words, and are skipped.
    """
    n = len(data.get("text", []))
    lines: Dict[Tuple[int, int, int], List[Word]] = {}

    for i in range(n):
        if int(data.get("level", [WORD_LEVEL] * n)[i]) != WORD_LEVEL:
            continue
        txt = (data["text"][i] or "").strip()
        if not txt:
            continue
        conf = _safe_float(data.get("conf", ["-1"] * n)[i])
        if np.isnan(conf) or conf < 0:
            continue
        key = (
            int(data.get("block_num", [0] * n)[i]),
            int(data.get("par_num", [0] * n)[i]),
            int(data.get("line_num", [0] * n)[i]),
        )
        lines.setdefault(key, []).append(Word(text=txt, bbox=_token_bbox(data, i)))

    blocks: Dict[int, List[Line]] = {}
    for key in sorted(lines):
        words = sorted(lines[key], key=lambda w: w.bbox[0])
        line = Line(
            text=" ".join(w.text for w in words),
            bbox=union_bbox([w.bbox for w in words]),
            words=words,
        )
        blocks.setdefault(key[0], []).append(line)

    out: List[Block] = []
    for block_num in sorted(blocks):
        block_lines = blocks[block_num]
        out.append(
            Block(
                text="\n".join(ln.text for ln in block_lines),
                bbox=union_bbox([ln.bbox for ln in block_lines if ln.bbox is not None]),
                lines=block_lines,
            )
        )

    return StructuredText(text="\n".join(b.text for b in out), blocks=out)


class TesseractRecognizer(ITxtRecognizer):
    name = "tesseract"

    def __init__(self, psm: int = 3, lang: str = "eng"):
        # A missing binary is an unavailable engine, reported at construction.
        cmd = pytesseract.pytesseract.tesseract_cmd
        if shutil.which(cmd) is None:
            raise RuntimeError(f"Tesseract engine not available: {cmd!r} is not installed or not on PATH")
        self.psm = psm
        self.lang = lang

    def recognize(self, buf: PixelBuffer) -> StructuredText:
        img = buf.to_pil().convert("RGB")
        try:
            data = pytesseract.image_to_data(
                img, lang=self.lang, output_type=Output.DICT, config=_cfg(self.psm)
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, OSError) as e:
            raise RecognizerFailure(f"tesseract failed: {e}") from e
        return _group_tokens(data)
