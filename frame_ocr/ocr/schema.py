from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

BBox = Tuple[int, int, int, int]  # x, y, width, height


@dataclass
class Word:
    text: str
    bbox: Optional[BBox] = None


@dataclass
class Line:
    text: str
    bbox: Optional[BBox] = None
    words: List[Word] = field(default_factory=list)


@dataclass
class Block:
    text: str
    bbox: Optional[BBox] = None
    lines: List[Line] = field(default_factory=list)

    @property
    def word_count(self) -> int:
        return sum(len(ln.words) for ln in self.lines)


@dataclass
class StructuredText:
    """Recognizer output: top-level text plus the block/line/word hierarchy."""

    text: str
    blocks: List[Block] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.text


@dataclass(frozen=True)
class ScoredResult:
    text: StructuredText
    score: float      # heuristic, 0..1
    variant: str = ""  # producing variant label (diagnostics only)


def union_bbox(boxes: List[BBox]) -> Optional[BBox]:
    if not boxes:
        return None
    x0 = min(b[0] for b in boxes)
    y0 = min(b[1] for b in boxes)
    x1 = max(b[0] + b[2] for b in boxes)
    y1 = max(b[1] + b[3] for b in boxes)
    return (x0, y0, x1 - x0, y1 - y0)
