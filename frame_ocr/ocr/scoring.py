"""
Heuristic confidence for recognizer output.

The recognizers used here do not report a usable document-level confidence,
so the score is built from the structure of what came back:
  - text length (longer reads are usually the better ones)
  - number of blocks (more structure)
  - fraction of blocks the engine could localize
  - a small bonus when the layout looks regular
Every term is capped on its own and the sum is capped at 1.0.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

from .schema import Block, StructuredText


@dataclass(frozen=True)
class ScoreWeights:
    length_divisor: float = 50.0
    length_cap: float = 0.5
    block_divisor: float = 10.0
    block_cap: float = 0.2
    boxed_cap: float = 0.3
    consistency_min_blocks: int = 3
    consistency_bonus: float = 0.1
    max_cv: float = 0.5  # coefficient of variation below which a sequence is "regular"

    block_base: float = 0.5
    block_line_divisor: float = 10.0
    block_line_cap: float = 0.2
    block_box_bonus: float = 0.1
    block_word_divisor: float = 20.0
    block_word_cap: float = 0.2


DEFAULT_WEIGHTS = ScoreWeights()


def score(text: StructuredText, weights: ScoreWeights = DEFAULT_WEIGHTS) -> float:
    if text.is_empty:
        return 0.0
    w = weights
    blocks = text.blocks
    n = len(blocks)

    conf = min(len(text.text) / w.length_divisor, w.length_cap)
    conf += min(n / w.block_divisor, w.block_cap)

    if n > 0:
        boxed = sum(1 for b in blocks if b.bbox is not None)
        conf += min(boxed / n, w.boxed_cap)

    if n >= w.consistency_min_blocks and has_consistent_formatting(blocks, w.max_cv):
        conf += w.consistency_bonus

    return min(conf, 1.0)


def block_score(block: Block, weights: ScoreWeights = DEFAULT_WEIGHTS) -> float:
    """Confidence for one block, independent of the rest of the page."""
    if not block.text:
        return 0.0
    w = weights
    conf = w.block_base
    conf += min(len(block.lines) / w.block_line_divisor, w.block_line_cap)
    if block.bbox is not None:
        conf += w.block_box_bonus
    conf += min(block.word_count / w.block_word_divisor, w.block_word_cap)
    return min(conf, 1.0)


def has_consistent_formatting(blocks: Sequence[Block], max_cv: float = 0.5) -> bool:
    line_counts = [len(b.lines) for b in blocks]
    heights = [b.bbox[3] for b in blocks if b.bbox is not None]
    return has_low_variance(line_counts, max_cv) or has_low_variance(heights, max_cv)


def has_low_variance(values: Sequence[float], max_cv: float = 0.5) -> bool:
    if not values:
        return True
    mean = sum(values) / len(values)
    if mean == 0:
        return True
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / mean < max_cv
