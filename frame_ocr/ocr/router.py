from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from .options import RecognitionOptions
from .pixels import PixelBuffer
from .schema import BBox, Block, Line, ScoredResult, StructuredText, Word
from .scoring import DEFAULT_WEIGHTS, ScoreWeights, block_score, score
from .variants import IDENTITY, EnhancementVariant, generate_variants

logger = logging.getLogger("frameocr")

Recognize = Callable[[PixelBuffer], StructuredText]

DEFAULT_EARLY_EXIT = 0.8


def _try_recognize(recognize: Recognize, variant: EnhancementVariant) -> Optional[StructuredText]:
    try:
        return recognize(variant.buffer)
    except Exception as e:
        logger.warning("Recognizer failed on variant %s: %s", variant.label, e)
        return None


def select_best(
    variants: Iterable[EnhancementVariant],
    recognize: Recognize,
    early_exit_threshold: float = DEFAULT_EARLY_EXIT,
    *,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> Optional[ScoredResult]:
    """
    Recognize each variant in order and keep the highest-scoring read.

    Calls are strictly sequential. A variant whose recognizer call raises is
    skipped like one that read nothing. Evaluation stops as soon as the best
    score exceeds early_exit_threshold. Returns None when no variant yields text.
    """
    best: Optional[ScoredResult] = None
    for variant in variants:
        text = _try_recognize(recognize, variant)
        if text is None or text.is_empty:
            logger.debug("Variant %s: no text", variant.label)
            continue

        conf = score(text, weights)
        logger.debug("Variant %s confidence: %.3f, text length: %d", variant.label, conf, len(text.text))

        if best is None or conf > best.score:
            best = ScoredResult(text=text, score=conf, variant=variant.label)

        if best.score > early_exit_threshold:
            break

    return best


def recognize_frame(
    source: PixelBuffer,
    recognize: Recognize,
    options: Optional[RecognitionOptions] = None,
    *,
    early_exit_threshold: float = DEFAULT_EARLY_EXIT,
    enhance_contrast: float = 1.5,
    high_contrast: float = 2.0,
    upscale: float = 2.0,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> Optional[Dict[str, Any]]:
    """
    High-level entry point for one camera frame.

    Strategy:
      - no image processing: recognize the frame as delivered
      - single attempt: recognize the grayscale+contrast variant only
      - multiple attempts: generate all variants and keep the best by heuristic
    Only the multi-attempt path computes a confidence; the others report 0.0.
    Returns the output payload, or None when the frame holds no legible text.
    """
    opts = options or RecognitionOptions()

    if opts.use_image_processing and opts.multiple_attempts:
        variants = generate_variants(
            source,
            enhance_contrast=enhance_contrast,
            high_contrast=high_contrast,
            upscale=upscale,
        )
        logger.debug("Trying %d different processing methods", len(variants))
        best = select_best(variants, recognize, early_exit_threshold, weights=weights)
    else:
        if opts.use_image_processing:
            variant = generate_variants(source, multiple_attempts=False, enhance_contrast=enhance_contrast)[0]
        else:
            variant = EnhancementVariant(IDENTITY, source)
        text = _try_recognize(recognize, variant)
        best = None if text is None or text.is_empty else ScoredResult(text=text, score=0.0, variant=variant.label)

    if best is None:
        return None

    logger.debug("Selected variant %s (confidence %.3f)", best.variant, best.score)
    return build_payload(
        best,
        include_boxes=opts.include_boxes,
        include_confidence=opts.include_confidence,
        weights=weights,
    )


# ---------- output ----------
def _box(bbox: Optional[BBox]) -> Optional[Dict[str, float]]:
    if bbox is None:
        return None
    x, y, w, h = bbox
    return {"x": float(x), "y": float(y), "width": float(w), "height": float(h)}


def _word_dict(word: Word) -> Dict[str, Any]:
    out: Dict[str, Any] = {"text": word.text}
    box = _box(word.bbox)
    if box is not None:
        out["box"] = box
    return out


def _line_dict(line: Line) -> Dict[str, Any]:
    out: Dict[str, Any] = {"text": line.text}
    box = _box(line.bbox)
    if box is not None:
        out["box"] = box
    words = [_word_dict(w) for w in line.words]
    if words:
        out["words"] = words
    return out


def _block_dict(block: Block, include_confidence: bool, weights: ScoreWeights) -> Dict[str, Any]:
    out: Dict[str, Any] = {"text": block.text}
    if include_confidence:
        out["confidence"] = block_score(block, weights)
    box = _box(block.bbox)
    if box is not None:
        out["box"] = box
    lines = [_line_dict(ln) for ln in block.lines]
    if lines:
        out["lines"] = lines
    return out


def build_payload(
    result: ScoredResult,
    *,
    include_boxes: bool = False,
    include_confidence: bool = False,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> Dict[str, Any]:
    """Result object for the caller. Optional fields are omitted, never emitted empty."""
    data: Dict[str, Any] = {"text": result.text.text}
    if include_confidence:
        data["confidence"] = float(result.score)
    if include_boxes:
        blocks: List[Dict[str, Any]] = [
            _block_dict(b, include_confidence, weights) for b in result.text.blocks
        ]
        if blocks:
            data["blocks"] = blocks
    return data
