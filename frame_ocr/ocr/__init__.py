"""
Frame OCR pipeline.

Enhance a frame into several candidate images, run a recognizer on each,
and keep the read that scores best on a structural confidence heuristic.
"""

from .errors import InvalidArgument, RecognizerFailure
from .options import RecognitionOptions
from .pixels import PixelBuffer
from .preprocess import adjust_contrast, scale, to_grayscale
from .router import build_payload, recognize_frame, select_best
from .schema import Block, Line, ScoredResult, StructuredText, Word
from .scoring import ScoreWeights, block_score, score
from .variants import EnhancementVariant, generate_variants

__all__ = [
    "InvalidArgument",
    "RecognizerFailure",
    "RecognitionOptions",
    "PixelBuffer",
    "adjust_contrast",
    "scale",
    "to_grayscale",
    "build_payload",
    "recognize_frame",
    "select_best",
    "Block",
    "Line",
    "ScoredResult",
    "StructuredText",
    "Word",
    "ScoreWeights",
    "block_score",
    "score",
    "EnhancementVariant",
    "generate_variants",
]
