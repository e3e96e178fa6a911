from typing import Optional
from .itxt import ITxtRecognizer
from .tess import TesseractRecognizer
try:
    from .ppocr import RapidOCRRecognizer  # optional
except ImportError:  # pragma: no cover
    RapidOCRRecognizer = None  # type: ignore

def make_recognizer(name: Optional[str]) -> ITxtRecognizer:
    """
    Factory. Supported names:
      - 'tesseract' (default)
      - 'ppocr' / 'rapidocr' / 'paddle'  (requires rapidocr_onnxruntime)
    """
    n = (name or "tesseract").strip().lower()
    if n in ("ppocr", "rapidocr", "paddle"):
        if RapidOCRRecognizer is None:
            raise RuntimeError("PPOCR engine not available")
        return RapidOCRRecognizer()
    if n in ("tess", "tesseract"):
        return TesseractRecognizer()
    raise RuntimeError(f"Unknown OCR engine: {name}")

__all__ = [
    "ITxtRecognizer",
    "TesseractRecognizer",
    "RapidOCRRecognizer",
    "make_recognizer",
]
