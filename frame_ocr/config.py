from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Dict


_TRUTHY = frozenset({"1", "true", "yes", "y", "on"})
_FALSY = frozenset({"0", "false", "no", "n", "off"})


def _env_flag(name: str, default: bool) -> bool:
    # Unset, empty or unrecognised values keep the default.
    raw = (os.getenv(name) or "").strip().lower()
    if raw in _TRUTHY:
        return True
    if raw in _FALSY:
        return False
    return default


def _env_factor(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if math.isfinite(value) else default


@dataclass(frozen=True)
class Settings:
    # OCR engine
    ocr_engine: str  # tesseract | ppocr

    # Variant selection: stop trying variants once the best score exceeds this.
    early_exit_threshold: float

    # Variant generation
    enhance_contrast: float
    high_contrast: float
    upscale_factor: float

    # Defaults for per-call options when the caller omits them
    default_use_image_processing: bool
    default_multiple_attempts: bool

    # General
    selftest_on_startup: bool
    log_level: str
    environment: str

    def option_defaults(self) -> Dict[str, bool]:
        return {
            "useImageProcessing": self.default_use_image_processing,
            "multipleAttempts": self.default_multiple_attempts,
        }

    @staticmethod
    def from_env() -> "Settings":
        return Settings(
            ocr_engine=(os.getenv("OCR_ENGINE") or "tesseract").strip().lower(),
            early_exit_threshold=_env_factor("OCR_EARLY_EXIT_THRESHOLD", 0.8),
            enhance_contrast=_env_factor("OCR_ENHANCE_CONTRAST", 1.5),
            high_contrast=_env_factor("OCR_HIGH_CONTRAST", 2.0),
            upscale_factor=_env_factor("OCR_UPSCALE_FACTOR", 2.0),
            default_use_image_processing=_env_flag("OCR_DEFAULT_USE_IMAGE_PROCESSING", True),
            default_multiple_attempts=_env_flag("OCR_DEFAULT_MULTIPLE_ATTEMPTS", True),
            selftest_on_startup=_env_flag("OCR_SELFTEST_ON_STARTUP", True),
            log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper() or "INFO",
            environment=(os.getenv("ENVIRONMENT") or os.getenv("ENV") or "stage").strip() or "stage",
        )
