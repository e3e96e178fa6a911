from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger("frameocr")

# Unsupported keys already reported at INFO; later calls only log at DEBUG.
_reported_options: Set[str] = set()


class RecognitionOptions(BaseModel):
    """Per-call options, camelCase on the wire."""

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)

    include_boxes: bool = Field(False, alias="includeBoxes")
    include_confidence: bool = Field(False, alias="includeConfidence")
    use_image_processing: bool = Field(True, alias="useImageProcessing")
    multiple_attempts: bool = Field(True, alias="multipleAttempts")

    @classmethod
    def parse(
        cls,
        arguments: Optional[Mapping[str, Any]] = None,
        *,
        defaults: Optional[Dict[str, bool]] = None,
    ) -> "RecognitionOptions":
        data: Dict[str, Any] = dict(defaults or {})
        data.update(arguments or {})
        opts = cls.model_validate(data)
        extra = sorted((opts.model_extra or {}).keys())
        new = [k for k in extra if k not in _reported_options]
        if new:
            _reported_options.update(new)
            logger.info("Ignoring unsupported OCR options: %s", ", ".join(new))
        if extra:
            logger.debug("Unsupported OCR options on this call: %s", ", ".join(extra))
        logger.debug(
            "Args includeBoxes=%s includeConfidence=%s useImageProcessing=%s multipleAttempts=%s",
            opts.include_boxes,
            opts.include_confidence,
            opts.use_image_processing,
            opts.multiple_attempts,
        )
        return opts
