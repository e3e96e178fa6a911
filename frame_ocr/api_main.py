# api_main.py
# FastAPI service for frame OCR
# - Stable OCR endpoint aliases
# - Options passed as query parameters (includeBoxes, includeConfidence, ...)
# - Returns the result object, or null when the frame has no legible text

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from .config import Settings
from .ocr.engines import make_recognizer
from .ocr.errors import InvalidArgument
from .ocr.options import RecognitionOptions
from .ocr.pixels import PixelBuffer
from .ocr.router import Recognize, recognize_frame
from .selftest import run_pipeline_selftest

logger = logging.getLogger("frameocr")

# Query parameters that are not recognition options.
_NON_OPTION_PARAMS = {"engine", "rotation"}


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache(maxsize=4)
def _recognizer_for(name: str):
    return make_recognizer(name)


def get_recognize(
    engine: Optional[str] = Query(None),
    settings: Settings = Depends(get_settings),
) -> Recognize:
    try:
        return _recognizer_for((engine or settings.ocr_engine).strip().lower()).recognize
    except RuntimeError as e:
        raise HTTPException(status_code=501, detail=str(e))


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("Frame OCR API starting (env=%s, engine=%s)", settings.environment, settings.ocr_engine)
    if settings.selftest_on_startup:
        run_pipeline_selftest()
    yield


# ---------- app ----------
app = FastAPI(title="Frame OCR API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _frame_bytes(request: Request, file: UploadFile | None, image: UploadFile | None) -> bytes:
    """Encoded frame from a multipart `file`/`image` part, else from a raw image/* body."""
    part = file if file is not None else image
    if part is not None:
        part_type = (part.content_type or "").lower()
        if not part_type.startswith("image/"):
            raise HTTPException(
                status_code=400,
                detail=f"Frame part has content type {part_type or 'none'!r}; expected image/*.",
            )
        return await part.read()

    body_type = (request.headers.get("content-type") or "").lower()
    if not body_type.startswith("image/"):
        raise HTTPException(
            status_code=422,
            detail="Missing frame: upload a multipart 'file' (or 'image') part, or POST the encoded frame with Content-Type: image/*.",
        )
    return await request.body()


def _options_from_query(request: Request, settings: Settings) -> RecognitionOptions:
    args: Dict[str, Any] = {k: v for k, v in request.query_params.items() if k not in _NON_OPTION_PARAMS}
    try:
        return RecognitionOptions.parse(args, defaults=settings.option_defaults())
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False))


# ---------- routes ----------
@app.get("/")
async def root(settings: Settings = Depends(get_settings)):
    return {"service": "frame-ocr-api", "env": settings.environment, "ok": True}


@app.get("/healthz")
async def healthz(settings: Settings = Depends(get_settings)):
    return {"ok": True, "env": settings.environment}


@app.post("/ocr")
@app.post("/api/ocr")
@app.post("/extract")
@app.post("/api/extract")
async def ocr_extract(
    request: Request,
    file: UploadFile | None = File(None),
    image: UploadFile | None = File(None),
    rotation: int = Query(0),
    recognize: Recognize = Depends(get_recognize),
    settings: Settings = Depends(get_settings),
):
    opts = _options_from_query(request, settings)
    data = await _frame_bytes(request, file, image)
    try:
        source = PixelBuffer.from_bytes(data, rotation_degrees=rotation)
    except InvalidArgument as e:
        raise HTTPException(status_code=400, detail=str(e))

    return await run_in_threadpool(
        recognize_frame,
        source,
        recognize,
        opts,
        early_exit_threshold=settings.early_exit_threshold,
        enhance_contrast=settings.enhance_contrast,
        high_contrast=settings.high_contrast,
        upscale=settings.upscale_factor,
    )


# ---------- uvicorn entry ----------
def main() -> None:
    import uvicorn

    logging.basicConfig(
        level=get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = int(os.getenv("PORT", "8080"))
    uvicorn.run("frame_ocr.api_main:app", host="0.0.0.0", port=port, reload=False)


if __name__ == "__main__":
    main()
