import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, File, Request, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel

from .errors import ClientInputError, EatWiseError
from .pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)

DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024


def _format_size(n: int) -> str:
    for unit, size in (("MB", 1024 * 1024), ("KB", 1024)):
        if n >= size:
            return f"{n / size:g}{unit}"
    return f"{n}B"


class AnalyzeTextRequest(BaseModel):
    text: Optional[str] = None


class UploadRejected(ClientInputError):
    pass


async def _read_image(image: Optional[UploadFile], max_bytes: int) -> bytes:
    if image is None:
        raise UploadRejected("No image provided")
    if not (image.content_type or "").startswith("image/"):
        raise UploadRejected("Only image files allowed")
    data = await image.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise UploadRejected(f"File too large (max {_format_size(max_bytes)})")
    return data


def create_app(pipeline: AnalysisPipeline, max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES) -> FastAPI:
    app = FastAPI(title="EatWise API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(EatWiseError)
    async def eatwise_error_handler(request: Request, exc: EatWiseError):
        if isinstance(exc, ClientInputError):
            return JSONResponse(status_code=400, content={"error": str(exc)})
        logger.error("Server Error: %s (%s)", exc, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Server Error: %s (%s)", exc, request.url.path)
        return JSONResponse(status_code=500, content={"error": "Internal server error"})

    @app.get("/", response_class=PlainTextResponse)
    def index() -> str:
        return "Welcome to EatWise API Server"

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        return {"status": "OK", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.post("/api/ocr/extract")
    async def ocr_extract(image: Optional[UploadFile] = File(None)):
        data = await _read_image(image, max_upload_bytes)
        text = await run_in_threadpool(pipeline.extract, data)
        return {"text": text}

    @app.post("/api/analysis/analyze")
    async def analyze_text(payload: AnalyzeTextRequest):
        if not (payload.text or "").strip():
            return JSONResponse(status_code=400, content={"error": "No text provided"})
        report = await run_in_threadpool(pipeline.analyze_text, payload.text)
        return report.to_dict()

    @app.post("/api/analysis/image")
    async def analyze_image(image: Optional[UploadFile] = File(None)):
        data = await _read_image(image, max_upload_bytes)
        report = await run_in_threadpool(pipeline.analyze, data)
        return report.to_dict()

    return app
