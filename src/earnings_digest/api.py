"""HTTP surface: a single multipart endpoint that returns the summary JSON."""

from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from earnings_digest.analyzer import EarningsAnalyzer
from earnings_digest.config import FrozenConfig, resolve_config
from earnings_digest.constants import DEFAULT_MIME_TYPE, MULTIPART_OVERHEAD_BYTES
from earnings_digest.core.types import Failure, Success, UploadedDocument
from earnings_digest.errors import classify_error
from earnings_digest.exceptions import InputValidationError, PayloadTooLargeError
from earnings_digest.files.loader import too_large_message


def build_app(
    config: FrozenConfig | None = None,
    *,
    analyzer: EarningsAnalyzer | None = None,
) -> FastAPI:
    """Create the FastAPI application.

    Configuration is resolved once here and injected into the analyzer; a
    missing API key does not stop the app from starting.
    """
    logger = logging.getLogger("earnings_digest.api")
    resolved = config if config is not None else resolve_config()
    pipeline = analyzer or EarningsAnalyzer(resolved)
    logger.info("analyze endpoint configured: %s", resolved)

    app = FastAPI(title="earnings-digest", version="0.1.0")

    @app.middleware("http")
    async def reject_oversized_body(request: Request, call_next):
        if request.method == "POST" and request.url.path == "/api/analyze":
            declared = request.headers.get("content-length", "")
            max_bytes = pipeline.loader.max_bytes
            limit = max_bytes + MULTIPART_OVERHEAD_BYTES
            if declared.isdigit() and int(declared) > limit:
                logger.info("rejected %s-byte request before parsing", declared)
                classified = classify_error(
                    PayloadTooLargeError(too_large_message(max_bytes))
                )
                return JSONResponse(
                    classified.to_payload(), status_code=classified.status_code
                )
        return await call_next(request)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        del request
        logger.info("rejected malformed form data: %s", exc.errors())
        classified = classify_error(
            InputValidationError("Invalid form data. Please attach a document.")
        )
        return JSONResponse(
            classified.to_payload(), status_code=classified.status_code
        )

    @app.get("/health", tags=["System"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/analyze", tags=["Analysis"])
    async def analyze(
        tool: str | None = Form(default=None),
        file: UploadFile | None = File(default=None),
    ) -> JSONResponse:
        request_id = uuid.uuid4().hex
        document: UploadedDocument | None = None
        if file is not None:
            # The form parser has already spooled the file; copy just past the cap
            data = await file.read(pipeline.loader.max_bytes + 1)
            document = UploadedDocument(
                filename=file.filename or "",
                mime_type=file.content_type or DEFAULT_MIME_TYPE,
                data=data,
            )

        match await pipeline.analyze(tool, document):
            case Success(value=summary):
                logger.info("analysis succeeded", extra={"request_id": request_id})
                return JSONResponse(summary.model_dump(mode="json"), status_code=200)
            case Failure(error=classified):
                logger.info(
                    "analysis failed: %s",
                    classified.kind.value,
                    extra={"request_id": request_id},
                )
                return JSONResponse(
                    classified.to_payload(), status_code=classified.status_code
                )
        raise RuntimeError("analyzer returned a non-Result value")

    return app
