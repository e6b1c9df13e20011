import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from tos_analyzer.api.v1.api import api_router
from tos_analyzer.core.config import settings
from tos_analyzer.core.exceptions import (
    AnalyzerError,
    CompletionTransportError,
    DocumentExtractionError,
    InvalidInputError,
)
from tos_analyzer.core.logging import configure_logging

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.PROJECT_NAME)


def _error_status(exc: AnalyzerError) -> int:
    if isinstance(exc, InvalidInputError):
        return 400
    if isinstance(exc, DocumentExtractionError):
        return 422
    return 502


@app.exception_handler(AnalyzerError)
async def analyzer_error_handler(request: Request, exc: AnalyzerError) -> JSONResponse:
    status_code = _error_status(exc)
    if isinstance(exc, CompletionTransportError):
        logger.error(f"Analysis failed at {request.url.path}: {exc}")
        message = "Failed to analyze document."
    else:
        logger.warning(f"Rejected request at {request.url.path}: {exc}")
        message = str(exc)
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    fields = sorted({".".join(str(part) for part in error.get("loc", ())[1:]) or "body" for error in errors})
    logger.warning(f"Rejected malformed request at {request.url.path}: {len(errors)} validation error(s)")
    return JSONResponse(status_code=400, content={"error": f"Invalid request fields: {', '.join(fields)}."})


@app.get("/healthz", tags=["health"])
def root_health() -> dict[str, str]:
    """Basic health endpoint."""
    return {"status": "ok"}


app.include_router(api_router, prefix="/api/v1")
