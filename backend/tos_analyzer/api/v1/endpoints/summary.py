"""
Terms of Service summary endpoint.

Accepts exactly one of pasted text, a URL or an uploaded file, and returns
the merged analysis plus the list of redacted substrings. Redaction is a
best-effort pattern filter (emails, phone numbers, long digit runs, IPv4
addresses); names and postal addresses are not removed.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from tos_analyzer.api.v1.dependencies import get_pipeline, get_settings
from tos_analyzer.core.config import Settings
from tos_analyzer.core.exceptions import CompletionTransportError, InvalidInputError
from tos_analyzer.schemas.analysis import ErrorResponse, SummaryResponse
from tos_analyzer.services.pipeline import DocumentPipeline, PipelineResult, RawDocument

logger = logging.getLogger(__name__)

router = APIRouter()


def _select_input(text: Optional[str], url: Optional[str], file: Optional[UploadFile]) -> RawDocument:
    text = (text or "").strip()
    url = (url or "").strip()
    has_file = file is not None and bool(file.filename)

    provided = [name for name, present in (("text", text), ("url", url), ("file", has_file)) if present]
    if not provided:
        raise InvalidInputError("No valid input provided.")
    if len(provided) > 1:
        raise InvalidInputError(f"Provide exactly one input, got: {', '.join(provided)}.")

    if text:
        return RawDocument(origin="text", content=text)
    if url:
        return RawDocument(origin="url", content=url)
    return RawDocument(origin="file", content=b"", filename=file.filename, content_type=file.content_type)


async def run_with_retry(pipeline: DocumentPipeline, raw: RawDocument, settings: Settings) -> PipelineResult:
    """Re-run the whole pipeline when the completion endpoint fails; other errors are final."""
    async for attempt in AsyncRetrying(
        stop=stop_after_attempt(max(1, settings.ANALYSIS_MAX_ATTEMPTS)),
        wait=wait_exponential(multiplier=settings.ANALYSIS_RETRY_BACKOFF_SECONDS, max=10),
        retry=retry_if_exception_type(CompletionTransportError),
        reraise=True,
    ):
        with attempt:
            if attempt.retry_state.attempt_number > 1:
                logger.warning(f"Retrying analysis (attempt {attempt.retry_state.attempt_number})")
            return await pipeline.process(raw)


@router.post(
    "",
    response_model=SummaryResponse,
    responses={400: {"model": ErrorResponse}, 422: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def summarize_document(
    text: Optional[str] = Form(None),
    url: Optional[str] = Form(None),
    file: Optional[UploadFile] = File(None),
    pipeline: DocumentPipeline = Depends(get_pipeline),
    settings: Settings = Depends(get_settings),
) -> SummaryResponse:
    raw = _select_input(text, url, file)
    if raw.origin == "file":
        try:
            raw.content = await file.read()
        finally:
            await file.close()

    logger.info(f"Summary request received, input type: {raw.origin}")
    result = await run_with_retry(pipeline, raw, settings)

    return SummaryResponse(analysis=result.report, redacted=result.redacted, truncated=result.truncated)
