import logging
from typing import Optional
from urllib.parse import urlparse

import httpx

from tos_analyzer.core.config import get_settings
from tos_analyzer.core.exceptions import DocumentExtractionError, InvalidInputError
from tos_analyzer.services.document_parser import html_to_text

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = {"http", "https"}


def validate_url(url: str) -> str:
    """Return the stripped URL, or raise InvalidInputError if it is not absolute http(s)."""
    candidate = (url or "").strip()
    parsed = urlparse(candidate)
    if parsed.scheme.lower() not in ALLOWED_SCHEMES or not parsed.netloc:
        raise InvalidInputError(f"Invalid URL: {candidate!r}. Only absolute http(s) URLs are supported.")
    return candidate


async def fetch_url(
    url: str,
    timeout: Optional[float] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Download a page and return its text.

    HTML pages are reduced to their visible text; other text responses are
    returned unchanged.

    Raises:
        InvalidInputError: URL is not an absolute http(s) URL
        DocumentExtractionError: Timeout, connection failure or non-2xx status
    """
    url = validate_url(url)
    timeout = timeout if timeout is not None else get_settings().URL_FETCH_TIMEOUT_SECONDS

    logger.info(f"Fetching document from {url}")
    try:
        if http_client is not None:
            response = await http_client.get(url, timeout=timeout, follow_redirects=True)
        else:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
                response = await client.get(url)
        response.raise_for_status()
    except httpx.TimeoutException as e:
        raise DocumentExtractionError(f"Fetching {url} timed out after {timeout}s") from e
    except httpx.HTTPStatusError as e:
        raise DocumentExtractionError(f"Fetching {url} returned HTTP {e.response.status_code}") from e
    except httpx.HTTPError as e:
        raise DocumentExtractionError(f"Failed to fetch {url}: {e}") from e

    content_type = response.headers.get("content-type", "").lower()
    text = response.text
    if "html" in content_type:
        text = html_to_text(text)

    logger.info(f"Fetched {len(text)} chars from {url} ({content_type or 'unknown type'})")
    return text
