import logging
from io import BytesIO
from pathlib import PurePath
from typing import Optional

import chardet
import docx
from bs4 import BeautifulSoup
from pypdf import PdfReader
from pypdf.errors import PdfReadError

from tos_analyzer.core.config import get_settings
from tos_analyzer.core.exceptions import (
    DocumentExtractionError,
    EncryptedDocumentError,
    InvalidInputError,
    UnsupportedFileTypeError,
)

logger = logging.getLogger(__name__)

PDF_EXTENSIONS = {".pdf"}
DOCX_EXTENSIONS = {".docx"}
HTML_EXTENSIONS = {".html", ".htm"}

# Known binary formats with no text extractor; every other suffix is decoded as text.
UNSUPPORTED_EXTENSIONS = {
    ".doc", ".xls", ".xlsx", ".ppt", ".pptx", ".odt", ".pages",
    ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".tif", ".tiff", ".webp", ".heic",
    ".zip", ".gz", ".tar", ".rar", ".7z",
    ".exe", ".dll", ".so", ".bin", ".dmg", ".iso",
    ".mp3", ".mp4", ".wav", ".mov", ".avi",
}


def find_codec(binary_data: bytes) -> str:
    """
    Detect the encoding of binary data.

    Args:
        binary_data: Binary content to detect encoding from

    Returns:
        Detected encoding name, 'utf-8' when detection gives nothing
    """
    result = chardet.detect(binary_data)
    encoding = result.get("encoding")
    confidence = result.get("confidence", 0)

    if encoding and confidence < 0.7:
        logger.warning(f"Low confidence ({confidence}) in detected encoding: {encoding}")

    return encoding or "utf-8"


def decode_text(data: bytes) -> str:
    """Decode bytes as UTF-8, falling back to the detected encoding."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        encoding = find_codec(data)
        logger.info(f"Content is not valid UTF-8, decoding as {encoding}")
        try:
            return data.decode(encoding, errors="replace")
        except LookupError:
            return data.decode("utf-8", errors="replace")


def html_to_text(html: str) -> str:
    """Visible text of an HTML page, one block per line."""
    soup = BeautifulSoup(html, "html5lib")
    for element in soup(["script", "style", "meta", "link", "noscript"]):
        element.decompose()
    lines = (line.strip() for line in soup.get_text(separator="\n").splitlines())
    return "\n".join(line for line in lines if line)


def _parse_pdf(data: bytes) -> str:
    try:
        reader = PdfReader(BytesIO(data))
    except (PdfReadError, ValueError) as e:
        raise DocumentExtractionError(f"Unable to read PDF: {e}") from e

    if reader.is_encrypted:
        raise EncryptedDocumentError(
            "PDF is encrypted. Please provide an unencrypted version of the document."
        )

    pages = []
    for page in reader.pages:
        extracted = page.extract_text()
        if extracted:
            pages.append(extracted)
    return "\n".join(pages)


def _parse_docx(data: bytes) -> str:
    document = docx.Document(BytesIO(data))
    parts = [paragraph.text for paragraph in document.paragraphs if paragraph.text.strip()]
    for table in document.tables:
        for row in table.rows:
            cells = [cell.text.strip() for cell in row.cells if cell.text.strip()]
            if cells:
                parts.append(" | ".join(cells))
    return "\n".join(parts)


def extract_text(data: bytes, filename: Optional[str] = None) -> str:
    """
    Extract plain text from an uploaded document.

    ``.pdf`` files yield their text layer, ``.docx`` files their raw paragraph
    and table text, ``.html`` files their visible text. Known binary formats
    are rejected; anything else (``.txt``, ``.json``, ``.csv``, no suffix...)
    is decoded as text.

    Args:
        data: Raw file bytes
        filename: Declared filename, used only for its extension

    Returns:
        Extracted text (possibly empty)

    Raises:
        InvalidInputError: File exceeds the upload size limit
        UnsupportedFileTypeError: Extension is a known binary format
        EncryptedDocumentError: PDF is password-protected
        DocumentExtractionError: File could not be parsed
    """
    settings = get_settings()
    size_mb = len(data) / (1024 * 1024)
    if size_mb > settings.MAX_UPLOAD_SIZE_MB:
        raise InvalidInputError(
            f"File size ({size_mb:.1f}MB) exceeds maximum allowed ({settings.MAX_UPLOAD_SIZE_MB}MB)."
        )

    suffix = PurePath(filename or "").suffix.lower()
    if suffix in UNSUPPORTED_EXTENSIONS:
        raise UnsupportedFileTypeError(
            f"Unsupported file type: {suffix}. "
            "Upload a PDF, DOCX, HTML or plain-text document instead."
        )

    logger.info(f"Extracting text from {filename or 'upload'} ({size_mb:.2f}MB), type: {suffix or 'text'}")

    try:
        if suffix in PDF_EXTENSIONS:
            text = _parse_pdf(data)
        elif suffix in DOCX_EXTENSIONS:
            text = _parse_docx(data)
        elif suffix in HTML_EXTENSIONS:
            text = html_to_text(decode_text(data))
        else:
            text = decode_text(data)
    except DocumentExtractionError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error extracting text from {filename}: {e}", exc_info=True)
        raise DocumentExtractionError(f"Failed to parse document: {e}") from e

    logger.info(f"Extracted {len(text)} chars from {filename or 'upload'}")
    return text
