import logging
from typing import List

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHUNK_SIZE = 12000


def _find_split_index(text: str, start: int, end: int) -> int:
    """Cut after the last period past ``start`` in ``text[start:end]``, or hard-cut at ``end``."""
    period = text.rfind(".", start, end)
    if period > start:
        return period + 1
    return end


def chunk_text(text: str, max_size: int = DEFAULT_MAX_CHUNK_SIZE) -> List[str]:
    """
    Split sanitized text into chunks of at most ``max_size`` characters.

    Chunks end on a period whenever one exists inside the size budget, so
    sentences are not broken mid-way. Each chunk is whitespace-trimmed and
    empty chunks are dropped; joining the untrimmed slices gives back ``text``.
    """
    if max_size < 1:
        raise ValueError(f"max_size must be positive, got {max_size}")
    if not text:
        return []

    chunks: List[str] = []
    start = 0
    length = len(text)

    while start < length:
        end = start + max_size
        if end >= length:
            end = length
        else:
            end = _find_split_index(text, start, end)
        piece = text[start:end].strip()
        if piece:
            chunks.append(piece)
        start = end

    logger.debug("Split %d chars into %d chunk(s) (max_size=%d)", length, len(chunks), max_size)
    return chunks
