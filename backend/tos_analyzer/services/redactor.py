"""
Best-effort PII redaction for documents before they are sent to the LLM.

Detects and replaces:
- Email addresses
- US-style phone numbers
- SSN-shaped identifiers
- Long digit runs (10+ digits: national IDs, card and account numbers)
- IPv4 addresses

This is a pattern filter, not a guarantee. Names, postal addresses and
free-form identifiers pass through untouched, so callers must not treat the
sanitized text as anonymous.
"""
import logging
import re
from dataclasses import dataclass, field
from typing import List, Tuple

logger = logging.getLogger(__name__)

PLACEHOLDER = "[REDACTED]"

# Applied in this order over the progressively redacted text.
# None of them can match inside PLACEHOLDER (no digits, no "@").
PII_PATTERNS: List[Tuple[str, re.Pattern]] = [
    ("EMAIL_ADDRESS", re.compile(r"\b[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}\b", re.IGNORECASE)),
    ("PHONE_NUMBER", re.compile(r"(?:\(\d{3}\)|\b\d{3})[-.\s]?\d{3}[-.\s]?\d{4}\b")),
    ("US_SSN", re.compile(r"\b\d{3}[-.\s]?\d{2}[-.\s]?\d{4}\b")),
    ("DIGIT_RUN", re.compile(r"\b\d{10,}\b")),
    ("IP_ADDRESS", re.compile(r"\b\d{1,3}(?:\.\d{1,3}){3}\b")),
]


@dataclass
class RedactionResult:
    """Sanitized text plus the original substrings that were removed."""

    sanitized: str
    log: List[str] = field(default_factory=list)


def _source_offset(index: int, replaced: List[Tuple[int, int]]) -> int:
    """Map an index in the partially redacted text back to the source text."""
    shift = 0
    for start, end in sorted(replaced):
        if start + shift >= index:
            break
        shift += len(PLACEHOLDER) - (end - start)
    return index - shift


def _apply_pattern(
    text: str, pattern: re.Pattern, replaced: List[Tuple[int, int]]
) -> Tuple[str, List[Tuple[int, int, str]]]:
    """Run one pattern over ``text``; return the new text and the matches in source coordinates."""
    matches = []
    pieces = []
    cursor = 0
    for match in pattern.finditer(text):
        source_start = _source_offset(match.start(), replaced)
        matches.append((source_start, source_start + len(match.group()), match.group()))
        pieces.append(text[cursor:match.start()])
        pieces.append(PLACEHOLDER)
        cursor = match.end()
    pieces.append(text[cursor:])
    return "".join(pieces), matches


def redact(text: str) -> RedactionResult:
    """
    Replace every PII match with ``[REDACTED]``.

    Args:
        text: Raw document text

    Returns:
        RedactionResult whose ``log`` lists the exact removed substrings,
        ordered by where they appeared in ``text``. Repeated values are kept.

    Example:
        >>> result = redact("Contact us at test@example.com or 555-123-4567.")
        >>> result.sanitized
        'Contact us at [REDACTED] or [REDACTED].'
        >>> result.log
        ['test@example.com', '555-123-4567']
    """
    if not text:
        return RedactionResult(sanitized=text or "", log=[])

    sanitized = text
    replaced: List[Tuple[int, int]] = []
    found: List[Tuple[int, int, str]] = []

    for entity_type, pattern in PII_PATTERNS:
        sanitized, matches = _apply_pattern(sanitized, pattern, replaced)
        if matches:
            logger.debug("Redacted %d %s match(es)", len(matches), entity_type)
        for start, end, value in matches:
            replaced.append((start, end))
            found.append((start, end, value))

    found.sort(key=lambda item: item[0])
    return RedactionResult(sanitized=sanitized, log=[value for _, _, value in found])
