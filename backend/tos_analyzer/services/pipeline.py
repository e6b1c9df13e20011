"""
Document-to-report pipeline.

extract text -> redact -> chunk -> analyze chunks (concurrently, bounded) -> merge

Every call to ``DocumentPipeline.process`` works on its own values only; the
pipeline object holds configuration and collaborators, never request state.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Literal, Optional, Tuple, Union

from tos_analyzer.core.config import Settings, get_settings
from tos_analyzer.core.exceptions import InvalidInputError
from tos_analyzer.schemas.analysis import AnalysisRecord, Report
from tos_analyzer.services.chunk_analyzer import ChunkAnalyzer
from tos_analyzer.services.chunker import DEFAULT_MAX_CHUNK_SIZE, chunk_text
from tos_analyzer.services.document_parser import decode_text, extract_text
from tos_analyzer.services.merger import merge_records
from tos_analyzer.services.redactor import redact
from tos_analyzer.services.url_fetcher import fetch_url

logger = logging.getLogger(__name__)

# Sanitized text beyond this many characters is still analyzed, but flagged.
SOFT_LENGTH_LIMIT = 60000
DEFAULT_MAX_CONCURRENCY = 4

Origin = Literal["text", "url", "file"]
TextExtractor = Callable[[bytes, Optional[str]], str]
UrlFetcher = Callable[[str], Awaitable[str]]


@dataclass
class RawDocument:
    """One request's input: pasted text, a URL to fetch, or uploaded file bytes."""

    origin: Origin
    content: Union[str, bytes]
    filename: Optional[str] = None
    content_type: Optional[str] = None


@dataclass
class PipelineResult:
    report: Report
    redacted: List[str] = field(default_factory=list)
    truncated: bool = False
    chunk_count: int = 0


class DocumentPipeline:
    """Sequences redaction, chunking, per-chunk analysis and merging for one document."""

    def __init__(
        self,
        analyzer: ChunkAnalyzer,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        soft_length_limit: int = SOFT_LENGTH_LIMIT,
        text_extractor: TextExtractor = extract_text,
        url_fetcher: UrlFetcher = fetch_url,
    ) -> None:
        if max_concurrency < 1:
            raise ValueError(f"max_concurrency must be positive, got {max_concurrency}")
        self.analyzer = analyzer
        self.max_chunk_size = max_chunk_size
        self.max_concurrency = max_concurrency
        self.soft_length_limit = soft_length_limit
        self.text_extractor = text_extractor
        self.url_fetcher = url_fetcher

    @classmethod
    def from_settings(cls, analyzer: ChunkAnalyzer, settings: Optional[Settings] = None) -> "DocumentPipeline":
        settings = settings or get_settings()
        return cls(
            analyzer=analyzer,
            max_chunk_size=settings.CHUNK_MAX_SIZE,
            max_concurrency=settings.LLM_MAX_CONCURRENCY,
            soft_length_limit=settings.SOFT_LENGTH_LIMIT,
        )

    async def extract(self, raw: RawDocument) -> str:
        """Turn the raw input into plain text, delegating to the extraction collaborators."""
        if raw.origin == "text":
            return raw.content if isinstance(raw.content, str) else decode_text(raw.content)
        if raw.origin == "url":
            url = raw.content.decode("utf-8") if isinstance(raw.content, bytes) else raw.content
            return await self.url_fetcher(url)
        if raw.origin == "file":
            data = raw.content.encode("utf-8") if isinstance(raw.content, str) else raw.content
            logger.info(f"Uploaded file: {raw.filename}, declared content type: {raw.content_type or 'unknown'}")
            return self.text_extractor(data, raw.filename)
        raise InvalidInputError(f"Unknown input origin: {raw.origin!r}")

    async def process(self, raw: RawDocument) -> PipelineResult:
        """
        Produce the merged report for one document.

        Raises:
            InvalidInputError: Unusable input
            DocumentExtractionError: Text could not be extracted
            CompletionTransportError: Any chunk's completion call failed; no
                partial report is returned
        """
        started = time.monotonic()
        logger.info(f"Pipeline started, input type: {raw.origin}")

        text = await self.extract(raw)

        redaction = redact(text)
        sanitized = redaction.sanitized
        logger.info(f"Content sanitized: {len(redaction.log)} item(s) redacted, length {len(sanitized)}")

        truncated = len(sanitized) > self.soft_length_limit
        if truncated:
            logger.warning(
                f"Sanitized content ({len(sanitized)} chars) exceeds soft limit of "
                f"{self.soft_length_limit}; result may be incomplete"
            )

        chunks = chunk_text(sanitized, self.max_chunk_size)
        logger.info(f"Chunk count: {len(chunks)}")

        if not chunks:
            logger.info("No content left to analyze, returning empty report")
            return PipelineResult(report=Report(), redacted=[], truncated=False, chunk_count=0)

        records = await self.analyze_chunks(chunks)
        report = merge_records(records)

        logger.info(f"Analysis completed in {time.monotonic() - started:.2f}s")
        return PipelineResult(
            report=report,
            redacted=redaction.log,
            truncated=truncated,
            chunk_count=len(chunks),
        )

    async def analyze_chunks(self, chunks: List[str]) -> List[AnalysisRecord]:
        """Analyze chunks concurrently; results come back in chunk order."""
        semaphore = asyncio.Semaphore(self.max_concurrency)
        total = len(chunks)

        async def analyze_indexed(index: int, chunk: str) -> Tuple[int, AnalysisRecord]:
            async with semaphore:
                logger.info(f"Analyzing chunk {index + 1}/{total}")
                return index, await self.analyzer.analyze(chunk)

        tasks = [asyncio.ensure_future(analyze_indexed(i, chunk)) for i, chunk in enumerate(chunks)]
        try:
            results = await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        return [record for _, record in sorted(results, key=lambda item: item[0])]
