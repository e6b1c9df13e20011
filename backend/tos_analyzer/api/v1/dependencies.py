from fastapi import Depends

from tos_analyzer.core.config import Settings, get_settings
from tos_analyzer.services.chunk_analyzer import ChunkAnalyzer
from tos_analyzer.services.llm_service import CompletionClient
from tos_analyzer.services.pipeline import DocumentPipeline


def get_pipeline(settings: Settings = Depends(get_settings)) -> DocumentPipeline:
    """Build a request-scoped pipeline wired to the configured completion endpoint."""
    analyzer = ChunkAnalyzer(CompletionClient.from_settings(settings))
    return DocumentPipeline.from_settings(analyzer, settings)


__all__ = ["get_pipeline", "get_settings"]
