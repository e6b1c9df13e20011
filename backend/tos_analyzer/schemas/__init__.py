"""Pydantic schemas package."""
from tos_analyzer.schemas.analysis import (
    AnalysisRecord,
    ErrorResponse,
    Report,
    SummaryResponse,
)

__all__ = [
    "AnalysisRecord",
    "ErrorResponse",
    "Report",
    "SummaryResponse",
]
