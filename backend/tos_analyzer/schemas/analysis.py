from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

LIST_FIELDS = ("red_flags", "financial_clauses", "recommendations")


class AnalysisRecord(BaseModel):
    """Structured analysis of a single chunk."""

    summary: str = ""
    red_flags: list[str] = Field(default_factory=list)
    financial_clauses: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", strict=True)

    @field_validator("summary", mode="before")
    @classmethod
    def _null_summary(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator(*LIST_FIELDS, mode="before")
    @classmethod
    def _null_list(cls, value: Any) -> Any:
        return [] if value is None else value


class Report(AnalysisRecord):
    """Merged analysis of a whole document. List fields hold no duplicates."""


class SummaryResponse(BaseModel):
    analysis: Report
    redacted: list[str] = Field(default_factory=list)
    truncated: bool = False


class ErrorResponse(BaseModel):
    error: str
