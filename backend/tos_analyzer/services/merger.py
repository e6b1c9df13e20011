from typing import Iterable, List, Sequence

from tos_analyzer.schemas.analysis import LIST_FIELDS, AnalysisRecord, Report

SUMMARY_SEPARATOR = " "


def _dedupe(items: Iterable[str]) -> List[str]:
    """Drop exact duplicates, keeping the first occurrence of each item."""
    seen = set()
    unique = []
    for item in items:
        if item not in seen:
            seen.add(item)
            unique.append(item)
    return unique


def merge_records(records: Sequence[AnalysisRecord]) -> Report:
    """
    Merge per-chunk records, in chunk order, into one report.

    Summaries are joined with a space. List fields are flattened across all
    chunks and deduplicated globally by exact string equality.
    """
    if not records:
        return Report()

    merged = {
        field: _dedupe(item for record in records for item in getattr(record, field))
        for field in LIST_FIELDS
    }
    return Report(
        summary=SUMMARY_SEPARATOR.join(record.summary for record in records),
        **merged,
    )
