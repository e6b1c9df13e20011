"""
Per-chunk analysis: prompt contract, completion call and strict parsing.

Model output is untrusted free text. Anything that is not exactly one JSON
object matching the four-field record degrades to an empty AnalysisRecord so
the merge step always receives well-formed input. Transport failures are a
different matter and propagate to the caller.
"""
import logging
from typing import Optional

from pydantic import ValidationError

from tos_analyzer.schemas.analysis import AnalysisRecord
from tos_analyzer.services.llm_service import CompletionClient

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = """You are an expert legal analyst reviewing a Terms of Service document for an ordinary user.

Analyze the document excerpt provided by the user and report on it.

REQUIRED OUTPUT FORMAT - return exactly one JSON object with exactly these keys:
{
  "summary": "Concise, plain-language summary of the most important points, at most 5-7 sentences.",
  "red_flags": [
    "Potential risk or problematic clause for users (limits on user rights, privacy risks, arbitration, etc.), one clear sentence each."
  ],
  "financial_clauses": [
    "Clause imposing fees, penalties, monetary obligations, automatic renewals or early termination charges, one clear sentence each."
  ],
  "recommendations": [
    "Actionable next step for users to protect themselves or better understand their rights, one clear sentence each."
  ]
}

RULES:
- Output ONLY the JSON object: no markdown, no code block markers, no comments, no text before or after it
- Every key must be present; use [] for a list with nothing to report, never null and never omit the key
- Each list item is a plain string; deduplicate items and keep at most 5-7 per list, most relevant first
- Use plain, accessible language and avoid legal jargon unless necessary
- Only include what is clearly stated or strongly implied in the text; do not speculate
- Personal data in the text has been replaced with [REDACTED]; do not comment on the placeholders
"""


def parse_analysis(raw_output: Optional[str]) -> AnalysisRecord:
    """
    Strictly parse model output into an AnalysisRecord.

    Returns the empty default record for malformed output instead of raising:
    invalid JSON, markdown fences or surrounding prose, a non-object payload,
    or fields of the wrong type.
    """
    if not raw_output or not raw_output.strip():
        logger.warning("LLM returned empty output, using empty analysis record")
        return AnalysisRecord()

    try:
        return AnalysisRecord.model_validate_json(raw_output.strip())
    except ValidationError as e:
        logger.warning(f"Failed to parse LLM analysis output ({e.error_count()} error(s)), using empty record")
        logger.debug("Unparsable LLM output (trunc): %s", raw_output[:1000])
        return AnalysisRecord()


class ChunkAnalyzer:
    """Runs the fixed analysis prompt over one chunk at a time."""

    def __init__(self, client: CompletionClient, system_prompt: str = SYSTEM_PROMPT) -> None:
        self.client = client
        self.system_prompt = system_prompt

    async def analyze(self, chunk: str) -> AnalysisRecord:
        """
        Analyze a single chunk.

        Raises:
            CompletionTransportError: If the completion endpoint fails. Parse
                failures never raise.
        """
        raw_output = await self.client.complete(self.system_prompt, chunk)
        record = parse_analysis(raw_output)
        logger.info(
            "Chunk analyzed: %d red flag(s), %d financial clause(s), %d recommendation(s)",
            len(record.red_flags),
            len(record.financial_clauses),
            len(record.recommendations),
        )
        return record
