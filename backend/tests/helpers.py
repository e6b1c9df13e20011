"""Shared test doubles and payload builders."""
import asyncio
import json
from typing import Callable, Dict, List, Optional

from tos_analyzer.core.exceptions import CompletionTransportError


def completion_envelope(content: Optional[str]) -> dict:
    """Chat-completion response body carrying ``content`` as the model's message."""
    return {
        "id": "cmpl-test",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


def record_json(
    summary: str = "",
    red_flags: Optional[List[str]] = None,
    financial_clauses: Optional[List[str]] = None,
    recommendations: Optional[List[str]] = None,
) -> str:
    return json.dumps(
        {
            "summary": summary,
            "red_flags": red_flags or [],
            "financial_clauses": financial_clauses or [],
            "recommendations": recommendations or [],
        }
    )


class FakeCompletionClient:
    """
    Stand-in for CompletionClient.

    ``responder`` maps the user content (the chunk) to the raw model output.
    Chunks containing any string in ``fail_on`` raise CompletionTransportError.
    """

    def __init__(
        self,
        responder: Optional[Callable[[str], str]] = None,
        fail_on: Optional[List[str]] = None,
        delays: Optional[Dict[str, float]] = None,
    ) -> None:
        self.responder = responder or (lambda chunk: record_json(summary=chunk[:20]))
        self.fail_on = fail_on or []
        self.delays = delays or {}
        self.calls: List[str] = []
        self.completed: List[str] = []
        self.system_prompts: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def complete(self, system_prompt: str, user_content: str) -> str:
        self.calls.append(user_content)
        self.system_prompts.append(system_prompt)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            delay = next((d for marker, d in self.delays.items() if marker in user_content), 0.0)
            await asyncio.sleep(delay)
            if any(marker in user_content for marker in self.fail_on):
                raise CompletionTransportError("LLM API returned error 503")
            output = self.responder(user_content)
            self.completed.append(user_content)
            return output
        finally:
            self.in_flight -= 1
