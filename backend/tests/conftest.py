from typing import Callable, Dict

import httpx
import pytest

from tests.helpers import FakeCompletionClient
from tos_analyzer.services.llm_service import CompletionClient


@pytest.fixture
def fake_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def mock_completion_client():
    """Build a real CompletionClient whose HTTP traffic goes to ``handler``."""

    def _build(handler: Callable[[httpx.Request], httpx.Response], timeout: float = 5.0) -> CompletionClient:
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        return CompletionClient(
            api_url="https://llm.test/v1/chat/completions",
            api_key="test-key-123",
            model="test-model",
            timeout=timeout,
            http_client=http_client,
        )

    return _build


@pytest.fixture
def sample_pii_texts() -> Dict[str, str]:
    return {
        "email": "Contact me at john.doe@example.com for details.",
        "phone": "Call 555-123-4567 or (555) 987-6543 today.",
        "ssn": "My SSN is 856-45-6789.",
        "digits": "Card number 4111111111111111 was charged.",
        "ip": "Requests came from 192.168.10.254 last night.",
        "multiple": "Email jane@example.com, call 555.123.4567, server 10.0.0.1, account 12345678901.",
        "no_pii": "This is a normal sentence without any personal data.",
    }
