import logging
from typing import Any, Optional

import httpx

from tos_analyzer.core.config import Settings, get_settings
from tos_analyzer.core.exceptions import CompletionTransportError

logger = logging.getLogger(__name__)


class CompletionClient:
    """Wrapper for an OpenAI-compatible chat-completion endpoint (Together AI by default)."""

    def __init__(
        self,
        api_url: str,
        api_key: str,
        model: str,
        timeout: float = 120.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.api_url = api_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._http_client = http_client

    @classmethod
    def from_settings(
        cls, settings: Optional[Settings] = None, http_client: Optional[httpx.AsyncClient] = None
    ) -> "CompletionClient":
        settings = settings or get_settings()
        return cls(
            api_url=settings.LLM_API_URL,
            api_key=settings.LLM_API_KEY,
            model=settings.LLM_MODEL,
            timeout=settings.LLM_TIMEOUT_SECONDS,
            http_client=http_client,
        )

    def _build_payload(self, system_prompt: str, user_content: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            "temperature": 0,
        }

    async def complete(self, system_prompt: str, user_content: str) -> str:
        """
        Send one system + user exchange and return the model's raw text.

        Raises:
            CompletionTransportError: On timeout, connection failure, non-2xx
                status or a response envelope without message content.
        """
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }
        payload = self._build_payload(system_prompt, user_content)

        if self._http_client is not None:
            return await self._post(self._http_client, headers, payload)
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            return await self._post(client, headers, payload)

    async def _post(self, client: httpx.AsyncClient, headers: dict, payload: dict) -> str:
        logger.info(f"Calling LLM: {self.model} at {self.api_url}")
        try:
            response = await client.post(self.api_url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except httpx.TimeoutException as e:
            logger.error(f"LLM request timed out after {self.timeout}s")
            raise CompletionTransportError(f"LLM request timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            logger.error(f"LLM API returned error {e.response.status_code}: {e.response.text[:500]}")
            raise CompletionTransportError(f"LLM API returned error {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.error(f"LLM call failed: {e}")
            raise CompletionTransportError(f"Failed to communicate with LLM: {e}") from e
        except ValueError as e:
            raise CompletionTransportError("LLM API returned a non-JSON envelope") from e

        return self._extract_content(result)

    @staticmethod
    def _extract_content(result: Any) -> str:
        try:
            content = result["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise CompletionTransportError(f"Unexpected LLM response format: {str(result)[:200]}") from e
        return content if isinstance(content, str) else ""
