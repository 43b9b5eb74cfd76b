"""DeepSeek chat-completions adapter."""

from typing import Any, Dict, List, Optional

import httpx

from alumni_finder.errors import LLMError
from alumni_finder.logger import get_logger

logger = get_logger(__name__)


class DeepSeekClient:
    """Minimal async client for the OpenAI-compatible DeepSeek API."""

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.deepseek.com/v1",
        model: str = "deepseek-chat",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._model = model
        self._timeout = timeout
        self._transport = transport

    async def chat(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """Send a chat completion and return the first choice's text."""
        if not self._api_key:
            raise LLMError("DeepSeek API key is not configured")

        payload: Dict[str, Any] = {"model": self._model, "messages": messages}
        if temperature is not None:
            payload["temperature"] = temperature
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    f"{self._base_url}/chat/completions",
                    json=payload,
                    headers={"Authorization": f"Bearer {self._api_key}"},
                )
        except httpx.HTTPError as e:
            raise LLMError(f"DeepSeek request failed: {e}") from e

        if response.status_code >= 400:
            raise LLMError(
                f"DeepSeek API error: {_error_detail(response)}",
                {"status_code": response.status_code},
            )

        try:
            content = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            raise LLMError("DeepSeek returned an unexpected response shape") from e
        if not isinstance(content, str) or not content.strip():
            raise LLMError("DeepSeek returned an empty completion")
        return content.strip()


def _error_detail(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    err = body.get("error") if isinstance(body, dict) else None
    if isinstance(err, dict) and err.get("message"):
        return str(err["message"])
    if isinstance(body, dict) and isinstance(body.get("message"), str):
        return body["message"]
    return response.reason_phrase
