"""Provider-agnostic chat client for OpenRouter/OpenAI-compatible and Anthropic APIs.

Detects the provider from LLM_API_BASE and formats requests accordingly.
"""

from __future__ import annotations

import logging
from typing import Any, Sequence

import httpx

from config import Settings
from models.schemas import ConversationTurn
from utils.retry import with_retry

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful programming assistant running in the user's terminal. "
    "When a PROJECT CONTEXT block precedes the question, it contains files "
    "from the user's project; base your answer on them and refer to files by "
    "their path."
)

APP_REFERER = "https://github.com/DanielPopoola/open-cli"
APP_TITLE = "open-cli"


class LLMClientError(Exception):
    """Raised when the LLM API call fails."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def friendly_error_message(exc: LLMClientError) -> str:
    """Map an API failure to a short hint for the user."""
    status = exc.status_code
    if status is None:
        return "Network connection failed. Check your internet connection."
    if status == 401:
        return "Authentication failed. Check your API key."
    if status == 400:
        return (
            "Invalid request. Check your model name "
            '(format: "provider/model-name", e.g. "openai/gpt-oss-20b").'
        )
    if status == 402:
        return "Insufficient credits. Check your account balance."
    if status == 429:
        return "Rate limit exceeded. This usually resolves quickly."
    if status >= 500:
        return "Server error. This is usually temporary."
    return f"API error ({status}): {exc}"


def _is_anthropic(api_base: str) -> bool:
    return "anthropic.com" in api_base


def _as_messages(turns: Sequence[ConversationTurn | dict[str, str]]) -> list[dict[str, str]]:
    return [t.as_message() if isinstance(t, ConversationTurn) else dict(t) for t in turns]


def with_context(
    history: Sequence[ConversationTurn | dict[str, str]], context: str
) -> list[dict[str, str]]:
    """Return *history* as API messages with *context* prefixed to the last user turn."""
    messages = _as_messages(history)
    if not context:
        return messages
    for message in reversed(messages):
        if message["role"] == "user":
            message["content"] = context + message["content"]
            break
    return messages


def _error_detail(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return resp.text[:500]
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return resp.text[:500]


class LLMClient:
    """Calls either the Anthropic Messages API or an OpenAI-compatible endpoint."""

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_base = settings.llm_api_base.rstrip("/")
        self._api_key = settings.llm_api_key
        self._model = settings.llm_model
        self._timeout = settings.llm_timeout
        self._max_tokens = settings.llm_max_tokens
        self._max_attempts = settings.retry_max_attempts
        self._base_delay = settings.retry_base_delay
        self._is_anthropic = _is_anthropic(self._api_base)
        self._transport = transport

    @property
    def model(self) -> str:
        return self._model

    async def chat(self, messages: Sequence[ConversationTurn | dict[str, str]]) -> str:
        """Send a conversation and return the assistant's reply text."""
        payload_messages = _as_messages(messages)
        call = self._call_anthropic if self._is_anthropic else self._call_openai
        return await with_retry(
            lambda: call(payload_messages),
            operation=f"Request to {self._model}",
            max_attempts=self._max_attempts,
            base_delay=self._base_delay,
            retry_on=(LLMClientError,),
        )

    async def send_with_context(
        self, history: Sequence[ConversationTurn | dict[str, str]], context: str
    ) -> str:
        return await self.chat(with_context(history, context))

    async def test_connection(self) -> bool:
        try:
            await self.chat([{"role": "user", "content": "Hello"}])
        except LLMClientError as exc:
            logger.warning("Connection test failed: %s", exc)
            return False
        return True

    async def _post(self, url: str, payload: dict[str, Any], headers: dict[str, str]) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                resp = await client.post(url, json=payload, headers=headers)
        except httpx.RequestError as exc:
            raise LLMClientError(f"Unable to reach {self._api_base}: {exc}") from exc

        if resp.status_code != 200:
            raise LLMClientError(
                f"API returned {resp.status_code}: {_error_detail(resp)}",
                status_code=resp.status_code,
            )
        try:
            return resp.json()
        except ValueError as exc:
            raise LLMClientError(
                f"Unexpected response format: {resp.text[:200]}",
                status_code=resp.status_code,
            ) from exc

    async def _call_openai(self, messages: list[dict[str, str]]) -> str:
        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [{"role": "system", "content": SYSTEM_PROMPT}, *messages],
        }
        if self._max_tokens:
            payload["max_tokens"] = self._max_tokens
        headers = {
            "HTTP-Referer": APP_REFERER,
            "X-Title": APP_TITLE,
        }
        if self._api_key and self._api_key.strip():
            headers["Authorization"] = f"Bearer {self._api_key.strip()}"

        data = await self._post(f"{self._api_base}/chat/completions", payload, headers)
        try:
            return data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMClientError(f"Unexpected response format: {str(data)[:200]}") from exc

    async def _call_anthropic(self, messages: list[dict[str, str]]) -> str:
        payload = {
            "model": self._model,
            "max_tokens": self._max_tokens or 4096,
            "system": SYSTEM_PROMPT,
            "messages": messages,
        }
        headers = {
            "x-api-key": self._api_key.strip() if self._api_key else "",
            "anthropic-version": "2023-06-01",
            "content-type": "application/json",
        }

        data = await self._post(f"{self._api_base}/v1/messages", payload, headers)
        try:
            return "".join(
                block.get("text", "") for block in data["content"] if block.get("type") == "text"
            )
        except (KeyError, TypeError, AttributeError) as exc:
            raise LLMClientError(f"Unexpected response format: {str(data)[:200]}") from exc
