"""
OpenAI-compatible Chat Completion Client.

Sends a system prompt and a user prompt to ``{api_base}/chat/completions``
and extracts the first choice's message content.
"""

from typing import Any

import httpx

from formassist.errors import ConfigError, NetworkError, ParseError, UpstreamError
from formassist.models import CompletionResult, TokenUsage
from formassist.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_API_BASE = "https://api.openai.com/v1"
DEFAULT_TIMEOUT = 60.0

# Fixed for data question answering: favour factual, low-variance answers.
ANSWER_TEMPERATURE = 0.3


class CompletionClient:
    """
    Chat completion client.

    One POST per call, no retries. The API key is passed per call so that
    callers own their credentials.
    """

    def __init__(
        self,
        api_base: str = DEFAULT_API_BASE,
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        default_model: str | None = None,
    ):
        self._api_base = api_base.rstrip("/")
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout
        self._default_model = default_model

    @property
    def endpoint(self) -> str:
        return f"{self._api_base}/chat/completions"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def complete(
        self,
        api_key: str,
        model: str,
        system_prompt: str,
        user_prompt: str,
    ) -> CompletionResult:
        """
        Ask the model.

        Args:
            api_key: Bearer key for the completion endpoint.
            model: Model name; falls back to the client's default model when empty.
            system_prompt: System message content.
            user_prompt: User message content.

        Returns:
            CompletionResult with the answer and token usage, if reported.

        Raises:
            ConfigError: Empty API key or no model. Raised before any request.
            UpstreamError: Response body carries an ``error`` object.
            NetworkError: Transport failure or non-2xx without an error body.
            ParseError: Body is not JSON or has no answer content.
        """
        if not api_key or not api_key.strip():
            raise ConfigError("OpenAI API key is not configured")

        model = (model or "").strip() or (self._default_model or "")
        if not model:
            raise ConfigError("No model configured")

        payload = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": ANSWER_TEMPERATURE,
        }
        headers = {
            "Authorization": f"Bearer {api_key.strip()}",
            "Content-Type": "application/json",
        }

        logger.info(
            f"Calling chat completion: model={model}, "
            f"prompt_chars={len(system_prompt) + len(user_prompt)}"
        )
        try:
            response = await self._get_client().post(self.endpoint, json=payload, headers=headers)
        except httpx.RequestError as e:
            logger.warning(f"Completion request failed: {e}")
            raise NetworkError(f"Request to completion endpoint failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = None

        error = _extract_error(data)
        if error is not None:
            logger.warning(f"Completion endpoint returned an error: {error}")
            raise UpstreamError(error)

        if not response.is_success:
            raise NetworkError(
                f"Completion endpoint returned HTTP {response.status_code}",
                status_code=response.status_code,
            )

        if data is None:
            raise ParseError("Completion response is not valid JSON")

        result = _parse_completion(data)
        logger.debug(f"Completion usage: {result.usage}")
        return result

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "CompletionClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


def _extract_error(data: Any) -> str | None:
    if not isinstance(data, dict) or not data.get("error"):
        return None
    error = data["error"]
    if isinstance(error, dict):
        return str(error.get("message") or error.get("code") or error)
    return str(error)


def _parse_completion(data: Any) -> CompletionResult:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as e:
        raise ParseError("Completion response has no choices[0].message.content") from e

    if not isinstance(content, str):
        raise ParseError("Completion response content is not text")

    usage = data.get("usage")
    return CompletionResult(
        answer=content,
        usage=TokenUsage.model_validate(usage) if isinstance(usage, dict) else None,
    )
