from __future__ import annotations

import logging
import re
from typing import Any, Optional

import httpx

from bitelist.services.errors import (
    NetworkTimeoutError,
    QuotaExceededError,
    UpstreamUnavailableError,
)
from bitelist.services.prompts import (
    RECIPE_SYSTEM_PROMPT,
    VIDEO_SYSTEM_PROMPT,
    build_recipe_prompt,
    build_video_prompt,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_MAX_TOKENS = 500
DEFAULT_TEMPERATURE = 0.1
DEFAULT_TIMEOUT_SECONDS = 60.0
MAX_CONTEXT_CHARS = 8000

CREDENTIAL_STATUS_CODES = {401, 403, 429}
SENTINEL_PHRASES = ("no ingredients", "ingredients found", "please provide")

BULLET_PATTERN = re.compile(r"^[-*•]\s*")
# Any line opening with "N." is dropped whole, "1.5 kg rice" included.
NUMBERED_LINE_PATTERN = re.compile(r"^\d+\.")


def _is_sentinel(line: str) -> bool:
    lowered = line.lower()
    return any(phrase in lowered for phrase in SENTINEL_PHRASES)


def parse_ingredient_lines(content: str) -> list[str]:
    ingredients: list[str] = []
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or NUMBERED_LINE_PATTERN.match(line):
            continue
        cleaned = BULLET_PATTERN.sub("", line, count=1).strip()
        if not cleaned or _is_sentinel(cleaned):
            continue
        ingredients.append(cleaned)
    return ingredients


def _extract_message_content(payload: Any) -> str:
    try:
        content = payload["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as error:
        raise UpstreamUnavailableError("Model response did not include message content.") from error
    if not isinstance(content, str):
        raise UpstreamUnavailableError("Model response content is not text.")
    return content


def _bound_context(text: str) -> str:
    stripped = text.strip()
    if len(stripped) <= MAX_CONTEXT_CHARS:
        return stripped
    logger.info("Truncating model context from %d to %d chars", len(stripped), MAX_CONTEXT_CHARS)
    return stripped[:MAX_CONTEXT_CHARS]


class ChatCompletionClient:
    """Client for an OpenAI-compatible chat-completions endpoint."""

    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str = DEFAULT_BASE_URL,
        max_tokens: int = DEFAULT_MAX_TOKENS,
        temperature: float = DEFAULT_TEMPERATURE,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self._transport = transport

    def analyze_for_ingredients(self, context_text: str, *, timeout: Optional[float] = None) -> list[str]:
        """
        Ask the model for the ingredients explicitly present in a video's text.

        Raises:
            QuotaExceededError: credential rejected or rate limited (401/403/429)
            UpstreamUnavailableError: any other failure
        """
        prompt = build_video_prompt(_bound_context(context_text))
        return self._complete_ingredients(VIDEO_SYSTEM_PROMPT, prompt, timeout)

    def extract_from_recipe_text(self, recipe_text: str, *, timeout: Optional[float] = None) -> list[str]:
        prompt = build_recipe_prompt(_bound_context(recipe_text))
        return self._complete_ingredients(RECIPE_SYSTEM_PROMPT, prompt, timeout)

    def _complete_ingredients(self, system_prompt: str, user_prompt: str, timeout: Optional[float]) -> list[str]:
        content = self._chat(system_prompt, user_prompt, timeout)
        ingredients = parse_ingredient_lines(content)
        logger.info("Model returned %d ingredient(s)", len(ingredients))
        return ingredients

    def _chat(self, system_prompt: str, user_prompt: str, timeout: Optional[float]) -> str:
        effective_timeout = self.timeout if timeout is None else min(self.timeout, timeout)
        url = f"{self.base_url}/chat/completions"
        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }

        try:
            with httpx.Client(timeout=effective_timeout, transport=self._transport) as client:
                response = client.post(
                    url,
                    json=body,
                    headers={"Authorization": f"Bearer {self.api_key}"},
                )
        except httpx.TimeoutException as error:
            raise NetworkTimeoutError(url, effective_timeout) from error
        except httpx.RequestError as error:
            raise UpstreamUnavailableError(f"Network error calling model endpoint: {error}") from error

        if response.status_code in CREDENTIAL_STATUS_CODES:
            logger.warning("Model endpoint rejected the request (%d); check the API key", response.status_code)
            raise QuotaExceededError(
                f"Model API credential unavailable or rate limited (status {response.status_code})",
                status_code=response.status_code,
            )
        if response.status_code != 200:
            raise UpstreamUnavailableError(
                f"Model API error with status code: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as error:
            raise UpstreamUnavailableError(f"Invalid JSON from model endpoint: {error}") from error
        return _extract_message_content(payload)
