import logging

import httpx

from app.exceptions.custom import (
    ConfigurationError,
    EmptyResult,
    RateLimitError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

API_URL = "https://api.perplexity.ai/chat/completions"
MODEL = "sonar"
SERVICE = "Perplexity"

_SYSTEM_PROMPT = (
    "You are a helpful assistant that searches for information and provides "
    "detailed responses with contact information when available. "
    "Always include phone numbers exactly as published."
)


class PerplexityService:
    def __init__(self, client: httpx.AsyncClient, api_key: str):
        self._client = client
        self._api_key = api_key

    async def search(self, query: str) -> str:
        """Ask Perplexity a free-text question and return its answer text."""
        if not self._api_key:
            raise ConfigurationError("PERPLEXITY_API_KEY")

        try:
            resp = await self._client.post(
                API_URL,
                json={
                    "model": MODEL,
                    "messages": [
                        {"role": "system", "content": _SYSTEM_PROMPT},
                        {"role": "user", "content": query},
                    ],
                    "max_tokens": 1000,
                    "temperature": 0.2,
                },
                headers={
                    "Authorization": f"Bearer {self._api_key}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.HTTPError as exc:
            logger.exception("Perplexity API call failed for %r", query)
            raise UpstreamError(SERVICE, type(exc).__name__) from exc

        if resp.status_code == 429:
            raise RateLimitError(SERVICE, body=resp.text)
        if not resp.is_success:
            raise UpstreamError(
                SERVICE,
                f"HTTP {resp.status_code}",
                status_code=resp.status_code,
                body=resp.text,
            )

        return self._parse_response(resp, query)

    def _parse_response(self, resp: httpx.Response, query: str) -> str:
        try:
            content = resp.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError):
            logger.warning("Unexpected Perplexity response structure for %r", query)
            raise EmptyResult(SERVICE)

        if not isinstance(content, str) or not content.strip():
            raise EmptyResult(SERVICE)

        logger.info("Perplexity answered %r with %d chars", query, len(content))
        return content
