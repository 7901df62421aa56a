"""Hosted damage classifier backed by the OpenRouter chat completions API.

Sends the item text with a fixed instruction asking for exactly one damage
category code and parses the reply with
:meth:`~humane_logistics.core.media.DamageCategory.parse`.  Temperature is
always 0 for reproducibility.

Error handling maps HTTP status codes to typed exceptions:
- HTTP 429 -> :class:`~humane_logistics.core.exceptions.EnrichmentRateLimitError`
- HTTP 401/403 -> :class:`~humane_logistics.core.exceptions.EnrichmentAuthError`
- Other non-2xx, network errors, malformed JSON ->
  :class:`~humane_logistics.core.exceptions.EnrichmentError`
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from humane_logistics.core.exceptions import (
    EnrichmentAuthError,
    EnrichmentError,
    EnrichmentRateLimitError,
)
from humane_logistics.core.media import DamageCategory
from humane_logistics.enrichment.base import DamageClassifier

logger = logging.getLogger(__name__)

OPENROUTER_API_URL: str = "https://openrouter.ai/api/v1/chat/completions"

#: Characters of item text sent to the model.
MAX_PROMPT_CHARS: int = 6000

_CATEGORY_CODES: str = ", ".join(
    member.value for member in DamageCategory if member is not DamageCategory.UNKNOWN
)

CLASSIFIER_SYSTEM_PROMPT: str = (
    "You classify disaster-related news and social media posts by the kind of "
    "damage they report. Reply with exactly one category code from this list "
    f"and nothing else: {_CATEGORY_CODES}. Use OTHER when the text reports no "
    "damage of the listed kinds."
)


class OpenRouterDamageClassifier(DamageClassifier):
    """Classify damage with a hosted LLM through OpenRouter.

    Args:
        api_key: OpenRouter API key (``Bearer`` token).
        model: OpenRouter model identifier.
        client: Optional injected :class:`httpx.AsyncClient`.  Inject for
            testing.  If ``None``, the classifier creates and owns a client.
        timeout: Request timeout in seconds.
    """

    engine_name = "openrouter"

    def __init__(
        self,
        api_key: str,
        model: str,
        client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self.model = model
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def classify(self, text: str) -> DamageCategory:
        """Ask the model for the damage category of *text*.

        Raises:
            EnrichmentRateLimitError: On HTTP 429.
            EnrichmentAuthError: On HTTP 401 or 403.
            EnrichmentError: On other HTTP errors, network failures or an
                unparseable response.
        """
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": CLASSIFIER_SYSTEM_PROMPT},
                {"role": "user", "content": text[:MAX_PROMPT_CHARS]},
            ],
            "temperature": 0,
        }
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }
        data = await self._post_completion(payload, headers)

        try:
            reply = data["choices"][0]["message"]["content"] or ""
        except (KeyError, IndexError, TypeError) as exc:
            raise EnrichmentError(
                f"openrouter: unexpected response shape: {exc}", engine=self.engine_name
            ) from exc

        cleaned = reply.strip().strip(".").strip()
        category = DamageCategory.parse(cleaned)
        if category is DamageCategory.UNKNOWN and cleaned:
            category = DamageCategory.parse(cleaned.split()[0])
        if category is DamageCategory.UNKNOWN:
            logger.info("openrouter: unrecognised category reply %r", reply[:80])
        return category

    async def _post_completion(
        self,
        payload: dict[str, Any],
        headers: dict[str, str],
    ) -> dict[str, Any]:
        try:
            response = await self._get_client().post(
                OPENROUTER_API_URL, json=payload, headers=headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            code = exc.response.status_code
            if code == 429:
                retry_after = float(exc.response.headers.get("Retry-After", 60))
                raise EnrichmentRateLimitError(
                    "openrouter: HTTP 429 rate limited",
                    retry_after=retry_after,
                    engine=self.engine_name,
                ) from exc
            if code in (401, 403):
                raise EnrichmentAuthError(
                    f"openrouter: HTTP {code}: invalid API key",
                    engine=self.engine_name,
                ) from exc
            raise EnrichmentError(
                f"openrouter: HTTP {code}: {exc.response.text[:200]}",
                engine=self.engine_name,
            ) from exc
        except httpx.RequestError as exc:
            raise EnrichmentError(
                f"openrouter: network error: {exc}", engine=self.engine_name
            ) from exc

        try:
            return response.json()  # type: ignore[no-any-return]
        except ValueError as exc:
            raise EnrichmentError(
                f"openrouter: JSON parse error: {exc}", engine=self.engine_name
            ) from exc

    async def aclose(self) -> None:
        """Close the HTTP client if this classifier created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
