# thinkarena/ai/providers.py
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Dict, Optional, Protocol

import httpx
from tenacity import RetryCallState, Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ..errors import UpstreamUnavailable
from ..settings import get_settings

logger = logging.getLogger("thinkarena")

RETRYABLE_STATUS = {429, 500, 502, 503, 504}


class _TransientStatus(Exception):
    def __init__(self, status_code: int):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


TRANSIENT_ERRORS = (httpx.TransportError, _TransientStatus)


def _log_retry(state: RetryCallState) -> None:
    logger.warning(f"[LLM] attempt {state.attempt_number} failed: {state.outcome.exception()}")


class TextCompletionProvider(Protocol):
    def generate(self, prompt: str) -> str: ...


class GeminiProvider:
    """
    Google Generative Language API over plain REST.

    Every call is bounded by `timeout`; timeouts, transport errors and
    429/5xx answers are retried up to `max_retries` more times with
    exponential backoff, then surface as UpstreamUnavailable.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        backoff_seconds: float = 0.5,
        client: Optional[httpx.Client] = None,
    ) -> None:
        settings = get_settings()
        self.api_key = api_key or settings.GEMINI_API_KEY
        if not self.api_key:
            raise ValueError("GEMINI_API_KEY is not configured")
        self.model = model or settings.GEMINI_MODEL
        root = (base_url or settings.GEMINI_BASE_URL).rstrip("/")
        self.url = f"{root}/{self.model}:generateContent"
        self.timeout = timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS
        self.max_retries = max_retries if max_retries is not None else settings.LLM_MAX_RETRIES
        self.backoff_seconds = backoff_seconds
        self._client = client or httpx.Client(timeout=self.timeout)

    def generate(self, prompt: str) -> str:
        payload: Dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}
        attempts = 1 + max(0, int(self.max_retries))
        retrying = Retrying(
            retry=retry_if_exception_type(TRANSIENT_ERRORS),
            stop=stop_after_attempt(attempts),
            wait=wait_exponential(multiplier=self.backoff_seconds, max=8),
            before_sleep=_log_retry,
            reraise=True,
        )

        try:
            for attempt in retrying:
                with attempt:
                    r = self._post(payload)
        except TRANSIENT_ERRORS as e:
            raise UpstreamUnavailable(f"Gemini call failed: {e}", attempts=attempts) from e

        if r.status_code >= 400:
            raise UpstreamUnavailable(
                f"Gemini rejected request: HTTP {r.status_code}",
                attempts=retrying.statistics.get("attempt_number", 1),
            )
        return self._extract_text(r)

    def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        r = self._client.post(self.url, params={"key": self.api_key}, json=payload)
        if r.status_code in RETRYABLE_STATUS:
            raise _TransientStatus(r.status_code)
        return r

    @staticmethod
    def _extract_text(r: httpx.Response) -> str:
        try:
            data = r.json()
            parts = data["candidates"][0]["content"]["parts"]
            return "".join(p.get("text", "") for p in parts)
        except (ValueError, KeyError, IndexError, TypeError):
            raise UpstreamUnavailable(f"Unexpected Gemini response: {r.text[:200]}")

    def close(self) -> None:
        self._client.close()


@lru_cache
def _default_provider() -> GeminiProvider:
    return GeminiProvider()


def get_completion_provider() -> TextCompletionProvider:
    """FastAPI dependency; tests swap it through app.dependency_overrides."""
    return _default_provider()
