"""HTTP client for the external answer-evaluation service.

Wraps ``httpx.AsyncClient`` with:
- explicit request timeout
- bounded retry with exponential backoff (network / 5xx errors)
- request timing logs
- connection-pool lifecycle tied to FastAPI lifespan

Every failure surfaces as :class:`EvaluationFailedError`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

import httpx

from config.settings import Settings, get_settings
from errors import EvaluationFailedError
from models.evaluation import ScoreResponse

logger = logging.getLogger(__name__)


class EvaluatorClient:
    """Async client that scores one answer per request."""

    def __init__(self, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._url = settings.evaluator_url
        self._timeout = settings.evaluator_timeout
        self._max_retries = max(1, settings.evaluator_max_retries)
        self._retry_base_delay = settings.evaluator_retry_base_delay
        self._http: httpx.AsyncClient | None = None

    # -- lifecycle -----------------------------------------------------------

    async def start(self) -> None:
        """Create the underlying ``httpx.AsyncClient`` connection pool."""
        if self._http is not None:
            return
        self._http = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            headers={"Content-Type": "application/json"},
        )
        logger.info("EvaluatorClient started: url=%s", self._url)

    async def close(self) -> None:
        """Gracefully close the connection pool."""
        if self._http is not None:
            await self._http.aclose()
            self._http = None
            logger.info("EvaluatorClient closed")

    # -- public API ----------------------------------------------------------

    async def evaluate(
        self,
        question: str,
        answer: str,
        reference_answer: str,
        keywords: list[str],
    ) -> ScoreResponse:
        """Score *answer* against *question*.

        Raises :class:`EvaluationFailedError` on non-success status,
        transport failure, or a body that is not a JSON object.
        """
        body = {
            "question": question,
            "answer": answer,
            "teacher_answer": reference_answer,
            "keywords": keywords,
        }
        payload = await self._post_with_retry(body)
        if not isinstance(payload, dict):
            raise EvaluationFailedError(
                f"expected a JSON object, got {type(payload).__name__}"
            )
        return ScoreResponse.from_payload(payload)

    # -- retry logic ---------------------------------------------------------

    async def _post_with_retry(self, body: dict[str, Any]) -> Any:
        """POST *body* with exponential-backoff retry.

        Retries on network errors (``httpx.TransportError``) and 5xx.
        Does NOT retry on client errors (4xx).
        """
        client = self._ensure_started()
        last_exc: EvaluationFailedError | None = None

        for attempt in range(1, self._max_retries + 1):
            t0 = time.monotonic()
            try:
                response = await client.post(self._url, json=body)
            except httpx.TransportError as exc:
                elapsed_ms = (time.monotonic() - t0) * 1000
                logger.warning(
                    "POST %s → network error (%.0fms): %s [attempt %d/%d]",
                    self._url, elapsed_ms, exc, attempt, self._max_retries,
                )
                last_exc = EvaluationFailedError(f"transport error: {exc}")
                last_exc.__cause__ = exc
            else:
                elapsed_ms = (time.monotonic() - t0) * 1000
                logger.info(
                    "POST %s → %d (%.0fms)",
                    self._url, response.status_code, elapsed_ms,
                )
                if 200 <= response.status_code < 300:
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise EvaluationFailedError(
                            "response body is not valid JSON",
                            status_code=response.status_code,
                        ) from exc

                detail = response.text[:300] if response.text else f"HTTP {response.status_code}"
                if response.status_code < 500:
                    raise EvaluationFailedError(detail, status_code=response.status_code)
                last_exc = EvaluationFailedError(detail, status_code=response.status_code)

            if attempt < self._max_retries:
                delay = self._retry_base_delay * (2 ** (attempt - 1))
                logger.warning(
                    "POST %s failed, retry %d/%d in %.1fs",
                    self._url, attempt, self._max_retries, delay,
                )
                await asyncio.sleep(delay)

        # Exhausted all retries
        raise last_exc  # type: ignore[misc]

    # -- internals -----------------------------------------------------------

    def _ensure_started(self) -> httpx.AsyncClient:
        if self._http is None:
            raise RuntimeError("EvaluatorClient not started; call await client.start() first")
        return self._http
