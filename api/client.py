#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
HTTP client for the Article Translator API.

Talks to one configured server URL. Long translations are followed by
polling the status endpoint with a bounded number of attempts; after the
first ``slowdown_after`` polls only every third tick actually polls.

Usage:
    async with TranslatorApiClient("http://localhost:5000") as client:
        html = await client.import_article("https://example.com/story")
        outcome = await client.translate(html)
        if "translatedText" in outcome:
            print(outcome["translatedText"])
        else:
            status = await client.wait_for_translation(outcome["translationId"])
            print(status["translatedText"])
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Dict, Optional

import httpx

from config.constants import (
    DEFAULT_PORT,
    POLL_INTERVAL_SECONDS,
    POLL_MAX_ATTEMPTS,
    POLL_SLOWDOWN_AFTER,
)

from config.logging_config import get_logger
logger = get_logger(__name__)

DEFAULT_API_URL = f"http://localhost:{DEFAULT_PORT}"


class ApiClientError(Exception):
    """Base exception for API client errors"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TranslationNotFoundError(ApiClientError):
    """The job id is unknown or has expired"""
    pass


class TranslationJobError(ApiClientError):
    """The job ended in the error state"""
    pass


class TranslationTimeoutError(ApiClientError):
    """The poll budget ran out before the job finished"""
    pass


def should_poll(tick: int, slowdown_after: int = POLL_SLOWDOWN_AFTER) -> bool:
    """
    Whether tick number ``tick`` (1-based) performs a poll.

    Every tick polls until ``slowdown_after``; afterwards one tick in three.
    """
    if tick <= slowdown_after:
        return True
    return (tick - slowdown_after) % 3 == 0


class TranslatorApiClient:
    """
    Async client for the translator REST API.

    Attributes:
        base_url: Server root, e.g. ``http://localhost:5000``.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_API_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 120.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=self.base_url, timeout=timeout)
        self._sleep = sleep

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def close(self):
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.HTTPError as e:
            raise ApiClientError(f"Could not reach translator API at {self.base_url}: {e}") from e

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or f"HTTP {response.status_code}"
        if isinstance(body, dict):
            return str(body.get("detail") or body.get("message") or body.get("error") or body)
        return str(body)

    def _check(self, response: httpx.Response) -> Dict[str, Any]:
        if response.status_code >= 400:
            raise ApiClientError(self._error_message(response), status_code=response.status_code)
        return response.json()

    # =========================================================================
    # Endpoints
    # =========================================================================

    async def health(self) -> Dict[str, Any]:
        return self._check(await self._request("GET", "/api/health"))

    async def import_article(self, url: str) -> str:
        """Fetch readable article HTML through the server."""
        response = await self._request("GET", "/api/import", params={"url": url})
        return self._check(response)["content"]

    async def translate(self, text: str, client_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Submit text for translation.

        Returns:
            ``{"translatedText"}`` for short texts, otherwise the job
            descriptor with ``translationId`` and ``totalChunks``.
        """
        payload: Dict[str, Any] = {"text": text}
        if client_id:
            payload["clientId"] = client_id
        return self._check(await self._request("POST", "/api/translate", json=payload))

    async def get_status(self, translation_id: str) -> Dict[str, Any]:
        """
        Raises:
            TranslationNotFoundError: On 404.
        """
        response = await self._request("GET", f"/api/translation-status/{translation_id}")
        if response.status_code == 404:
            raise TranslationNotFoundError(
                f"Translation not found: {translation_id}", status_code=404
            )
        return self._check(response)

    async def wait_for_translation(
        self,
        translation_id: str,
        max_polls: int = POLL_MAX_ATTEMPTS,
        interval: float = POLL_INTERVAL_SECONDS,
        slowdown_after: int = POLL_SLOWDOWN_AFTER,
        on_progress: Optional[Callable[[Dict[str, Any]], Any]] = None,
    ) -> Dict[str, Any]:
        """
        Poll until the job completes.

        Args:
            translation_id: Job to follow.
            max_polls: Number of ticks before giving up.
            interval: Seconds between ticks.
            slowdown_after: Ticks after which only every third one polls.
            on_progress: Called with every status received.

        Returns:
            Final status dict (``status == "completed"``).

        Raises:
            TranslationNotFoundError: Job unknown or expired.
            TranslationJobError: Job ended in error.
            TranslationTimeoutError: ``max_polls`` ticks elapsed.
        """
        for tick in range(1, max_polls + 1):
            if should_poll(tick, slowdown_after):
                status = await self.get_status(translation_id)
                if on_progress is not None:
                    on_progress(status)

                if status.get("status") == "completed":
                    return status
                if status.get("status") == "error":
                    raise TranslationJobError(status.get("error") or "Translation failed")

                progress = status.get("progress") or {}
                logger.debug(
                    f"Poll {tick}/{max_polls} for {translation_id}: "
                    f"{progress.get('completed')}/{progress.get('total')} chunks"
                )

            if tick < max_polls:
                await self._sleep(interval)

        raise TranslationTimeoutError(
            f"Translation {translation_id} did not finish after {max_polls} polls"
        )
