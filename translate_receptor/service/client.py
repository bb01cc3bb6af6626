"""
Async Translation API client with concurrency limits and error classification.
Each receptor call owns one client for its own lifetime; nothing is pooled
across calls.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from ..config import (
    CONNECT_TIMEOUT_SECONDS,
    LISTING_DISPLAY_LANGUAGE,
    ReceptorConfig,
)

logger = logging.getLogger("translate_receptor.service")


class ServiceAPIError(Exception):
    """Raised when the translation service call fails for any reason."""
    def __init__(self, status_code: Optional[int], message: str, url: str):
        self.status_code = status_code
        self.url = url
        self.message = message
        label = f"HTTP {status_code}" if status_code is not None else "Transport error"
        super().__init__(f"{label} for {url}: {message}")

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)


@dataclass(frozen=True)
class Translation:
    """Result of one translate call and the URL that produced it."""
    url: str
    target: str
    text: str


@dataclass(frozen=True)
class LanguageListing:
    """Result of one languages listing call: code -> display name."""
    url: str
    languages: dict[str, str]


class TranslateClient:
    """
    Async Translation API client.
    Features:
      - Bounded concurrency via semaphore
      - API key sent as header so request URLs are safe to cite
      - HTTP and transport failures normalised to ServiceAPIError
      - Injectable httpx transport
    No retry is performed; retry policy belongs to the host.
    """

    def __init__(
        self,
        config: ReceptorConfig,
        api_key: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.api_key = api_key
        self.transport = transport
        self._semaphore = asyncio.Semaphore(config.max_concurrent_requests)
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self):
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["X-Goog-Api-Key"] = self.api_key
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.config.request_timeout, connect=CONNECT_TIMEOUT_SECONDS),
            headers=headers,
            transport=self.transport,
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    def build_url(self, endpoint: str = "", params: Optional[dict] = None) -> str:
        """Build the full request URL, query string included."""
        base = self.config.base_url.rstrip("/")
        url = f"{base}/{endpoint.lstrip('/')}" if endpoint else base
        if not params:
            return url
        return str(httpx.URL(url, params=params))

    async def get(self, endpoint: str = "", params: Optional[dict] = None) -> tuple[str, dict]:
        """Execute a single GET. Returns (request URL, decoded JSON body)."""
        url = self.build_url(endpoint, params)
        async with self._semaphore:
            data = await self._execute(url)
        return url, data

    async def list_languages(self, target: str = LISTING_DISPLAY_LANGUAGE) -> LanguageListing:
        """List languages offered by the service, with names in `target`."""
        url, data = await self.get("languages", {"target": target})
        payload = data.get("data") if isinstance(data, dict) else None
        entries = payload.get("languages") if isinstance(payload, dict) else None
        if not isinstance(entries, list):
            raise ServiceAPIError(200, "Response has no data.languages list", url)
        languages = {}
        for entry in entries:
            if not isinstance(entry, dict):
                raise ServiceAPIError(200, f"Unexpected language entry: {entry!r}", url)
            code = entry.get("language")
            if code:
                languages[code] = entry.get("name") or code
        return LanguageListing(url=url, languages=languages)

    async def translate(
        self,
        text: str,
        target: str,
        source: Optional[str] = None,
    ) -> Translation:
        """Translate `text` into `target`."""
        params = {"q": text, "target": target, "format": "text"}
        if source:
            params["source"] = source
        url, data = await self.get("", params)
        try:
            translated = data["data"]["translations"][0]["translatedText"]
        except (KeyError, IndexError, TypeError):
            raise ServiceAPIError(200, "Response has no translatedText", url)
        return Translation(url=url, target=target, text=translated)

    async def _execute(self, url: str) -> dict:
        """Execute the raw request and classify the outcome."""
        if not self._client:
            raise RuntimeError("TranslateClient not initialized. Use 'async with' context.")

        try:
            response = await self._client.get(url)
        except httpx.HTTPError as e:
            logger.warning(f"Transport error on {url}: {type(e).__name__}: {e}")
            raise ServiceAPIError(None, f"{type(e).__name__}: {e}", url) from e

        logger.debug(f"GET {url} -> {response.status_code}")

        if response.status_code == 200:
            try:
                return response.json()
            except ValueError as e:
                raise ServiceAPIError(200, "Response body is not valid JSON", url) from e

        raise ServiceAPIError(response.status_code, _error_message(response), url)


def _error_message(response: httpx.Response) -> str:
    """Extract the service's error message, falling back to the raw body."""
    try:
        body: Any = response.json()
    except ValueError:
        return response.text[:200] or response.reason_phrase
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return error["message"]
    return response.text[:200] or response.reason_phrase
