"""
Shared fixtures: an in-process stub of the translation service served
through httpx.MockTransport.
"""

import asyncio
from typing import Any, Optional

import httpx
import pytest

from translate_receptor.config import ReceptorConfig
from translate_receptor.credentials import TranslateCredentials
from translate_receptor.receptor import TranslateReceptor


HELLO = {"en": "Hello", "it": "Ciao", "de": "Hallo"}

OFFERED = {"en": "English", "it": "Italian", "de": "German", "fr": "French"}


class StubTranslateService:
    """Fake Cloud-Translation-v2-shaped service."""

    def __init__(
        self,
        translations: Optional[dict] = None,
        offered: Optional[dict] = None,
        fail_targets: tuple = (),
        listing_status: int = 200,
        required_key: Optional[str] = None,
        delays: Optional[dict] = None,
        unreachable: bool = False,
        listing_body: Any = None,
    ):
        self.translations = dict(HELLO if translations is None else translations)
        self.offered = dict(OFFERED if offered is None else offered)
        self.fail_targets = set(fail_targets)
        self.listing_status = listing_status
        self.required_key = required_key
        self.delays = delays or {}
        self.unreachable = unreachable
        self.listing_body = listing_body
        self.requests: list[httpx.Request] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            return await self._respond(request)
        finally:
            self.in_flight -= 1

    async def _respond(self, request: httpx.Request) -> httpx.Response:
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)

        if self.required_key is not None and \
                request.headers.get("X-Goog-Api-Key") != self.required_key:
            return httpx.Response(403, json={"error": {"message": "API key not valid"}})

        if request.url.path.endswith("/languages"):
            if self.listing_status != 200:
                return httpx.Response(
                    self.listing_status,
                    json={"error": {"message": "listing unavailable"}},
                )
            if self.listing_body is not None:
                return httpx.Response(200, json=self.listing_body)
            return httpx.Response(200, json={"data": {"languages": [
                {"language": code, "name": name} for code, name in self.offered.items()
            ]}})

        target = request.url.params["target"]
        delay = self.delays.get(target, 0)
        if delay:
            await asyncio.sleep(delay)
        if target in self.fail_targets or target not in self.translations:
            return httpx.Response(500, json={"error": {"message": f"backend error for {target}"}})
        return httpx.Response(200, json={"data": {"translations": [
            {"translatedText": self.translations[target], "detectedSourceLanguage": "en"}
        ]}})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def stub():
    return StubTranslateService()


@pytest.fixture
def config():
    return ReceptorConfig()


@pytest.fixture
def credentials():
    return TranslateCredentials(primary_user="Ada")


@pytest.fixture
def receptor(stub, config):
    return TranslateReceptor(config, transport=stub.transport())
