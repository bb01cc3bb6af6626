"""
Translate receptor — the adapter the host drives.

Each of verify(), discover() and report() is a single-shot call that opens
its own service client and keeps no state once it returns, so concurrent
calls for different credentials never interfere.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from .auth.verifier import VerificationResult, Verifier
from .collectors import (
    ALL_TOPICS,
    DiscoveryEngine,
    DiscoveryResult,
    EvidenceError,
    EvidenceResult,
)
from .config import ReceptorConfig
from .credentials import CREDENTIAL_SCHEMA, CredentialSchema, TranslateCredentials
from .models import Report
from .service.client import TranslateClient

logger = logging.getLogger("translate_receptor.receptor")


@dataclass
class ReportResult:
    report: Report
    error: Optional[EvidenceError] = None


class TranslateReceptor:
    """Receptor for the translation service."""

    def __init__(
        self,
        config: Optional[ReceptorConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config or ReceptorConfig()
        self.transport = transport

    # ── Identity ────────────────────────────────────────────────────────────

    def get_receptor_type(self) -> str:
        return self.config.receptor_name

    def get_known_services(self) -> list[str]:
        return [self.config.service_name]

    def get_credential_obj(self) -> CredentialSchema:
        return CREDENTIAL_SCHEMA

    def topics(self) -> list[str]:
        return [cls.topic for cls in ALL_TOPICS]

    # ── Verify / Discover ───────────────────────────────────────────────────

    async def verify(self, credentials: TranslateCredentials) -> VerificationResult:
        return await Verifier(self.config, transport=self.transport).verify(credentials)

    async def discover(self, credentials: TranslateCredentials) -> DiscoveryResult:
        if not self.config.live_discovery:
            return await DiscoveryEngine(None, self.config).discover(credentials)
        async with self._client(credentials) as client:
            return await DiscoveryEngine(client, self.config).discover(credentials)

    # ── Evidence / Report ───────────────────────────────────────────────────

    async def build_evidence(
        self,
        credentials: TranslateCredentials,
        topic: str,
    ) -> EvidenceResult:
        """Build the evidence for a single topic by name."""
        builder_cls = next((cls for cls in ALL_TOPICS if cls.topic == topic), None)
        if builder_cls is None:
            result = EvidenceResult(topic)
            result.add_failure(topic, "", LookupError(
                f"Unknown topic '{topic}'. Known topics: {self.topics()}"
            ))
            return result
        async with self._client(credentials) as client:
            return await builder_cls(client, self.config).execute(credentials)

    async def report(self, credentials: TranslateCredentials) -> ReportResult:
        """
        Build every topic and assemble the report in topic order.

        A failing topic does not stop the others. Evidence that was built,
        even partially, is always kept; the returned error is the last one
        encountered in topic order.
        """
        report = Report()
        last_error: Optional[EvidenceError] = None

        async with self._client(credentials) as client:
            builders = [cls(client, self.config) for cls in ALL_TOPICS]
            results = await asyncio.gather(*(b.execute(credentials) for b in builders))

        for result in results:
            if result.evidence is not None:
                report.add_evidence(result.evidence)
            if result.error is not None:
                logger.error(f"[report] {result.error}")
                last_error = result.error

        logger.info(
            f"[report] {len(report)} evidences for {credentials.primary_user}"
            + (" (incomplete)" if last_error else "")
        )
        return ReportResult(report=report, error=last_error)

    def _client(self, credentials: TranslateCredentials) -> TranslateClient:
        return TranslateClient(self.config, api_key=credentials.api_key, transport=self.transport)
