"""
Base evidence builder — Abstract interface for all evidence topics.
Defines the contract for building one Evidence table per topic, with
query fan-out whose output order never depends on completion order.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Awaitable, Optional

from ..config import ReceptorConfig
from ..credentials import TranslateCredentials
from ..models import Evidence, RowSchema
from ..service.client import ServiceAPIError, TranslateClient

logger = logging.getLogger("translate_receptor.collectors")


@dataclass(frozen=True)
class QueryFailure:
    """One evidence query that failed, with enough context to retry it."""
    query: str
    reference: str
    cause: Exception

    def __str__(self) -> str:
        return f"{self.query} ({self.reference}): {self.cause}"


class EvidenceError(Exception):
    """One or more evidence queries for a topic failed."""
    def __init__(self, topic: str, failures: list[QueryFailure]):
        self.topic = topic
        self.failures = list(failures)
        details = "; ".join(str(f) for f in self.failures) or "no details"
        super().__init__(f"Evidence topic '{topic}' incomplete: {details}")


class EvidenceResult:
    """Standardized result from an evidence builder."""

    def __init__(self, topic: str):
        self.topic = topic
        self.evidence: Optional[Evidence] = None
        self.failures: list[QueryFailure] = []
        self.metadata: dict[str, Any] = {
            "topic": topic,
            "started_at": None,
            "completed_at": None,
            "duration_seconds": 0,
            "queries_issued": 0,
        }

    def add_failure(self, query: str, reference: str, cause: Exception):
        self.failures.append(QueryFailure(query, reference, cause))
        logger.error(f"[{self.topic}] Query {query} failed: {cause}")

    @property
    def error(self) -> Optional[EvidenceError]:
        if not self.failures:
            return None
        return EvidenceError(self.topic, self.failures)


class BaseEvidenceBuilder(ABC):
    """
    Abstract base class for all evidence topics.

    Subclasses declare `topic`, `schema` and implement build().
    The base class provides:
      - Evidence construction from configuration
      - Timing and metadata
      - Error capture that keeps already-built rows
      - Ordered concurrent query fan-out
    """

    topic: str = "base"
    schema: RowSchema

    def __init__(self, client: TranslateClient, config: ReceptorConfig):
        self.client = client
        self.config = config

    @property
    def caption(self) -> str:
        return f"{self.config.service_name} {self.topic}"

    @property
    def description(self) -> str:
        return ""

    def new_evidence(self) -> Evidence:
        return Evidence(
            service_name=self.config.service_name,
            entity_type=self.topic,
            caption=self.caption,
            description=self.description,
            schema=self.schema,
        )

    async def execute(self, credentials: TranslateCredentials) -> EvidenceResult:
        """
        Build the topic's evidence with timing and error handling.
        Evidence is always returned, possibly with fewer rows than queries.
        """
        result = EvidenceResult(self.topic)
        result.metadata["started_at"] = time.time()
        result.evidence = self.new_evidence()
        logger.info(f"[{self.topic}] Building evidence...")

        try:
            await self.build(result.evidence, credentials, result)
        except ServiceAPIError as e:
            result.add_failure(self.topic, e.url, e)

        result.metadata["completed_at"] = time.time()
        result.metadata["duration_seconds"] = round(
            result.metadata["completed_at"] - result.metadata["started_at"], 2
        )
        logger.info(
            f"[{self.topic}] Completed in {result.metadata['duration_seconds']}s: "
            f"{len(result.evidence.rows)} rows, {len(result.evidence.sources)} sources, "
            f"{len(result.failures)} failures"
        )
        return result

    @abstractmethod
    async def build(
        self,
        evidence: Evidence,
        credentials: TranslateCredentials,
        result: EvidenceResult,
    ):
        """
        Issue the topic's queries and append citations and rows to `evidence`.
        Record failed queries via result.add_failure() or gather_queries().
        """
        raise NotImplementedError

    async def gather_queries(
        self,
        queries: list[tuple[str, Awaitable[Any]]],
        result: EvidenceResult,
    ) -> list[Optional[Any]]:
        """
        Run labelled queries concurrently.

        Returns one slot per query, in the order given: the query's value, or
        None when it failed (the failure is recorded on `result`). Errors other
        than ServiceAPIError are programming errors and propagate.
        """
        result.metadata["queries_issued"] += len(queries)
        outcomes = await asyncio.gather(
            *(awaitable for _, awaitable in queries),
            return_exceptions=True,
        )
        values: list[Optional[Any]] = []
        for (label, _), outcome in zip(queries, outcomes):
            if isinstance(outcome, ServiceAPIError):
                result.add_failure(label, outcome.url, outcome)
                values.append(None)
            elif isinstance(outcome, BaseException):
                raise outcome
            else:
                values.append(outcome)
        return values
