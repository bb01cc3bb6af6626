"""
Discovery Engine
Enumerates the languages of the translation service as ServiceEntities,
without fetching any evidence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional

from ..config import ReceptorConfig
from ..credentials import TranslateCredentials
from ..models import ServiceEntities, ServiceEntity
from ..service.client import ServiceAPIError, TranslateClient

logger = logging.getLogger("translate_receptor.collectors.discovery")

ENTITY_TYPE_LANGUAGE = "Language"


@dataclass(frozen=True)
class CategoryFailure:
    category: str
    cause: Exception

    def __str__(self) -> str:
        return f"{self.category}: {self.cause}"


class DiscoveryError(Exception):
    """One or more discovery categories could not be enumerated."""
    def __init__(self, failures: list[CategoryFailure]):
        self.failures = list(failures)
        details = "; ".join(str(f) for f in self.failures)
        super().__init__(f"Discovery incomplete ({len(self.failures)} failed): {details}")


class LanguageNotOffered(Exception):
    """A configured language is missing from the service's listing."""
    pass


@dataclass
class DiscoveryResult:
    entities: list[ServiceEntity] = field(default_factory=list)
    failures: list[CategoryFailure] = field(default_factory=list)

    @property
    def error(self) -> Optional[DiscoveryError]:
        if not self.failures:
            return None
        return DiscoveryError(self.failures)


class DiscoveryEngine:
    """
    Maps every configured language to a ServiceEntity.

    In live mode one listing call decides which languages exist; a language
    the service does not offer is logged and skipped while the rest continue.
    In static mode the configured languages are enumerated without any call.
    """

    def __init__(self, client: Optional[TranslateClient], config: ReceptorConfig):
        self.client = client
        self.config = config

    async def discover(self, credentials: TranslateCredentials) -> DiscoveryResult:
        result = DiscoveryResult()
        services = ServiceEntities()

        if not self.config.live_discovery or self.client is None:
            for lang in self.config.languages:
                services.add_service(
                    self.config.service_name, ENTITY_TYPE_LANGUAGE, lang.name, lang.code
                )
            result.entities = list(services)
            return result

        offered: dict[str, str] = {}
        listing_error: Optional[ServiceAPIError] = None
        try:
            offered = (await self.client.list_languages()).languages
        except ServiceAPIError as e:
            listing_error = e
            logger.error(f"[discovery] Language listing failed: {e}")

        for lang in self.config.languages:
            if listing_error is not None:
                self._record(result, lang.code, listing_error)
                continue
            if lang.code not in offered:
                self._record(
                    result,
                    lang.code,
                    LanguageNotOffered(
                        f"'{lang.code}' is not offered by {self.config.service_name}"
                    ),
                )
                continue
            services.add_service(
                self.config.service_name, ENTITY_TYPE_LANGUAGE, lang.name, lang.code
            )

        result.entities = list(services)
        logger.info(
            f"[discovery] {len(result.entities)} entities discovered, "
            f"{len(result.failures)} categories failed"
        )
        return result

    @staticmethod
    def _record(result: DiscoveryResult, category: str, cause: Exception):
        result.failures.append(CategoryFailure(category, cause))
        logger.warning(f"[discovery] Skipping {category}: {cause}")
