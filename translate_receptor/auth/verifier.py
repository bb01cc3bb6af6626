"""
Credential verification: one cheap authenticated check against the
translation service. The outcome is strictly valid or invalid.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from ..config import ReceptorConfig
from ..credentials import TranslateCredentials
from ..service.client import ServiceAPIError, TranslateClient

logger = logging.getLogger("translate_receptor.auth")


class AuthError(Exception):
    """Raised (or returned) when credentials are rejected or the service is unreachable."""
    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message)


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    error: Optional[AuthError] = None

    def __bool__(self) -> bool:
        return self.valid


class Verifier:
    """
    Checks credentials by listing the service's languages.
    Does not retry; a failed check is reported to the host as-is.
    """

    def __init__(
        self,
        config: ReceptorConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.transport = transport

    async def verify(self, credentials: TranslateCredentials) -> VerificationResult:
        logger.info(f"verify: checking credentials for {credentials.primary_user}")

        try:
            async with TranslateClient(
                self.config, api_key=credentials.api_key, transport=self.transport
            ) as client:
                await client.list_languages()
        except ServiceAPIError as e:
            if e.is_auth_failure:
                reason = f"Credentials rejected by {self.config.service_name}: {e.message}"
            else:
                reason = f"{self.config.service_name} check failed: {e}"
            logger.warning(f"verify: {reason}")
            return VerificationResult(valid=False, error=AuthError(reason, cause=e))

        logger.info(f"verify: credentials for {credentials.primary_user} accepted")
        return VerificationResult(valid=True)
