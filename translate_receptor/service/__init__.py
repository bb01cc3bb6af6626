"""Outbound transport to the translation service."""

from .client import LanguageListing, ServiceAPIError, TranslateClient, Translation

__all__ = [
    "LanguageListing",
    "ServiceAPIError",
    "TranslateClient",
    "Translation",
]
