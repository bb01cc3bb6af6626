from .base import BaseEvidenceBuilder, EvidenceError, EvidenceResult, QueryFailure
from .discovery import (
    CategoryFailure,
    DiscoveryEngine,
    DiscoveryError,
    DiscoveryResult,
    LanguageNotOffered,
)
from .translations import TranslationEvidence
from .language_support import LanguageSupportEvidence

# Report order: evidence is appended in this order
ALL_TOPICS = [
    TranslationEvidence,
    LanguageSupportEvidence,
]

__all__ = [
    "BaseEvidenceBuilder",
    "EvidenceError",
    "EvidenceResult",
    "QueryFailure",
    "CategoryFailure",
    "DiscoveryEngine",
    "DiscoveryError",
    "DiscoveryResult",
    "LanguageNotOffered",
    "TranslationEvidence",
    "LanguageSupportEvidence",
    "ALL_TOPICS",
]
