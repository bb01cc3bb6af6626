"""
Configuration module for the Translate evidence receptor.
Defines the receptor identity, service endpoint, evidenced languages and
transport settings. Every value that used to be a compile-time constant is
a field here so several receptor instances can run side by side.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional, Union


# ─── Receptor Identity ──────────────────────────────────────────────────────

DEFAULT_RECEPTOR_NAME = "trr-custom"
DEFAULT_SERVICE_NAME = "Translate"


# ─── Service API Settings ───────────────────────────────────────────────────

DEFAULT_BASE_URL = "https://translation.googleapis.com/language/translate/v2"
DEFAULT_PHRASE = "Hello"

# Language used for display names returned by the listing call
LISTING_DISPLAY_LANGUAGE = "en"

# Transport
MAX_CONCURRENT_REQUESTS = 4       # Parallel requests per receptor call
REQUEST_TIMEOUT_SECONDS = 30.0
CONNECT_TIMEOUT_SECONDS = 10.0


# ─── Evidenced Languages ────────────────────────────────────────────────────

@dataclass(frozen=True)
class LanguageSpec:
    """One language the receptor discovers and evidences."""
    code: str        # ISO-639 code sent to the service (e.g. "it")
    name: str        # Display name used in rows (e.g. "Italian")


DEFAULT_LANGUAGES = (
    LanguageSpec("en", "English"),
    LanguageSpec("it", "Italian"),
    LanguageSpec("de", "German"),
)


# ─── Master Configuration ───────────────────────────────────────────────────

@dataclass
class ReceptorConfig:
    """Top-level configuration for one receptor instance."""
    receptor_name: str = DEFAULT_RECEPTOR_NAME
    service_name: str = DEFAULT_SERVICE_NAME
    base_url: str = DEFAULT_BASE_URL
    phrase: str = DEFAULT_PHRASE
    source_language: Optional[str] = None   # None lets the service auto-detect
    languages: list[LanguageSpec] = field(
        default_factory=lambda: list(DEFAULT_LANGUAGES)
    )
    max_concurrent_requests: int = MAX_CONCURRENT_REQUESTS
    request_timeout: float = REQUEST_TIMEOUT_SECONDS
    live_discovery: bool = True              # False = fixed enumeration, no calls
    verbose: bool = False

    def __post_init__(self):
        codes = [lang.code for lang in self.languages]
        if len(codes) != len(set(codes)):
            raise ValueError(f"Duplicate language codes in configuration: {codes}")
        if self.max_concurrent_requests < 1:
            raise ValueError("max_concurrent_requests must be at least 1")

    @classmethod
    def from_dict(cls, data: dict) -> "ReceptorConfig":
        """
        Build a configuration from a plain mapping, ignoring unknown keys.
        Raises ValueError when a known key holds a value of the wrong type.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be an object, got {type(data).__name__}")
        known = {f.name for f in fields(cls)}
        values = {}
        for k, v in data.items():
            if k not in known:
                continue
            if k == "languages":
                values[k] = _parse_languages(v)
            else:
                values[k] = _check_value(k, v)
        return cls(**values)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "ReceptorConfig":
        """Load configuration from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.from_dict(data)

    def to_dict(self) -> dict:
        return {
            "receptor_name": self.receptor_name,
            "service_name": self.service_name,
            "base_url": self.base_url,
            "phrase": self.phrase,
            "source_language": self.source_language,
            "languages": [{"code": l.code, "name": l.name} for l in self.languages],
            "max_concurrent_requests": self.max_concurrent_requests,
            "request_timeout": self.request_timeout,
            "live_discovery": self.live_discovery,
            "verbose": self.verbose,
        }


# ─── Value Checks ───────────────────────────────────────────────────────────

# Expected JSON types of the scalar fields, with a label for error messages
_SCALAR_FIELDS = {
    "receptor_name": (str, "a string"),
    "service_name": (str, "a string"),
    "base_url": (str, "a string"),
    "phrase": (str, "a string"),
    "source_language": ((str, type(None)), "a string or null"),
    "max_concurrent_requests": (int, "an integer"),
    "request_timeout": ((int, float), "a number"),
    "live_discovery": (bool, "a boolean"),
    "verbose": (bool, "a boolean"),
}


def _check_value(key: str, value):
    expected, label = _SCALAR_FIELDS[key]
    # bool is an int subclass; only boolean fields accept true/false
    if isinstance(value, bool) != (expected is bool) or not isinstance(value, expected):
        raise ValueError(f"'{key}' must be {label}, got {value!r}")
    if key == "request_timeout":
        return float(value)
    return value


def _parse_languages(value) -> list[LanguageSpec]:
    if not isinstance(value, list):
        raise ValueError(f"'languages' must be a list, got {value!r}")
    languages = []
    for entry in value:
        if not isinstance(entry, dict) or not isinstance(entry.get("code"), str) \
                or not entry["code"]:
            raise ValueError(f"Each language needs a non-empty 'code', got {entry!r}")
        name = entry.get("name", entry["code"])
        if not isinstance(name, str):
            raise ValueError(f"Language name must be a string, got {name!r}")
        languages.append(LanguageSpec(code=entry["code"], name=name))
    return languages
