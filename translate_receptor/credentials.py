"""
Credential descriptor — the typed credential the receptor accepts and the
schema the host uses to render the activation form.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping


class CredentialError(ValueError):
    """Raised when credential values or the credential schema are malformed."""
    pass


@dataclass(frozen=True)
class CredentialField:
    """UI metadata for one credential field. Presentation only."""
    name: str
    display: str
    placeholder: str = ""
    required: bool = True
    secret: bool = False

    def __post_init__(self):
        if not self.display:
            raise CredentialError(f"Credential field '{self.name}' has no display label")

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "display": self.display,
            "placeholder": self.placeholder,
            "required": self.required,
            "secret": self.secret,
        }


@dataclass(frozen=True)
class CredentialSchema:
    """Explicit description of the credential form, built once."""
    fields: tuple[CredentialField, ...]

    def __post_init__(self):
        names = [f.name for f in self.fields]
        if len(names) != len(set(names)):
            raise CredentialError(f"Duplicate credential fields: {names}")

    def field(self, name: str) -> CredentialField:
        for f in self.fields:
            if f.name == name:
                return f
        raise KeyError(name)

    def to_dict(self) -> dict:
        return {"fields": [f.to_dict() for f in self.fields]}


CREDENTIAL_SCHEMA = CredentialSchema(fields=(
    CredentialField("primary_user", display="Primary User", placeholder="First Name"),
    CredentialField(
        "api_key",
        display="API Key",
        placeholder="Translation API key",
        required=False,
        secret=True,
    ),
))


@dataclass(frozen=True)
class TranslateCredentials:
    """Credentials for the Translate receptor."""
    primary_user: str
    api_key: str = ""

    def __repr__(self) -> str:
        masked = "***" if self.api_key else ""
        return f"TranslateCredentials(primary_user={self.primary_user!r}, api_key={masked!r})"

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "TranslateCredentials":
        """Build credentials from host-supplied values, checking required fields."""
        missing = [
            f.name for f in CREDENTIAL_SCHEMA.fields
            if f.required and not values.get(f.name)
        ]
        if missing:
            raise CredentialError(f"Missing required credential fields: {missing}")
        return cls(
            primary_user=str(values["primary_user"]),
            api_key=str(values.get("api_key") or ""),
        )
