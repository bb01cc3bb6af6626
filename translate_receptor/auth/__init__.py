"""Credential verification against the translation service."""

from .verifier import AuthError, VerificationResult, Verifier

__all__ = ["AuthError", "VerificationResult", "Verifier"]
