"""Custom exceptions for the SST screener.

All modules should raise these exceptions instead of generic ones.
The FastAPI exception handler in main.py catches SstBaseException
and returns structured JSON error responses.
"""

from __future__ import annotations


class SstBaseException(Exception):
    """Base exception for all SST screener errors.

    Args:
        message: Human-readable error description.
        context: Optional dict of structured data for logging/debugging.
    """

    def __init__(self, message: str, context: dict | None = None) -> None:
        super().__init__(message)
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            # Filter out anything that looks like a secret
            safe_context = {
                k: "[REDACTED]" if _is_secret_key(k) else v for k, v in self.context.items()
            }
            return f"{super().__str__()} | context={safe_context}"
        return super().__str__()


class InvalidParameterError(SstBaseException):
    """Strategy parameters are invalid (non-positive capital, sizing, levels, etc.)."""


class DataNotFoundError(SstBaseException):
    """No stored price history exists for the requested symbol or range."""


def _is_secret_key(key: str) -> bool:
    """Check if a dict key name suggests it contains secret data."""
    secret_words = {"key", "secret", "password", "token", "private", "credential"}
    key_lower = key.lower()
    return any(word in key_lower for word in secret_words)
