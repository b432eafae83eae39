"""Error types and error sanitization utilities."""

from __future__ import annotations

import re
from typing import Any

from kubernetes.client.exceptions import ApiException


class PhareError(Exception):
    """Base class for errors raised by the operator itself."""


class BuildError(PhareError):
    """A desired object could not be built from the Phare spec.

    Not retryable with the same inputs.
    """


class UnsupportedKindError(BuildError):
    """``spec.microservice.kind`` names a workload kind the operator cannot run."""


class OwnershipConflictError(PhareError):
    """An object with the managed name exists but is controlled by someone else."""


class KindNotRegisteredError(PhareError):
    """The cluster does not serve the requested API kind (CRD not installed)."""


# Patterns that might expose sensitive information
SENSITIVE_PATTERNS = [
    r"token[:\s=]+([A-Za-z0-9\-_\.=/+]+)",
    r"password[:\s=]+([^\s,;\)]+)",
    r"authorization[:\s]+(bearer\s+)?([A-Za-z0-9\-_\.=/+]+)",
]

# Fields to redact completely
SENSITIVE_FIELDS = {
    "password",
    "secret",
    "token",
    "credentials",
}


def is_not_found(error: BaseException) -> bool:
    """Return True if *error* is an API 404."""
    return isinstance(error, ApiException) and error.status == 404


def is_conflict(error: BaseException) -> bool:
    """Return True if *error* is an API 409 (stale resourceVersion or already exists)."""
    return isinstance(error, ApiException) and error.status == 409


def sanitize_error_message(message: str) -> str:
    """Sanitize error message to remove sensitive information.

    Args:
        message: Original error message

    Returns:
        Sanitized error message with sensitive data redacted
    """
    sanitized = message
    for pattern in SENSITIVE_PATTERNS:
        sanitized = re.sub(pattern, "[REDACTED]", sanitized, flags=re.IGNORECASE)
    return sanitized


def sanitize_exception(error: BaseException) -> str:
    """Return a one-line, sanitized description of *error* for status and events."""
    if isinstance(error, ApiException):
        text = f"{error.status} {error.reason}".strip()
    else:
        text = str(error) or type(error).__name__
    return sanitize_error_message(" ".join(text.split()))


def sanitize_dict(data: dict[str, Any], sensitive_keys: set[str] | None = None) -> dict[str, Any]:
    """Sanitize dictionary by redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        sensitive_keys: Additional keys to redact (merged with SENSITIVE_FIELDS)

    Returns:
        Sanitized dictionary with sensitive values redacted
    """
    all_sensitive = SENSITIVE_FIELDS | (sensitive_keys or set())
    sanitized: dict[str, Any] = {}

    for key, value in data.items():
        key_lower = key.lower()
        if any(sensitive in key_lower for sensitive in all_sensitive):
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, sensitive_keys)
        elif isinstance(value, str):
            sanitized[key] = sanitize_error_message(value)
        else:
            sanitized[key] = value

    return sanitized
