"""Redaction of sensitive fields in telemetry payloads."""

from collections.abc import Mapping
from typing import Any

REDACTED = "*****"

# Matched as substrings of the lowercased key
SENSITIVE_KEY_PARTS = ("password", "token", "apikey", "authorization")


def _is_sensitive(key: object) -> bool:
    lowered = str(key).lower()
    return any(part in lowered for part in SENSITIVE_KEY_PARTS)


def _clean(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            k: (REDACTED if _is_sensitive(k) else _clean(v)) for k, v in value.items()
        }
    if isinstance(value, list):
        return [_clean(v) for v in value]
    if isinstance(value, tuple):
        return tuple(_clean(v) for v in value)
    return value


def sanitize(value: Any) -> Any:
    """Return a copy of *value* with sensitive keys replaced by ``*****``.

    Every mapping key whose lowercase form contains "password", "token",
    "apikey" or "authorization" has its value redacted, at any depth.
    Mappings nested in lists and tuples are cleaned as well. Non-mapping
    leaves are passed through as-is and the input is never mutated.

    Args:
        value: JSON-compatible value (dicts, lists, primitives).

    Returns:
        The sanitized copy, or *value* itself when it is not a container.
    """
    return _clean(value)


def sanitize_params(params: Any) -> Any:
    """Redact SQL parameters that look like passwords.

    Args:
        params: Sequence of query parameters.

    Returns:
        New list where every string containing "password" (any case) is
        replaced by ``*****``. Non-sequence input is returned unchanged.
    """
    if not isinstance(params, (list, tuple)):
        return params
    return [
        REDACTED if isinstance(p, str) and "password" in p.lower() else p
        for p in params
    ]
