"""Helpers for showing configuration and payloads without leaking secrets.

raspinfo holds an upstream API key. The debug status endpoint and DEBUG
logs pass values through :func:`redact_for_log` first.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping, Sequence
from typing import Any

MASK = "***MASKED***"

_SENSITIVE_VALUE_KEYS: frozenset[str] = frozenset(
    {
        "hsl_api_key",
        "api_key",
        "apikey",
        "digitransit-subscription-key",
        "password",
        "token",
        "authorization",
        "cookie",
    }
)


def redact_for_log(value: Any, *, max_string: int = 512, _depth: int = 0) -> Any:
    """Return a redacted, JSON-friendly copy of *value*.

    Dataclass instances are converted to dicts first. Sensitive keys that
    hold an empty value stay empty so a missing key remains visible.
    """
    if _depth > 20:
        return "<max-depth>"

    if value is None:
        return None

    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        value = dataclasses.asdict(value)

    if isinstance(value, str):
        if len(value) > max_string:
            return f"{value[:max_string]}…<truncated>"
        return value

    if isinstance(value, (int, float, bool)):
        return value

    if isinstance(value, bytes):
        return f"<bytes:{len(value)}b>"

    if isinstance(value, Mapping):
        redacted: dict[str, Any] = {}
        for k, v in value.items():
            key = str(k)
            if key.lower() in _SENSITIVE_VALUE_KEYS:
                redacted[key] = MASK if v else v
            else:
                redacted[key] = redact_for_log(v, max_string=max_string, _depth=_depth + 1)
        return redacted

    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return [redact_for_log(v, max_string=max_string, _depth=_depth + 1) for v in value]

    return repr(value)
