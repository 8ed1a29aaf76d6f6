from __future__ import annotations

from typing import Any, Mapping

TRUTHY = {"1", "true", "t", "yes", "y", "on"}


def env_str(env: Mapping[str, str], name: str, default: str = "") -> str:
    """
    Shell-style ${NAME:-default}: unset or empty falls back to default,
    anything else is returned as-is.
    """
    v = env.get(name)
    if v is None or v == "":
        return default
    return v


def env_bool(env: Mapping[str, str], name: str, default: bool = False) -> bool:
    raw = env.get(name)
    if raw is None:
        return default
    return str(raw).strip().lower() in TRUTHY


def env_present(env: Mapping[str, str], name: str) -> bool:
    # Shell-style [ -n "$NAME" ]: whitespace counts as set
    v = env.get(name)
    return v is not None and v != ""


def is_positive_int(raw: Any) -> bool:
    try:
        return int(str(raw).strip()) > 0
    except (TypeError, ValueError):
        return False
