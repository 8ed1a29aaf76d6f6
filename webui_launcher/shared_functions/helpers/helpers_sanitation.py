from __future__ import annotations

from typing import Dict, Mapping
from urllib.parse import urlsplit, urlunsplit

"""
Sanitation helper functions
"""

SECRET_MARKERS = (
    "password",
    "secret",
    "api_key",
    "token",
    "private_key",
)

DSN_KEYS = {"database_url"}


def is_secret_name(name: str) -> bool:
    n = name.strip().lower()
    return any(marker in n for marker in SECRET_MARKERS)


def redact_dsn(url: str) -> str:
    # Keep user/host/db readable, never the password
    try:
        parts = urlsplit(url)
        if parts.password is None:
            return url
        host = parts.hostname or ""
        if ":" in host:
            host = f"[{host}]"
        if parts.port is not None:
            host = f"{host}:{parts.port}"
        user = parts.username or ""
        netloc = f"{user}:***@{host}"
        return urlunsplit((parts.scheme, netloc, parts.path, parts.query, parts.fragment))
    except ValueError:
        return "Redacted"


def scrub_env(env: Mapping[str, str]) -> Dict[str, str]:
    clean: Dict[str, str] = {}
    for k, v in env.items():
        if is_secret_name(k):
            clean[k] = "Redacted"
        elif k.strip().lower() in DSN_KEYS:
            clean[k] = redact_dsn(v)
        else:
            clean[k] = v
    return clean
