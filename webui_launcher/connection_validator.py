"""
Notes / How to run
------------------
- Imported by launch_supervisor (startup gate) and database (live check).
- Not meant to be executed directly.

Purpose
-------
Checks the DATABASE_URL *string* only. No connection is opened here.

Hard failures (ConnectionValidationError subclasses):
  - absent / empty            -> MissingInputError (no parse attempted)
  - unparseable               -> MalformedInputError
  - scheme != postgresql      -> SchemeMismatchError
  - no hostname               -> MissingHostError

sslmode / channel_binding are advisory: when missing they are logged at
WARNING and validation still succeeds.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional
from urllib.parse import parse_qs, unquote, urlsplit

from webui_launcher.errors import (
    MalformedInputError,
    MissingHostError,
    MissingInputError,
    SchemeMismatchError,
)

logger = logging.getLogger(__name__)

EXPECTED_SCHEME = "postgresql"
SSL_REQUIRED_MODES = ("require", "verify-ca", "verify-full")


@dataclass(frozen=True)
class ConnectionDescriptor:
    scheme: str
    hostname: str
    port: Optional[int]
    username: Optional[str]
    database: str
    sslmode: Optional[str]
    channel_binding: Optional[str]

    @property
    def ssl_required(self) -> bool:
        return self.sslmode in SSL_REQUIRED_MODES

    @property
    def channel_binding_required(self) -> bool:
        return self.channel_binding == "require"


def _last(query: Dict[str, List[str]], key: str) -> Optional[str]:
    # libpq semantics: a repeated keyword overrides the earlier one
    values = query.get(key) or []
    return values[-1] if values else None


def parse_connection_string(url: Optional[str]) -> ConnectionDescriptor:
    """
    Parse and check a connection string without logging anything.

    Any exception from the URL parser (unbalanced IPv6 bracket, bad port, ...)
    is normalized to MalformedInputError. Scheme and host are checked before
    the port is read, so a wrong scheme or missing host wins over a bad port.
    """
    if url is None or url.strip() == "":
        raise MissingInputError()

    try:
        parsed = urlsplit(url)
        scheme = parsed.scheme
        hostname = parsed.hostname
        username = unquote(parsed.username) if parsed.username else None
        query = parse_qs(parsed.query, keep_blank_values=True)
        database = unquote(parsed.path.lstrip("/"))
    except Exception as exc:
        raise MalformedInputError(str(exc) or exc.__class__.__name__) from exc

    if scheme != EXPECTED_SCHEME:
        raise SchemeMismatchError(scheme, EXPECTED_SCHEME)

    if not hostname:
        raise MissingHostError()

    try:
        port = parsed.port
    except ValueError as exc:
        raise MalformedInputError(str(exc)) from exc

    return ConnectionDescriptor(
        scheme=scheme,
        hostname=hostname,
        port=port,
        username=username,
        database=database,
        sslmode=_last(query, "sslmode"),
        channel_binding=_last(query, "channel_binding"),
    )


def report_connection(descriptor: ConnectionDescriptor) -> None:
    logger.info("DB Host: %s", descriptor.hostname)
    logger.info("DB Name: %s", descriptor.database)

    if descriptor.ssl_required:
        logger.info("SSL Mode: Required (%s)", descriptor.sslmode)
    else:
        logger.warning("SSL Mode: Not configured")

    if descriptor.channel_binding_required:
        logger.info("Channel Binding: Required")
    else:
        logger.warning("Channel Binding: Not configured")


def validate_connection_string(url: Optional[str]) -> ConnectionDescriptor:
    descriptor = parse_connection_string(url)
    report_connection(descriptor)
    logger.info("PostgreSQL connection string validated")
    return descriptor
