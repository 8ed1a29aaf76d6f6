"""Shared pytest fixtures for the webui_launcher test suite."""

from __future__ import annotations

import pytest

GOOD_URL = "postgresql://u:p@myhost/mydb?sslmode=require&channel_binding=require"


@pytest.fixture
def good_url() -> str:
    return GOOD_URL


@pytest.fixture
def base_env() -> dict[str, str]:
    """Minimal environment that passes validation and sets no secrets."""
    return {"DATABASE_URL": GOOD_URL, "PATH": "/usr/bin"}
