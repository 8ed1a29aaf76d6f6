"""
Runtime configuration for the launched web server, derived from an explicit
environment mapping. Nothing here reads or writes os.environ.

Key env vars
- PORT (default: 8080)
- UVICORN_WORKERS (default: 2)
- DATABASE_POOL_SIZE / DATABASE_POOL_MAX_OVERFLOW (default: 5 / 5)
- VECTOR_DB (default: pgvector)
- APP_MODULE (default: open_webui.main:app)
- WEBUI_SECRET_KEY / WEBUI_JWT_SECRET_KEY (secret provisioning gate)
"""

from __future__ import annotations

import base64
import os
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from webui_launcher.shared_functions.helpers.helpers_generic import env_present, env_str

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = "8080"
DEFAULT_WORKERS = "2"
DEFAULT_POOL_SIZE = "5"
DEFAULT_POOL_MAX_OVERFLOW = "5"
DEFAULT_VECTOR_DB = "pgvector"
DEFAULT_APP_MODULE = "open_webui.main:app"

KEEP_ALIVE_TIMEOUT = "65"
EVENT_LOOP = "uvloop"

SECRET_KEY_VAR = "WEBUI_SECRET_KEY"
JWT_SECRET_KEY_VAR = "WEBUI_JWT_SECRET_KEY"
SECRET_KEY_BYTES = 12

OPTIONAL_INTEGRATIONS: Tuple[Tuple[str, str], ...] = (
    ("OPENAI_API_KEY", "OpenAI"),
    ("ANTHROPIC_API_KEY", "Anthropic"),
    ("GOOGLE_API_KEY", "Google"),
)


@dataclass(frozen=True)
class RuntimeConfig:
    host: str
    port: str
    workers: str
    keep_alive_timeout: str
    pool_size: str
    pool_max_overflow: str
    vector_db: str
    app_module: str
    app_dir: Optional[str]
    integrations: Tuple[str, ...]
    # WEBUI_SECRET_KEY as the child will see it; None when only the JWT fallback is set
    secret_key: Optional[str]
    secret_generated: bool
    env: Mapping[str, str]


def generate_secret_key(nbytes: int = SECRET_KEY_BYTES) -> str:
    return base64.b64encode(os.urandom(nbytes)).decode("ascii")


def secret_configured(env: Mapping[str, str]) -> bool:
    return env_present(env, SECRET_KEY_VAR) or env_present(env, JWT_SECRET_KEY_VAR)


def detect_integrations(env: Mapping[str, str]) -> Tuple[str, ...]:
    return tuple(label for name, label in OPTIONAL_INTEGRATIONS if env_present(env, name))


def _prepend_path(entry: str, existing: str) -> str:
    return f"{entry}{os.pathsep}{existing}" if existing else entry


def build_runtime_config(env: Mapping[str, str], *, app_dir: Optional[str] = None) -> RuntimeConfig:
    """
    Resolve host/port/pool/worker settings with their defaults and compose the
    child environment. The secret is left as configured; see provision_secret().
    """
    host = DEFAULT_HOST
    port = env_str(env, "PORT", DEFAULT_PORT)
    workers = env_str(env, "UVICORN_WORKERS", DEFAULT_WORKERS)
    pool_size = env_str(env, "DATABASE_POOL_SIZE", DEFAULT_POOL_SIZE)
    pool_max_overflow = env_str(env, "DATABASE_POOL_MAX_OVERFLOW", DEFAULT_POOL_MAX_OVERFLOW)
    vector_db = env_str(env, "VECTOR_DB", DEFAULT_VECTOR_DB)
    app_module = env_str(env, "APP_MODULE", DEFAULT_APP_MODULE)

    child = dict(env)
    child.update(
        {
            "HOST": host,
            "PORT": port,
            "PYTHONUNBUFFERED": "1",
            "DATABASE_POOL_SIZE": pool_size,
            "DATABASE_POOL_MAX_OVERFLOW": pool_max_overflow,
            "SQLALCHEMY_ECHO": "false",
            "VECTOR_DB": vector_db,
        }
    )
    if app_dir:
        child["PYTHONPATH"] = _prepend_path(app_dir, env_str(env, "PYTHONPATH"))

    secret_key = env.get(SECRET_KEY_VAR) if env_present(env, SECRET_KEY_VAR) else None

    return RuntimeConfig(
        host=host,
        port=port,
        workers=workers,
        keep_alive_timeout=KEEP_ALIVE_TIMEOUT,
        pool_size=pool_size,
        pool_max_overflow=pool_max_overflow,
        vector_db=vector_db,
        app_module=app_module,
        app_dir=app_dir,
        integrations=detect_integrations(env),
        secret_key=secret_key,
        secret_generated=False,
        env=MappingProxyType(child),
    )


def provision_secret(
    config: RuntimeConfig,
    env: Mapping[str, str],
    *,
    factory: Callable[[], str] = generate_secret_key,
) -> RuntimeConfig:
    """
    Return config unchanged when either secret variable is set; otherwise a copy
    whose child env carries a freshly generated WEBUI_SECRET_KEY.
    """
    if secret_configured(env):
        return config

    secret = factory()
    child = dict(config.env)
    child[SECRET_KEY_VAR] = secret
    return replace(config, secret_key=secret, secret_generated=True, env=MappingProxyType(child))
