"""
launch_supervisor.py

Notes / How to run
- Entry: python run_server.py [uvicorn args...]   (or the webui-launch script)
- Sequence:
    Init -> ValidatingConnection -> {Failed | ConfiguringRuntime}
         -> ProvisioningSecret -> SelectingArguments -> Exec
- Failed returns exit status 1 before any application code runs.
- Exec replaces this process with uvicorn. There is no wrapper left behind;
  restarts are the hosting platform's job.

Security
- Secret values are never logged. DATABASE_URL is logged with the password
  redacted, and only at DEBUG.
"""

from __future__ import annotations

import logging
import os
import sys
from enum import Enum
from types import MappingProxyType
from typing import Mapping, NoReturn, Optional, Sequence

from webui_launcher.connection_validator import validate_connection_string
from webui_launcher.errors import ConnectionValidationError
from webui_launcher.runtime_settings import (
    DEFAULT_HOST,
    DEFAULT_PORT,
    EVENT_LOOP,
    RuntimeConfig,
    build_runtime_config,
    provision_secret,
)
from webui_launcher.shared_functions.helpers.helpers_generic import is_positive_int
from webui_launcher.shared_functions.helpers.helpers_logging_config import (
    flush_logging,
    setup_logging,
)
from webui_launcher.shared_functions.helpers.helpers_sanitation import redact_dsn, scrub_env

logger = logging.getLogger(__name__)


class Stage(str, Enum):
    INIT = "init"
    VALIDATING_CONNECTION = "validating_connection"
    FAILED = "failed"
    CONFIGURING_RUNTIME = "configuring_runtime"
    PROVISIONING_SECRET = "provisioning_secret"
    SELECTING_ARGUMENTS = "selecting_arguments"
    EXEC = "exec"


def default_arguments(config: RuntimeConfig) -> list[str]:
    return [
        "--workers",
        config.workers,
        "--loop",
        EVENT_LOOP,
        "--timeout-keep-alive",
        config.keep_alive_timeout,
    ]


def select_arguments(config: RuntimeConfig, cli_args: Sequence[str]) -> list[str]:
    # User-supplied args replace the defaults wholesale
    if cli_args:
        return list(cli_args)
    return default_arguments(config)


def build_command(config: RuntimeConfig, args: Sequence[str], python: Optional[str] = None) -> list[str]:
    return [
        python or sys.executable,
        "-m",
        "uvicorn",
        config.app_module,
        "--host",
        config.host,
        "--port",
        config.port,
        "--forwarded-allow-ips",
        "*",
        *args,
        "--log-level",
        "info",
        "--access-log",
    ]


class LaunchSupervisor:
    def __init__(
        self,
        env: Mapping[str, str],
        cli_args: Sequence[str] = (),
        *,
        app_dir: Optional[str] = None,
    ) -> None:
        self.env: Mapping[str, str] = MappingProxyType(dict(env))
        self.cli_args = tuple(cli_args)
        self.app_dir = app_dir
        self.stage = Stage.INIT

    def validate_connection(self) -> bool:
        self.stage = Stage.VALIDATING_CONNECTION
        logger.info("Validating PostgreSQL connection string...")

        url = self.env.get("DATABASE_URL")
        if url:
            logger.debug("DATABASE_URL=%s", redact_dsn(url))

        try:
            validate_connection_string(url)
        except ConnectionValidationError as exc:
            self.stage = Stage.FAILED
            logger.error("[%s] %s", exc.kind, exc.message)
            for hint in exc.hints:
                logger.error("        %s", hint)
            logger.error("Database validation failed - exiting")
            return False

        logger.info("Database connection validated")
        return True

    def prepare(self) -> RuntimeConfig:
        self.stage = Stage.CONFIGURING_RUNTIME
        config = build_runtime_config(self.env, app_dir=self.app_dir)

        logger.info("VECTOR_DB: %s", config.vector_db)
        for name, value in (
            ("DATABASE_POOL_SIZE", config.pool_size),
            ("DATABASE_POOL_MAX_OVERFLOW", config.pool_max_overflow),
        ):
            if not is_positive_int(value):
                logger.warning("%s=%r is not a positive integer; passing it through unchanged", name, value)

        for label in config.integrations:
            logger.info("%s API: Configured", label)

        self.stage = Stage.PROVISIONING_SECRET
        provisioned = provision_secret(config, self.env)
        if provisioned.secret_generated:
            logger.info("WEBUI_SECRET_KEY generated")
        else:
            logger.info("WEBUI_SECRET_KEY already configured")

        return provisioned

    def select_arguments(self, config: RuntimeConfig) -> list[str]:
        self.stage = Stage.SELECTING_ARGUMENTS
        return select_arguments(config, self.cli_args)

    def launch(self, config: RuntimeConfig, args: Sequence[str]) -> NoReturn:
        cmd = build_command(config, args)

        self.stage = Stage.EXEC
        logger.info("Starting uvicorn with %s workers", config.workers)
        logger.info("Listening on %s:%s", config.host, config.port)
        logger.debug("exec: %s", " ".join(cmd))
        overrides = {k: v for k, v in config.env.items() if self.env.get(k) != v}
        logger.debug("env overrides: %s", scrub_env(overrides))
        flush_logging()

        if config.app_dir:
            os.chdir(config.app_dir)
        os.execvpe(cmd[0], cmd, dict(config.env))

    def run(self) -> int:
        logger.info("Starting Open WebUI launcher")
        logger.info("HOST: %s:%s", DEFAULT_HOST, self.env.get("PORT") or DEFAULT_PORT)

        if not self.validate_connection():
            return 1

        config = self.prepare()
        args = self.select_arguments(config)
        self.launch(config, args)


def main(argv: Optional[Sequence[str]] = None, *, app_dir: Optional[str] = None) -> int:
    setup_logging(os.environ)
    cli_args = sys.argv[1:] if argv is None else argv
    return LaunchSupervisor(os.environ, cli_args, app_dir=app_dir).run()
