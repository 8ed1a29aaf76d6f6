"""
Notes
-----
How to run:
- Entrypoints (run_server.py, verify_db.py) call setup_logging(os.environ)
  once, before anything else logs.
- Then any module uses:
    import logging
    logger = logging.getLogger(__name__)

Environment variables:
  LOG_LEVEL=INFO|DEBUG|WARNING|ERROR
  LOG_TO_STDOUT=1|0
  LOG_DIR=/var/log/webui_launcher
  LOG_FILE=webui_launcher.log

The launcher exec()s the web server right after logging its last line, so
handlers are flushed by flush_logging() and never relied on at interpreter exit.
"""

from __future__ import annotations

import logging
import logging.config
import sys
from pathlib import Path
from typing import Mapping

from webui_launcher.shared_functions.helpers.helpers_generic import env_bool, env_str

TIMESTAMPED_FORMAT = "[%(asctime)s] %(levelname)s %(message)s"
PLAIN_FORMAT = "%(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(env: Mapping[str, str], *, timestamps: bool = True) -> None:
    """
    Configure logging from env vars.

    timestamps=False gives bare message lines (used by the standalone verifier).
    """
    level = env_str(env, "LOG_LEVEL", "INFO").strip().upper()
    log_to_stdout = env_bool(env, "LOG_TO_STDOUT", True)
    log_dir = env_str(env, "LOG_DIR").strip()
    log_file = env_str(env, "LOG_FILE", "webui_launcher.log").strip()

    formatter = "timestamped" if timestamps else "plain"

    handlers: dict = {}
    root_handlers: list[str] = []

    if log_to_stdout:
        handlers["console"] = {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": formatter,
            "stream": sys.stdout,
        }
        root_handlers.append("console")

    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.WatchedFileHandler",
            "level": level,
            "formatter": "timestamped",
            "filename": str(Path(log_dir) / log_file),
        }
        root_handlers.append("file")

    if not root_handlers:
        raise RuntimeError("Logging misconfig: no handlers (set LOG_TO_STDOUT=1 and/or LOG_DIR)")

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "timestamped": {"format": TIMESTAMPED_FORMAT, "datefmt": DATE_FORMAT},
            "plain": {"format": PLAIN_FORMAT},
        },
        "handlers": handlers,
        "root": {"level": level, "handlers": root_handlers},
        "loggers": {
            # databases/asyncpg are chatty at DEBUG; keep them at WARNING
            "databases": {"level": "WARNING"},
            "asyncpg": {"level": "WARNING"},
        },
    }

    logging.config.dictConfig(config)


def flush_logging() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()
