"""Unit tests for shared_functions.helpers (env, sanitation, logging config)."""

from __future__ import annotations

import logging
import logging.handlers

import pytest

from webui_launcher.shared_functions.helpers.helpers_generic import (
    env_bool,
    env_present,
    env_str,
    is_positive_int,
)
from webui_launcher.shared_functions.helpers.helpers_logging_config import (
    PLAIN_FORMAT,
    TIMESTAMPED_FORMAT,
    setup_logging,
)
from webui_launcher.shared_functions.helpers.helpers_sanitation import redact_dsn, scrub_env


class TestEnvHelpers:
    def test_env_str_shell_default_semantics(self) -> None:
        assert env_str({}, "X", "d") == "d"
        assert env_str({"X": ""}, "X", "d") == "d"
        assert env_str({"X": " v "}, "X", "d") == " v "

    def test_env_bool(self) -> None:
        assert env_bool({"X": "yes"}, "X") is True
        assert env_bool({"X": "0"}, "X", True) is False
        assert env_bool({}, "X", True) is True

    def test_env_present(self) -> None:
        assert env_present({"X": "a"}, "X")
        assert env_present({"X": " "}, "X")
        assert not env_present({"X": ""}, "X")
        assert not env_present({}, "X")

    @pytest.mark.parametrize("raw, expected", [("5", True), (" 3 ", True), ("0", False), ("-1", False), ("x", False), (None, False)])
    def test_is_positive_int(self, raw, expected) -> None:
        assert is_positive_int(raw) is expected


class TestSanitation:
    def test_redact_dsn_hides_password_only(self) -> None:
        assert redact_dsn("postgresql://u:secret@h:5432/db?sslmode=require") == "postgresql://u:***@h:5432/db?sslmode=require"

    def test_redact_dsn_without_password(self) -> None:
        assert redact_dsn("postgresql://h/db") == "postgresql://h/db"

    def test_redact_dsn_unparseable(self) -> None:
        assert redact_dsn("postgresql://u:p@h:bad/db") == "Redacted"

    def test_scrub_env(self) -> None:
        clean = scrub_env(
            {
                "WEBUI_SECRET_KEY": "s",
                "OPENAI_API_KEY": "k",
                "DATABASE_URL": "postgresql://u:p@h/db",
                "PORT": "8080",
            }
        )
        assert clean == {
            "WEBUI_SECRET_KEY": "Redacted",
            "OPENAI_API_KEY": "Redacted",
            "DATABASE_URL": "postgresql://u:***@h/db",
            "PORT": "8080",
        }


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_timestamped_console(self) -> None:
        setup_logging({"LOG_LEVEL": "debug"})
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        (handler,) = root.handlers
        assert handler.formatter._fmt == TIMESTAMPED_FORMAT

    def test_plain_console(self) -> None:
        setup_logging({}, timestamps=False)
        (handler,) = logging.getLogger().handlers
        assert handler.formatter._fmt == PLAIN_FORMAT
        assert logging.getLogger().level == logging.INFO

    def test_file_handler(self, tmp_path) -> None:
        setup_logging({"LOG_TO_STDOUT": "0", "LOG_DIR": str(tmp_path / "logs")})
        (handler,) = logging.getLogger().handlers
        assert isinstance(handler, logging.handlers.WatchedFileHandler)
        assert handler.baseFilename.endswith("webui_launcher.log")
        handler.close()

    def test_no_handlers_is_an_error(self) -> None:
        with pytest.raises(RuntimeError):
            setup_logging({"LOG_TO_STDOUT": "0"})
