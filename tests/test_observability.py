"""
Tests for observability — logging level resolution and setup.
"""

import logging

import pytest

from jlinstall.core.observability.logging_config import resolve_level, setup_logging


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


class TestResolveLevel:
    def test_default(self):
        assert resolve_level() == "WARNING"

    def test_env(self):
        assert resolve_level(env_level="INFO") == "INFO"

    def test_precedence(self):
        assert resolve_level(debug=True, verbose=True, quiet=True) == "DEBUG"
        assert resolve_level(verbose=True, quiet=True, env_level="ERROR") == "INFO"
        assert resolve_level(quiet=True, env_level="DEBUG") == "ERROR"


class TestSetupLogging:
    def test_console_handler(self):
        setup_logging("INFO")
        root = logging.getLogger()
        assert len(root.handlers) == 1
        assert root.level == logging.INFO

    def test_unknown_level_falls_back_to_warning(self):
        setup_logging("CHATTY")
        assert logging.getLogger().level == logging.WARNING

    def test_file_handler_with_own_level(self, tmp_path):
        log_file = tmp_path / "jlinstall.log"
        setup_logging("WARNING", log_file=str(log_file), log_file_level="DEBUG")
        root = logging.getLogger()
        assert len(root.handlers) == 2
        assert root.level == logging.DEBUG

        logging.getLogger("jlinstall.test").debug("written to file only")
        for h in root.handlers:
            h.flush()
        assert "written to file only" in log_file.read_text()

    def test_third_party_quieted(self):
        setup_logging("INFO")
        assert logging.getLogger("urllib3").level == logging.WARNING
