"""
Unit tests for logging setup.
"""

import logging
from logging.handlers import RotatingFileHandler

import pytest
from hybrid_rag.logging_config import MAX_SESSION_LOGS, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


class TestSetupLogging:

    def test_console_only(self):
        assert setup_logging(log_file=None) is None

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert not isinstance(handlers[0], RotatingFileHandler)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_session_file_created(self, tmp_path):
        session_log = setup_logging(log_file=str(tmp_path / "logs" / "retrieval.log"))

        assert session_log.parent == tmp_path / "logs"
        assert session_log.name.startswith("retrieval_")
        logging.getLogger("hybrid_rag.test").debug("detail for file only")
        for handler in logging.getLogger().handlers:
            handler.flush()
        assert "detail for file only" in session_log.read_text()

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path):
        setup_logging(log_file=str(tmp_path / "retrieval.log"))
        setup_logging(log_file=str(tmp_path / "retrieval.log"))

        assert len(logging.getLogger().handlers) == 2

    def test_old_sessions_pruned(self, tmp_path):
        for day in range(1, 9):
            (tmp_path / f"retrieval_2024010{day}_120000.log").write_text("old")

        session_log = setup_logging(log_file=str(tmp_path / "retrieval.log"))

        remaining = sorted(tmp_path.glob("retrieval_*.log"))
        assert len(remaining) == MAX_SESSION_LOGS
        assert session_log in remaining
        assert not (tmp_path / "retrieval_20240101_120000.log").exists()
