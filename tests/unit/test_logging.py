"""Unit tests for coursegate logging configuration."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import pytest

from coursegate.logging import setup_logging


@pytest.fixture(autouse=True)
def reset_coursegate_logger():
    """Detach handlers added by setup_logging after each test."""
    yield
    for name in ("coursegate", "coursegate.ledger"):
        logger = logging.getLogger(name)
        for handler in list(logger.handlers):
            handler.close()
        logger.handlers.clear()
        logger.setLevel(logging.NOTSET)


@pytest.mark.unit
class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_creates_nested_log_directory(self, tmp_path: Path) -> None:
        log_dir = tmp_path / "var" / "logs"

        setup_logging(log_dir=log_dir, console=False)

        assert (log_dir / "coursegate.log").exists()

    def test_component_records_reach_file(self, tmp_path: Path) -> None:
        """Ledger and store loggers share the coursegate file."""
        setup_logging(log_dir=tmp_path, console=False)

        logging.getLogger("coursegate.ledger.ledger").info("seat taken")
        logging.getLogger("coursegate.store.catalog").info("course created")

        content = (tmp_path / "coursegate.log").read_text()
        assert "seat taken" in content
        assert "course created" in content
        assert " | INFO     | MainThread | coursegate.ledger.ledger | " in content

    def test_level_filters_records(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, level="WARNING", console=False)
        logger = logging.getLogger("coursegate")

        logger.info("quiet")
        logger.warning("loud")

        content = (tmp_path / "coursegate.log").read_text()
        assert "quiet" not in content
        assert "loud" in content

    def test_env_sets_level_and_dir(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """COURSEGATE_LOG_LEVEL and COURSEGATE_LOG_DIR apply when not passed."""
        monkeypatch.setenv("COURSEGATE_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("COURSEGATE_LOG_DIR", str(tmp_path))

        logger = setup_logging(console=False)

        assert logger.level == logging.DEBUG
        assert (tmp_path / "coursegate.log").exists()

    def test_repeated_setup_replaces_handlers(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, console=True)
        logger = setup_logging(log_dir=tmp_path, console=False)

        assert logger.name == "coursegate"
        assert len(logger.handlers) == 1

    def test_rotating_handler_configured(self, tmp_path: Path) -> None:
        logger = setup_logging(
            log_dir=tmp_path, log_file="audit.log", max_bytes=2048, backup_count=2, console=False
        )

        (handler,) = logger.handlers
        assert isinstance(handler, RotatingFileHandler)
        assert handler.maxBytes == 2048
        assert handler.backupCount == 2
        assert Path(handler.baseFilename).name == "audit.log"


@pytest.mark.unit
class TestEnrollmentLog:
    """Tests for the separate enrollment ledger log."""

    def test_only_ledger_records_reach_enrollment_log(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, console=False)

        logging.getLogger("coursegate.ledger.ledger").info("Enrolled s1 in MATH101")
        logging.getLogger("coursegate.store.catalog").info("Created course MATH101")

        enrollments = (tmp_path / "enrollments.log").read_text()
        assert "Enrolled s1 in MATH101" in enrollments
        assert "Created course MATH101" not in enrollments

    def test_ledger_records_also_reach_main_log(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, console=False)

        logging.getLogger("coursegate.ledger.ledger").info("Dropped s1 from MATH101")

        assert "Dropped s1 from MATH101" in (tmp_path / "coursegate.log").read_text()

    def test_custom_enrollment_log_name(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, ledger_log_file="seats.log", console=False)

        (handler,) = logging.getLogger("coursegate.ledger").handlers
        assert isinstance(handler, RotatingFileHandler)
        assert Path(handler.baseFilename).name == "seats.log"

    def test_disabled_enrollment_log(self, tmp_path: Path) -> None:
        """ledger_log_file=None writes no enrollment log."""
        setup_logging(log_dir=tmp_path, ledger_log_file=None, console=False)

        logging.getLogger("coursegate.ledger.ledger").info("Enrolled s1 in MATH101")

        assert logging.getLogger("coursegate.ledger").handlers == []
        assert not (tmp_path / "enrollments.log").exists()

    def test_repeated_setup_replaces_enrollment_handler(self, tmp_path: Path) -> None:
        setup_logging(log_dir=tmp_path, console=False)
        setup_logging(log_dir=tmp_path, console=False)

        assert len(logging.getLogger("coursegate.ledger").handlers) == 1
