"""Tests for logging setup."""

import sys

from loguru import logger

from settings.logging import setup_logging


class TestSetupLogging:
    def teardown_method(self):
        logger.remove()
        logger.add(sys.stderr)

    def test_file_sink_created(self, tmp_path):
        log_dir = tmp_path / "logs"
        setup_logging(level="debug", log_dir=log_dir)
        logger.info("resync started")
        logger.remove()

        files = list(log_dir.glob("sync_*.log"))
        assert len(files) == 1
        assert "resync started" in files[0].read_text(encoding="utf-8")

    def test_console_only(self, tmp_path):
        setup_logging(to_file=False, log_dir=tmp_path / "logs")
        assert not (tmp_path / "logs").exists()
