"""
Unit tests for queue-based logging setup.
"""

import logging
import re
from pathlib import Path

from marketsnap.config.constants import NOISY_LOGGERS
from marketsnap.telemetry.logger import AsyncLogger, setup_logging


class TestSetupLogging:
    """Tests for component-tagged log output."""

    def test_file_lines_tagged_with_component(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "marketsnap.log"
        async_logger = setup_logging(level="WARNING", log_file=log_file, component="serve")
        try:
            logging.getLogger("marketsnap.dashboard.poller").debug("poll 3 dropped")
            logging.getLogger("marketsnap.core.engine").warning("exchanges step failed")
        finally:
            async_logger.stop()

        lines = log_file.read_text(encoding="utf-8").splitlines()

        assert len(lines) == 2
        assert "| serve   | DEBUG    | marketsnap.dashboard.poller | poll 3 dropped" in lines[0]
        assert lines[1].endswith("| marketsnap.core.engine | exchanges step failed")
        assert re.match(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z \| ", lines[1])

    def test_noisy_loggers_quieted(self) -> None:
        async_logger = setup_logging(level="DEBUG")
        async_logger.stop()

        for name in NOISY_LOGGERS:
            assert logging.getLogger(name).level == logging.WARNING

    def test_stop_detaches_queue(self) -> None:
        async_logger = AsyncLogger("marketsnap.tests.detach")
        before = list(async_logger.logger.handlers)

        with async_logger:
            assert len(async_logger.logger.handlers) == len(before) + 1

        assert async_logger.logger.handlers == before
        assert async_logger.component == "refresh"
