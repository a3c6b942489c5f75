"""Tests for loguru setup."""

from __future__ import annotations

import json
from collections.abc import Iterator

import pytest
from loguru import logger

from sheetops.logging import setup_logging


@pytest.fixture
def restore_logger() -> Iterator[None]:
    yield
    logger.remove()


@pytest.mark.usefixtures("restore_logger")
class TestSetupLogging:
    def test_text_logs_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(log_level="info")
        logger.info("resolved sheet {}", 7)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "INFO" in captured.err
        assert "resolved sheet 7" in captured.err

    def test_level_filters(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(log_level="WARNING")
        logger.info("hidden")
        logger.warning("shown")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_json_logs(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(json_logs=True, log_level="DEBUG")
        logger.debug("batch sent")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["record"]["message"] == "batch sent"
        assert record["record"]["level"]["name"] == "DEBUG"
