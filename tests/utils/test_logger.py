"""Tests for the module logger."""

import pytest
from loguru import logger

from src.utils.logger import get_logger, setup_logging


@pytest.fixture
def records():
    captured = []
    sink_id = logger.add(lambda message: captured.append(message.record), level="DEBUG")
    yield captured
    logger.remove(sink_id)


@pytest.mark.unit
class TestModuleLogger:
    def test_extra_is_bound(self, records):
        get_logger("tests.module").info("Stored", extra={"document_id": "d1", "chunks": 3})

        record = records[-1]
        assert record["message"] == "Stored"
        assert record["extra"]["module"] == "tests.module"
        assert record["extra"]["document_id"] == "d1"
        assert record["extra"]["chunks"] == 3

    def test_braces_in_message_are_literal(self, records):
        reply = '[{"source": "a", "target": "b"}]'

        get_logger("tests.module").warning(f"Bad reply: {reply}", extra={"attempt": 1})

        assert records[-1]["message"] == f"Bad reply: {reply}"

    def test_record_points_at_caller(self, records):
        get_logger("tests.module").error("boom")

        assert records[-1]["function"] == "test_record_points_at_caller"
        assert records[-1]["level"].name == "ERROR"


@pytest.mark.unit
class TestSetupLogging:
    def test_file_sinks_created(self, tmp_path):
        log_dir = tmp_path / "logs"

        setup_logging(level="DEBUG", log_dir=str(log_dir), serialize=False)
        get_logger("tests.setup").error("written to disk")
        logger.complete()

        names = sorted(p.name for p in log_dir.iterdir())
        assert any(name.startswith("context_memory_") for name in names)
        assert any(name.startswith("errors_") for name in names)

        logger.remove()

    def test_console_only(self, tmp_path):
        log_dir = tmp_path / "logs"

        setup_logging(log_to_file=False, log_dir=str(log_dir))

        assert not log_dir.exists()
        logger.remove()
