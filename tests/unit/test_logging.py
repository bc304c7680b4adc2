"""
结构化日志单元测试
"""

import sys

import pytest
from loguru import logger

from fleetpulse.config import LoggingConfig
from fleetpulse.infrastructure.logging import StructuredLogger, configure_logging, create_logger


def service_records(records, service):
    return [r for r in records if r["extra"].get("service") == service]


class TestStructuredLogger:
    def test_binds_service_and_context(self, log_records):
        log = create_logger("DeviceSvc", {"region": "eu"})
        log.info("hello", {"device_id": "d1"})

        [record] = service_records(log_records, "DeviceSvc")
        assert record["level"].name == "INFO"
        assert record["message"] == "[DeviceSvc] hello"
        assert record["extra"]["context"] == {"region": "eu", "device_id": "d1"}
        assert len(record["extra"]["trace_id"]) == 13

    def test_min_level_filters(self, log_records):
        log = StructuredLogger("Filtered", min_level="warn")
        log.debug("d")
        log.info("i")
        log.warn("w")

        levels = [r["level"].name for r in service_records(log_records, "Filtered")]
        assert levels == ["WARNING"]

    def test_disabled_logger_is_silent(self, log_records):
        log = create_logger("Silent", enabled=False)
        log.error("nothing", RuntimeError("x"))
        assert service_records(log_records, "Silent") == []

    def test_error_details_attached(self, log_records):
        create_logger("Errs").error("failed", ValueError("bad value"))

        [record] = service_records(log_records, "Errs")
        assert record["extra"]["error"] == {"name": "ValueError", "message": "bad value"}

    def test_fatal_maps_to_critical(self, log_records):
        create_logger("Fatal").fatal("down")
        [record] = service_records(log_records, "Fatal")
        assert record["level"].name == "CRITICAL"

    def test_child_extends_context(self, log_records):
        parent = create_logger("Parent", {"a": 1})
        child = parent.child({"b": 2})
        child.info("from child")

        [record] = service_records(log_records, "Parent")
        assert record["extra"]["context"] == {"a": 1, "b": 2}
        assert parent.default_context == {"a": 1}

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            StructuredLogger("x", min_level="trace")


class TestConfigureLogging:
    def test_file_sink(self, tmp_path):
        log_file = tmp_path / "fleetpulse.log"
        try:
            configure_logging(LoggingConfig(level="INFO", file=str(log_file)))
            create_logger("FileSvc").info("written to file")
        finally:
            logger.remove()
            logger.add(sys.stderr)

        assert "[FileSvc] written to file" in log_file.read_text(encoding="utf-8")
