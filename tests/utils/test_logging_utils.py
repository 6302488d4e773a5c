import json
import logging
import sys

import pytest
from rich.logging import RichHandler

from cushionstats.utils.logging_utils import (
    TRACE_LEVEL,
    JSONFormatter,
    configure_logging,
    get_log_format,
)


def _record(**extra):
    record = logging.LogRecord(
        name="cushionstats.analysis.equivalence",
        level=logging.WARNING,
        pathname=__file__,
        lineno=10,
        msg="Equivalence: group %s not tested",
        args=("lcdod/L3",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_format_structure(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert data["message"] == "Equivalence: group lcdod/L3 not tested"
        assert data["level"] == "WARNING"
        assert data["logger"] == "cushionstats.analysis.equivalence"
        assert "timestamp" in data

    def test_extra_fields_are_included(self):
        data = json.loads(
            JSONFormatter().format(_record(variable="lcdod", failed_groups=["lcdod/L3"]))
        )

        assert data["variable"] == "lcdod"
        assert data["failed_groups"] == ["lcdod/L3"]
        assert "args" not in data

    def test_exception_is_formatted(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError: boom" in data["exception"]


class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        yield
        for handler in root.handlers:
            if handler not in handlers:
                handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_human_format_uses_rich(self):
        configure_logging("debug")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h, RichHandler) for h in root.handlers)
        assert get_log_format() == "human"

    def test_json_format(self):
        configure_logging("warning", log_format="json")

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert get_log_format() == "json"

    def test_trace_level(self):
        configure_logging("trace")

        assert logging.getLogger().level == TRACE_LEVEL
        assert logging.getLevelName(TRACE_LEVEL) == "TRACE"

    def test_unknown_level_falls_back_to_info(self):
        configure_logging("chatty")

        assert logging.getLogger().level == logging.INFO

    def test_log_file(self, tmp_path):
        log_file = tmp_path / "run.log"
        configure_logging("info", log_file=str(log_file))

        logging.getLogger("cushionstats.test").info("Pipeline: hello")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert "Pipeline: hello" in log_file.read_text()
