"""Tests for the JSON log formatter."""
import json
import logging

from organizer.logger import JSONFormatter, setup_logging


def test_formats_extras_as_fields():
    record = logging.makeLogRecord(
        {"name": "organizer.test", "levelname": "INFO", "msg": "Moved page", "source_index": 3}
    )
    data = json.loads(JSONFormatter().format(record))
    assert data["message"] == "Moved page"
    assert data["logger"] == "organizer.test"
    assert data["source_index"] == 3
    assert "msg" not in data


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    setup_logging("DEBUG")
    setup_logging("DEBUG")
    handlers = [h for h in root.handlers if isinstance(h.formatter, JSONFormatter)]
    assert len(handlers) == 1
    assert root.level == logging.DEBUG
