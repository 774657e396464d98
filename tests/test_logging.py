# tests/test_logging.py
import json
import logging
from pathlib import Path

from summarizer.observability.logger import JSONFormatter


def _format(**fields):
    record = logging.makeLogRecord({
        "name": "summarizer.memory.sessions",
        "levelno": logging.INFO,
        "levelname": "INFO",
        "msg": "Session stored",
        **fields,
    })
    return json.loads(JSONFormatter().format(record))


class TestJSONFormatter:
    """One JSON object per log line."""

    def test_extra_fields_are_merged(self):
        payload = _format(file_id="file-a", chunks=3)

        assert payload["message"] == "Session stored"
        assert payload["level"] == "INFO"
        assert payload["file_id"] == "file-a"
        assert payload["chunks"] == 3

    def test_record_internals_are_left_out(self):
        payload = _format()

        assert "lineno" not in payload
        assert "args" not in payload

    def test_colliding_extra_is_prefixed(self):
        payload = _format(logger="custom")

        assert payload["logger"] == "summarizer.memory.sessions"
        assert payload["extra_logger"] == "custom"

    def test_non_serializable_values_are_stringified(self):
        payload = _format(source_file=Path("uploads/file-a.pdf"))

        assert payload["source_file"] == str(Path("uploads/file-a.pdf"))
