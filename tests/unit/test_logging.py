"""Tests for logging helpers."""

import json
import logging

from collabnotes.config import Settings
from collabnotes.core.logging import (
    ColoredFormatter,
    JSONFormatter,
    build_logging_config,
    get_log_level,
    get_logger,
)


def _record(**extra):
    record = logging.LogRecord(
        "collabnotes.test", logging.INFO, __file__, 10, "Note %s", ("shared",), None
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra():
    output = json.loads(JSONFormatter().format(_record(note_id="abc", user_id="u1")))

    assert output["message"] == "Note shared"
    assert output["level"] == "INFO"
    assert output["logger"] == "collabnotes.test"
    assert output["extra"] == {"note_id": "abc", "user_id": "u1"}


def test_json_formatter_without_extra():
    output = json.loads(JSONFormatter().format(_record()))
    assert "extra" not in output


def test_colored_formatter_leaves_record_untouched():
    record = _record()
    text = ColoredFormatter("%(levelname)s %(message)s").format(record)

    assert "Note shared" in text
    assert record.levelname == "INFO"


def test_get_logger_namespace():
    assert get_logger("notes").name == "collabnotes.notes"


def test_get_log_level():
    assert get_log_level("debug") == logging.DEBUG
    assert get_log_level("nonsense") == logging.INFO


def test_console_formatter_follows_debug(tmp_path):
    prod = build_logging_config(Settings(debug=False, log_dir=str(tmp_path)))
    dev = build_logging_config(Settings(debug=True, log_dir=str(tmp_path)))

    assert prod["handlers"]["console"]["formatter"] == "json"
    assert dev["handlers"]["console"]["formatter"] == "colored"
    assert prod["handlers"]["file"]["filename"].startswith(str(tmp_path))
