import io
import json
import logging

from rotation.logging import JSONFormatter, build_handler, setup_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("rotation.store", logging.WARNING, __file__, 1, "slot %s", ("a",), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_rotation_extras():
    line = JSONFormatter().format(_record(rotation_slot="workoutHistory", other="skip"))
    entry = json.loads(line)
    assert entry["message"] == "slot a"
    assert entry["level"] == "WARNING"
    assert entry["logger"] == "rotation.store"
    assert entry["rotation_slot"] == "workoutHistory"
    assert "other" not in entry


def test_setup_logging_replaces_handlers():
    root = logging.getLogger()
    saved, level = root.handlers[:], root.level
    try:
        setup_logging("json", logging.INFO)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        setup_logging("text", "WARNING")
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)
        assert root.level == logging.WARNING
    finally:
        root.handlers[:] = saved
        root.setLevel(level)


def test_build_handler_writes_json_lines():
    stream = io.StringIO()
    logger = logging.getLogger("rotation.test_handler")
    logger.propagate = False
    handler = build_handler("json", stream)
    logger.addHandler(handler)
    try:
        logger.warning("saved", extra={"rotation_superset_records": 2})
    finally:
        logger.removeHandler(handler)
        logger.propagate = True
    entry = json.loads(stream.getvalue())
    assert entry["message"] == "saved"
    assert entry["rotation_superset_records"] == 2
