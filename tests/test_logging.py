"""Tests for the logging setup and formatters."""

import json
import logging

from sbom_visualizer.logging import (
    ColoredFormatter,
    LoggerConfig,
    StructuredFormatter,
    close_logging,
    get_logging_stats,
    set_log_level,
    setup_logging,
)


def _record(message="Merged model", level=logging.INFO, **extra):
    record = logging.LogRecord("sbom_visualizer.test", level, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_structured_formatter_emits_json_with_extra():
    record = _record(merge_report={"dangling_edges": 2})
    entry = json.loads(StructuredFormatter().format(record))
    assert entry["level"] == "INFO"
    assert entry["logger"] == "sbom_visualizer.test"
    assert entry["message"] == "Merged model"
    assert entry["extra"] == {"merge_report": {"dangling_edges": 2}}


def test_structured_formatter_without_extra():
    entry = json.loads(StructuredFormatter(include_extra=False).format(_record(foo="bar")))
    assert "extra" not in entry


def test_colored_formatter_wraps_level():
    output = ColoredFormatter("%(levelname)s %(message)s").format(_record(level=logging.WARNING))
    assert output.startswith("\033[33m")
    assert output.endswith("\033[0m")
    assert "\033[1mWARNING" in output


def test_setup_and_close(tmp_path):
    log_file = tmp_path / "logs" / "sbom.log"
    setup_logging(LoggerConfig(level="DEBUG", file_path=str(log_file), enable_structured=True))
    try:
        stats = get_logging_stats()
        assert stats["configured"]
        assert stats["handlers_active"] == ["console", "file"]
        assert stats["current_level"] == "DEBUG"

        logging.getLogger("sbom_visualizer.test").info("hello", extra={"documents": 2})
        set_log_level("ERROR")
        logging.getLogger("sbom_visualizer.test").warning("suppressed")
    finally:
        close_logging()

    entries = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    test_entries = [e for e in entries if e["logger"] == "sbom_visualizer.test"]
    assert [e["message"] for e in test_entries] == ["hello"]
    assert test_entries[0]["extra"] == {"documents": 2}
    assert not get_logging_stats()["configured"]


def test_setup_is_idempotent():
    setup_logging(LoggerConfig(level="WARNING"))
    setup_logging(LoggerConfig(level="DEBUG"))
    assert get_logging_stats()["current_level"] == "WARNING"
    close_logging()
