"""Tests for pathmorph logging setup."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from io import StringIO
from pathlib import Path

import pytest

from pathmorph.logging_config import (
    ErrorFilter,
    StructuredFormatter,
    configure_logging,
    setup_dev_logging,
)


def record_for(logger_name: str, level: int = logging.INFO, msg: str = "ok") -> logging.LogRecord:
    logger = logging.getLogger(logger_name)
    return logger.makeRecord(logger_name, level, __file__, 0, msg, (), None)


def emitted(formatter: StructuredFormatter, record: logging.LogRecord) -> dict:
    return json.loads(formatter.format(record))


@pytest.fixture(autouse=True)
def restore_root_logger() -> Iterator[None]:
    root = logging.getLogger()
    saved, level = root.handlers[:], root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        if handler not in saved:
            handler.close()
    for handler in saved:
        root.addHandler(handler)
    root.setLevel(level)


class TestStructuredFormatter:
    @pytest.fixture
    def formatter(self) -> StructuredFormatter:
        return StructuredFormatter()

    def test_payload_fields(self, formatter: StructuredFormatter) -> None:
        data = emitted(formatter, record_for("pathmorph.matching", msg="balanced 2 piece(s)"))
        assert data["level"] == "INFO"
        assert data["logger"] == "pathmorph.matching"
        assert data["message"] == "balanced 2 piece(s)"
        assert data["category"] == "morph"
        assert data["timestamp"].endswith("+00:00")
        assert "extra" not in data
        assert "exception" not in data

    @pytest.mark.parametrize(
        ("logger_name", "category"),
        [
            ("pathmorph.types.commands", "geometry"),
            ("pathmorph.splitter", "geometry"),
            ("pathmorph.corners", "morph"),
            ("pathmorph.interpolation", "morph"),
            ("pathmorph.rendering", "render"),
            ("PIL.PngImagePlugin", "render"),
            ("pathmorph.svg", "io"),
            ("pathmorph.cli", "cli"),
            ("pathmorph", "system"),
            ("pathmorphology", "system"),
            ("svgpathtools", "system"),
        ],
    )
    def test_category_by_logger_prefix(
        self, formatter: StructuredFormatter, logger_name: str, category: str
    ) -> None:
        assert emitted(formatter, record_for(logger_name))["category"] == category

    def test_extra_fields(self, formatter: StructuredFormatter) -> None:
        record = record_for("pathmorph.matching")
        record.from_pieces = 3  # type: ignore[attr-defined]
        record.policy = "keep"  # type: ignore[attr-defined]
        record.shape = object()  # type: ignore[attr-defined]
        extra = emitted(formatter, record)["extra"]
        assert extra["from_pieces"] == 3
        assert extra["policy"] == "keep"
        assert extra["shape"].startswith("<object")

    def test_message_arguments_are_merged(self, formatter: StructuredFormatter) -> None:
        record = logging.getLogger("pathmorph.corners").makeRecord(
            "pathmorph.corners", logging.DEBUG, __file__, 0, "tagged %d corner(s)", (4,), None
        )
        data = emitted(formatter, record)
        assert data["message"] == "tagged 4 corner(s)"
        assert "extra" not in data

    def test_exception_traceback(self, formatter: StructuredFormatter) -> None:
        try:
            raise ValueError("bad band options")
        except ValueError as e:
            record = record_for("pathmorph.rendering", logging.ERROR, "bands failed")
            record.exc_info = (type(e), e, e.__traceback__)
        data = emitted(formatter, record)
        assert "ValueError: bad band options" in data["exception"]


class TestErrorFilter:
    @pytest.mark.parametrize(
        ("level", "passes"),
        [
            (logging.DEBUG, False),
            (logging.WARNING, False),
            (logging.ERROR, True),
            (logging.CRITICAL, True),
        ],
    )
    def test_threshold(self, level: int, passes: bool) -> None:
        assert ErrorFilter().filter(record_for("pathmorph.cli", level)) is passes


class TestConfigureLogging:
    def test_json_lines(self) -> None:
        stream = StringIO()
        configure_logging(json_format=True, stream=stream)
        logging.getLogger("pathmorph.svg").info("parsed %d command(s)", 5)
        data = json.loads(stream.getvalue())
        assert data["message"] == "parsed 5 command(s)"
        assert data["category"] == "io"

    def test_plain_lines(self) -> None:
        stream = StringIO()
        configure_logging(json_format=False, stream=stream)
        logging.getLogger("pathmorph.svg").info("parsed")
        line = stream.getvalue()
        assert "INFO [pathmorph.svg] parsed" in line
        assert not line.startswith("{")

    def test_level_threshold(self) -> None:
        stream = StringIO()
        configure_logging(json_format=False, log_level=logging.WARNING, stream=stream)
        logger = logging.getLogger("pathmorph.matching")
        logger.info("kept orientation")
        logger.warning("empty piece")
        assert "kept orientation" not in stream.getvalue()
        assert "empty piece" in stream.getvalue()

    def test_replaces_existing_handlers(self) -> None:
        configure_logging(stream=StringIO())
        configure_logging(stream=StringIO())
        assert len(logging.getLogger().handlers) == 1

    def test_log_files(self, tmp_path: Path) -> None:
        all_log = tmp_path / "logs" / "pathmorph.log"
        error_log = tmp_path / "logs" / "errors.log"
        configure_logging(
            log_file=str(all_log), error_log_file=str(error_log), stream=StringIO()
        )
        logger = logging.getLogger("pathmorph.rendering")
        logger.info("drew frame")
        logger.error("surface closed")
        for handler in logging.getLogger().handlers:
            handler.flush()

        assert len(all_log.read_text().splitlines()) == 2
        errors = error_log.read_text().splitlines()
        assert [json.loads(line)["message"] for line in errors] == ["surface closed"]

    def test_pillow_kept_quiet(self) -> None:
        configure_logging(log_level=logging.DEBUG, stream=StringIO())
        assert logging.getLogger("PIL").level == logging.WARNING


class TestSetupDevLogging:
    def test_plain_by_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("LOG_JSON", raising=False)
        setup_dev_logging(logging.DEBUG)
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert not isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_json_switch(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_JSON", "TRUE")
        setup_dev_logging()
        assert isinstance(logging.getLogger().handlers[0].formatter, StructuredFormatter)
