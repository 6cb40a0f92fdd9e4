"""Tests for the structured logger."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from shared.logger import ToolLogger

from pewalk.core.errors import BadSignatureError
from pewalk.core.walker import ImageWalker

from tests.conftest import build_image


def test_json_file_records_carry_operation(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "walk.jsonl"
    logger = ToolLogger("walker", log_file=log_file, json_logs=True, console_output=False)
    with logger.operation("decode_sections"):
        logger.warning("odd value %d", 7, offset=0x40)
    logger.info("outside")

    lines = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    assert lines[0]["message"] == "odd value 7"
    assert lines[0]["operation"] == "decode_sections"
    assert lines[0]["logger"] == "pewalk.walker"
    assert lines[0]["extra"] == {"offset": 0x40}
    assert "operation" not in lines[1]


def test_operation_context_nests() -> None:
    logger = ToolLogger("nest", console_output=False)
    with logger.operation("outer"):
        with logger.operation("inner"):
            assert logger.current_operation == "inner"
        assert logger.current_operation == "outer"
    assert logger.current_operation is None


def test_level_filters_file_output(tmp_path: Path) -> None:
    log_file = tmp_path / "walk.log"
    logger = ToolLogger("levels", log_level="WARNING", log_file=log_file, console_output=False)
    logger.info("hidden")
    logger.error("shown")
    text = log_file.read_text(encoding="utf-8")
    assert "hidden" not in text
    assert "shown" in text


def test_failed_walk_is_written_to_log_file(tmp_path: Path) -> None:
    log_file = tmp_path / "walk.jsonl"
    logger = ToolLogger("walker", log_file=log_file, json_logs=True, console_output=False)
    walker = ImageWalker(logger=logger)
    try:
        walker.walk_bytes(build_image(signature=b"PX\x00\x00"), source="bad.exe")
    except BadSignatureError:
        pass
    records = [json.loads(line) for line in log_file.read_text(encoding="utf-8").splitlines()]
    errors = [r for r in records if r["level"] == "ERROR"]
    assert len(errors) == 1
    assert errors[0]["operation"] == "validate_signature"
    assert errors[0]["extra"]["error_kind"] == "BadSignature"
    assert errors[0]["message"].startswith("bad.exe: BadSignature during signature validation")


def test_console_ceiling_leaves_file_uncapped(tmp_path: Path) -> None:
    log_file = tmp_path / "walk.log"
    logger = ToolLogger("ceiling", log_file=log_file, console_max_level="WARNING")
    console_handler, file_handler = logger.underlying.handlers
    warning = logging.makeLogRecord({"levelno": logging.WARNING, "levelname": "WARNING"})
    error = logging.makeLogRecord({"levelno": logging.ERROR, "levelname": "ERROR"})
    assert console_handler.filter(warning)
    assert not console_handler.filter(error)
    assert file_handler.filter(error)
