"""Tests for console rendering and JSON reports."""

from __future__ import annotations

import json
from pathlib import Path

from shared.config import PeWalkConfig
from shared.console import ToolConsole

from pewalk.core.walker import ImageWalker
from pewalk.output.console import PeWalkConsoleOutput
from pewalk.output.report import PeWalkReportGenerator
from pewalk.parsers.constants import (
    file_characteristics_names,
    machine_name,
    section_flags,
    subsystem_name,
)

from tests.conftest import build_image, pack_section


def test_console_renders_reported_fields(
    walker: ImageWalker, sample_image: bytes, recording_console: ToolConsole
) -> None:
    image = walker.walk_bytes(sample_image, source="sample.exe")
    PeWalkConsoleOutput(console=recording_console).display(image)
    text = recording_console.export_text()

    assert "sample.exe" in text
    assert "0x80" in text
    assert "x86 (0x014c)" in text
    assert "EXECUTABLE_IMAGE, 32BIT_MACHINE" in text
    assert "Windows Console" in text
    assert "4194304" in text  # image base
    for row in (".text", "0x00001000", "0x00000400", "0x00001a00", "R X CODE"):
        assert row in text
    assert "Data Directories" not in text


def test_console_directories_and_display_cap(
    walker: ImageWalker, sample_image: bytes, recording_console: ToolConsole
) -> None:
    image = walker.walk_bytes(sample_image)
    config = PeWalkConfig(show_data_directories=True, max_display_sections=2)
    PeWalkConsoleOutput(console=recording_console, config=config).display(image)
    text = recording_console.export_text()

    assert "Data Directories" in text
    assert "Base Relocation" in text
    assert "0x00003100" in text
    assert "Sections (3)" in text
    assert "1 more section(s) not shown" in text
    assert ".rdata" in text
    assert ".data " not in text


def test_unnamed_section_placeholder(walker: ImageWalker, recording_console: ToolConsole) -> None:
    image = walker.walk_bytes(build_image([pack_section(b"\x00" * 8)]))
    PeWalkConsoleOutput(console=recording_console).display_sections(image.sections)
    assert "<unnamed>" in recording_console.export_text()


def test_report_file(walker: ImageWalker, sample_image: bytes, tmp_path: Path) -> None:
    image = walker.walk_bytes(sample_image)
    path = PeWalkReportGenerator().generate_json(image, tmp_path / "out" / "r.json")
    report = json.loads(path.read_text(encoding="utf-8"))
    assert report["version"] == "1.0.0"
    assert report["image"]["nt_head"]["signature"] == 0x4550
    assert report["image"]["dos_header"]["e_res2"] == [0] * 10


def test_lookup_helpers() -> None:
    assert machine_name(0x8664) == "x86_64"
    assert machine_name(0x1234) == "unknown(0x1234)"
    assert subsystem_name(2) == "Windows GUI"
    assert subsystem_name(99) == "Unknown(0x63)"
    assert file_characteristics_names(0x2002) == ["EXECUTABLE_IMAGE", "DLL"]
    assert section_flags(0xC0000040) == "R W IDATA"
    assert section_flags(0) == "-"


def test_markup_in_names_and_source_is_literal(
    walker: ImageWalker, recording_console: ToolConsole
) -> None:
    data = build_image([pack_section(b"[/x]"), pack_section(b"[red]ab"), pack_section(b"a\\")])
    image = walker.walk_bytes(data, source="[bold]drop.exe")
    PeWalkConsoleOutput(console=recording_console).display(image)
    text = recording_console.export_text()
    assert "[bold]drop.exe" in text
    assert "[/x]" in text
    assert "[red]ab" in text
    assert "a\\" in text
