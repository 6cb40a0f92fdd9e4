"""
PeWalk Console Output
======================

Rich-powered terminal display for a decoded :class:`PEImage`: a DOS / COFF
summary panel, the optional header fields, the section table and, on
request, the 16 data directories.

Uses the :class:`~shared.console.ToolConsole` abstraction for consistent
styling.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Sequence

from rich.markup import escape

from shared.config import PeWalkConfig
from shared.console import ToolConsole

from pewalk.core.models import (
    DataDirectory,
    FileHeader,
    OptionalHeader,
    PEImage,
    SectionHeader,
    decode_section_name,
)
from pewalk.parsers.constants import (
    DIRECTORY_NAMES,
    file_characteristics_names,
    machine_name,
    section_flags,
    subsystem_name,
)


def _timestamp(value: int) -> str:
    """Render a COFF ``time_date_stamp`` as UTC, or raw hex if unusable."""
    if value == 0:
        return "0 (not set)"
    try:
        rendered = datetime.fromtimestamp(value, tz=timezone.utc)
    except (OSError, ValueError, OverflowError):
        return f"0x{value:08x}"
    return f"{rendered:%Y-%m-%d %H:%M:%S} UTC (0x{value:08x})"


class PeWalkConsoleOutput:
    """Rich terminal display for PE header walk results.

    Usage::

        output = PeWalkConsoleOutput()
        output.display(image)
    """

    def __init__(
        self,
        console: ToolConsole | None = None,
        config: PeWalkConfig | None = None,
    ) -> None:
        self._console: ToolConsole = console or ToolConsole()
        self._config: PeWalkConfig = config or PeWalkConfig()

    def display(self, image: PEImage) -> None:
        """Display every part of the walk result."""
        self._console.section(f"PE Headers -- {escape(image.source)}")
        self.display_headers(image)
        self.display_optional_header(image.optional_header)
        if self._config.show_data_directories:
            self.display_data_directories(image.optional_header.data_directory)
        self.display_sections(image.sections)

    def _panel(self, title: str, pairs: Sequence[tuple[str, Any]]) -> None:
        # Values are rendered as literal text, never as Rich markup.
        self._console.key_value_panel(
            title, [(label, escape(str(value))) for label, value in pairs]
        )

    def display_headers(self, image: PEImage) -> None:
        """DOS and COFF summary panel."""
        fh: FileHeader = image.file_header
        flags = ", ".join(file_characteristics_names(fh.characteristics)) or "-"
        self._panel(
            "DOS / COFF Header",
            [
                ("File size", f"{image.file_size:,} bytes"),
                ("DOS e_lfanew", f"0x{image.dos_header.e_lfanew:x}"),
                ("Machine", f"{machine_name(fh.machine)} (0x{fh.machine:04x})"),
                ("Number of sections", fh.number_of_sections),
                ("Time date stamp", _timestamp(fh.time_date_stamp)),
                ("Size of optional header", fh.size_of_optional_header),
                ("Characteristics", f"0x{fh.characteristics:04x} {flags}"),
            ],
        )
        self._console.blank()

    def display_optional_header(self, oh: OptionalHeader) -> None:
        """Fields of the optional header the tool reports."""
        self._panel(
            "Optional Header",
            [
                ("Magic", f"0x{oh.magic:x}"),
                ("Size of code", oh.size_of_code),
                ("Address of entry point", oh.address_of_entry_point),
                ("Image base", oh.image_base),
                ("Section alignment", oh.section_alignment),
                ("File alignment", oh.file_alignment),
                ("Size of image", oh.size_of_image),
                ("Subsystem", subsystem_name(oh.subsystem)),
                ("Number of RVA and sizes", oh.number_of_rva_and_sizes),
            ],
        )
        self._console.blank()

    def display_data_directories(self, directories: tuple[DataDirectory, ...]) -> None:
        rows = [
            (index, DIRECTORY_NAMES[index], f"0x{dd.virtual_address:08x}", f"0x{dd.size:08x}")
            for index, dd in enumerate(directories)
        ]
        self._console.table(
            "Data Directories",
            ["#", "Directory", "RVA", "Size"],
            rows,
            justify=["right", "left", "right", "right"],
        )
        self._console.blank()

    def display_sections(self, sections: tuple[SectionHeader, ...]) -> None:
        """Section table: index, name, VA, raw pointer, raw size, flags.

        At most ``max_display_sections`` rows are rendered; the caption
        reports how many were left out.
        """
        limit = self._config.max_display_sections
        shown = sections[:limit]
        rows = [
            (
                index,
                escape(decode_section_name(sec.name, self._config.name_encoding)) or "<unnamed>",
                f"0x{sec.virt_addr:08x}",
                f"0x{sec.ptr_to_raw_data:08x}",
                f"0x{sec.size_of_raw_data:08x}",
                section_flags(sec.characteristics),
            )
            for index, sec in enumerate(shown)
        ]
        hidden = len(sections) - len(shown)
        caption = f"{hidden} more section(s) not shown" if hidden > 0 else None
        self._console.table(
            f"Sections ({len(sections)})",
            ["#", "Name", "VA", "Raw Ptr", "Raw Size", "Flags"],
            rows,
            caption=caption,
            justify=["right", "left", "right", "right", "right", "left"],
        )
