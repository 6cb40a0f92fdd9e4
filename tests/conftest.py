"""Shared fixtures: a byte-level PE32 image builder and quiet collaborators."""

from __future__ import annotations

import struct
from typing import Any

import pytest

from shared.console import ToolConsole
from shared.logger import ToolLogger

from pewalk.core.walker import ImageWalker


# Packed independently of the decoder layout tables on purpose.
_DOS_FMT = "<14H4H2H10Hi"
_FILE_FMT = "<HHIIIHH"
_OPT_FMT = "<HBBIIIIIIIIIHHHHHHIIIIHHIIIIII"
_SECTION_FMT = "<8sIIIIIIHHI"

OPTIONAL_FIELDS: tuple[str, ...] = (
    "magic", "major_linker_version", "minor_linker_version",
    "size_of_code", "size_of_initialized_data", "size_of_uninitialized_data",
    "address_of_entry_point", "base_of_code", "base_of_data", "image_base",
    "section_alignment", "file_alignment",
    "major_operating_system_version", "minor_operating_system_version",
    "major_image_version", "minor_image_version",
    "major_subsystem_version", "minor_subsystem_version",
    "win32_version_value", "size_of_image", "size_of_headers", "checksum",
    "subsystem", "dll_characteristics",
    "size_of_stack_reserve", "size_of_stack_commit",
    "size_of_heap_reserve", "size_of_heap_commit",
    "loader_flags", "number_of_rva_and_sizes",
)


def pack_dos_header(
    e_lfanew: int = 64,
    e_magic: int = 0x5A4D,
    words: tuple[int, ...] = (0x90, 3, 0, 4, 0, 0xFFFF, 0, 0xB8, 0, 0, 0, 0x40, 0),
    e_res: tuple[int, ...] = (0, 0, 0, 0),
    e_oemid: int = 0,
    e_oeminfo: int = 0,
    e_res2: tuple[int, ...] = (0,) * 10,
) -> bytes:
    """Pack a 64-byte DOS header; *words* are e_cblp through e_ovno."""
    return struct.pack(
        _DOS_FMT, e_magic, *words, *e_res, e_oemid, e_oeminfo, *e_res2, e_lfanew
    )


def pack_file_header(
    number_of_sections: int = 1,
    machine: int = 0x14C,
    time_date_stamp: int = 0,
    pointer_to_symbol_table: int = 0,
    number_of_symbols: int = 0,
    size_of_optional_header: int = 224,
    characteristics: int = 0x0102,
) -> bytes:
    return struct.pack(
        _FILE_FMT,
        machine,
        number_of_sections,
        time_date_stamp,
        pointer_to_symbol_table,
        number_of_symbols,
        size_of_optional_header,
        characteristics,
    )


def pack_optional_header(
    directories: list[tuple[int, int]] | None = None,
    **fields: int,
) -> bytes:
    """Pack a PE32 optional header; unspecified fields are zero."""
    unknown = set(fields) - set(OPTIONAL_FIELDS)
    if unknown:
        raise KeyError(f"unknown optional header fields: {sorted(unknown)}")
    scalars = struct.pack(_OPT_FMT, *(fields.get(name, 0) for name in OPTIONAL_FIELDS))
    table = list(directories or [])
    table += [(0, 0)] * (16 - len(table))
    return scalars + b"".join(struct.pack("<II", rva, size) for rva, size in table)


def pack_section(
    name: bytes = b".text",
    virtual_size: int = 0,
    virtual_address: int = 0,
    size_of_raw_data: int = 0,
    pointer_to_raw_data: int = 0,
    pointer_to_relocations: int = 0,
    pointer_to_line_numbers: int = 0,
    number_of_relocations: int = 0,
    number_of_line_numbers: int = 0,
    characteristics: int = 0,
) -> bytes:
    return struct.pack(
        _SECTION_FMT,
        name,
        virtual_size,
        virtual_address,
        size_of_raw_data,
        pointer_to_raw_data,
        pointer_to_relocations,
        pointer_to_line_numbers,
        number_of_relocations,
        number_of_line_numbers,
        characteristics,
    )


def build_image(
    sections: list[bytes] | None = None,
    *,
    e_lfanew: int = 64,
    signature: bytes = b"PE\x00\x00",
    file_header: bytes | None = None,
    optional_header: bytes | None = None,
    stub: bytes = b"",
    trailer: bytes = b"",
) -> bytes:
    """Assemble DOS header, stub, NT head, section table and trailer.

    The stub is padded with zeros so that the NT head lands at *e_lfanew*
    whenever *e_lfanew* is at least 64.
    """
    sections = [pack_section()] if sections is None else sections
    dos = pack_dos_header(e_lfanew=e_lfanew)
    gap = max(e_lfanew - len(dos) - len(stub), 0)
    head = dos + stub + b"\x00" * gap
    fh = file_header if file_header is not None else pack_file_header(len(sections))
    oh = optional_header if optional_header is not None else pack_optional_header()
    return head + signature + fh + oh + b"".join(sections) + trailer


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def minimal_image() -> bytes:
    """64-byte DOS header, NT head at 64, zeroed optional header, one .text."""
    return build_image([pack_section(b".text")], optional_header=b"\x00" * 224)


@pytest.fixture
def sample_fields() -> dict[str, Any]:
    return {
        "magic": 0x10B,
        "major_linker_version": 14,
        "minor_linker_version": 29,
        "size_of_code": 0x1A00,
        "size_of_initialized_data": 0x2400,
        "address_of_entry_point": 0x1234,
        "base_of_code": 0x1000,
        "base_of_data": 0x3000,
        "image_base": 0x400000,
        "section_alignment": 0x1000,
        "file_alignment": 0x200,
        "major_operating_system_version": 6,
        "major_subsystem_version": 6,
        "size_of_image": 0x6000,
        "size_of_headers": 0x400,
        "checksum": 0xBEEF,
        "subsystem": 3,
        "dll_characteristics": 0x8140,
        "size_of_stack_reserve": 0x100000,
        "size_of_stack_commit": 0x1000,
        "size_of_heap_reserve": 0x100000,
        "size_of_heap_commit": 0x1000,
        "number_of_rva_and_sizes": 16,
    }


@pytest.fixture
def sample_sections() -> list[bytes]:
    return [
        pack_section(b".text", 0x1900, 0x1000, 0x1A00, 0x400, characteristics=0x60000020),
        pack_section(b".rdata", 0x0800, 0x3000, 0x0800, 0x1E00, characteristics=0x40000040),
        pack_section(b".data", 0x0300, 0x4000, 0x0200, 0x2600, characteristics=0xC0000040),
    ]


@pytest.fixture
def sample_image(sample_fields: dict[str, Any], sample_sections: list[bytes]) -> bytes:
    """A realistic three-section PE32 image with a DOS stub and a trailer."""
    return build_image(
        sample_sections,
        e_lfanew=0x80,
        stub=b"\x0e\x1f\xba\x0e\x00\xb4\x09\xcd\x21\xb8\x01\x4c\xcd\x21",
        file_header=pack_file_header(
            number_of_sections=3, time_date_stamp=0x5F5E1000, characteristics=0x0102
        ),
        optional_header=pack_optional_header(
            directories=[(0, 0), (0x3100, 0x28), (0, 0), (0, 0), (0, 0), (0x5000, 0x1C)],
            **sample_fields,
        ),
        trailer=b"\xcc" * 64,
    )


@pytest.fixture
def quiet_logger() -> ToolLogger:
    return ToolLogger("test", log_level="DEBUG", console_output=False)


@pytest.fixture
def walker(quiet_logger: ToolLogger) -> ImageWalker:
    return ImageWalker(logger=quiet_logger)


@pytest.fixture
def recording_console() -> ToolConsole:
    return ToolConsole(record=True, width=160)
