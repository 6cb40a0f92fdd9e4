"""
PE32 Fixed-Layout Header Decoders
==================================

Manual struct-based decoders for the fixed-size structures at the front of
a Portable Executable image:

    - DOS header (64 bytes, ``e_lfanew`` at offset 60)
    - COFF file header (20 bytes)
    - PE32 optional header (96 bytes of scalars + 16 x 8-byte data directories)
    - Section header (40 bytes)
    - NT head: 4-byte signature + file header + optional header

Each structure is described by an ordered layout table of
``(field_name, struct_code)`` pairs.  The order of that table *is* the
on-disk layout: decoders read it front to back through a
:class:`~pewalk.parsers.reader.FieldReader`, collect every value, and only
then build the record.  Decoders never seek; they trust the cursor their
caller left them at.

References:
    - Microsoft. (2024). PE Format. Microsoft Learn.
      https://learn.microsoft.com/en-us/windows/win32/debug/pe-format
    - Pietrek, M. (1994). Peering Inside the PE: A Tour of the Win32
      Portable Executable File Format. Microsoft Systems Journal.
"""

from __future__ import annotations

import struct
from typing import Any

from pewalk.core.errors import TruncatedError
from pewalk.core.models import (
    DOS_RESERVED2_WORDS,
    DOS_RESERVED_WORDS,
    NUMBER_OF_DIRECTORY_ENTRIES,
    SECTION_NAME_SIZE,
    DataDirectory,
    DosHeader,
    FileHeader,
    NtHead,
    OptionalHeader,
    SectionHeader,
)
from pewalk.parsers.reader import FieldReader


Layout = tuple[tuple[str, str], ...]

# ---------------------------------------------------------------------------
# Layout tables
# ---------------------------------------------------------------------------

DOS_HEADER_LAYOUT: Layout = (
    ("e_magic", "H"),
    ("e_cblp", "H"),
    ("e_cp", "H"),
    ("e_crlc", "H"),
    ("e_cparhdr", "H"),
    ("e_minalloc", "H"),
    ("e_maxalloc", "H"),
    ("e_ss", "H"),
    ("e_sp", "H"),
    ("e_csum", "H"),
    ("e_ip", "H"),
    ("e_cs", "H"),
    ("e_lfarlc", "H"),
    ("e_ovno", "H"),
    ("e_res", f"{DOS_RESERVED_WORDS}H"),
    ("e_oemid", "H"),
    ("e_oeminfo", "H"),
    ("e_res2", f"{DOS_RESERVED2_WORDS}H"),
    ("e_lfanew", "i"),
)

DATA_DIRECTORY_LAYOUT: Layout = (
    ("virtual_address", "I"),
    ("size", "I"),
)

FILE_HEADER_LAYOUT: Layout = (
    ("machine", "H"),
    ("number_of_sections", "H"),
    ("time_date_stamp", "I"),
    ("pointer_to_symbol_table", "I"),
    ("number_of_symbols", "I"),
    ("size_of_optional_header", "H"),
    ("characteristics", "H"),
)

# Scalar part only; the 16 data directories follow it.
OPTIONAL_HEADER_LAYOUT: Layout = (
    ("magic", "H"),
    ("major_linker_version", "B"),
    ("minor_linker_version", "B"),
    ("size_of_code", "I"),
    ("size_of_initialized_data", "I"),
    ("size_of_uninitialized_data", "I"),
    ("address_of_entry_point", "I"),
    ("base_of_code", "I"),
    ("base_of_data", "I"),
    ("image_base", "I"),
    ("section_alignment", "I"),
    ("file_alignment", "I"),
    ("major_operating_system_version", "H"),
    ("minor_operating_system_version", "H"),
    ("major_image_version", "H"),
    ("minor_image_version", "H"),
    ("major_subsystem_version", "H"),
    ("minor_subsystem_version", "H"),
    ("win32_version_value", "I"),
    ("size_of_image", "I"),
    ("size_of_headers", "I"),
    ("checksum", "I"),
    ("subsystem", "H"),
    ("dll_characteristics", "H"),
    ("size_of_stack_reserve", "I"),
    ("size_of_stack_commit", "I"),
    ("size_of_heap_reserve", "I"),
    ("size_of_heap_commit", "I"),
    ("loader_flags", "I"),
    ("number_of_rva_and_sizes", "I"),
)

SECTION_HEADER_LAYOUT: Layout = (
    ("name", f"{SECTION_NAME_SIZE}s"),
    ("phys_addr_or_virt_size", "I"),
    ("virt_addr", "I"),
    ("size_of_raw_data", "I"),
    ("ptr_to_raw_data", "I"),
    ("ptr_to_relocations", "I"),
    ("ptr_to_line_numbers", "I"),
    ("number_of_relocations", "H"),
    ("number_of_line_numbers", "H"),
    ("characteristics", "I"),
)


def layout_size(layout: Layout) -> int:
    """Return the on-disk byte size of *layout*."""
    return struct.calcsize("<" + "".join(code for _, code in layout))


DOS_HEADER_SIZE: int = layout_size(DOS_HEADER_LAYOUT)                # 64
FILE_HEADER_SIZE: int = layout_size(FILE_HEADER_LAYOUT)              # 20
DATA_DIRECTORY_SIZE: int = layout_size(DATA_DIRECTORY_LAYOUT)        # 8
OPTIONAL_HEADER_SIZE: int = (
    layout_size(OPTIONAL_HEADER_LAYOUT)
    + NUMBER_OF_DIRECTORY_ENTRIES * DATA_DIRECTORY_SIZE
)                                                                    # 224
SECTION_HEADER_SIZE: int = layout_size(SECTION_HEADER_LAYOUT)        # 40
SIGNATURE_SIZE: int = 4


# ---------------------------------------------------------------------------
# Generic field walker
# ---------------------------------------------------------------------------

def read_fields(reader: FieldReader, layout: Layout, record: str) -> dict[str, Any]:
    """Read every field of *layout* in order and return them by name.

    Single-width integer codes go through :meth:`FieldReader.read_scalar`.
    Repeated codes such as ``"4H"`` become a tuple of that many values and
    ``"<n>s"`` becomes a raw ``bytes`` run of length *n*.

    Raises:
        TruncatedError: If the source ends before the layout is complete.
    """
    values: dict[str, Any] = {}
    for name, code in layout:
        what = f"{record}.{name}"
        if code.endswith("s"):
            values[name] = reader.read_bytes(int(code[:-1]), what=what)
        elif len(code) > 1:
            count, unit = int(code[:-1]), code[-1]
            values[name] = tuple(
                reader.read_scalar(unit, what=what) for _ in range(count)
            )
        else:
            values[name] = reader.read_scalar(code, what=what)
    return values


# ---------------------------------------------------------------------------
# Decoders
# ---------------------------------------------------------------------------

def read_dos_header(reader: FieldReader) -> DosHeader:
    """Decode the 64-byte DOS header at the current position."""
    return DosHeader(**read_fields(reader, DOS_HEADER_LAYOUT, "dos_header"))


def read_data_directory(reader: FieldReader) -> DataDirectory:
    """Decode one 8-byte data directory entry."""
    return DataDirectory(**read_fields(reader, DATA_DIRECTORY_LAYOUT, "data_directory"))


def read_file_header(reader: FieldReader) -> FileHeader:
    """Decode the 20-byte COFF file header."""
    return FileHeader(**read_fields(reader, FILE_HEADER_LAYOUT, "file_header"))


def read_optional_header(reader: FieldReader) -> OptionalHeader:
    """Decode the 224-byte PE32 optional header.

    Always reads exactly 16 data directories after the scalar fields,
    whatever ``number_of_rva_and_sizes`` says.
    """
    fields = read_fields(reader, OPTIONAL_HEADER_LAYOUT, "optional_header")
    directories = tuple(
        read_data_directory(reader) for _ in range(NUMBER_OF_DIRECTORY_ENTRIES)
    )
    return OptionalHeader(**fields, data_directory=directories)


def read_section_header(reader: FieldReader) -> SectionHeader:
    """Decode one 40-byte section header."""
    return SectionHeader(**read_fields(reader, SECTION_HEADER_LAYOUT, "section_header"))


def read_nt_head(reader: FieldReader) -> NtHead:
    """Decode signature, file header and optional header, in that order.

    The signature is not checked here, so a malformed head can still be
    inspected; the walker rejects it before touching the section table.
    """
    signature = reader.read_scalar("I", what="nt_head.signature")
    file_header = read_file_header(reader)
    optional_header = read_optional_header(reader)
    return NtHead(
        signature=signature,
        file_header=file_header,
        optional_header=optional_header,
    )


def read_section_headers(reader: FieldReader, count: int) -> list[SectionHeader]:
    """Decode *count* consecutive section headers.

    Raises:
        TruncatedError: Naming the index of the first header that could not
            be read completely.
    """
    sections: list[SectionHeader] = []
    for index in range(count):
        try:
            sections.append(read_section_header(reader))
        except TruncatedError as exc:
            raise TruncatedError(
                exc.needed,
                exc.available,
                what=f"section #{index} of {count} ({exc.what})",
                offset=exc.offset,
            ) from exc
    return sections
