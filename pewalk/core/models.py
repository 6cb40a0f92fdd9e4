"""
PeWalk Data Models
===================

Pydantic models for the PE32 header records produced by the decoders in
:mod:`pewalk.parsers.pe_headers`.

Every record is frozen: it is built once, from a complete run of bytes,
and never mutated afterwards.  Integer widths are enforced through the
``U8`` / ``U16`` / ``U32`` / ``I32`` annotated aliases, and the fixed-count
arrays of the format (``e_res[4]``, ``e_res2[10]``, ``data_directory[16]``)
are tuples whose length is checked on construction.

References:
    - Microsoft. (2024). PE Format. Microsoft Learn.
      https://learn.microsoft.com/en-us/windows/win32/debug/pe-format
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import enum
from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_serializer,
    field_validator,
)


# ---------------------------------------------------------------------------
# Integer width aliases
# ---------------------------------------------------------------------------

U8 = Annotated[int, Field(ge=0, le=0xFF)]
U16 = Annotated[int, Field(ge=0, le=0xFFFF)]
U32 = Annotated[int, Field(ge=0, le=0xFFFF_FFFF)]
I32 = Annotated[int, Field(ge=-0x8000_0000, le=0x7FFF_FFFF)]

DOS_RESERVED_WORDS: int = 4
DOS_RESERVED2_WORDS: int = 10
NUMBER_OF_DIRECTORY_ENTRIES: int = 16
SECTION_NAME_SIZE: int = 8

MZ_SIGNATURE: int = 0x5A4D
NT_SIGNATURE: int = 0x0000_4550
PE32_MAGIC: int = 0x10B


# ---------------------------------------------------------------------------
# Walk states
# ---------------------------------------------------------------------------

class WalkState(str, enum.Enum):
    """Steps of the image walk, in the only order they may occur."""

    START = "start"
    SEEK = "seek"
    DECODE_NT_HEAD = "decode_nt_head"
    VALIDATE_SIGNATURE = "validate_signature"
    DECODE_SECTIONS = "decode_sections"
    DONE = "done"

    @property
    def label(self) -> str:
        """Human-readable name of the step for diagnostics."""
        return {
            "start": "DOS header decode",
            "seek": "seek to NT head",
            "decode_nt_head": "NT head decode",
            "validate_signature": "signature validation",
            "decode_sections": "section header decode",
            "done": "completion",
        }[self.value]


class _Record(BaseModel):
    """Base for every decoded header record."""

    model_config = ConfigDict(frozen=True, extra="ignore")


# ---------------------------------------------------------------------------
# DOS header
# ---------------------------------------------------------------------------

class DosHeader(_Record):
    """Legacy MS-DOS stub header (64 bytes at file offset 0).

    Only ``e_lfanew`` is functionally relevant: it is the absolute file
    offset of the NT head.  It is signed in the format, so a negative value
    is representable here and rejected by the walker before any seek.
    """

    e_magic: U16
    e_cblp: U16
    e_cp: U16
    e_crlc: U16
    e_cparhdr: U16
    e_minalloc: U16
    e_maxalloc: U16
    e_ss: U16
    e_sp: U16
    e_csum: U16
    e_ip: U16
    e_cs: U16
    e_lfarlc: U16
    e_ovno: U16
    e_res: tuple[U16, ...]
    e_oemid: U16
    e_oeminfo: U16
    e_res2: tuple[U16, ...]
    e_lfanew: I32

    @field_validator("e_res")
    @classmethod
    def _check_res(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        if len(v) != DOS_RESERVED_WORDS:
            raise ValueError(f"e_res must hold {DOS_RESERVED_WORDS} words, got {len(v)}")
        return v

    @field_validator("e_res2")
    @classmethod
    def _check_res2(cls, v: tuple[int, ...]) -> tuple[int, ...]:
        if len(v) != DOS_RESERVED2_WORDS:
            raise ValueError(f"e_res2 must hold {DOS_RESERVED2_WORDS} words, got {len(v)}")
        return v

    @property
    def has_mz_signature(self) -> bool:
        return self.e_magic == MZ_SIGNATURE


# ---------------------------------------------------------------------------
# Data directory
# ---------------------------------------------------------------------------

class DataDirectory(_Record):
    """One ``(virtual_address, size)`` slot of the optional header table."""

    virtual_address: U32
    size: U32

    @property
    def is_empty(self) -> bool:
        return self.virtual_address == 0 and self.size == 0


# ---------------------------------------------------------------------------
# COFF file header
# ---------------------------------------------------------------------------

class FileHeader(_Record):
    """COFF file header (20 bytes after the PE signature).

    Attributes:
        machine: Target machine type (e.g. ``0x14c`` for i386).
        number_of_sections: Count of section headers following the optional header.
        time_date_stamp: Link time, seconds since the Unix epoch.
        pointer_to_symbol_table: File offset of the COFF symbol table (deprecated).
        number_of_symbols: Symbol table entry count (deprecated).
        size_of_optional_header: Declared optional header size.  Not used to
            locate the section table.
        characteristics: ``IMAGE_FILE_*`` flag bits.
    """

    machine: U16
    number_of_sections: U16
    time_date_stamp: U32
    pointer_to_symbol_table: U32
    number_of_symbols: U32
    size_of_optional_header: U16
    characteristics: U16


# ---------------------------------------------------------------------------
# Optional header (PE32)
# ---------------------------------------------------------------------------

class OptionalHeader(_Record):
    """PE32 optional header: 96 bytes of scalars plus 16 data directories."""

    magic: U16
    major_linker_version: U8
    minor_linker_version: U8
    size_of_code: U32
    size_of_initialized_data: U32
    size_of_uninitialized_data: U32
    address_of_entry_point: U32
    base_of_code: U32
    base_of_data: U32
    image_base: U32
    section_alignment: U32
    file_alignment: U32
    major_operating_system_version: U16
    minor_operating_system_version: U16
    major_image_version: U16
    minor_image_version: U16
    major_subsystem_version: U16
    minor_subsystem_version: U16
    win32_version_value: U32
    size_of_image: U32
    size_of_headers: U32
    checksum: U32
    subsystem: U16
    dll_characteristics: U16
    size_of_stack_reserve: U32
    size_of_stack_commit: U32
    size_of_heap_reserve: U32
    size_of_heap_commit: U32
    loader_flags: U32
    number_of_rva_and_sizes: U32
    data_directory: tuple[DataDirectory, ...]

    @field_validator("data_directory")
    @classmethod
    def _check_directory_count(
        cls, v: tuple[DataDirectory, ...]
    ) -> tuple[DataDirectory, ...]:
        # The table size is fixed; number_of_rva_and_sizes does not change it.
        if len(v) != NUMBER_OF_DIRECTORY_ENTRIES:
            raise ValueError(
                f"data_directory must hold {NUMBER_OF_DIRECTORY_ENTRIES} "
                f"entries, got {len(v)}"
            )
        return v

    @property
    def is_pe32(self) -> bool:
        return self.magic == PE32_MAGIC


# ---------------------------------------------------------------------------
# NT head
# ---------------------------------------------------------------------------

class NtHead(_Record):
    """PE signature, COFF file header and optional header, in file order."""

    signature: U32
    file_header: FileHeader
    optional_header: OptionalHeader

    @property
    def has_valid_signature(self) -> bool:
        return self.signature == NT_SIGNATURE


# ---------------------------------------------------------------------------
# Section header
# ---------------------------------------------------------------------------

def decode_section_name(raw: bytes, encoding: str = "utf-8") -> str:
    """Decode an 8-byte section name without ever failing.

    The name is cut at the first NUL byte, then decoded with invalid
    sequences replaced by U+FFFD.  An all-NUL name yields ``""``.

    Args:
        raw: The raw name bytes.
        encoding: Codec to decode with; unknown codecs fall back to UTF-8.

    Returns:
        Display text for the name.
    """
    head = raw.split(b"\x00", 1)[0]
    try:
        return head.decode(encoding, errors="replace")
    except LookupError:
        return head.decode("utf-8", errors="replace")


class SectionHeader(_Record):
    """One 40-byte entry of the section table."""

    name: bytes
    phys_addr_or_virt_size: U32
    virt_addr: U32
    size_of_raw_data: U32
    ptr_to_raw_data: U32
    ptr_to_relocations: U32
    ptr_to_line_numbers: U32
    number_of_relocations: U16
    number_of_line_numbers: U16
    characteristics: U32

    @field_validator("name")
    @classmethod
    def _check_name(cls, v: bytes) -> bytes:
        if len(v) != SECTION_NAME_SIZE:
            raise ValueError(f"section name must be {SECTION_NAME_SIZE} bytes, got {len(v)}")
        return v

    @field_serializer("name")
    def _serialize_name(self, v: bytes) -> str:
        return v.hex()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_name(self) -> str:
        """Loss-tolerant UTF-8 rendering of :attr:`name`."""
        return decode_section_name(self.name)


# ---------------------------------------------------------------------------
# Walk result
# ---------------------------------------------------------------------------

class PEImage(_Record):
    """Everything a successful walk produced.

    Attributes:
        source: Path or label of the byte source.
        file_size: Length of the byte source in bytes.
        dos_header: Decoded DOS header.
        nt_head: Decoded NT head with a validated signature.
        sections: Section headers in file order.
    """

    source: str = ""
    file_size: int = Field(default=0, ge=0)
    dos_header: DosHeader
    nt_head: NtHead
    sections: tuple[SectionHeader, ...] = ()

    @property
    def file_header(self) -> FileHeader:
        return self.nt_head.file_header

    @property
    def optional_header(self) -> OptionalHeader:
        return self.nt_head.optional_header
