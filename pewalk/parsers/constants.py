"""
PE Constant Tables
===================

Name lookups for the numeric fields the presentation layer renders:
machine types, COFF characteristics, subsystems, section flags and the
standard data directory slots.  Decoding never depends on these tables.
"""

from __future__ import annotations

# Machine types
IMAGE_FILE_MACHINE_UNKNOWN: int = 0x0
IMAGE_FILE_MACHINE_I386: int = 0x14C
IMAGE_FILE_MACHINE_R3000: int = 0x162
IMAGE_FILE_MACHINE_R4000: int = 0x166
IMAGE_FILE_MACHINE_ARM: int = 0x1C0
IMAGE_FILE_MACHINE_ARMNT: int = 0x1C4
IMAGE_FILE_MACHINE_IA64: int = 0x200
IMAGE_FILE_MACHINE_MIPS16: int = 0x266
IMAGE_FILE_MACHINE_RISCV32: int = 0x5032
IMAGE_FILE_MACHINE_AMD64: int = 0x8664
IMAGE_FILE_MACHINE_ARM64: int = 0xAA64

MACHINE_NAMES: dict[int, str] = {
    IMAGE_FILE_MACHINE_UNKNOWN: "Unknown",
    IMAGE_FILE_MACHINE_I386: "x86",
    IMAGE_FILE_MACHINE_R3000: "MIPS R3000",
    IMAGE_FILE_MACHINE_R4000: "MIPS R4000",
    IMAGE_FILE_MACHINE_ARM: "ARM",
    IMAGE_FILE_MACHINE_ARMNT: "ARM Thumb-2",
    IMAGE_FILE_MACHINE_IA64: "IA-64",
    IMAGE_FILE_MACHINE_MIPS16: "MIPS16",
    IMAGE_FILE_MACHINE_RISCV32: "RISC-V 32",
    IMAGE_FILE_MACHINE_AMD64: "x86_64",
    IMAGE_FILE_MACHINE_ARM64: "AArch64",
}

# COFF characteristics
FILE_CHARACTERISTICS: dict[int, str] = {
    0x0001: "RELOCS_STRIPPED",
    0x0002: "EXECUTABLE_IMAGE",
    0x0004: "LINE_NUMS_STRIPPED",
    0x0008: "LOCAL_SYMS_STRIPPED",
    0x0020: "LARGE_ADDRESS_AWARE",
    0x0100: "32BIT_MACHINE",
    0x0200: "DEBUG_STRIPPED",
    0x0400: "REMOVABLE_RUN_FROM_SWAP",
    0x0800: "NET_RUN_FROM_SWAP",
    0x1000: "SYSTEM",
    0x2000: "DLL",
    0x4000: "UP_SYSTEM_ONLY",
}

SUBSYSTEM_NAMES: dict[int, str] = {
    0: "Unknown",
    1: "Native",
    2: "Windows GUI",
    3: "Windows Console",
    7: "POSIX Console",
    9: "Windows CE GUI",
    10: "EFI Application",
    11: "EFI Boot Service Driver",
    12: "EFI Runtime Driver",
    13: "EFI ROM",
    14: "Xbox",
}

# Section characteristics
IMAGE_SCN_CNT_CODE: int = 0x00000020
IMAGE_SCN_CNT_INITIALIZED_DATA: int = 0x00000040
IMAGE_SCN_CNT_UNINITIALIZED_DATA: int = 0x00000080
IMAGE_SCN_MEM_EXECUTE: int = 0x20000000
IMAGE_SCN_MEM_READ: int = 0x40000000
IMAGE_SCN_MEM_WRITE: int = 0x80000000

# Index order of the optional header's data directory table
DIRECTORY_NAMES: tuple[str, ...] = (
    "Export",
    "Import",
    "Resource",
    "Exception",
    "Security",
    "Base Relocation",
    "Debug",
    "Architecture",
    "Global Ptr",
    "TLS",
    "Load Config",
    "Bound Import",
    "IAT",
    "Delay Import",
    "COM Descriptor",
    "Reserved",
)


def machine_name(machine: int) -> str:
    return MACHINE_NAMES.get(machine, f"unknown(0x{machine:x})")


def subsystem_name(subsystem: int) -> str:
    return SUBSYSTEM_NAMES.get(subsystem, f"Unknown(0x{subsystem:x})")


def file_characteristics_names(characteristics: int) -> list[str]:
    """Return the names of every known flag set in *characteristics*."""
    return [
        name for bit, name in FILE_CHARACTERISTICS.items()
        if characteristics & bit
    ]


def section_flags(characteristics: int) -> str:
    """Convert a section characteristics bitmask to e.g. ``"R X CODE"``."""
    parts: list[str] = []
    if characteristics & IMAGE_SCN_MEM_READ:
        parts.append("R")
    if characteristics & IMAGE_SCN_MEM_WRITE:
        parts.append("W")
    if characteristics & IMAGE_SCN_MEM_EXECUTE:
        parts.append("X")
    if characteristics & IMAGE_SCN_CNT_CODE:
        parts.append("CODE")
    if characteristics & IMAGE_SCN_CNT_INITIALIZED_DATA:
        parts.append("IDATA")
    if characteristics & IMAGE_SCN_CNT_UNINITIALIZED_DATA:
        parts.append("UDATA")
    return " ".join(parts) if parts else "-"
