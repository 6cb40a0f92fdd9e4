"""Tests for the header record models."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from pewalk.core.errors import BadSignatureError, TruncatedError
from pewalk.core.models import (
    DataDirectory,
    DosHeader,
    SectionHeader,
    WalkState,
    decode_section_name,
)


def _dos_kwargs(**overrides: object) -> dict[str, object]:
    kwargs: dict[str, object] = {
        name: 0
        for name in (
            "e_magic", "e_cblp", "e_cp", "e_crlc", "e_cparhdr", "e_minalloc",
            "e_maxalloc", "e_ss", "e_sp", "e_csum", "e_ip", "e_cs",
            "e_lfarlc", "e_ovno", "e_oemid", "e_oeminfo", "e_lfanew",
        )
    }
    kwargs["e_res"] = (0,) * 4
    kwargs["e_res2"] = (0,) * 10
    kwargs.update(overrides)
    return kwargs


def _section(name: bytes) -> SectionHeader:
    return SectionHeader(
        name=name,
        phys_addr_or_virt_size=0,
        virt_addr=0x1000,
        size_of_raw_data=0,
        ptr_to_raw_data=0,
        ptr_to_relocations=0,
        ptr_to_line_numbers=0,
        number_of_relocations=0,
        number_of_line_numbers=0,
        characteristics=0,
    )


class TestRecords:
    def test_records_are_frozen(self) -> None:
        dd = DataDirectory(virtual_address=1, size=2)
        with pytest.raises(ValidationError):
            dd.size = 3  # type: ignore[misc]

    @pytest.mark.parametrize("field,length", [("e_res", 3), ("e_res", 5), ("e_res2", 9)])
    def test_fixed_dos_arrays(self, field: str, length: int) -> None:
        with pytest.raises(ValidationError):
            DosHeader(**_dos_kwargs(**{field: (0,) * length}))

    def test_integer_widths_enforced(self) -> None:
        with pytest.raises(ValidationError):
            DataDirectory(virtual_address=-1, size=0)
        with pytest.raises(ValidationError):
            DosHeader(**_dos_kwargs(e_lfanew=0x8000_0000))

    def test_section_name_must_be_eight_bytes(self) -> None:
        with pytest.raises(ValidationError):
            _section(b".text")

    def test_section_json_carries_hex_and_text(self) -> None:
        dumped = _section(b".text\x00\x00\x00").model_dump(mode="json")
        assert dumped["name"] == "2e74657874000000"
        assert dumped["display_name"] == ".text"


class TestSectionNames:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            (b"\x00" * 8, ""),
            (b".text\x00\x00\x00", ".text"),
            (b"verylong", "verylong"),
            (b"a\x00b\x00c\x00d\x00", "a"),
            (b"\xc3\xa9t\xff\x00\x00\x00\x00", "\u00e9t\ufffd"),
        ],
    )
    def test_decode(self, raw: bytes, expected: str) -> None:
        assert decode_section_name(raw) == expected

    def test_other_codec(self) -> None:
        assert decode_section_name(b"\xe9t\xe9\x00\x00\x00\x00\x00", "latin-1") == "été"

    def test_unknown_codec_falls_back(self) -> None:
        assert decode_section_name(b".data\x00\x00\x00", "no-such-codec") == ".data"


class TestErrors:
    def test_describe_before_and_after_tagging(self) -> None:
        exc = BadSignatureError(0x4D5A)
        assert exc.describe().startswith("BadSignature during decode:")
        exc.step = WalkState.VALIDATE_SIGNATURE
        assert exc.describe() == (
            "BadSignature during signature validation: "
            "NT signature is 0x00004d5a, expected 0x00004550"
        )

    def test_truncated_message(self) -> None:
        exc = TruncatedError(40, 12, what="section_header", offset=0x178)
        assert str(exc) == "section_header needs 40 byte(s) at offset 0x178, only 12 available"
