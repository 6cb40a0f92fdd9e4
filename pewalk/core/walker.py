"""
PE Image Walker
================

Top-level orchestration of a PE header decode.  The walk is a linear state
machine with one terminal success state:

    START -> SEEK -> DECODE_NT_HEAD -> VALIDATE_SIGNATURE -> DECODE_SECTIONS -> DONE

Each state has one handler that consumes the partially built walk and
names the next state.  Any :class:`~pewalk.core.errors.PEWalkError` raised
by a handler aborts the whole walk: the exception is tagged with the state
it escaped from, logged once, and re-raised.  No partial result is ever
returned.

Usage::

    walker = ImageWalker()
    image = walker.walk_file("notepad.exe")
    for index, section in enumerate(image.sections):
        print(index, section.display_name)
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable, Optional

from shared.config import AppConfig
from shared.logger import ToolLogger

from pewalk.core.errors import BadSignatureError, PEWalkError
from pewalk.core.models import (
    DosHeader,
    NtHead,
    PEImage,
    SectionHeader,
    WalkState,
)
from pewalk.parsers.pe_headers import (
    OPTIONAL_HEADER_SIZE,
    read_dos_header,
    read_nt_head,
    read_section_headers,
)
from pewalk.parsers.reader import FieldReader


@dataclass
class _Walk:
    """Mutable scratch state owned by a single walk."""

    reader: FieldReader
    source: str
    dos_header: Optional[DosHeader] = None
    nt_head: Optional[NtHead] = None
    sections: list[SectionHeader] = field(default_factory=list)


class ImageWalker:
    """Decode the DOS header, NT head and section table of a PE32 image.

    Args:
        config: Application configuration; its ``[global]`` logging settings
            are used when no *logger* is passed.
        logger: Logger to report state transitions, diagnostics and failures.
    """

    def __init__(
        self,
        config: AppConfig | None = None,
        logger: ToolLogger | None = None,
    ) -> None:
        self._config: AppConfig = config or AppConfig()
        if logger is None:
            settings = self._config.global_settings
            logger = ToolLogger(
                "walker",
                log_level=settings.log_level,
                log_file=settings.log_file,
                json_logs=settings.log_json,
            )
        self._logger: ToolLogger = logger
        self._handlers: dict[WalkState, Callable[[_Walk], WalkState]] = {
            WalkState.START: self._decode_dos_header,
            WalkState.SEEK: self._seek_nt_head,
            WalkState.DECODE_NT_HEAD: self._decode_nt_head,
            WalkState.VALIDATE_SIGNATURE: self._validate_signature,
            WalkState.DECODE_SECTIONS: self._decode_sections,
        }

    # ------------------------------------------------------------------ #
    #  Public interface
    # ------------------------------------------------------------------ #

    def walk(self, stream: BinaryIO, source: str = "<stream>") -> PEImage:
        """Walk an open, seekable binary stream from offset 0.

        Args:
            stream: Binary stream positioned anywhere; the walk starts at 0.
            source: Label for the stream used in logs and in the result.

        Returns:
            The complete :class:`PEImage`.

        Raises:
            TruncatedError: A header ended before all of its fields were read.
            SeekOutOfRangeError: ``e_lfanew`` is negative or past the end.
            BadSignatureError: The NT signature is not ``PE\\0\\0``.
        """
        stream.seek(0)
        walk = _Walk(reader=FieldReader(stream), source=source)

        state = WalkState.START
        with self._logger.timed(f"walk {source}"):
            while state is not WalkState.DONE:
                with self._logger.operation(state.value):
                    state = self._step(state, walk)

        assert walk.dos_header is not None and walk.nt_head is not None
        return PEImage(
            source=source,
            file_size=walk.reader.size,
            dos_header=walk.dos_header,
            nt_head=walk.nt_head,
            sections=tuple(walk.sections),
        )

    def walk_file(self, path: str | Path) -> PEImage:
        """Open *path* read-only, walk it and close it again.

        Raises:
            OSError: If the file cannot be opened.
        """
        file_path = Path(path)
        with open(file_path, "rb") as fh:
            return self.walk(fh, source=str(file_path))

    def walk_bytes(self, data: bytes, source: str = "<memory>") -> PEImage:
        """Walk an in-memory image."""
        return self.walk(io.BytesIO(data), source=source)

    # ------------------------------------------------------------------ #
    #  State machine
    # ------------------------------------------------------------------ #

    def _step(self, state: WalkState, walk: _Walk) -> WalkState:
        """Run the handler for *state*; tag and log any failure."""
        self._logger.debug("Entering %s at offset 0x%x", state.value, walk.reader.tell())
        try:
            return self._handlers[state](walk)
        except PEWalkError as exc:
            exc.step = state
            self._logger.error(
                "%s: %s",
                walk.source,
                exc.describe(),
                error_kind=exc.kind,
                offset=exc.offset,
            )
            raise

    def _decode_dos_header(self, walk: _Walk) -> WalkState:
        walk.dos_header = read_dos_header(walk.reader)
        if not walk.dos_header.has_mz_signature:
            self._logger.warning(
                "DOS e_magic is 0x%04x, not 'MZ'; continuing",
                walk.dos_header.e_magic,
            )
        return WalkState.SEEK

    def _seek_nt_head(self, walk: _Walk) -> WalkState:
        assert walk.dos_header is not None
        # Negative e_lfanew is rejected by the reader, never wrapped.
        walk.reader.seek(walk.dos_header.e_lfanew)
        return WalkState.DECODE_NT_HEAD

    def _decode_nt_head(self, walk: _Walk) -> WalkState:
        walk.nt_head = read_nt_head(walk.reader)
        return WalkState.VALIDATE_SIGNATURE

    def _validate_signature(self, walk: _Walk) -> WalkState:
        assert walk.dos_header is not None and walk.nt_head is not None
        nt_head = walk.nt_head
        if not nt_head.has_valid_signature:
            raise BadSignatureError(nt_head.signature, offset=walk.dos_header.e_lfanew)

        optional = nt_head.optional_header
        if not optional.is_pe32:
            self._logger.warning(
                "Optional header magic is 0x%x, decoding with the PE32 layout",
                optional.magic,
            )
        declared = nt_head.file_header.size_of_optional_header
        if declared != OPTIONAL_HEADER_SIZE:
            self._logger.warning(
                "size_of_optional_header is %d, expected %d; section table "
                "is read right after the standard optional header",
                declared,
                OPTIONAL_HEADER_SIZE,
            )
        return WalkState.DECODE_SECTIONS

    def _decode_sections(self, walk: _Walk) -> WalkState:
        assert walk.nt_head is not None
        count = walk.nt_head.file_header.number_of_sections
        walk.sections = read_section_headers(walk.reader, count)
        self._logger.debug("Decoded %d section header(s)", len(walk.sections))
        return WalkState.DONE


# ========================= Module-level convenience ========================

def walk_image(path: str | Path, logger: ToolLogger | None = None) -> PEImage:
    """Walk the PE image at *path* with a default :class:`ImageWalker`."""
    return ImageWalker(logger=logger).walk_file(path)
