"""
PeWalk Decode Errors
=====================

Exception hierarchy raised by the field reader, the fixed-layout decoders
and the image walker.  Decoders raise without a ``step``; the walker tags
the exception with the :class:`~pewalk.core.models.WalkState` in which it
happened before re-raising it to the caller.
"""

from __future__ import annotations

from typing import Optional

from pewalk.core.models import WalkState


class PEWalkError(Exception):
    """Base class for every failure of a PE header walk.

    Attributes:
        step:   Walk state the failure occurred in, once tagged by the walker.
        offset: Stream position associated with the failure, if known.
    """

    kind: str = "PEWalkError"

    def __init__(
        self,
        message: str,
        *,
        step: Optional[WalkState] = None,
        offset: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.offset = offset

    def describe(self) -> str:
        """Return ``"<Kind> during <step>: <message>"`` for user display."""
        where = self.step.label if self.step is not None else "decode"
        return f"{self.kind} during {where}: {self.message}"


class TruncatedError(PEWalkError):
    """Fewer bytes remain in the source than a field or record requires."""

    kind = "Truncated"

    def __init__(
        self,
        needed: int,
        available: int,
        *,
        what: str = "field",
        offset: Optional[int] = None,
    ) -> None:
        at = f" at offset 0x{offset:x}" if offset is not None else ""
        super().__init__(
            f"{what} needs {needed} byte(s){at}, only {available} available",
            offset=offset,
        )
        self.needed = needed
        self.available = available
        self.what = what


class SeekOutOfRangeError(PEWalkError):
    """A seek target is negative or lies outside the byte source."""

    kind = "SeekOutOfRange"

    def __init__(self, target: int, size: int) -> None:
        super().__init__(
            f"cannot seek to offset {target} in a {size}-byte source",
            offset=target,
        )
        self.target = target
        self.size = size


class BadSignatureError(PEWalkError):
    """The NT head signature is not ``PE\\0\\0`` (``0x00004550``)."""

    kind = "BadSignature"

    def __init__(self, signature: int, *, offset: Optional[int] = None) -> None:
        super().__init__(
            f"NT signature is 0x{signature:08x}, expected 0x00004550",
            offset=offset,
        )
        self.signature = signature
