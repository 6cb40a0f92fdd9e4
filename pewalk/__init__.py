"""
PeWalk -- PE Header Walker
===========================

Read-only decoder for the structural headers of Windows Portable
Executable (PE32) images.  A walk reads the DOS header, seeks to the NT
head it points at, checks the ``PE\\0\\0`` signature and decodes the
section table that follows the optional header.

References:
    - Microsoft. (2024). PE Format. Microsoft Learn.
    - Pietrek, M. (1994). Peering Inside the PE.
"""

__version__ = "1.0.0"

from pewalk.core.errors import (
    BadSignatureError,
    PEWalkError,
    SeekOutOfRangeError,
    TruncatedError,
)
from pewalk.core.models import PEImage, WalkState
from pewalk.core.walker import ImageWalker, walk_image

__all__ = [
    "BadSignatureError",
    "ImageWalker",
    "PEImage",
    "PEWalkError",
    "SeekOutOfRangeError",
    "TruncatedError",
    "WalkState",
    "walk_image",
]
