"""
Zero-copy byte and UTF-8 string slices.

    >>> import stringslice as ss
    >>> text = ss.CharSlice("a,b,c")
    >>> text.split_once(",")
    (True, CharSlice('a'), CharSlice('b,c'))
"""

from stringslice.byteslice import ByteIterator, ByteSlice
from stringslice.char import Char
from stringslice.charslice import CharIterator, CharSlice
from stringslice.errors import (
    InvalidCharBoundaryError,
    InvalidUtf8Error,
    OutOfBoundsError,
    SliceError,
)
from stringslice.memory import NOT_FOUND

__version__ = "0.1.0"

__all__ = [
    "NOT_FOUND",
    "ByteIterator",
    "ByteSlice",
    "Char",
    "CharIterator",
    "CharSlice",
    "InvalidCharBoundaryError",
    "InvalidUtf8Error",
    "OutOfBoundsError",
    "SliceError",
]
