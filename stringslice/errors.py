"""
Exception types raised by slices, characters and iterators.

Every class derives from `SliceError` and from the closest builtin, so callers
can catch either `IndexError`/`ValueError` or the library-specific types.
Exhausted iterators raise the builtin `StopIteration`.
"""


class SliceError(Exception):
    """Base class for every error raised by `stringslice`."""


class OutOfBoundsError(SliceError, IndexError):
    """An index or range exceeds the slice length, or `start > end`."""

    def __init__(self, message: str, index: int = -1, length: int = -1):
        super().__init__(message)
        self.index = index
        self.length = length


class InvalidCharBoundaryError(SliceError, ValueError):
    """A byte offset of a `CharSlice` does not start a valid UTF-8 character."""

    def __init__(self, message: str, index: int = -1):
        super().__init__(message)
        self.index = index


class InvalidUtf8Error(InvalidCharBoundaryError):
    """Validated iteration or counting met bytes that are not valid UTF-8."""
