"""
Zero-copy views over contiguous byte buffers.

A `ByteSlice` stores a flat unsigned-byte `memoryview` of the backing buffer
plus an `(offset, length)` index range into it. Narrowing a slice only creates
a new index range. Bytes are copied only by operations that return a new buffer:
`add`, `join`, `replacen`, `to_bytes`.

The backing buffer must not be mutated while views of it are alive. This isn't
checked at runtime.
"""

import hashlib
import mmap
from typing import Iterable, List, Tuple, Union

from stringslice import memory
from stringslice.errors import OutOfBoundsError
from stringslice.log import get_logger
from stringslice.memory import NOT_FOUND

logger = get_logger(__name__)

BytesLike = Union[bytes, bytearray, memoryview, mmap.mmap]
Range = Tuple[memoryview, int, int]

_EMPTY_BUFFER = memoryview(b"")


def as_flat_buffer(data) -> memoryview:
    """Exposes any contiguous buffer as a one-dimensional unsigned-byte `memoryview`."""
    view = memoryview(data)
    if not view.c_contiguous:
        raise ValueError("Only C-contiguous buffers can be viewed as slices")
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


def as_range(data) -> Range:
    """Converts slices, bytes-like objects and text into a `(buffer, offset, length)` triple.

    Text is encoded as UTF-8, which is the only case that allocates.
    """
    to_range = getattr(data, "_byte_range", None)
    if to_range is not None:
        return to_range()
    if isinstance(data, str):
        encoded = data.encode("utf-8")
        return memoryview(encoded), 0, len(encoded)
    buffer = as_flat_buffer(data)
    return buffer, 0, len(buffer)


def _coerce_or_none(data):
    # Non-contiguous buffers and unencodable text (lone surrogates) aren't comparable
    try:
        return as_range(data)
    except (TypeError, ValueError):
        return None


class ByteSlice:
    """An immutable `(buffer, offset, length)` view over bytes."""

    __slots__ = ("_buffer", "_offset", "_length")

    def __init__(self, data: Union[BytesLike, str, "ByteSlice"] = b""):
        self._buffer, self._offset, self._length = as_range(data)

    @classmethod
    def _view(cls, buffer: memoryview, offset: int, length: int) -> "ByteSlice":
        view = cls.__new__(cls)
        view._buffer = buffer
        view._offset = offset
        view._length = length
        return view

    def _byte_range(self) -> Range:
        return self._buffer, self._offset, self._length

    def _narrow(self, start: int, end: int) -> "ByteSlice":
        return ByteSlice._view(self._buffer, self._offset + start, end - start)

    # Properties

    @property
    def offset(self) -> int:
        """Start of the view within its backing buffer."""
        return self._offset

    @property
    def length(self) -> int:
        return self._length

    @property
    def buffer(self) -> memoryview:
        """The whole backing buffer, not only the viewed window."""
        return self._buffer

    def __len__(self) -> int:
        return self._length

    def is_empty(self) -> bool:
        return self._length == 0

    def __bool__(self) -> bool:
        return self._length != 0

    # Comparisons

    def compare(self, other) -> int:
        """Lexicographic three-way comparison: -1, 0 or 1."""
        buffer, offset, length = as_range(other)
        return memory.compare(self._buffer, self._offset, self._length, buffer, offset, length)

    def __eq__(self, other):
        other_range = _coerce_or_none(other)
        if other_range is None:
            return NotImplemented
        buffer, offset, length = other_range
        return memory.equal(self._buffer, self._offset, self._length, buffer, offset, length)

    def __ne__(self, other):
        result = self.__eq__(other)
        return result if result is NotImplemented else not result

    def _compare_or_none(self, other):
        other_range = _coerce_or_none(other)
        if other_range is None:
            return None
        buffer, offset, length = other_range
        return memory.compare(self._buffer, self._offset, self._length, buffer, offset, length)

    def __lt__(self, other):
        order = self._compare_or_none(other)
        return NotImplemented if order is None else order < 0

    def __le__(self, other):
        order = self._compare_or_none(other)
        return NotImplemented if order is None else order <= 0

    def __gt__(self, other):
        order = self._compare_or_none(other)
        return NotImplemented if order is None else order > 0

    def __ge__(self, other):
        order = self._compare_or_none(other)
        return NotImplemented if order is None else order >= 0

    # Hashing

    def __hash__(self) -> int:
        # Must match `hash(bytes)`, as slices compare equal to `bytes`
        return hash(self.to_bytes())

    def digest(self, name: str = "sha256") -> bytes:
        """Digest of the viewed bytes, identical to hashing an owned copy."""
        return hashlib.new(name, self.as_memoryview()).digest()

    def hexdigest(self, name: str = "sha256") -> str:
        return hashlib.new(name, self.as_memoryview()).hexdigest()

    # Search

    def _find_from(self, pattern: Range, start: int = 0) -> int:
        buffer, offset, length = pattern
        found = memory.find(
            self._buffer, self._offset + start, self._length - start, buffer, offset, length
        )
        return found if found == NOT_FOUND else found + start

    def find(self, pattern) -> int:
        """Offset of the first match of `pattern`, or `NOT_FOUND` (-1).

        An empty pattern matches at offset zero.
        """
        return self._find_from(as_range(pattern))

    def rfind(self, pattern) -> int:
        """Offset of the last match of `pattern`, or `NOT_FOUND` (-1).

        An empty pattern matches at the end of the slice.
        """
        buffer, offset, length = as_range(pattern)
        return memory.rfind(self._buffer, self._offset, self._length, buffer, offset, length)

    def contains(self, pattern) -> bool:
        return self.find(pattern) != NOT_FOUND

    def __contains__(self, pattern) -> bool:
        if isinstance(pattern, int):
            if not 0 <= pattern <= 0xFF:
                raise ValueError("Byte values must be in range(0, 256)")
            return memory.find_byte(self._buffer, self._offset, self._length, pattern) != NOT_FOUND
        return self.contains(pattern)

    def startswith(self, prefix) -> bool:
        buffer, offset, length = as_range(prefix)
        if length > self._length:
            return False
        return memory.equal(self._buffer, self._offset, length, buffer, offset, length)

    def endswith(self, suffix) -> bool:
        buffer, offset, length = as_range(suffix)
        if length > self._length:
            return False
        start = self._offset + self._length - length
        return memory.equal(self._buffer, start, length, buffer, offset, length)

    def strip_prefix(self, prefix) -> "ByteSlice":
        """The view without `prefix` if it starts with it, otherwise `self`."""
        if not self.startswith(prefix):
            return self
        return self._narrow(as_range(prefix)[2], self._length)

    def strip_suffix(self, suffix) -> "ByteSlice":
        """The view without `suffix` if it ends with it, otherwise `self`."""
        if not self.endswith(suffix):
            return self
        return self._narrow(0, self._length - as_range(suffix)[2])

    def count(self, pattern) -> int:
        """Number of non-overlapping matches.

        By convention an empty pattern matches `len(self) + 1` times: before the
        first byte, between every two bytes and after the last one.
        """
        needle = as_range(pattern)
        step = needle[2]
        if step == 0:
            return self._length + 1
        matches, position = 0, 0
        while True:
            found = self._find_from(needle, position)
            if found == NOT_FOUND:
                return matches
            matches += 1
            position = found + step

    # Bounds-checked narrowing

    def _check_range(self, start: int, end: int) -> None:
        if start > end:
            raise OutOfBoundsError(f"Inverted range [{start}, {end})", start, self._length)
        if start < 0:
            raise OutOfBoundsError(f"Negative start offset {start}", start, self._length)
        if end > self._length:
            raise OutOfBoundsError(f"End offset {end} exceeds length {self._length}", end, self._length)

    def split_at(self, mid: int) -> Tuple["ByteSlice", "ByteSlice"]:
        """Returns `(self[:mid], self[mid:])`."""
        self._check_range(0, mid)
        return self._narrow(0, mid), self._narrow(mid, self._length)

    def get_subslice(self, start: int, end: int) -> "ByteSlice":
        self._check_range(start, end)
        return self._narrow(start, end)

    def get_before(self, end: int) -> "ByteSlice":
        self._check_range(0, end)
        return self._narrow(0, end)

    def get_after(self, start: int) -> "ByteSlice":
        self._check_range(start, self._length)
        return self._narrow(start, self._length)

    def get_after_strict(self, start: int) -> "ByteSlice":
        """Like `get_after`, but the result may not be empty."""
        if start >= self._length:
            raise OutOfBoundsError(f"Start offset {start} must be below length {self._length}", start, self._length)
        return self.get_after(start)

    def __getitem__(self, key):
        if isinstance(key, slice):
            start, stop, step = key.indices(self._length)
            if step != 1:
                raise ValueError("Only contiguous slices are supported")
            return self.get_subslice(start, max(start, stop))
        index = key + self._length if key < 0 else key
        if not 0 <= index < self._length:
            raise OutOfBoundsError(f"Index {key} out of range for length {self._length}", key, self._length)
        return self._buffer[self._offset + index]

    # Splitting

    def split_once(self, pattern) -> Tuple[bool, "ByteSlice", "ByteSlice"]:
        """Splits around the first match of `pattern`, excluding the match.

        When there is no match, returns `(False, self, empty)`, so the whole
        slice stays on the non-consumed side.
        """
        needle = as_range(pattern)
        found = self._find_from(needle)
        if found == NOT_FOUND:
            return False, self, self._narrow(self._length, self._length)
        return True, self._narrow(0, found), self._narrow(found + needle[2], self._length)

    def rsplit_once(self, pattern) -> Tuple[bool, "ByteSlice", "ByteSlice"]:
        """Splits around the last match of `pattern`, excluding the match.

        When there is no match, returns `(False, empty, self)`.
        """
        buffer, offset, length = as_range(pattern)
        found = memory.rfind(self._buffer, self._offset, self._length, buffer, offset, length)
        if found == NOT_FOUND:
            return False, self._narrow(0, 0), self
        return True, self._narrow(0, found), self._narrow(found + length, self._length)

    def split(self, delimiter) -> List["ByteSlice"]:
        """Repeatedly applies `split_once`.

        An empty delimiter yields a single-element list with the whole slice,
        unlike `count`, which reports `len(self) + 1` matches for it.
        """
        needle = as_range(delimiter)
        if needle[2] == 0:
            return [self]
        parts = []
        position = 0
        while True:
            found = self._find_from(needle, position)
            if found == NOT_FOUND:
                parts.append(self._narrow(position, self._length))
                return parts
            parts.append(self._narrow(position, found))
            position = found + needle[2]

    # Allocating operations

    def add(self, other) -> "ByteSlice":
        """Concatenates into a newly allocated buffer."""
        buffer, offset, length = as_range(other)
        result = bytearray(self._length + length)
        target = memoryview(result)
        memory.copy(target, 0, self._buffer, self._offset, self._length)
        memory.copy(target, self._length, buffer, offset, length)
        logger.debug("buffer_allocated", operation="add", size=len(result))
        return ByteSlice._view(target, 0, len(result))

    def __add__(self, other):
        if _coerce_or_none(other) is None:
            return NotImplemented
        return self.add(other)

    def __radd__(self, other):
        if _coerce_or_none(other) is None:
            return NotImplemented
        return ByteSlice(other).add(self)

    def join(self, parts: Iterable) -> "ByteSlice":
        """Concatenates `parts` with `self` between consecutive elements."""
        ranges = [as_range(part) for part in parts]
        if not ranges:
            return ByteSlice._view(_EMPTY_BUFFER, 0, 0)
        size = sum(length for _, _, length in ranges) + self._length * (len(ranges) - 1)
        result = bytearray(size)
        target = memoryview(result)
        position = 0
        for index, (buffer, offset, length) in enumerate(ranges):
            if index:
                memory.copy(target, position, self._buffer, self._offset, self._length)
                position += self._length
            memory.copy(target, position, buffer, offset, length)
            position += length
        logger.debug("buffer_allocated", operation="join", size=size, parts=len(ranges))
        return ByteSlice._view(target, 0, size)

    def replacen(self, pattern, replacement, limit: int) -> "ByteSlice":
        """Replaces up to `limit` leftmost non-overlapping matches into a new buffer.

        The output buffer is sized up front, so `replacement` may not be longer
        than `pattern`.
        """
        needle = as_range(pattern)
        substitute = as_range(replacement)
        if needle[2] == 0:
            raise ValueError("Can't replace an empty pattern")
        if substitute[2] > needle[2]:
            raise ValueError(
                f"Replacement ({substitute[2]} bytes) can't be longer than the pattern ({needle[2]} bytes)"
            )

        matches = []
        position = 0
        while len(matches) < limit:
            found = self._find_from(needle, position)
            if found == NOT_FOUND:
                break
            matches.append(found)
            position = found + needle[2]

        size = self._length - len(matches) * (needle[2] - substitute[2])
        result = bytearray(size)
        target = memoryview(result)
        written, consumed = 0, 0
        for found in matches:
            memory.copy(target, written, self._buffer, self._offset + consumed, found - consumed)
            written += found - consumed
            memory.copy(target, written, *substitute)
            written += substitute[2]
            consumed = found + needle[2]
        memory.copy(target, written, self._buffer, self._offset + consumed, self._length - consumed)
        logger.debug("buffer_allocated", operation="replacen", size=size, replaced=len(matches))
        return ByteSlice._view(target, 0, size)

    # Iteration and conversion

    def iter(self) -> "ByteIterator":
        return ByteIterator(self)

    def __iter__(self) -> "ByteIterator":
        return ByteIterator(self)

    def __reversed__(self):
        iterator = ByteIterator(self)
        while not iterator.is_empty():
            yield iterator.next_back()

    def as_memoryview(self) -> memoryview:
        """The viewed window, without copying."""
        return self._buffer[self._offset : self._offset + self._length]

    def to_bytes(self) -> bytes:
        """An owned copy of the viewed bytes."""
        return self.as_memoryview().tobytes()

    def __bytes__(self) -> bytes:
        return self.to_bytes()

    def decode(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        return str(self.as_memoryview(), encoding, errors)

    def write_to(self, path: str) -> None:
        with open(path, "wb") as file:
            file.write(self.as_memoryview())

    def __repr__(self) -> str:
        return f"ByteSlice({self.to_bytes()!r})"


class ByteIterator:
    """Bidirectional iterator over the bytes of a slice.

    The only state is the `remaining` view: `next` drops its first byte,
    `next_back` its last one, and both stop once it is empty.
    """

    __slots__ = ("_remaining",)

    def __init__(self, source: ByteSlice):
        self._remaining = source

    def __iter__(self) -> "ByteIterator":
        return self

    def next(self) -> int:
        remaining = self._remaining
        if not remaining._length:
            raise StopIteration
        value = remaining._buffer[remaining._offset]
        self._remaining = ByteSlice._view(remaining._buffer, remaining._offset + 1, remaining._length - 1)
        return value

    __next__ = next

    def next_back(self) -> int:
        remaining = self._remaining
        if not remaining._length:
            raise StopIteration
        value = remaining._buffer[remaining._offset + remaining._length - 1]
        self._remaining = ByteSlice._view(remaining._buffer, remaining._offset, remaining._length - 1)
        return value

    def as_slice(self) -> ByteSlice:
        return self._remaining

    def is_empty(self) -> bool:
        return self._remaining._length == 0

    def __length_hint__(self) -> int:
        return self._remaining._length
