"""
UTF-8 aware views.

`CharSlice` wraps a `ByteSlice` and guarantees that both of its edges are
character boundaries. Search and split algorithms are shared with `ByteSlice`
and work on bytes; a valid UTF-8 encoding never contains another character's
leading byte in a trailing position, so matches of valid patterns can't
straddle a character. Every operation that narrows the view still re-validates
both new edges.

Character iteration comes in two flavors:

    -   `next`, `next_back`, `count` validate every character and raise
        `InvalidUtf8Error` on malformed input.
    -   `unsafe_next`, `unsafe_next_back`, `unsafe_count` trust the input,
        advancing by the length implied by the leading byte and returning
        invalid `Char` objects instead of raising.
"""

from typing import Iterable, List, Tuple, Union

from stringslice.byteslice import ByteSlice, BytesLike, Range, as_range
from stringslice.char import Char
from stringslice.errors import InvalidCharBoundaryError, InvalidUtf8Error, OutOfBoundsError
from stringslice.memory import NOT_FOUND
from stringslice.utf8 import (
    MAX_CHAR_LENGTH,
    assumed_length,
    decode_length_at,
    is_continuation,
)


class CharSlice:
    """An immutable view over bytes whose edges are UTF-8 character boundaries."""

    __slots__ = ("_bytes",)

    def __init__(self, data: Union[BytesLike, str, ByteSlice, "CharSlice"] = b""):
        if isinstance(data, CharSlice):
            self._bytes = data._bytes
            return
        view = data if isinstance(data, ByteSlice) else ByteSlice(data)
        if not isinstance(data, str):
            _check_edges(view)
        self._bytes = view

    @classmethod
    def from_byte_slice(cls, view: ByteSlice) -> "CharSlice":
        """Validates the edges of an existing view."""
        _check_edges(view)
        return cls._trusted(view)

    @classmethod
    def unchecked(cls, data: Union[BytesLike, str, ByteSlice]) -> "CharSlice":
        """Wraps `data` without validating its edges.

        The caller vouches for the boundary invariant. Validated iteration over
        such a slice still reports malformed bytes with `InvalidUtf8Error`.
        """
        return cls._trusted(data if isinstance(data, ByteSlice) else ByteSlice(data))

    @classmethod
    def _trusted(cls, view: ByteSlice) -> "CharSlice":
        text = cls.__new__(cls)
        text._bytes = view
        return text

    def _byte_range(self) -> Range:
        return self._bytes._byte_range()

    def as_bytes(self) -> ByteSlice:
        return self._bytes

    # Properties

    @property
    def offset(self) -> int:
        return self._bytes._offset

    @property
    def length(self) -> int:
        return self._bytes._length

    def __len__(self) -> int:
        return self._bytes._length

    def is_empty(self) -> bool:
        return self._bytes._length == 0

    def __bool__(self) -> bool:
        return self._bytes._length != 0

    # Boundaries

    def is_char_boundary(self, index: int) -> bool:
        view = self._bytes
        if index == view._length:
            return True
        if index < 0 or index > view._length:
            return False
        return decode_length_at(view._buffer, view._offset + index, view._offset + view._length) != 0

    def _narrow(self, start: int, end: int) -> "CharSlice":
        self._bytes._check_range(start, end)
        for edge in (start, end):
            if not self.is_char_boundary(edge):
                raise InvalidCharBoundaryError(f"Offset {edge} is not a character boundary", edge)
        return CharSlice._trusted(self._bytes._narrow(start, end))

    def get(self, index: int) -> Char:
        """The character starting at byte offset `index`."""
        view = self._bytes
        if not 0 <= index < view._length:
            raise OutOfBoundsError(f"Index {index} out of range for length {view._length}", index, view._length)
        start = view._offset + index
        end = view._offset + view._length
        length = decode_length_at(view._buffer, start, end)
        if not length:
            raise InvalidCharBoundaryError(f"No valid character starts at offset {index}", index)
        return Char._trusted(view._buffer[start : start + length].tobytes())

    def split_at(self, mid: int) -> Tuple["CharSlice", "CharSlice"]:
        return self._narrow(0, mid), self._narrow(mid, self.length)

    def get_subslice(self, start: int, end: int) -> "CharSlice":
        return self._narrow(start, end)

    def get_before(self, end: int) -> "CharSlice":
        return self._narrow(0, end)

    def get_after(self, start: int) -> "CharSlice":
        return self._narrow(start, self.length)

    def get_after_strict(self, start: int) -> "CharSlice":
        if start >= self.length:
            raise OutOfBoundsError(f"Start offset {start} must be below length {self.length}", start, self.length)
        return self._narrow(start, self.length)

    def __getitem__(self, key):
        if isinstance(key, slice):
            start, stop, step = key.indices(self.length)
            if step != 1:
                raise ValueError("Only contiguous slices are supported")
            return self._narrow(start, max(start, stop))
        index = key + self.length if key < 0 else key
        return self.get(index)

    # Comparisons and hashing, shared with byte slices

    def compare(self, other) -> int:
        return self._bytes.compare(other)

    def __eq__(self, other):
        return self._bytes.__eq__(other)

    def __ne__(self, other):
        return self._bytes.__ne__(other)

    def __lt__(self, other):
        return self._bytes.__lt__(other)

    def __le__(self, other):
        return self._bytes.__le__(other)

    def __gt__(self, other):
        return self._bytes.__gt__(other)

    def __ge__(self, other):
        return self._bytes.__ge__(other)

    def __hash__(self) -> int:
        return hash(self._bytes)

    def digest(self, name: str = "sha256") -> bytes:
        return self._bytes.digest(name)

    def hexdigest(self, name: str = "sha256") -> str:
        return self._bytes.hexdigest(name)

    # Search

    def find(self, pattern) -> int:
        return self._bytes.find(pattern)

    def rfind(self, pattern) -> int:
        return self._bytes.rfind(pattern)

    def contains(self, pattern) -> bool:
        return self._bytes.contains(pattern)

    def __contains__(self, pattern) -> bool:
        return self._bytes.__contains__(pattern)

    def startswith(self, prefix) -> bool:
        return self._bytes.startswith(prefix)

    def endswith(self, suffix) -> bool:
        return self._bytes.endswith(suffix)

    def strip_prefix(self, prefix) -> "CharSlice":
        if not self._bytes.startswith(prefix):
            return self
        return self._narrow(as_range(prefix)[2], self.length)

    def strip_suffix(self, suffix) -> "CharSlice":
        if not self._bytes.endswith(suffix):
            return self
        return self._narrow(0, self.length - as_range(suffix)[2])

    def split_once(self, pattern) -> Tuple[bool, "CharSlice", "CharSlice"]:
        """Splits around the first match. Without one, returns `(False, self, empty)`."""
        needle = as_range(pattern)
        found = self._bytes._find_from(needle)
        if found == NOT_FOUND:
            return False, self, self._narrow(self.length, self.length)
        return True, self._narrow(0, found), self._narrow(found + needle[2], self.length)

    def rsplit_once(self, pattern) -> Tuple[bool, "CharSlice", "CharSlice"]:
        """Splits around the last match. Without one, returns `(False, empty, self)`."""
        needle = as_range(pattern)
        found = self._bytes.rfind(pattern)
        if found == NOT_FOUND:
            return False, self._narrow(0, 0), self
        return True, self._narrow(0, found), self._narrow(found + needle[2], self.length)

    def count(self, pattern) -> int:
        """Non-overlapping matches; an empty pattern counts `len(self) + 1`."""
        return self._bytes.count(pattern)

    def split(self, delimiter) -> List["CharSlice"]:
        """Repeatedly applies `split_once`.

        An empty delimiter returns `[self]`, even though `count` reports
        `len(self) + 1` matches for it.
        """
        needle = as_range(delimiter)
        if needle[2] == 0:
            return [self]
        delimiter = ByteSlice._view(*needle)
        parts = []
        rest = self
        while True:
            found, head, tail = rest.split_once(delimiter)
            parts.append(head)
            if not found:
                return parts
            rest = tail

    # Allocating operations

    def add(self, other) -> "CharSlice":
        return CharSlice.from_byte_slice(self._bytes.add(other))

    def __add__(self, other):
        result = self._bytes.__add__(other)
        return result if result is NotImplemented else CharSlice.from_byte_slice(result)

    def __radd__(self, other):
        result = self._bytes.__radd__(other)
        return result if result is NotImplemented else CharSlice.from_byte_slice(result)

    def join(self, parts: Iterable) -> "CharSlice":
        return CharSlice.from_byte_slice(self._bytes.join(parts))

    def replacen(self, pattern, replacement, limit: int) -> "CharSlice":
        """Replaces up to `limit` leftmost non-overlapping matches into a new buffer.

        Only non-growing replacements are supported: `replacement` may not be
        longer than `pattern` in bytes.
        """
        return CharSlice.from_byte_slice(self._bytes.replacen(pattern, replacement, limit))

    # Characters

    def chars(self) -> "CharIterator":
        return CharIterator(self)

    def __iter__(self) -> "CharIterator":
        return CharIterator(self)

    def is_ascii(self) -> bool:
        return all(byte < 0x80 for byte in self._bytes.as_memoryview())

    def is_valid_utf8(self) -> bool:
        return CharIterator(self).validate_utf8()

    # Conversion

    def as_memoryview(self) -> memoryview:
        return self._bytes.as_memoryview()

    def to_bytes(self) -> bytes:
        return self._bytes.to_bytes()

    def __bytes__(self) -> bytes:
        return self._bytes.to_bytes()

    def decode(self, encoding: str = "utf-8", errors: str = "strict") -> str:
        return self._bytes.decode(encoding, errors)

    def write_to(self, path: str) -> None:
        self._bytes.write_to(path)

    def __str__(self) -> str:
        return self._bytes.decode("utf-8", "replace")

    def __repr__(self) -> str:
        return f"CharSlice({str(self)!r})"


def _check_edges(view: ByteSlice) -> None:
    if view._length and not decode_length_at(view._buffer, view._offset, view._offset + view._length):
        raise InvalidCharBoundaryError("Slice doesn't start at a character boundary", 0)
    # A continuation byte right after the end means the last character was cut
    end = view._offset + view._length
    if end < len(view._buffer) and is_continuation(view._buffer[end]):
        raise InvalidCharBoundaryError("Slice doesn't end at a character boundary", view._length)


class CharIterator:
    """Bidirectional iterator over the characters of a `CharSlice`.

    Like `ByteIterator`, the only state is the `remaining` view, which shrinks
    by one character length per step from either side.
    """

    __slots__ = ("_remaining",)

    def __init__(self, source: CharSlice):
        self._remaining = source

    def __iter__(self) -> "CharIterator":
        return self

    def _advance(self, start: int, end: int) -> None:
        view = self._remaining._bytes
        self._remaining = CharSlice._trusted(ByteSlice._view(view._buffer, start, end - start))

    def _back_start(self) -> int:
        """Offset of the last leading byte, looking back at most four bytes."""
        view = self._remaining._bytes
        end = view._offset + view._length
        start = end - 1
        limit = max(view._offset, end - MAX_CHAR_LENGTH)
        while start > limit and is_continuation(view._buffer[start]):
            start -= 1
        return start

    def next(self) -> Char:
        view = self._remaining._bytes
        if not view._length:
            raise StopIteration
        start, end = view._offset, view._offset + view._length
        length = decode_length_at(view._buffer, start, end)
        if not length:
            raise InvalidUtf8Error(f"Invalid UTF-8 sequence at buffer offset {start}", start)
        char = Char._trusted(view._buffer[start : start + length].tobytes())
        self._advance(start + length, end)
        return char

    __next__ = next

    def next_back(self) -> Char:
        view = self._remaining._bytes
        if not view._length:
            raise StopIteration
        end = view._offset + view._length
        start = self._back_start()
        if decode_length_at(view._buffer, start, end) != end - start:
            raise InvalidUtf8Error(f"Invalid UTF-8 sequence before buffer offset {end}", start)
        char = Char._trusted(view._buffer[start:end].tobytes())
        self._advance(view._offset, start)
        return char

    def unsafe_next(self) -> Char:
        """Like `next`, but never raises on malformed input.

        Advances by the length implied by the leading byte. The returned
        character has a zero `length` if the bytes were not valid.
        """
        view = self._remaining._bytes
        if not view._length:
            raise StopIteration
        start, end = view._offset, view._offset + view._length
        size = min(assumed_length(view._buffer[start]), view._length)
        char = _char_or_invalid(view._buffer[start : start + size].tobytes())
        self._advance(start + size, end)
        return char

    def unsafe_next_back(self) -> Char:
        view = self._remaining._bytes
        if not view._length:
            raise StopIteration
        end = view._offset + view._length
        start = self._back_start()
        char = _char_or_invalid(view._buffer[start:end].tobytes())
        self._advance(view._offset, start)
        return char

    def count(self) -> int:
        """Consumes the iterator, returning the number of characters.

        Raises `InvalidUtf8Error` on malformed input.
        """
        view = self._remaining._bytes
        buffer, position, end = view._buffer, view._offset, view._offset + view._length
        characters = 0
        while position < end:
            length = decode_length_at(buffer, position, end)
            if not length:
                self._advance(position, end)
                raise InvalidUtf8Error(f"Invalid UTF-8 sequence at buffer offset {position}", position)
            position += length
            characters += 1
        self._advance(end, end)
        return characters

    def unsafe_count(self) -> int:
        """Consumes the iterator, counting characters by their leading bytes only."""
        view = self._remaining._bytes
        buffer, position, end = view._buffer, view._offset, view._offset + view._length
        characters = 0
        while position < end:
            position += assumed_length(buffer[position])
            characters += 1
        self._advance(end, end)
        return characters

    def validate_utf8(self) -> bool:
        """Consumes the iterator, reporting whether every character was valid."""
        view = self._remaining._bytes
        buffer, position, end = view._buffer, view._offset, view._offset + view._length
        while position < end:
            length = decode_length_at(buffer, position, end)
            if not length:
                self._advance(position, end)
                return False
            position += length
        self._advance(end, end)
        return True

    def as_slice(self) -> CharSlice:
        return self._remaining

    def is_empty(self) -> bool:
        return self._remaining._bytes._length == 0

    def __length_hint__(self) -> int:
        # At least one character per four bytes
        return -(-self._remaining._bytes._length // MAX_CHAR_LENGTH)


def _char_or_invalid(raw: bytes) -> Char:
    char = Char.from_bytes(raw)
    if char.length != len(raw):
        return Char._invalid(raw)
    return char
