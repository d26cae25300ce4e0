"""
A single UTF-8 encoded character, 1 to 4 bytes long, with a validity flag.
"""

from typing import Final, Tuple, Union

from stringslice.utf8 import (
    MAX_CHAR_LENGTH,
    assumed_length,
    decode_code_point,
    decode_length,
    encode_code_point,
)

REPLACEMENT_CHARACTER: Final[str] = "�"


class Char:
    """One decoded UTF-8 character.

    Valid characters have a `length` of 1 to 4. Invalid ones have a `length` of
    zero and keep the raw bytes they were built from, so they can still be
    compared and hashed.

    Ordering is by code point. Every invalid character sorts after every valid
    one, and invalid characters are ordered by their raw bytes. This keeps the
    comparison total and transitive over arbitrary input.
    """

    __slots__ = ("_raw", "_length")

    def __init__(self, data: Union[bytes, bytearray, memoryview, str] = b"\x00"):
        if isinstance(data, str):
            if len(data) != 1:
                raise ValueError(f"Expected a single character, got {len(data)}")
            data = data.encode("utf-8", "surrogatepass")
        window = memoryview(data)[:MAX_CHAR_LENGTH]
        length = decode_length(window)
        if length:
            self._raw = bytes(window[:length])
        elif len(window):
            self._raw = bytes(window[: assumed_length(window[0])])
        else:
            self._raw = b""
        self._length = length

    @classmethod
    def from_bytes(cls, window: Union[bytes, bytearray, memoryview]) -> "Char":
        """Decodes the leading character of `window`."""
        return cls(window)

    @classmethod
    def from_code_point(cls, code_point: int) -> "Char":
        return cls._trusted(encode_code_point(code_point))

    @classmethod
    def _trusted(cls, raw: bytes) -> "Char":
        char = cls.__new__(cls)
        char._raw = raw
        char._length = len(raw)
        return char

    @classmethod
    def _invalid(cls, raw: bytes) -> "Char":
        char = cls.__new__(cls)
        char._raw = raw
        char._length = 0
        return char

    @property
    def length(self) -> int:
        return self._length

    def __len__(self) -> int:
        return self._length

    def is_valid_utf8(self) -> bool:
        return self._length != 0

    def is_ascii(self) -> bool:
        return self._length == 1 and self._raw[0] < 0x80

    def to_code_point(self) -> int:
        """Unicode scalar value, or zero for invalid characters."""
        if not self._length:
            return 0
        return decode_code_point(self._raw, self._length)

    def _key(self) -> Tuple[int, Union[int, bytes]]:
        if self._length:
            return (0, self.to_code_point())
        return (1, self._raw)

    def compare(self, other: "Char") -> int:
        a, b = self._key(), other._key()
        if a == b:
            return 0
        return -1 if a < b else 1

    def __eq__(self, other):
        if isinstance(other, str):
            if len(other) != 1:
                return NotImplemented
            other = Char(other)
            # Lone surrogates decode to invalid characters, never equal to text
            if not other._length:
                return False
        if not isinstance(other, Char):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other):
        if not isinstance(other, Char):
            return NotImplemented
        return self._key() < other._key()

    def __le__(self, other):
        if not isinstance(other, Char):
            return NotImplemented
        return self._key() <= other._key()

    def __gt__(self, other):
        if not isinstance(other, Char):
            return NotImplemented
        return self._key() > other._key()

    def __ge__(self, other):
        if not isinstance(other, Char):
            return NotImplemented
        return self._key() >= other._key()

    def __hash__(self) -> int:
        # Valid characters compare equal to one-character `str`, so hash like it
        if self._length:
            return hash(str(self))
        return hash(self._raw)

    def __bytes__(self) -> bytes:
        return self._raw

    def __str__(self) -> str:
        if not self._length:
            return REPLACEMENT_CHARACTER
        return self._raw.decode("utf-8")

    def __repr__(self) -> str:
        if not self._length:
            return f"Char.invalid({self._raw!r})"
        return f"Char({str(self)!r})"
