"""
ASCII transforms layered on top of slices.

Each function is a single pass over the byte range of its input. Bytes outside
the ASCII range are copied through unchanged. Results that need new bytes are
returned as views over freshly allocated buffers, of the same kind as the input:
`CharSlice` in, `CharSlice` out. Plain `str` is treated as a `CharSlice` and any
other bytes-like object as a `ByteSlice`.
"""

from typing import Final, Optional, Union

from stringslice import memory
from stringslice.byteslice import ByteSlice, BytesLike
from stringslice.charslice import CharSlice
from stringslice.log import get_logger

logger = get_logger(__name__)

AnySlice = Union[ByteSlice, CharSlice]

WHITESPACE: Final[bytes] = b" \t\n\v\f\r"
ADDRESS_SIZE: Final[int] = 20

_UPPER: Final[bytes] = bytes(byte - 32 if 0x61 <= byte <= 0x7A else byte for byte in range(256))
_LOWER: Final[bytes] = bytes(byte + 32 if 0x41 <= byte <= 0x5A else byte for byte in range(256))
_HEX_DIGITS: Final[bytes] = b"0123456789abcdefABCDEF"


def _as_slice(data: Union[AnySlice, BytesLike, str]) -> AnySlice:
    if isinstance(data, (ByteSlice, CharSlice)):
        return data
    if isinstance(data, str):
        return CharSlice(data)
    return ByteSlice(data)


def _rewrap(like: AnySlice, result: bytearray) -> AnySlice:
    view = ByteSlice(result)
    return CharSlice.from_byte_slice(view) if isinstance(like, CharSlice) else view


def _translate(data, table: bytes, operation: str) -> AnySlice:
    source = _as_slice(data)
    result = bytearray(source.as_memoryview()).translate(table)
    logger.debug("buffer_allocated", operation=operation, size=len(result))
    return _rewrap(source, result)


def to_upper(data) -> AnySlice:
    return _translate(data, _UPPER, "to_upper")


def to_lower(data) -> AnySlice:
    return _translate(data, _LOWER, "to_lower")


def trim_start(data) -> AnySlice:
    """Drops leading ASCII whitespace. Returns a view, nothing is copied."""
    source = _as_slice(data)
    window = source.as_memoryview()
    start = 0
    while start < len(source) and window[start] in WHITESPACE:
        start += 1
    return source.get_after(start)


def trim_end(data) -> AnySlice:
    source = _as_slice(data)
    window = source.as_memoryview()
    end = len(source)
    while end > 0 and window[end - 1] in WHITESPACE:
        end -= 1
    return source.get_before(end)


def trim(data) -> AnySlice:
    return trim_end(trim_start(data))


def parse_int(data) -> int:
    """Parses an optionally signed decimal integer, rejecting any other byte."""
    window = _as_slice(data).as_memoryview()
    if not len(window):
        raise ValueError("Can't parse an empty slice as an integer")
    sign, position = 1, 0
    if window[0] in b"+-":
        sign = -1 if window[0] == 0x2D else 1
        position = 1
    if position == len(window):
        raise ValueError("Sign without digits")
    value = 0
    for byte in window[position:]:
        if not 0x30 <= byte <= 0x39:
            raise ValueError(f"Unexpected byte {byte:#04x} in decimal integer")
        value = value * 10 + (byte - 0x30)
    return sign * value


def to_hex_string(value: int, width: Optional[int] = None) -> CharSlice:
    """Formats `value` as `0x`-prefixed lowercase hex.

    With `width`, pads to `2 * width` digits, as if `value` was a `width`-byte
    big-endian integer, and fails if it doesn't fit.
    """
    if value < 0:
        raise ValueError("Only non-negative values can be formatted")
    digits = format(value, "x")
    if width is not None:
        if len(digits) > 2 * width:
            raise ValueError(f"{value:#x} doesn't fit into {width} bytes")
        digits = digits.zfill(2 * width)
    return CharSlice("0x" + digits)


def to_address(data) -> int:
    """Parses a `0x`-prefixed, 40-digit hex address into an integer."""
    window = _as_slice(data).as_memoryview()
    if len(window) != 2 + 2 * ADDRESS_SIZE or window[0] != 0x30 or window[1] not in b"xX":
        raise ValueError("Addresses must be 0x followed by 40 hex digits")
    for byte in window[2:]:
        if byte not in _HEX_DIGITS:
            raise ValueError(f"Unexpected byte {byte:#04x} in hex address")
    return int(str(window[2:], "ascii"), 16)


def repeat(data, times: int) -> AnySlice:
    """Concatenates `times` copies into a new buffer, doubling the copied block."""
    if times < 0:
        raise ValueError("Repetition count can't be negative")
    source = _as_slice(data)
    unit = len(source)
    result = bytearray(unit * times)
    target = memoryview(result)
    if result:
        buffer, offset, length = source._byte_range()
        memory.copy(target, 0, buffer, offset, length)
        filled = unit
        while filled < len(result):
            chunk = min(filled, len(result) - filled)
            memory.copy(target, filled, target, 0, chunk)
            filled += chunk
    logger.debug("buffer_allocated", operation="repeat", size=len(result))
    return _rewrap(source, result)


def _width(source: AnySlice) -> int:
    if isinstance(source, CharSlice):
        return source.chars().count()
    return len(source)


def _pad(data, width: int, fill, at_start: bool) -> AnySlice:
    source = _as_slice(data)
    filler = _as_slice(fill)
    filler = CharSlice(filler) if isinstance(source, CharSlice) else ByteSlice(filler)
    if _width(filler) != 1:
        raise ValueError("Padding must be a single character")
    missing = width - _width(source)
    if missing <= 0:
        return source
    padding = repeat(filler, missing)
    return padding.add(source) if at_start else source.add(padding)


def pad_start(data, width: int, fill=" ") -> AnySlice:
    """Left-pads to `width` characters, or bytes for a `ByteSlice`."""
    return _pad(data, width, fill, at_start=True)


def pad_end(data, width: int, fill=" ") -> AnySlice:
    return _pad(data, width, fill, at_start=False)
