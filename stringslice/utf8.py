"""
UTF-8 decoding rules per RFC 3629.

`decode_length` is the single source of truth for every character-boundary
check in the package: a byte offset is a boundary iff the window starting there
decodes to a non-zero length, or the offset is the end of the slice.
"""

from typing import Dict, Final, Tuple

MAX_CHAR_LENGTH: Final[int] = 4
MAX_CODE_POINT: Final[int] = 0x10FFFF

# Allowed ranges for the second byte of 3- and 4-byte sequences, where they
# differ from the generic continuation range. These exclude overlong encodings,
# surrogates, and code points past U+10FFFF.
_SECOND_BYTE_RANGES: Final[Dict[int, Tuple[int, int]]] = {
    0xE0: (0xA0, 0xBF),
    0xED: (0x80, 0x9F),
    0xF0: (0x90, 0xBF),
    0xF4: (0x80, 0x8F),
}
_CONTINUATION_RANGE: Final[Tuple[int, int]] = (0x80, 0xBF)


def is_continuation(byte: int) -> bool:
    return byte & 0xC0 == 0x80


def decode_length(window) -> int:
    """Length of the valid UTF-8 character at the start of `window`, or 0.

    `window` is any bytes-like object; only its first four bytes are read.
    Truncated sequences, stray continuation bytes, overlong forms, surrogates
    and values above U+10FFFF all yield 0.
    """
    size = len(window)
    if size == 0:
        return 0
    lead = window[0]
    if lead < 0x80:
        return 1
    if lead < 0xC2:
        return 0
    if lead < 0xE0:
        expected = 2
    elif lead < 0xF0:
        expected = 3
    elif lead < 0xF5:
        expected = 4
    else:
        return 0

    if size < expected:
        return 0
    low, high = _SECOND_BYTE_RANGES.get(lead, _CONTINUATION_RANGE)
    if not low <= window[1] <= high:
        return 0
    for index in range(2, expected):
        if not is_continuation(window[index]):
            return 0
    return expected


def decode_length_at(buffer: memoryview, offset: int, end: int) -> int:
    """Applies `decode_length` to the window of `buffer` at `offset`, clipped to `end`."""
    if offset >= end:
        return 0
    lead = buffer[offset]
    if lead < 0x80:
        return 1
    return decode_length(buffer[offset : min(offset + MAX_CHAR_LENGTH, end)])


def assumed_length(lead: int) -> int:
    """Guesses the character length from the leading byte alone.

    Used by the unchecked iterators. Stray continuation bytes count as one byte
    so that malformed input still makes progress.
    """
    if lead < 0xC0:
        return 1
    if lead < 0xE0:
        return 2
    if lead < 0xF0:
        return 3
    return 4


def decode_code_point(window, length: int) -> int:
    """Combines the payload bits of an already validated `length`-byte sequence."""
    if length == 1:
        return window[0]
    if length == 2:
        return ((window[0] & 0x1F) << 6) | (window[1] & 0x3F)
    if length == 3:
        return ((window[0] & 0x0F) << 12) | ((window[1] & 0x3F) << 6) | (window[2] & 0x3F)
    if length == 4:
        return (
            ((window[0] & 0x07) << 18)
            | ((window[1] & 0x3F) << 12)
            | ((window[2] & 0x3F) << 6)
            | (window[3] & 0x3F)
        )
    raise ValueError(f"Invalid UTF-8 sequence length: {length}")


def encode_code_point(code_point: int) -> bytes:
    if code_point < 0 or code_point > MAX_CODE_POINT:
        raise ValueError(f"Code point out of range: {code_point:#x}")
    if 0xD800 <= code_point <= 0xDFFF:
        raise ValueError(f"Surrogate code points can't be encoded: {code_point:#x}")
    if code_point < 0x80:
        return bytes((code_point,))
    if code_point < 0x800:
        return bytes((0xC0 | (code_point >> 6), 0x80 | (code_point & 0x3F)))
    if code_point < 0x10000:
        return bytes(
            (
                0xE0 | (code_point >> 12),
                0x80 | ((code_point >> 6) & 0x3F),
                0x80 | (code_point & 0x3F),
            )
        )
    return bytes(
        (
            0xF0 | (code_point >> 18),
            0x80 | ((code_point >> 12) & 0x3F),
            0x80 | ((code_point >> 6) & 0x3F),
            0x80 | (code_point & 0x3F),
        )
    )
