"""
Raw buffer primitives: byte search, block comparison, move and copy.

Every function works on `(buffer, offset, length)` triples, where `buffer` is a
flat unsigned-byte `memoryview`. Nothing here allocates, except the transient
`memoryview` windows used to load machine words.

Strategy
    -   Ranges shorter than one machine word are scanned byte by byte.
    -   Longer ranges are processed in 8-byte words using SWAR tricks: a
        zero-byte mask for searching, big-endian word loads for ordering.
    -   The tail that doesn't fill a whole word is loaded as a partial word and
        masked, so the observable results equal a plain byte-by-byte scan.
"""

from typing import Final

WORD_SIZE: Final[int] = 8
NOT_FOUND: Final[int] = -1

_ONES: Final[int] = 0x0101010101010101
_LOW_SEVEN_BITS: Final[int] = 0x7F7F7F7F7F7F7F7F
_HIGH_BITS: Final[int] = 0x8080808080808080


def _zero_bytes_mask(word: int) -> int:
    """Sets the high bit of every zero byte in `word` and clears everything else.

    Unlike the classic `(x - 0x01..) & ~x & 0x80..` expression this one never
    reports false positives, so it can be used for both forward and backward scans.
    """
    nonzero = ((word & _LOW_SEVEN_BITS) + _LOW_SEVEN_BITS) | word
    return ~(nonzero | _LOW_SEVEN_BITS) & _HIGH_BITS


def _partial_mask(count: int) -> int:
    # High bits of the lowest `count` bytes of a little-endian word
    return _HIGH_BITS & ((1 << (count * 8)) - 1)


def _load_le(buffer: memoryview, offset: int, count: int) -> int:
    return int.from_bytes(buffer[offset : offset + count], "little")


def _load_be(buffer: memoryview, offset: int, count: int) -> int:
    return int.from_bytes(buffer[offset : offset + count], "big")


def find_byte(buffer: memoryview, offset: int, length: int, target: int) -> int:
    """Returns the index of the first `target` byte in the range, or `NOT_FOUND`."""
    if length < WORD_SIZE:
        for index in range(length):
            if buffer[offset + index] == target:
                return index
        return NOT_FOUND

    broadcast = target * _ONES
    index = 0
    while index + WORD_SIZE <= length:
        matches = _zero_bytes_mask(_load_le(buffer, offset + index, WORD_SIZE) ^ broadcast)
        if matches:
            return index + ((matches & -matches).bit_length() - 1) // 8
        index += WORD_SIZE

    tail = length - index
    if tail:
        matches = _zero_bytes_mask(_load_le(buffer, offset + index, tail) ^ broadcast) & _partial_mask(tail)
        if matches:
            return index + ((matches & -matches).bit_length() - 1) // 8
    return NOT_FOUND


def rfind_byte(buffer: memoryview, offset: int, length: int, target: int) -> int:
    """Returns the index of the last `target` byte in the range, or `NOT_FOUND`."""
    if length < WORD_SIZE:
        for index in range(length - 1, -1, -1):
            if buffer[offset + index] == target:
                return index
        return NOT_FOUND

    broadcast = target * _ONES
    end = length
    while end >= WORD_SIZE:
        start = end - WORD_SIZE
        matches = _zero_bytes_mask(_load_le(buffer, offset + start, WORD_SIZE) ^ broadcast)
        if matches:
            return start + (matches.bit_length() - 1) // 8
        end = start

    if end:
        matches = _zero_bytes_mask(_load_le(buffer, offset, end) ^ broadcast) & _partial_mask(end)
        if matches:
            return (matches.bit_length() - 1) // 8
    return NOT_FOUND


def compare(
    first: memoryview,
    first_offset: int,
    first_length: int,
    second: memoryview,
    second_offset: int,
    second_length: int,
) -> int:
    """Lexicographic three-way comparison of two ranges, returning -1, 0 or 1.

    The shared prefix is compared in ascending address order. When it matches,
    the shorter range sorts first.
    """
    shared = min(first_length, second_length)
    if shared < WORD_SIZE:
        for index in range(shared):
            a, b = first[first_offset + index], second[second_offset + index]
            if a != b:
                return -1 if a < b else 1
    else:
        index = 0
        while index < shared:
            # Big-endian loads turn byte-wise ordering into integer ordering
            step = min(WORD_SIZE, shared - index)
            a = _load_be(first, first_offset + index, step)
            b = _load_be(second, second_offset + index, step)
            if a != b:
                return -1 if a < b else 1
            index += step

    if first_length == second_length:
        return 0
    return -1 if first_length < second_length else 1


def equal(
    first: memoryview,
    first_offset: int,
    first_length: int,
    second: memoryview,
    second_offset: int,
    second_length: int,
) -> bool:
    """Cheaper equality check, exits early on mismatching lengths."""
    if first_length != second_length:
        return False
    if first is second and first_offset == second_offset:
        return True
    index = 0
    while index + WORD_SIZE <= first_length:
        if _load_le(first, first_offset + index, WORD_SIZE) != _load_le(second, second_offset + index, WORD_SIZE):
            return False
        index += WORD_SIZE
    tail = first_length - index
    return tail == 0 or _load_le(first, first_offset + index, tail) == _load_le(second, second_offset + index, tail)


def find(
    haystack: memoryview,
    haystack_offset: int,
    haystack_length: int,
    needle: memoryview,
    needle_offset: int,
    needle_length: int,
) -> int:
    """Offset of the first occurrence of the needle in the haystack, or `NOT_FOUND`.

    An empty needle matches at offset zero.
    """
    if needle_length == 0:
        return 0
    if needle_length > haystack_length:
        return NOT_FOUND

    first_byte = needle[needle_offset]
    last_start = haystack_length - needle_length
    position = 0
    while position <= last_start:
        hit = find_byte(haystack, haystack_offset + position, last_start - position + 1, first_byte)
        if hit == NOT_FOUND:
            return NOT_FOUND
        position += hit
        if equal(
            haystack,
            haystack_offset + position + 1,
            needle_length - 1,
            needle,
            needle_offset + 1,
            needle_length - 1,
        ):
            return position
        position += 1
    return NOT_FOUND


def rfind(
    haystack: memoryview,
    haystack_offset: int,
    haystack_length: int,
    needle: memoryview,
    needle_offset: int,
    needle_length: int,
) -> int:
    """Offset of the last occurrence of the needle in the haystack, or `NOT_FOUND`.

    An empty needle matches at the very end of the haystack.
    """
    if needle_length == 0:
        return haystack_length
    if needle_length > haystack_length:
        return NOT_FOUND

    first_byte = needle[needle_offset]
    candidates = haystack_length - needle_length + 1
    while candidates > 0:
        hit = rfind_byte(haystack, haystack_offset, candidates, first_byte)
        if hit == NOT_FOUND:
            return NOT_FOUND
        if equal(
            haystack,
            haystack_offset + hit + 1,
            needle_length - 1,
            needle,
            needle_offset + 1,
            needle_length - 1,
        ):
            return hit
        candidates = hit
    return NOT_FOUND


def _shares_storage(first: memoryview, second: memoryview) -> bool:
    return first is second or (first.obj is not None and first.obj is second.obj)


def move(destination: memoryview, destination_offset: int, source: memoryview, source_offset: int, length: int) -> None:
    """Copies `length` bytes with `memmove` semantics.

    Within a single view the copy direction is picked from the offsets. Two
    different views of the same object may start at different positions in it,
    so their offsets aren't comparable: the source range is snapshotted first.
    """
    if length <= 0:
        return
    if destination is not source:
        if _shares_storage(destination, source):
            source = memoryview(source[source_offset : source_offset + length].tobytes())
            source_offset = 0
        copy(destination, destination_offset, source, source_offset, length)
        return
    if not source_offset < destination_offset < source_offset + length:
        copy(destination, destination_offset, source, source_offset, length)
        return

    end = length
    while end >= WORD_SIZE:
        start = end - WORD_SIZE
        destination[destination_offset + start : destination_offset + end] = source[
            source_offset + start : source_offset + end
        ]
        end = start
    for index in range(end - 1, -1, -1):
        destination[destination_offset + index] = source[source_offset + index]


def copy(destination: memoryview, destination_offset: int, source: memoryview, source_offset: int, length: int) -> None:
    """Copies `length` bytes front to back. The ranges must not overlap."""
    index = 0
    while index + WORD_SIZE <= length:
        destination[destination_offset + index : destination_offset + index + WORD_SIZE] = source[
            source_offset + index : source_offset + index + WORD_SIZE
        ]
        index += WORD_SIZE
    while index < length:
        destination[destination_offset + index] = source[source_offset + index]
        index += 1
