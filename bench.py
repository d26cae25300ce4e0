import time

import fire

from stringslice import ByteSlice, CharSlice


def log_duration(name: str, func: callable):
    a = time.time_ns()
    func()
    b = time.time_ns()
    secs = (b - a) / 1e9
    print(f"{name}: took {secs:} seconds")


def log_functionality(pattern: str, pythonic_bytes: bytes, byte_slice: ByteSlice, char_slice: CharSlice):
    needle = pattern.encode("utf-8")
    log_duration("Find match in Python", lambda: needle in pythonic_bytes)
    log_duration("Find match in ByteSlice", lambda: needle in byte_slice)

    log_duration("Count matches in Python", lambda: pythonic_bytes.count(needle))
    log_duration("Count matches in ByteSlice", lambda: byte_slice.count(needle))

    log_duration("Split Python", lambda: pythonic_bytes.split(needle))
    log_duration("Split ByteSlice", lambda: byte_slice.split(needle))
    log_duration("Split CharSlice", lambda: char_slice.split(needle))

    log_duration("Count characters in Python", lambda: len(pythonic_bytes.decode("utf-8")))
    log_duration("Count characters in CharSlice", lambda: char_slice.chars().count())
    log_duration("Count characters unchecked", lambda: char_slice.chars().unsafe_count())


def bench(path: str, pattern: str):
    pythonic_bytes: bytes = open(path, "rb").read()
    byte_slice = ByteSlice(pythonic_bytes)
    char_slice = CharSlice.unchecked(byte_slice)

    log_functionality(pattern, pythonic_bytes, byte_slice, char_slice)


if __name__ == "__main__":
    fire.Fire(bench)
