#!/usr/bin/env python3

import argparse
import mmap
import os
import sys
from contextlib import contextmanager

import stringslice
from stringslice import ByteSlice, CharSlice, InvalidUtf8Error
from stringslice.ascii import WHITESPACE
from stringslice.log import configure_logging, get_logger

logger = get_logger("stringslice.cli.wc")


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="Print newline, word, and byte counts for each FILE, and a total line if more than one FILE is \
        specified. A word is a non-zero-length sequence of characters delimited by white space."
    )
    parser.add_argument("files", nargs="*", default=["-"], help="Files to process")
    parser.add_argument("-c", "--bytes", action="store_true", help="print the byte counts")
    parser.add_argument("-m", "--chars", action="store_true", help="print the character counts")
    parser.add_argument("-l", "--lines", action="store_true", help="print the newline counts")
    parser.add_argument(
        "-L",
        "--max-line-length",
        action="store_true",
        help="print the maximum display width",
    )
    parser.add_argument("-w", "--words", action="store_true", help="print the word counts")
    parser.add_argument(
        "--files0-from",
        metavar="filename",
        help="Read input from the files specified by NUL-terminated names in file F;"
        " If F is - then read names from standard input",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug events to stderr")
    parser.add_argument("--log-json", action="store_true", help="log as JSON lines")
    parser.add_argument("--version", action="version", version=stringslice.__version__)
    return parser.parse_args(argv)


@contextmanager
def mapped(file_path: str):
    """Yields the file's contents as a buffer, memory-mapping non-empty files.

    The mapping is closed on exit, so views built from it must not outlive the block.
    """
    if file_path == "-":
        yield sys.stdin.buffer.read()
        return
    with open(file_path, "rb") as file:
        if os.fstat(file.fileno()).st_size == 0:
            yield b""
            return
        with mmap.mmap(file.fileno(), 0, access=mmap.ACCESS_READ) as mapping:
            yield mapping


def count_chars(content: ByteSlice) -> int:
    try:
        return CharSlice.unchecked(content).chars().count()
    except InvalidUtf8Error as error:
        logger.warning("invalid_utf8", offset=error.index, fallback="unsafe_count")
        return CharSlice.unchecked(content).chars().unsafe_count()


def count_words(content: ByteSlice) -> int:
    words, inside = 0, False
    for byte in content:
        if byte in WHITESPACE:
            inside = False
        elif not inside:
            inside = True
            words += 1
    return words


def wc(file_path, args):
    try:
        with mapped(file_path) as mapping:
            counts = count_all(ByteSlice(mapping), args)
    except FileNotFoundError:
        return f"No such file: {file_path}", False

    logger.debug("counted", file=file_path, **counts)
    return counts, True


def count_all(content: ByteSlice, args):
    counts = {}
    if args.lines:
        counts["line_count"] = content.count(b"\n")
    if args.words:
        counts["word_count"] = count_words(content)
    if args.chars:
        counts["char_count"] = count_chars(content)
    if args.max_line_length:
        counts["max_line_length"] = max(count_chars(line) for line in content.split(b"\n"))
    if args.bytes:
        counts["byte_count"] = len(content)
    return counts


def format_output(counts, args, just):
    selected_counts = []
    if args.lines:
        selected_counts.append(counts["line_count"])
    if args.words:
        selected_counts.append(counts["word_count"])
    if args.chars:
        selected_counts.append(counts["char_count"])
    if args.bytes:
        selected_counts.append(counts["byte_count"])
    if args.max_line_length:
        selected_counts.append(counts.get("max_line_length", 0))

    return " ".join(str(count).rjust(just) for count in selected_counts)


def split_names(names: ByteSlice):
    return [name.decode() for name in names.split(b"\0") if name]


def get_files_from(fn):
    with mapped(fn) as mapping:
        names = split_names(ByteSlice(mapping))
    return [name for name in names if os.path.isfile(name)]


def main(argv=None) -> int:
    args = parse_arguments(argv)
    configure_logging(verbose=args.verbose, log_json=args.log_json)
    total_counts = {
        "line_count": 0,
        "word_count": 0,
        "char_count": 0,
        "max_line_length": 0,
        "byte_count": 0,
    }
    if not any([args.lines, args.words, args.chars, args.bytes, args.max_line_length]):
        args.lines = True
        args.words = True
        args.bytes = True

    if args.files0_from and args.files == ["-"]:
        args.files = get_files_from(args.files0_from)
        if not args.files:
            return 0

    # wc uses the file size to determine column width when printing
    sizes = [os.stat(fn).st_size for fn in args.files if fn != "-" and os.path.isfile(fn)]
    just = max([len(str(size)) for size in sizes] + [1])

    status = 0
    for file_path in args.files:
        counts, success = wc(file_path, args)
        if success:
            for key in total_counts.keys():
                if key == "max_line_length":
                    total_counts[key] = max(total_counts[key], counts.get(key, 0))
                else:
                    total_counts[key] += counts.get(key, 0)
            print(format_output(counts, args, just) + f" {file_path}")
        else:
            print(counts)
            status = 1

    if len(args.files) > 1:
        print(format_output(total_counts, args, just) + " total")
    return status


if __name__ == "__main__":
    sys.exit(main())
