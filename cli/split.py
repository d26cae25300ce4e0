#!/usr/bin/env python3

import argparse
import sys

import stringslice
from stringslice import ByteSlice, CharSlice, NOT_FOUND
from stringslice.log import configure_logging, get_logger

from cli.wc import mapped

logger = get_logger("stringslice.cli.split")


def parse_arguments(argv=None):
    parser = argparse.ArgumentParser(
        description="Output pieces of FILE to PREFIX0, PREFIX1, ...; default size is 1000 lines, and default PREFIX is 'x'."
    )
    parser.add_argument("file", nargs="?", default="-", help='File to process, "-" for standard input')
    parser.add_argument("prefix", nargs="?", default="x", help='Output file prefix, default is "x"')
    parser.add_argument(
        "-l",
        "--lines",
        type=int,
        default=1000,
        help="Number of lines per output file, default is 1000",
    )
    parser.add_argument(
        "-t",
        "--separator",
        default="\n",
        help="Use SEP instead of newline as the record separator; '\\0' (zero) specifies the NUL character",
    )
    parser.add_argument(
        "-n",
        "--number",
        type=int,
        default=None,
        help="Generate N output files based on size of input, never cutting a UTF-8 character in half",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug events to stderr")
    parser.add_argument("--log-json", action="store_true", help="log as JSON lines")
    parser.add_argument("--version", action="version", version=stringslice.__version__)
    return parser.parse_args(argv)


def split_by_size(file_contents: ByteSlice, number_of_files: int, output_prefix: str) -> int:
    """Writes `number_of_files` pieces of roughly equal size, moving cuts to character boundaries."""
    text = CharSlice.unchecked(file_contents)
    total_length = len(text)
    chunk_size = total_length // number_of_files
    start = 0
    for file_part in range(number_of_files):
        end = start + chunk_size if file_part < number_of_files - 1 else total_length
        end = max(end, start)
        while not text.is_char_boundary(end):
            end += 1
        file_contents.get_subslice(start, end).write_to(f"{output_prefix}{file_part}")
        start = end
    return number_of_files


def split_by_records(file_contents: ByteSlice, lines_per_file: int, output_prefix: str, separator: bytes) -> int:
    """Writes pieces of `lines_per_file` records each, keeping the separators."""
    file_part = 0
    rest = file_contents
    while rest:
        cut = 0
        for _ in range(lines_per_file):
            found = rest.get_after(cut).find(separator)
            if found == NOT_FOUND:
                cut = len(rest)
                break
            cut += found + len(separator)
        piece, rest = rest.split_at(cut)
        piece.write_to(f"{output_prefix}{file_part}")
        file_part += 1
    return file_part


def split_file(file_path, lines_per_file, output_prefix, separator, number_of_files) -> int:
    if separator == "\\0":
        separator = "\0"
    if number_of_files is not None and number_of_files < 1:
        print("Usage example: split.py [-n NUMBER] [file] [prefix], NUMBER must be positive")
        return 1
    if number_of_files is None and (lines_per_file < 1 or not separator):
        print("Usage example: split.py [-l LINES] [file] [prefix], LINES and SEP must not be empty")
        return 1

    try:
        with mapped(file_path) as mapping:
            size = len(mapping)
            if number_of_files is not None:
                written = split_by_size(ByteSlice(mapping), number_of_files, output_prefix)
            else:
                written = split_by_records(ByteSlice(mapping), lines_per_file, output_prefix, separator.encode("utf-8"))
    except FileNotFoundError:
        print(f"No such file: {file_path}")
        return 1

    logger.debug("split_written", file=file_path, parts=written, size=size)
    return 0


def main(argv=None) -> int:
    args = parse_arguments(argv)
    configure_logging(verbose=args.verbose, log_json=args.log_json)
    return split_file(args.file, args.lines, args.prefix, args.separator, args.number)


if __name__ == "__main__":
    sys.exit(main())
