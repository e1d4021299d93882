#!/usr/bin/env python3
"""
Sort Logcat - Stable, duplicate-free merge of Android logcat files

Robot controller logs are periodically dumped again from the start of the
device log buffer, so a set of saved logs (or even a single file) holds
several overlapping copies of the same stream. This tool folds all of them
into one chronologically sorted log, keeping the relative order of lines
that share a timestamp and dropping lines seen more than once.

Usage Examples:
    # Sort one log; output goes to robotControllerLog.txt.sorted
    sortlog robotControllerLog.txt

    # Merge every matching log below the current directory
    sortlog "robotControllerLog*.txt"

    # Merge compressed and plain logs into an explicit output file
    sortlog -out merged.txt old.txt.gz new.txt

    # Keep garbage collector messages
    sortlog -notidy robotControllerLog.txt

    # Write to stdout (progress messages then go to stderr)
    sortlog -out - robotControllerLog.txt | less

How it works:
    1. Each line is stripped of leading NUL bytes and, in tidy mode, dropped
       if it is a garbage collector message
    2. Its sort key is derived from the timestamp/process/thread prefix
    3. The line is filed under its key unless that key already holds it
    4. Once every file is read, the keys are sorted and their lines emitted

Requirements:
    - The whole input is held in memory until the output is written
    - Files ending in .gz (any case) are decompressed on the fly
"""

import argparse
import os
import sys
import zlib
from typing import Iterable, Iterator, List, NamedTuple, Optional, TextIO

from sortlog.files.file_discovery import expand_patterns, open_log_file, same_file
from sortlog.filter.tidy import TidyFilter, strip_leading_nuls
from sortlog.keys.sort_key import ProcessIndexRegistry, SortKey, default_key, derive_key
from sortlog.merge.grouping_store import GroupingStore

SORTED_SUFFIX = ".sorted"


class SortStats(NamedTuple):
    files_read: int
    lines_read: int
    lines_discarded: int
    lines_stored: int
    duplicates_dropped: int
    distinct_keys: int


def log_progress(message, verbose=False):
    """
    Log progress message to stderr if verbose is enabled.

    Args:
        message: Message to log
        verbose: Whether to output the message
    """
    if verbose:
        print(message, file=sys.stderr)


def announce(message: str, quiet: bool = False, stream: Optional[TextIO] = None):
    """Print an informational message to stream (stdout by default) unless quiet."""
    if not quiet:
        print(message, file=stream if stream is not None else sys.stdout)


def fold_line(
    previous_key: SortKey,
    store: GroupingStore,
    line: str,
    registry: ProcessIndexRegistry,
    tidy: TidyFilter,
) -> SortKey:
    """
    Fold one raw line into the store.

    Args:
        previous_key: Key of the last line kept from the current file
        store: Grouping store of the run
        line: Raw line, without line terminator
        registry: Process index registry of the run
        tidy: Tidy filter of the run

    Returns:
        The previous key to use for the next line: the key of this line, or
        previous_key unchanged if the line was discarded
    """
    line = strip_leading_nuls(line)
    if tidy.should_discard(line):
        return previous_key

    key = derive_key(line, previous_key, registry)
    store.append(key, line)
    return key


def fold_lines(
    lines: Iterable[str],
    store: GroupingStore,
    registry: ProcessIndexRegistry,
    tidy: TidyFilter,
) -> int:
    """
    Fold the lines of one file into the store.

    Lines may still carry their line terminator. Restart markers at the top
    of the file inherit the default key.

    Returns:
        Number of lines read
    """
    previous_key = default_key()
    lines_read = 0
    for line in lines:
        lines_read += 1
        previous_key = fold_line(previous_key, store, line.rstrip("\n"), registry, tidy)
    return lines_read


def read_log_lines(fh: TextIO, name: str) -> Iterator[str]:
    """
    Yield the lines of an open log file, stopping at the first read error.

    A truncated or corrupt file is reported to stderr; the lines before the
    damage are still yielded.
    """
    try:
        yield from fh
    except (OSError, EOFError, zlib.error) as e:
        print(f"error reading '{name}': {e}", file=sys.stderr)


def process_file(
    path: str,
    store: GroupingStore,
    registry: ProcessIndexRegistry,
    tidy: TidyFilter,
    quiet: bool = False,
    stream: Optional[TextIO] = None,
) -> int:
    """
    Read one input file into the store.

    Errors are reported to stderr and end the processing of this file only;
    lines already grouped from it are kept.

    Returns:
        Number of lines read from the file
    """
    name = os.path.basename(path)
    announce(f"reading '{name}'", quiet, stream)

    try:
        fh = open_log_file(path)
    except FileNotFoundError:
        print(f'file "{name}" not found', file=sys.stderr)
        return 0
    except OSError as e:
        print(f"error reading '{name}': {e}", file=sys.stderr)
        return 0

    with fh:
        return fold_lines(read_log_lines(fh, name), store, registry, tidy)


def emit_output(
    store: GroupingStore,
    output_path: str,
    quiet: bool = False,
    stream: Optional[TextIO] = None,
) -> bool:
    """
    Write the merged lines, one per record, to output_path ('-' for stdout).

    Lines go out as the bytes they were read as, including bytes that are not
    valid UTF-8.

    Returns:
        True if the output was written, False if it could not be opened or
        written
    """
    lines = store.iter_sorted_lines()

    if output_path == "-":
        sys.stdout.flush()
        out = sys.stdout.buffer
        try:
            for line in lines:
                out.write(line.encode("utf-8", "surrogateescape") + b"\n")
            out.flush()
        except OSError as e:
            print(f"error writing to stdout: {e}", file=sys.stderr)
            return False
        return True

    name = os.path.basename(output_path)
    announce(f"emitting '{name}'", quiet, stream)

    try:
        out = open(output_path, "w", encoding="utf-8", errors="surrogateescape", newline="\n")
    except FileNotFoundError:
        print(f'file "{name}" not found', file=sys.stderr)
        return False
    except OSError as e:
        print(f"error writing '{name}': {e}", file=sys.stderr)
        return False

    try:
        with out:
            for line in lines:
                out.write(line + "\n")
    except OSError as e:
        print(f"error writing '{name}': {e}", file=sys.stderr)
        return False
    return True


def default_output_path(first_input: str) -> str:
    return os.path.abspath(first_input) + SORTED_SUFFIX


def sort_files(
    files: List[str],
    output_path: Optional[str] = None,
    tidy: bool = True,
    quiet: bool = False,
    verbose: bool = False,
) -> SortStats:
    """
    Merge already resolved input files into one sorted, duplicate-free output.

    Args:
        files: Input files, in the order their lines are first encountered
        output_path: Output file, '-' for stdout, or None for the first
            input's absolute path with '.sorted' appended
        tidy: Whether to drop garbage collector messages
        quiet: Suppress the reading/emitting messages
        verbose: Log a summary to stderr

    Returns:
        SortStats for the run
    """
    if output_path is None and files:
        output_path = default_output_path(files[0])

    # Keep the informational messages out of a merged log written to stdout
    stream = sys.stderr if output_path == "-" else None

    store = GroupingStore()
    registry = ProcessIndexRegistry()
    tidy_filter = TidyFilter(enabled=tidy)

    files_read = 0
    lines_read = 0
    for path in files:
        if output_path != "-" and same_file(path, output_path):
            log_progress(f"[SKIP] {os.path.basename(path)} is the output file", verbose)
            continue
        lines_read += process_file(path, store, registry, tidy_filter, quiet, stream)
        files_read += 1

    if output_path is not None:
        emit_output(store, output_path, quiet, stream)

    stats = SortStats(
        files_read=files_read,
        lines_read=lines_read,
        lines_discarded=lines_read - store.line_count() - store.duplicates_dropped,
        lines_stored=store.line_count(),
        duplicates_dropped=store.duplicates_dropped,
        distinct_keys=len(store),
    )
    log_progress(
        f"[SUMMARY] {stats.files_read} files, {stats.lines_read} lines read, "
        f"{stats.lines_discarded} discarded, {stats.duplicates_dropped} duplicates, "
        f"{stats.lines_stored} written under {stats.distinct_keys} keys",
        verbose,
    )
    return stats


def sort_logs(
    patterns: List[str],
    output_path: Optional[str] = None,
    tidy: bool = True,
    quiet: bool = False,
    verbose: bool = False,
    base_dir: str = ".",
) -> SortStats:
    """Expand wildcard patterns against base_dir and merge the files they name."""
    files = expand_patterns(patterns, base_dir)
    return sort_files(files, output_path, tidy=tidy, quiet=quiet, verbose=verbose)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="sortlog",
        description=(
            "Sort and merge Android logcat files, removing duplicated lines while "
            "keeping the relative order of lines with the same timestamp."
        ),
        epilog="Examples:\n"
        "  sortlog robotControllerLog.txt\n"
        "  sortlog -out merged.txt 'robotControllerLog*.txt' old.txt.gz\n"
        "  sortlog -notidy -out - robotControllerLog.txt | less",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "inputs",
        nargs="+",
        metavar="inputFile",
        help="Logcat file to sort (wildcards supported, .gz files are decompressed). "
        "By default, output has the same name as the first input with '.sorted' appended.",
    )
    parser.add_argument(
        "-tidy",
        "--tidy",
        dest="tidy",
        action="store_true",
        default=True,
        help="Remove superfluous lines such as garbage collector messages (default)",
    )
    parser.add_argument(
        "-notidy",
        "--no-tidy",
        dest="tidy",
        action="store_false",
        help="Keep every line",
    )
    parser.add_argument(
        "-out",
        "-o",
        "--out",
        dest="output",
        metavar="outputFile",
        default=None,
        help="Output file name (use '-' for stdout)",
    )
    parser.add_argument(
        "-q",
        "--quiet",
        action="store_true",
        help="Suppress the reading/emitting messages",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Print statistics to stderr",
    )
    return parser


def main(argv=None):
    """Main entry point for command-line usage."""
    parser = build_parser()
    args = parser.parse_args(argv)

    files = expand_patterns(args.inputs)
    if not files:
        parser.error("no input files match " + ", ".join(repr(p) for p in args.inputs))

    try:
        sort_files(files, args.output, tidy=args.tidy, quiet=args.quiet, verbose=args.verbose)
    except KeyboardInterrupt:
        print("\n# Interrupted by user", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
