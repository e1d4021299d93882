#!/usr/bin/env python3
"""
sort_key.py - Sort Keys for Android Logcat Lines
================================================

Derives the composite sort key used to order and group logcat lines. A key is
built from the timestamp prefix and the process/thread columns of a line:

    01-01 01:47:07.199 15883 16254 E RobotCore: thread id=63 name="lynx async work"
    01-01 01:47:07.200 15883 16254 E RobotCore:     at java.lang.Object.wait(Native Method)
    0123456789012345678901234567890
    0         1         2         3

KEY ORDERING
============

Keys are ordered by timestamp, except for the Control Hub layout whose clock
starts at a nominal January 1st after every boot. When two keys both carry
that date, their streams cannot be told apart by time alone, so they are
bucketed by process ordinal (first-seen order of the process id across the
run) and only then ordered by time.

The thread id takes part in key equality (and so in grouping) but never in
ordering.

FALLBACK
========

Lines that are too short, have a malformed date, or lack numeric process and
thread columns get the default key, which sorts before everything else. Lines
starting with "--------- beginning of" inherit the key of the line before
them, so log restart markers stay next to the lines they preceded.

PYTHON API
==========

    from sortlog.keys.sort_key import ProcessIndexRegistry, default_key, derive_key

    registry = ProcessIndexRegistry()
    prev_key = default_key()
    for line in lines:
        prev_key = derive_key(line, prev_key, registry)
"""

import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

from sortlog.filter.tidy import is_restart_marker

MIN_KEYED_LINE_LENGTH = 30

# Logcat timestamps carry no year; everything lands in the year of the epoch.
REFERENCE_YEAR = 1970
DEFAULT_ORDINAL = -1

TIMESTAMP_PATTERN = re.compile(
    r"(?P<month>[0-9]{2})-(?P<day>[0-9]{2}) "
    r"(?P<hour>[0-9]{2}):(?P<minute>[0-9]{2}):(?P<second>[0-9]{2})\.(?P<millis>[0-9]{3})"
)
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")


class ProcessIndexRegistry:
    """
    Append-only ordered set of process ids, in first-seen order.

    One registry is owned by each run and handed to every key derivation.
    Ordinals are never reused or renumbered.
    """

    def __init__(self):
        self._processes: List[int] = []
        self._ordinals: Dict[int, int] = {}

    def index_of(self, pid: int) -> int:
        """Return the ordinal of pid, registering it if it is new."""
        ordinal = self._ordinals.get(pid)
        if ordinal is None:
            ordinal = len(self._processes)
            self._processes.append(pid)
            self._ordinals[pid] = ordinal
        return ordinal

    def processes(self) -> List[int]:
        return list(self._processes)

    def __contains__(self, pid) -> bool:
        return pid in self._ordinals

    def __len__(self):
        return len(self._processes)


@dataclass(frozen=True)
class SortKey:
    """
    Ordering identity of one logcat line.

    Equality and hashing use (timestamp, process, thread) only; the process
    ordinal is derived from the registry and never affects identity.
    """

    timestamp: datetime
    process: int
    thread: int
    process_ordinal: int = field(default=DEFAULT_ORDINAL, compare=False)

    @property
    def month(self) -> int:
        return self.timestamp.month

    @property
    def day_of_month(self) -> int:
        return self.timestamp.day

    @property
    def is_special_variant(self) -> bool:
        """True for the Control Hub layout, whose dates collapse to January 1st."""
        return self.month == 1 and self.day_of_month == 1

    def ordering(self) -> Tuple[int, int, datetime]:
        """
        Tuple sort key reproducing compare_keys().

        Special-variant keys are bucketed by process ordinal. All timestamps
        share the reference year, so a January 1st timestamp never comes after
        a non-special one, and putting the special bucket first agrees with a
        plain timestamp comparison across the two groups.
        """
        if self.is_special_variant:
            return (0, self.process_ordinal, self.timestamp)
        return (1, 0, self.timestamp)


def compare_keys(a: SortKey, b: SortKey) -> int:
    """
    Three-way comparison of two keys, usable with functools.cmp_to_key.

    Args:
        a: First key
        b: Second key

    Returns:
        Negative, zero or positive as a sorts before, with, or after b
    """
    if a.is_special_variant and b.is_special_variant:
        if a.process_ordinal != b.process_ordinal:
            return a.process_ordinal - b.process_ordinal
    if a.timestamp < b.timestamp:
        return -1
    if a.timestamp > b.timestamp:
        return 1
    return 0


def default_key() -> SortKey:
    """Key for lines that cannot be parsed; sorts before every other key."""
    return SortKey(datetime(REFERENCE_YEAR, 1, 1), 0, 0, DEFAULT_ORDINAL)


def parse_timestamp(line: str) -> Optional[Tuple[datetime, int]]:
    """
    Parse the "MM-dd HH:mm:ss.SSS" prefix of a line.

    A day past the end of its month rolls forward (02-29 becomes March 1st),
    other out-of-range fields make the date invalid.

    Args:
        line: Logcat line

    Returns:
        Tuple of (timestamp, index just past the prefix), or None if the line
        does not start with a valid timestamp

    Example:
        >>> parse_timestamp("02-19 11:40:49.125 11806 11806 I FIRST: ...")
        (datetime.datetime(1970, 2, 19, 11, 40, 49, 125000), 18)
    """
    match = TIMESTAMP_PATTERN.match(line)
    if match is None:
        return None

    fields = {name: int(value) for name, value in match.groupdict().items()}
    if not 1 <= fields["month"] <= 12 or not 1 <= fields["day"] <= 31:
        return None
    if fields["hour"] > 23 or fields["minute"] > 59 or fields["second"] > 59:
        return None

    timestamp = datetime(REFERENCE_YEAR, fields["month"], 1) + timedelta(
        days=fields["day"] - 1,
        hours=fields["hour"],
        minutes=fields["minute"],
        seconds=fields["second"],
        milliseconds=fields["millis"],
    )
    return timestamp, match.end()


def parse_key(line: str) -> Optional[SortKey]:
    """
    Build a candidate key from a line, without touching any registry.

    The candidate's process ordinal is left at DEFAULT_ORDINAL; use
    resolve_ordinal() to assign it before the key is stored or sorted.

    Args:
        line: Logcat line with leading NUL bytes already stripped

    Returns:
        SortKey candidate, or None if the line has no parseable key
    """
    if len(line) < MIN_KEYED_LINE_LENGTH:
        return None

    parsed = parse_timestamp(line)
    if parsed is None:
        return None
    timestamp, end = parsed

    splits = re.split(" +", line[end:].strip())
    if len(splits) < 2:
        return None
    if not INTEGER_PATTERN.fullmatch(splits[0]) or not INTEGER_PATTERN.fullmatch(splits[1]):
        return None

    return SortKey(timestamp, int(splits[0]), int(splits[1]))


def resolve_ordinal(key: SortKey, registry: ProcessIndexRegistry) -> SortKey:
    """Return a copy of key carrying the registry ordinal of its process."""
    return replace(key, process_ordinal=registry.index_of(key.process))


def derive_key(line: str, previous_key: SortKey, registry: ProcessIndexRegistry) -> SortKey:
    """
    Derive the sort key of a line.

    Args:
        line: Logcat line with leading NUL bytes already stripped
        previous_key: Key of the previously kept line (default_key() at the
            start of a file)
        registry: Process index registry of the current run

    Returns:
        previous_key for restart markers, the parsed key for well-formed
        lines, and the default key otherwise
    """
    if is_restart_marker(line):
        return previous_key

    candidate = parse_key(line)
    if candidate is None:
        return default_key()
    return resolve_ordinal(candidate, registry)
