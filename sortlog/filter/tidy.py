#!/usr/bin/env python3
"""
tidy.py - Line Classification and Tidy Filtering for Logcat Lines
=================================================================

Decides, for each raw logcat line, whether it is kept at all and whether it
is a log restart marker.

Tidy mode drops lines that only add noise when reading a merged log, such as
Dalvik garbage collector reports:

    02-19 11:40:49.311  1205  1212 D dalvikvm: GC_CONCURRENT freed 385K, 12% free ...

Restart markers look like:

    --------- beginning of /dev/log/main

They are emitted by logcat each time it starts dumping a log buffer again.

PYTHON API
==========

    from sortlog.filter.tidy import TidyFilter, strip_leading_nuls

    tidy = TidyFilter()
    for raw in lines:
        line = strip_leading_nuls(raw)
        if tidy.should_discard(line):
            continue
        ...

    # Extra markers, e.g. for ART GC reports
    tidy = TidyFilter(markers=["GC_CONCURRENT freed", "Background concurrent copying GC freed"])
"""

from typing import Iterable

LOG_START_PREFIX = "--------- beginning of"
DEFAULT_TIDY_MARKERS = ("GC_CONCURRENT freed",)


def strip_leading_nuls(line: str) -> str:
    """Remove the NUL padding some devices leave at the start of a line."""
    return line.lstrip("\0")


def is_restart_marker(line: str) -> bool:
    """True if the line marks the start of a new log segment."""
    return line.startswith(LOG_START_PREFIX)


class TidyFilter:  # pylint: disable=too-few-public-methods
    """Substring filter for diagnostic lines removed in tidy mode."""

    def __init__(self, markers: Iterable[str] = DEFAULT_TIDY_MARKERS, enabled: bool = True):
        """
        Initialize filter.

        Args:
            markers: Substrings identifying lines to discard
            enabled: When False, no line is ever discarded
        """
        self.markers = tuple(markers)
        self.enabled = enabled

    def should_discard(self, line: str) -> bool:
        """Check if a line is to be dropped before grouping."""
        if not self.enabled:
            return False
        for marker in self.markers:
            if marker in line:
                return True
        return False

    def __len__(self):
        return len(self.markers)
