"""
SortLog

A Python package for sorting and merging Android logcat files.
Recovers a single chronological log from overlapping, repeatedly re-dumped
copies of the same log stream, removing duplicated lines while keeping the
relative order of lines that share a timestamp.

Modules:
    keys: Sort key derivation and the process index registry
    filter: Line classification and tidy filtering
    merge: Grouping store, ordered merge and the sortlog command
    files: Wildcard expansion and (gzip-aware) file opening
"""

__version__ = "1.0.0"

from .merge.grouping_store import GroupingStore
from .merge.sort_logcat import SortStats, sort_files, sort_logs

__all__ = [
    "GroupingStore",
    "SortStats",
    "sort_files",
    "sort_logs",
    "__version__",
]
