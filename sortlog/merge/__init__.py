"""Merge module - Grouping of logcat lines by sort key and the ordered merge."""

from .grouping_store import GroupingStore
from .sort_logcat import fold_line, fold_lines, sort_files, sort_logs

__all__ = ["GroupingStore", "fold_line", "fold_lines", "sort_files", "sort_logs"]
