"""
Grouping of logcat lines by sort key, and the ordered merge of the groups.

Every line is filed under its key in first-encountered order. A line already
present under the same key is not stored again, which is what removes the
repeated fragments left by logs that were re-dumped from the start. Output
order comes from two levels: the keys are sorted, then each key's bucket is
flattened in the order it was filled.
"""

from typing import Dict, Iterator, List

from sortlog.keys.sort_key import SortKey


class GroupingStore:
    """Mapping from SortKey to an insertion-ordered, duplicate-free list of lines."""

    def __init__(self):
        self._lines: Dict[SortKey, List[str]] = {}
        self._line_count = 0
        self.duplicates_dropped = 0

    def append(self, key: SortKey, line: str) -> bool:
        """
        File a line under its key.

        Args:
            key: Sort key of the line
            line: Raw line, without line terminator

        Returns:
            True if the line was stored, False if it was already present under key
        """
        bucket = self._lines.get(key)
        if bucket is None:
            bucket = []
            self._lines[key] = bucket

        if line in bucket:
            self.duplicates_dropped += 1
            return False
        bucket.append(line)
        self._line_count += 1
        return True

    def keys(self) -> List[SortKey]:
        return list(self._lines)

    def lines_for(self, key: SortKey) -> List[str]:
        return list(self._lines.get(key, ()))

    def line_count(self) -> int:
        return self._line_count

    def sorted_keys(self) -> List[SortKey]:
        """Distinct keys in output order (stable over insertion order)."""
        return sorted(self._lines, key=SortKey.ordering)

    def iter_sorted_lines(self) -> Iterator[str]:
        for key in self.sorted_keys():
            yield from self._lines[key]

    def emit(self) -> List[str]:
        """
        Merge all groups into the final ordered, duplicate-free sequence of lines.

        Returns:
            Lines of every key, keys in sorted order, each key's lines in the
            order they were first encountered
        """
        return list(self.iter_sorted_lines())

    def __contains__(self, key) -> bool:
        return key in self._lines

    def __len__(self):
        return len(self._lines)
