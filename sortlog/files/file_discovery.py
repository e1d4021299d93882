"""
File discovery utilities for finding and opening logcat files.
"""

import fnmatch
import glob
import gzip
import os
from typing import List, TextIO


def expand_pattern(pattern: str, base_dir: str = ".") -> List[str]:
    """
    Resolve one input argument to the files it names.

    Args:
        pattern: File path, or wildcard pattern. A bare name or pattern such
            as "robotControllerLog*.txt" is matched against file names
            anywhere below base_dir; a path with a directory part is taken as
            is when it names a file, and goes through glob otherwise.
        base_dir: Directory walked for bare patterns

    Returns:
        Sorted list of matching file paths (empty if nothing matched)

    Note:
        Directories that cannot be listed are skipped silently.
    """
    if os.path.dirname(pattern):
        if os.path.isfile(pattern):
            return [pattern]
        return sorted(match for match in glob.glob(pattern) if os.path.isfile(match))

    files = []
    for root, dirs, filenames in os.walk(base_dir):
        dirs.sort()
        for filename in sorted(filenames):
            if fnmatch.fnmatchcase(filename, pattern):
                files.append(os.path.join(root, filename))
    return files


def expand_patterns(patterns: List[str], base_dir: str = ".") -> List[str]:
    """
    Resolve every input argument, in argument order.

    A file named by more than one argument is only listed once, at its first
    position.
    """
    files = []
    seen = set()
    for pattern in patterns:
        for path in expand_pattern(pattern, base_dir):
            canonical = os.path.realpath(path)
            if canonical not in seen:
                seen.add(canonical)
                files.append(path)
    return files


def is_gzip_file(path: str) -> bool:
    """Detect gzip input by its '.gz' suffix, ignoring case."""
    return os.path.basename(path).lower().endswith(".gz")


def open_log_file(path: str) -> TextIO:
    """
    Open a logcat file for reading, supports gzip.

    Undecodable bytes are carried through as surrogates, so writing the lines
    back with the same error handler reproduces the input bytes.

    Args:
        path: File path

    Returns:
        File handle (text mode)
    """
    if is_gzip_file(path):
        return gzip.open(path, "rt", encoding="utf-8", errors="surrogateescape")
    return open(path, "r", encoding="utf-8", errors="surrogateescape")


def same_file(path_a: str, path_b: str) -> bool:
    """Compare two paths by their canonical form."""
    return os.path.realpath(path_a) == os.path.realpath(path_b)
