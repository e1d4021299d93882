"""Files module - Input discovery and opening of plain or gzip logcat files."""

from .file_discovery import expand_pattern, expand_patterns, is_gzip_file, open_log_file

__all__ = ["expand_pattern", "expand_patterns", "is_gzip_file", "open_log_file"]
