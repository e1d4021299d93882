"""Filter module - Line classification and tidy filtering."""

from .tidy import TidyFilter, is_restart_marker, strip_leading_nuls

__all__ = ["TidyFilter", "is_restart_marker", "strip_leading_nuls"]
