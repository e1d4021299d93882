"""Keys module - Sort keys for logcat lines and the process index registry."""

from .sort_key import ProcessIndexRegistry, SortKey, compare_keys, default_key, derive_key

__all__ = ["ProcessIndexRegistry", "SortKey", "compare_keys", "default_key", "derive_key"]
