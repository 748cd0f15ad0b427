"""etcd v2 source store."""

from .reader import SourceReader

__all__ = ["SourceReader"]
