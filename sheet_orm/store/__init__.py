"""Backing stores: the contract plus an in-memory implementation."""

from .base import HEADER_OFFSET, BackingStore, TableHandle
from .memory import InMemoryStore

__all__ = [
    "HEADER_OFFSET",
    "BackingStore",
    "TableHandle",
    "InMemoryStore",
]
