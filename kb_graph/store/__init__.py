"""
Record store interface and the in-memory implementation.
"""

from .entities import Document, Category, Tag
from .base import RecordStore
from .memory import InMemoryRecordStore

__all__ = [
    "Document",
    "Category",
    "Tag",
    "RecordStore",
    "InMemoryRecordStore",
]
