"""
Record Store Interface

Abstract read (and minimal mutation) interface over the relational store
holding documents, categories, tags and their associations. Storage,
transactions and soft-delete bookkeeping belong to the implementation;
the analytics core only calls the methods below.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from .entities import Category, Document, Tag


class RecordStore(ABC):
    """Abstract base class for record stores."""

    # -- per-user listings --------------------------------------------------

    @abstractmethod
    def list_documents(self, user_id: int) -> List[Document]:
        """Live (not soft-deleted) documents of a user, in store order."""
        pass

    @abstractmethod
    def list_categories(self, user_id: int) -> List[Category]:
        """Categories of a user, ordered by sort order then creation time."""
        pass

    @abstractmethod
    def list_tags(self, user_id: int) -> List[Tag]:
        pass

    # -- associations -------------------------------------------------------

    @abstractmethod
    def list_tags_for_document(self, document_id: int, user_id: int) -> List[Tag]:
        pass

    @abstractmethod
    def list_documents_for_tag(self, tag_id: int, user_id: int) -> List[Document]:
        """Live documents carrying one of the user's tags, whoever owns them."""
        pass

    @abstractmethod
    def list_documents_for_category(self, category_id: int, user_id: int) -> List[Document]:
        pass

    # -- single lookups (not user scoped) -----------------------------------

    @abstractmethod
    def get_document(self, document_id: int) -> Optional[Document]:
        pass

    @abstractmethod
    def get_category(self, category_id: int) -> Optional[Category]:
        pass

    # -- mutations ----------------------------------------------------------

    @abstractmethod
    def update_category_parent(self, category_id: int, user_id: int,
                               parent_id: Optional[int]) -> bool:
        """Reassign a category's parent. Returns True when a row changed."""
        pass

    @abstractmethod
    def delete_category(self, category_id: int, user_id: int) -> bool:
        pass
