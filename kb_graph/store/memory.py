"""
In-memory record store.

Backs the CLI, the demo API and the test-suite. Data can be seeded
programmatically or loaded from a JSON fixture of the form::

    {
      "documents":     [{"id": 1, "title": "...", "user_id": 1, "created_time": "..."}],
      "categories":    [{"id": 1, "name": "...", "user_id": 1, "parent_id": null}],
      "tags":          [{"id": 1, "name": "...", "user_id": 1}],
      "document_tags": [{"document_id": 1, "tag_id": 1}]
    }
"""

import json
import logging
from collections import defaultdict
from typing import Dict, List, Optional

from .base import RecordStore
from .entities import Category, Document, Tag

logger = logging.getLogger(__name__)


class InMemoryRecordStore(RecordStore):
    """Dictionary-backed record store."""

    def __init__(self):
        self._documents: Dict[int, Document] = {}
        self._categories: Dict[int, Category] = {}
        self._tags: Dict[int, Tag] = {}
        # document id -> ordered tag ids
        self._document_tags: Dict[int, List[int]] = defaultdict(list)

    # =========================================================================
    # SEEDING
    # =========================================================================

    def add_document(self, document: Document) -> Document:
        self._documents[document.id] = document
        return document

    def add_category(self, category: Category) -> Category:
        self._categories[category.id] = category
        return category

    def add_tag(self, tag: Tag) -> Tag:
        self._tags[tag.id] = tag
        return tag

    def tag_document(self, document_id: int, tag_id: int) -> None:
        """Associate a tag with a document (idempotent)."""
        if tag_id not in self._document_tags[document_id]:
            self._document_tags[document_id].append(tag_id)

    def soft_delete_document(self, document_id: int) -> bool:
        document = self._documents.get(document_id)
        if document is None or document.deleted:
            return False
        document.deleted = True
        return True

    # =========================================================================
    # RecordStore
    # =========================================================================

    def list_documents(self, user_id: int) -> List[Document]:
        return [
            d for d in self._documents.values()
            if d.user_id == user_id and not d.deleted
        ]

    def list_categories(self, user_id: int) -> List[Category]:
        categories = [c for c in self._categories.values() if c.user_id == user_id]
        return sorted(categories, key=lambda c: (c.sort_order, c.created_time))

    def list_tags(self, user_id: int) -> List[Tag]:
        return [t for t in self._tags.values() if t.user_id == user_id]

    def list_tags_for_document(self, document_id: int, user_id: int) -> List[Tag]:
        tags = []
        for tag_id in self._document_tags.get(document_id, []):
            tag = self._tags.get(tag_id)
            if tag is not None and tag.user_id == user_id:
                tags.append(tag)
        return tags

    def list_documents_for_tag(self, tag_id: int, user_id: int) -> List[Document]:
        tag = self._tags.get(tag_id)
        if tag is None or tag.user_id != user_id:
            return []
        return [
            d for d in self._documents.values()
            if not d.deleted and tag_id in self._document_tags.get(d.id, [])
        ]

    def list_documents_for_category(self, category_id: int, user_id: int) -> List[Document]:
        return [d for d in self.list_documents(user_id) if d.category_id == category_id]

    def get_document(self, document_id: int) -> Optional[Document]:
        document = self._documents.get(document_id)
        if document is None or document.deleted:
            return None
        return document

    def get_category(self, category_id: int) -> Optional[Category]:
        return self._categories.get(category_id)

    def update_category_parent(self, category_id: int, user_id: int,
                               parent_id: Optional[int]) -> bool:
        category = self._categories.get(category_id)
        if category is None or category.user_id != user_id:
            return False
        category.parent_id = parent_id
        return True

    def delete_category(self, category_id: int, user_id: int) -> bool:
        category = self._categories.get(category_id)
        if category is None or category.user_id != user_id:
            return False
        del self._categories[category_id]
        return True

    # =========================================================================
    # PERSISTENCE
    # =========================================================================

    def to_dict(self) -> Dict:
        return {
            "documents": [d.to_dict() for d in self._documents.values()],
            "categories": [c.to_dict() for c in self._categories.values()],
            "tags": [t.to_dict() for t in self._tags.values()],
            "document_tags": [
                {"document_id": doc_id, "tag_id": tag_id}
                for doc_id, tag_ids in self._document_tags.items()
                for tag_id in tag_ids
            ]
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "InMemoryRecordStore":
        store = cls()
        for item in data.get("categories", []):
            store.add_category(Category.from_dict(item))
        for item in data.get("documents", []):
            store.add_document(Document.from_dict(item))
        for item in data.get("tags", []):
            store.add_tag(Tag.from_dict(item))
        for link in data.get("document_tags", []):
            store.tag_document(link["document_id"], link["tag_id"])
        return store

    def save_json(self, path: str) -> str:
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2, default=str)
        return path

    @classmethod
    def load_json(cls, path: str) -> "InMemoryRecordStore":
        with open(path, 'r') as f:
            data = json.load(f)
        store = cls.from_dict(data)
        logger.info(
            f"Loaded record store from {path}: {len(store._documents)} documents, "
            f"{len(store._categories)} categories, {len(store._tags)} tags"
        )
        return store
