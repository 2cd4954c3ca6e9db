"""
Entity snapshot loading.

Every analytics call works off a snapshot loaded fresh from the record store
for one user. Nothing is cached between calls.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from ..store.base import RecordStore
from ..store.entities import Category, Document, Tag

logger = logging.getLogger(__name__)


@dataclass
class EntitySnapshot:
    """One user's documents, categories, tags and tag associations."""
    user_id: int
    documents: List[Document] = field(default_factory=list)
    categories: List[Category] = field(default_factory=list)
    tags: List[Tag] = field(default_factory=list)
    # document id -> tag ids, in tag enumeration order
    tag_ids_by_document: Dict[int, List[int]] = field(default_factory=dict)

    def tag_ids(self, document_id: int) -> Set[int]:
        return set(self.tag_ids_by_document.get(document_id, ()))

    def tag_count(self, document_id: int) -> int:
        return len(self.tag_ids_by_document.get(document_id, ()))

    def documents_for_tag(self, tag_id: int) -> List[Document]:
        return [d for d in self.documents if tag_id in self.tag_ids_by_document.get(d.id, ())]

    def document_counts_by_category(self) -> Dict[int, int]:
        counts: Dict[int, int] = {}
        for document in self.documents:
            if document.category_id is not None:
                counts[document.category_id] = counts.get(document.category_id, 0) + 1
        return counts

    def find_document(self, document_id: int) -> Optional[Document]:
        for document in self.documents:
            if document.id == document_id:
                return document
        return None


class SnapshotLoader:
    """
    Thin adapter that reads a user's entities from the record store.

    Usage:
        loader = SnapshotLoader(store)
        snapshot = loader.load(user_id=1)

        # Scope to documents already resolved by a full-text search
        snapshot = loader.load(user_id=1, document_ids=[4, 8, 15])
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def load(self, user_id: int, document_ids: Optional[Iterable[int]] = None) -> EntitySnapshot:
        documents = self.store.list_documents(user_id)
        categories = self.store.list_categories(user_id)
        tags = self.store.list_tags(user_id)

        owned_documents = {d.id for d in documents}
        if document_ids is not None:
            wanted = set(document_ids)
            documents = [d for d in documents if d.id in wanted]

        known_documents = {d.id for d in documents}
        tag_ids_by_document: Dict[int, List[int]] = {d.id: [] for d in documents}

        out_of_scope = 0
        for tag in tags:
            for document in self.store.list_documents_for_tag(tag.id, user_id):
                if document.id in known_documents:
                    tag_ids_by_document[document.id].append(tag.id)
                elif document.id in owned_documents:
                    out_of_scope += 1
                else:
                    logger.warning(
                        f"Skipping tag {tag.id} of user {user_id} on document "
                        f"{document.id}: document belongs to another user"
                    )

        if out_of_scope:
            logger.debug(f"Left out {out_of_scope} tag associations outside the document scope")

        logger.debug(
            f"Loaded snapshot for user {user_id}: {len(documents)} documents, "
            f"{len(categories)} categories, {len(tags)} tags"
        )

        return EntitySnapshot(
            user_id=user_id,
            documents=documents,
            categories=categories,
            tags=tags,
            tag_ids_by_document=tag_ids_by_document
        )
