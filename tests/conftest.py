"""
Pytest configuration and fixtures for the knowledge graph analytics tests.
"""

from datetime import datetime, timedelta
from typing import List

import pytest

from kb_graph.store import Category, Document, InMemoryRecordStore, Tag


OWNER = 1
OTHER_USER = 2
BASE_TIME = datetime(2024, 3, 1, 9, 0, 0)


def make_document(doc_id: int, title: str, user_id: int = OWNER, days: int = 0,
                  category_id: int = None, content: str = None) -> Document:
    return Document(
        id=doc_id,
        title=title,
        user_id=user_id,
        created_time=BASE_TIME + timedelta(days=days),
        content=content,
        category_id=category_id
    )


def make_category(category_id: int, name: str, parent_id: int = None,
                  user_id: int = OWNER, sort_order: int = 0) -> Category:
    return Category(
        id=category_id,
        name=name,
        user_id=user_id,
        parent_id=parent_id,
        sort_order=sort_order,
        created_time=BASE_TIME + timedelta(minutes=category_id)
    )


def make_tag(tag_id: int, name: str, user_id: int = OWNER) -> Tag:
    return Tag(id=tag_id, name=name, user_id=user_id, created_time=BASE_TIME)


# =============================================================================
# STORE FIXTURES
# =============================================================================

@pytest.fixture
def store() -> InMemoryRecordStore:
    """Empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def relation_store() -> InMemoryRecordStore:
    """
    Three documents: D1{A,B}, D2{B,C}, D3{D}.

    D1 and D2 share one tag; D3 shares nothing.
    """
    store = InMemoryRecordStore()
    for tag_id, name in [(1, "A"), (2, "B"), (3, "C"), (4, "D")]:
        store.add_tag(make_tag(tag_id, name))

    store.add_document(make_document(1, "D1", days=0))
    store.add_document(make_document(2, "D2", days=1))
    store.add_document(make_document(3, "D3", days=2))

    store.tag_document(1, 1)
    store.tag_document(1, 2)
    store.tag_document(2, 2)
    store.tag_document(2, 3)
    store.tag_document(3, 4)
    return store


@pytest.fixture
def coverage_store() -> InMemoryRecordStore:
    """Four categories: two hold documents, two are empty."""
    store = InMemoryRecordStore()
    store.add_category(make_category(10, "Python", sort_order=1))
    store.add_category(make_category(11, "Databases", sort_order=2))
    store.add_category(make_category(12, "Networking", sort_order=3))
    store.add_category(make_category(13, "Security", sort_order=4))

    store.add_document(make_document(1, "Generators", category_id=10))
    store.add_document(make_document(2, "Decorators", days=1, category_id=10))
    store.add_document(make_document(3, "Indexes", days=2, category_id=11))
    return store


@pytest.fixture
def tree_store() -> InMemoryRecordStore:
    """Category chain A -> B -> C with one document in each of B and C."""
    store = InMemoryRecordStore()
    store.add_category(make_category(1, "A"))
    store.add_category(make_category(2, "B", parent_id=1))
    store.add_category(make_category(3, "C", parent_id=2))

    store.add_document(make_document(1, "Intro to B", category_id=2))
    store.add_document(make_document(2, "Deep dive C", days=1, category_id=3))
    return store


@pytest.fixture
def path_store() -> InMemoryRecordStore:
    """Five documents created on five distinct days, inserted out of order."""
    store = InMemoryRecordStore()
    for doc_id, title, days in [
        (3, "Closures", 2),
        (1, "Python basics", 0),
        (5, "Async Python", 4),
        (2, "Functions", 1),
        (4, "Python packaging", 3),
    ]:
        store.add_document(make_document(
            doc_id, title, days=days, content=f"Notes on {title.lower()}"
        ))
    return store


@pytest.fixture
def cyclic_categories() -> List[Category]:
    """X and Y are each other's parent; R is an ordinary root."""
    return [
        make_category(1, "R"),
        make_category(2, "X", parent_id=3),
        make_category(3, "Y", parent_id=2),
    ]


@pytest.fixture
def two_user_store(relation_store) -> InMemoryRecordStore:
    """relation_store plus a category and a document owned by another user."""
    relation_store.add_category(make_category(50, "Private", user_id=OTHER_USER))
    relation_store.add_document(make_document(50, "Not yours", user_id=OTHER_USER, category_id=50))
    return relation_store
