"""
Category Hierarchy

Assembles a user's categories into a tree and guards structural mutations.

Categories are held in a flat arena keyed by id with an adjacency index from
parent id to child ids. Traversal is iterative with a visited set, so cyclic
parent data surfaces as CycleDetectedError instead of unbounded recursion.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Set

from ..exceptions import ConflictError, CycleDetectedError, require_owned
from ..store.base import RecordStore
from ..store.entities import Category

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass
class CategoryTreeNode:
    """A category with its direct children."""
    category: Category
    document_count: int = 0
    total_document_count: int = 0
    depth: int = 1
    children: List["CategoryTreeNode"] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "id": self.category.id,
            "name": self.category.name,
            "parentId": self.category.parent_id,
            "sortOrder": self.category.sort_order,
            "documentCount": self.document_count,
            "totalDocumentCount": self.total_document_count,
            "children": [child.to_dict() for child in self.children]
        }


@dataclass
class CategoryTree:
    """Root nodes plus an index of every node by category id."""
    roots: List[CategoryTreeNode] = field(default_factory=list)
    index: Dict[int, CategoryTreeNode] = field(default_factory=dict)

    @property
    def max_depth(self) -> int:
        return max((node.depth for node in self.index.values()), default=0)

    def find(self, category_id: int) -> Optional[CategoryTreeNode]:
        return self.index.get(category_id)

    def to_dict(self) -> List[Dict]:
        return [root.to_dict() for root in self.roots]


class CategoryArena:
    """Flat category table with a parent -> children adjacency index."""

    def __init__(self, categories: Iterable[Category]):
        self.categories: Dict[int, Category] = {}
        self.children: Dict[Optional[int], List[int]] = defaultdict(list)

        for category in categories:
            if category.id in self.categories:
                logger.warning(f"Duplicate category id {category.id} ignored")
                continue
            self.categories[category.id] = category

        for category in self.categories.values():
            self.children[category.parent_id].append(category.id)

    def roots(self) -> List[Category]:
        """Categories with no parent, or whose parent is not in the arena."""
        roots = []
        for category in self.categories.values():
            if category.parent_id is None:
                roots.append(category)
            elif category.parent_id not in self.categories:
                logger.warning(
                    f"Category {category.id} references missing parent "
                    f"{category.parent_id}; treating it as a root"
                )
                roots.append(category)
        return roots

    def descendant_ids(self, category_id: int) -> Set[int]:
        """Every category below category_id. Stops on revisits."""
        found: Set[int] = set()
        stack = list(self.children.get(category_id, []))
        while stack:
            current = stack.pop()
            if current in found or current == category_id:
                continue
            found.add(current)
            stack.extend(self.children.get(current, []))
        return found


# =============================================================================
# TREE BUILDER
# =============================================================================

class CategoryTreeBuilder:
    """
    Depth-first tree assembly from root categories.

    Children keep the order in which the store lists categories (sort order,
    then creation time). Raises CycleDetectedError when any category cannot
    be reached from a root, which only happens when its ancestry loops.
    """

    def build(self, categories: Iterable[Category],
              document_counts: Dict[int, int] = None) -> CategoryTree:
        arena = CategoryArena(categories)
        document_counts = document_counts or {}

        tree = CategoryTree()
        visited: Set[int] = set()
        preorder: List[CategoryTreeNode] = []

        # (category id, parent node, depth)
        stack = [(root.id, None, 1) for root in reversed(arena.roots())]

        while stack:
            category_id, parent, depth = stack.pop()
            if category_id in visited:
                raise CycleDetectedError([category_id])
            visited.add(category_id)

            node = CategoryTreeNode(
                category=arena.categories[category_id],
                document_count=document_counts.get(category_id, 0),
                depth=depth
            )
            tree.index[category_id] = node
            preorder.append(node)

            if parent is None:
                tree.roots.append(node)
            else:
                parent.children.append(node)

            for child_id in reversed(arena.children.get(category_id, [])):
                stack.append((child_id, node, depth + 1))

        unreachable = set(arena.categories) - visited
        if unreachable:
            logger.error(f"Category hierarchy contains a cycle: {sorted(unreachable)}")
            raise CycleDetectedError(unreachable)

        # Children follow their parent in preorder, so a reverse pass sees them first
        for node in reversed(preorder):
            node.total_document_count = node.document_count + sum(
                child.total_document_count for child in node.children
            )

        return tree


# =============================================================================
# MUTATION GUARDS
# =============================================================================

class CategoryMover:
    """
    Validate and apply structural category changes against the record store.

    A rejected change never reaches the store.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def move(self, user_id: int, category_id: int, new_parent_id: Optional[int]) -> Category:
        """Reassign a category's parent; None moves it to the root level."""
        require_owned(self.store.get_category(category_id), "Category", category_id, user_id)

        if new_parent_id is not None:
            require_owned(self.store.get_category(new_parent_id), "Category", new_parent_id, user_id)

            if new_parent_id == category_id:
                raise ConflictError(
                    f"Cannot move category {category_id} under itself",
                    {"category_id": category_id, "new_parent_id": new_parent_id}
                )

            arena = CategoryArena(self.store.list_categories(user_id))
            if new_parent_id in arena.descendant_ids(category_id):
                logger.warning(
                    f"Rejected move of category {category_id} under its descendant {new_parent_id}"
                )
                raise ConflictError(
                    f"Cannot move category {category_id} under its own descendant {new_parent_id}",
                    {"category_id": category_id, "new_parent_id": new_parent_id}
                )

        self.store.update_category_parent(category_id, user_id, new_parent_id)
        logger.info(f"Moved category {category_id} under {new_parent_id}")
        return self.store.get_category(category_id)

    def delete(self, user_id: int, category_id: int) -> bool:
        """Delete a category that has neither children nor documents."""
        require_owned(self.store.get_category(category_id), "Category", category_id, user_id)

        children = [c for c in self.store.list_categories(user_id) if c.parent_id == category_id]
        if children:
            raise ConflictError(
                f"Category {category_id} has {len(children)} subcategories",
                {"category_id": category_id, "child_ids": [c.id for c in children]}
            )

        documents = self.store.list_documents_for_category(category_id, user_id)
        if documents:
            raise ConflictError(
                f"Category {category_id} still holds {len(documents)} documents",
                {"category_id": category_id, "document_count": len(documents)}
            )

        return self.store.delete_category(category_id, user_id)
