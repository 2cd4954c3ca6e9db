"""
Tag-overlap similarity between documents.

The score of two documents is the number of tags they share. It weights the
SIMILAR_TO edges of the document-relation graph and ranks "similar
documents".

Scaling limit: the relation graph compares every unordered pair of
documents, O(n^2 * t) for n documents of up to t tags. That is fine for a
personal corpus (hundreds to low thousands of documents); run it through
AnalysisExecutor so a pathological corpus only degrades its own request.
"""

import logging
from typing import Dict, List, Optional, Set

from ..exceptions import NotFoundError, validate_input
from .executor import CancellationToken, check_cancelled
from .knowledge_graph import (
    EdgeKind,
    KnowledgeGraph,
    Node,
    NodeKind,
    node_id,
)
from .results import SimilarDocument

logger = logging.getLogger(__name__)

RELATION_DOCUMENT_SIZE = 35
RELATION_DOCUMENT_COLOR = "#ee6666"
RELATION_TAG_SIZE = 20
RELATION_TAG_COLOR = "#73c0de"


def shared_tag_count(tags_a: Set, tags_b: Set) -> int:
    """Similarity score: size of the tag intersection (symmetric)."""
    return len(tags_a & tags_b)


class SimilarityEngine:
    """
    Pairwise tag-overlap scoring over a knowledge graph.

    Usage:
        engine = SimilarityEngine()
        relations = engine.relation_graph(graph)
        similar = engine.similar_documents(graph, document_id=42, limit=5)
    """

    def document_tag_sets(self, graph: KnowledgeGraph) -> Dict[str, Set[str]]:
        """Tag node ids per document node id, in document order."""
        return {
            doc.id: set(graph.neighbors(doc.id, EdgeKind.TAGGED_WITH))
            for doc in graph.nodes_of_kind(NodeKind.DOCUMENT)
        }

    def score(self, graph: KnowledgeGraph, document_a: int, document_b: int) -> int:
        tag_sets = self.document_tag_sets(graph)
        a = tag_sets.get(node_id(NodeKind.DOCUMENT, document_a))
        b = tag_sets.get(node_id(NodeKind.DOCUMENT, document_b))
        if a is None:
            raise NotFoundError("Document", document_a)
        if b is None:
            raise NotFoundError("Document", document_b)
        return shared_tag_count(a, b)

    def relation_graph(self, graph: KnowledgeGraph,
                       token: Optional[CancellationToken] = None) -> KnowledgeGraph:
        """
        Build the document-relation graph.

        Documents and tags become nodes, TAGGED_WITH edges are copied, and
        each unordered document pair sharing at least one tag gets a
        SIMILAR_TO edge weighted by the shared count.
        """
        relations = KnowledgeGraph()
        documents = graph.nodes_of_kind(NodeKind.DOCUMENT)

        for doc in documents:
            relations.add_node(Node(
                id=doc.id,
                label=doc.label,
                kind=NodeKind.DOCUMENT,
                weight=RELATION_DOCUMENT_SIZE,
                entity_id=doc.entity_id,
                color=RELATION_DOCUMENT_COLOR
            ))

        for tag in graph.nodes_of_kind(NodeKind.TAG):
            relations.add_node(Node(
                id=tag.id,
                label=tag.label,
                kind=NodeKind.TAG,
                weight=RELATION_TAG_SIZE,
                entity_id=tag.entity_id,
                color=RELATION_TAG_COLOR
            ))

        for doc in documents:
            for tag_id in graph.neighbors(doc.id, EdgeKind.TAGGED_WITH):
                relations.add_edge(doc.id, tag_id, EdgeKind.TAGGED_WITH)

        tag_sets = self.document_tag_sets(graph)
        doc_ids = [doc.id for doc in documents]

        for i, doc1_id in enumerate(doc_ids):
            check_cancelled(token, "relation_graph")
            tags1 = tag_sets[doc1_id]
            if not tags1:
                continue
            for doc2_id in doc_ids[i + 1:]:
                shared = shared_tag_count(tags1, tag_sets[doc2_id])
                if shared > 0:
                    relations.add_edge(doc1_id, doc2_id, EdgeKind.SIMILAR_TO, weight=shared)

        logger.info(
            f"Built relation graph: {len(doc_ids)} documents, "
            f"{relations.get_statistics()['edge_counts'].get(EdgeKind.SIMILAR_TO.value, 0)} similarity edges"
        )
        return relations

    def similar_documents(self, graph: KnowledgeGraph, document_id: int, limit: int = 5,
                          token: Optional[CancellationToken] = None) -> List[SimilarDocument]:
        """
        Top-``limit`` documents sharing tags with ``document_id``.

        Sorted by score descending; ties keep enumeration order. Documents
        with no shared tag are left out, so an isolated document yields [].
        """
        validate_input(limit is not None and limit >= 0, "limit", "must not be negative", limit)

        target_id = node_id(NodeKind.DOCUMENT, document_id)
        if not graph.has_node(target_id):
            raise NotFoundError("Document", document_id)

        tag_sets = self.document_tag_sets(graph)
        target_tags = tag_sets[target_id]

        scored = []
        for index, doc in enumerate(graph.nodes_of_kind(NodeKind.DOCUMENT)):
            if index % 256 == 0:
                check_cancelled(token, "similar_documents")
            if doc.id == target_id:
                continue
            score = shared_tag_count(target_tags, tag_sets[doc.id])
            if score > 0:
                scored.append(SimilarDocument(id=doc.entity_id, title=doc.label, similarity_score=score))

        # sorted() is stable, so equal scores stay in enumeration order
        scored = sorted(scored, key=lambda s: s.similarity_score, reverse=True)
        return scored[:limit]
