"""
Graph Metrics

Aggregate analytics over a knowledge graph:

1. CentralityRanker  - documents ranked by tag connections
2. DensityAnalyzer   - 0..100 connectivity score with a coarse level
3. ClusterAnalyzer   - documents per category
4. GapAnalyzer       - category coverage and gap-filling suggestions
5. TagCloudBuilder   - tag usage weights for the tag cloud
"""

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Sequence

from .knowledge_graph import EdgeKind, KnowledgeGraph, Node, NodeKind
from .results import (
    CentralNode,
    ClusterResult,
    DensityResult,
    GapResult,
    TagCloudEntry,
)

logger = logging.getLogger(__name__)


# =============================================================================
# CENTRALITY
# =============================================================================

class CentralityRanker:
    """
    Rank documents by connection count (number of attached tags).

    Untagged documents are excluded rather than ranked at zero.
    """

    def __init__(self, top_n: int = 10):
        self.top_n = top_n

    def connection_count(self, graph: KnowledgeGraph, document: Node) -> int:
        return len(graph.outgoing(document.id, EdgeKind.TAGGED_WITH))

    def rank(self, graph: KnowledgeGraph) -> List[CentralNode]:
        ranked = []
        for doc in graph.nodes_of_kind(NodeKind.DOCUMENT):
            count = self.connection_count(graph, doc)
            if count > 0:
                ranked.append(CentralNode(id=doc.entity_id, title=doc.label, connection_count=count))

        ranked = sorted(ranked, key=lambda c: c.connection_count, reverse=True)
        return ranked[:self.top_n]


# =============================================================================
# DENSITY
# =============================================================================

HIGH_DENSITY = 70
MEDIUM_DENSITY = 40


def density_level(value: int) -> str:
    if value >= HIGH_DENSITY:
        return "high"
    if value >= MEDIUM_DENSITY:
        return "medium"
    return "low"


class DensityAnalyzer:
    """
    Connectivity density of a user's corpus.

    actual   = sum of every document's tag count
    possible = n * (n - 1) / 2 document pairs
    density  = floor(actual * 100 / possible), 0 when n <= 1, capped at 100

    "actual" measures tag richness rather than true pairwise overlap. The
    front end has always shown this figure, so it is kept as defined.
    """

    def analyze(self, graph: KnowledgeGraph) -> DensityResult:
        documents = graph.nodes_of_kind(NodeKind.DOCUMENT)
        n = len(documents)

        actual = sum(len(graph.outgoing(doc.id, EdgeKind.TAGGED_WITH)) for doc in documents)
        possible = n * (n - 1) // 2

        if n <= 1:
            value = 0
        else:
            value = min(100, (actual * 100) // possible)

        return DensityResult(
            value=value,
            level=density_level(value),
            actual_connections=actual,
            possible_connections=possible
        )


# =============================================================================
# CLUSTERS
# =============================================================================

def _direct_document_count(graph: KnowledgeGraph, category: Node) -> int:
    return len(graph.incoming(category.id, EdgeKind.BELONGS_TO_CATEGORY))


class ClusterAnalyzer:
    """Group documents by their (direct) category."""

    def analyze(self, graph: KnowledgeGraph) -> ClusterResult:
        clusters: Dict[str, int] = {}
        total = 0

        for category in graph.nodes_of_kind(NodeKind.CATEGORY):
            count = _direct_document_count(graph, category)
            if count == 0:
                continue
            # Same-named categories share one key
            clusters[category.label] = clusters.get(category.label, 0) + count
            total += 1

        return ClusterResult(clusters=clusters, total_clusters=total)


# =============================================================================
# GAPS
# =============================================================================

class GapSuggestionStrategy(ABC):
    """Produces tags a user could add to fill coverage gaps."""

    @abstractmethod
    def suggest(self, graph: KnowledgeGraph, uncovered: Sequence[Node]) -> List[str]:
        pass


class StaticGapSuggestions(GapSuggestionStrategy):
    """Fixed placeholder suggestions, independent of the data."""

    DEFAULT_TAGS = ["fundamentals", "core concepts", "practical examples", "advanced topics"]

    def __init__(self, tags: Sequence[str] = None):
        self.tags = list(tags) if tags is not None else list(self.DEFAULT_TAGS)

    def suggest(self, graph: KnowledgeGraph, uncovered: Sequence[Node]) -> List[str]:
        return list(self.tags)


class GapAnalyzer:
    """
    Category coverage: the share of categories holding at least one document.

    Usage:
        analyzer = GapAnalyzer()                       # static suggestions
        analyzer = GapAnalyzer(MyRecommender())        # any GapSuggestionStrategy
        gaps = analyzer.analyze(graph)
    """

    def __init__(self, strategy: GapSuggestionStrategy = None):
        self.strategy = strategy or StaticGapSuggestions()

    def analyze(self, graph: KnowledgeGraph) -> GapResult:
        categories = graph.nodes_of_kind(NodeKind.CATEGORY)
        uncovered = [c for c in categories if _direct_document_count(graph, c) == 0]

        total = len(categories)
        covered = total - len(uncovered)
        rate = covered / total if total else 0.0

        return GapResult(
            total_categories=total,
            covered_categories=covered,
            coverage_rate=rate,
            uncovered_categories=[c.label for c in uncovered],
            suggested_tags=self.strategy.suggest(graph, uncovered)
        )


# =============================================================================
# TAG CLOUD
# =============================================================================

class TagCloudBuilder:
    """Tag cloud entries weighted by the number of tagged documents."""

    def build(self, graph: KnowledgeGraph) -> List[TagCloudEntry]:
        return [
            TagCloudEntry(name=tag.label, weight=len(graph.incoming(tag.id, EdgeKind.TAGGED_WITH)))
            for tag in graph.nodes_of_kind(NodeKind.TAG)
        ]
