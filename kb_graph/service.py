"""
Knowledge Graph Service

Facade used by the REST layer and the CLI. Each call loads a private
snapshot of one user's data, computes a result and returns a result record.
Nothing survives between calls.
"""

import logging
from typing import Awaitable, Callable, Iterable, List, Optional

from .analysis.category_tree import CategoryMover, CategoryTree, CategoryTreeBuilder
from .analysis.executor import AnalysisExecutor, CancellationToken, check_cancelled
from .analysis.graph_metrics import (
    CentralityRanker,
    ClusterAnalyzer,
    DensityAnalyzer,
    GapAnalyzer,
    GapSuggestionStrategy,
    TagCloudBuilder,
)
from .analysis.knowledge_graph import GraphBuilder, KnowledgeGraph
from .analysis.learning_path import LearningPathSequencer
from .analysis.results import (
    ActivityResult,
    CentralNode,
    ClusterResult,
    CoverageResult,
    DensityResult,
    DistributionResult,
    EfficiencyResult,
    GapResult,
    LearningPathResult,
    OverviewResult,
    SimilarDocument,
    TagCloudEntry,
    TrendResult,
)
from .analysis.similarity import SimilarityEngine
from .analysis.snapshot import EntitySnapshot, SnapshotLoader
from .analysis.statistics import StatisticsAnalyzer
from .config.settings import AnalyticsConfig, settings
from .exceptions import require_owned, validate_input
from .store.base import RecordStore
from .store.entities import Category

logger = logging.getLogger(__name__)


class KnowledgeGraphService:
    """
    Knowledge-graph analytics for one record store.

    Usage:
        service = KnowledgeGraphService(store)
        graph = service.full_graph(user_id=1)
        similar = service.similar_documents(user_id=1, document_id=42, limit=5)
    """

    def __init__(self, store: RecordStore, config: AnalyticsConfig = None,
                 executor: AnalysisExecutor = None,
                 gap_strategy: GapSuggestionStrategy = None,
                 statistics: StatisticsAnalyzer = None):
        self.store = store
        self.config = config or settings.analytics
        self.executor = executor or AnalysisExecutor(self.config)

        self.loader = SnapshotLoader(store)
        self.builder = GraphBuilder()
        self.similarity = SimilarityEngine()
        self.centrality = CentralityRanker(top_n=self.config.central_nodes_limit)
        self.density = DensityAnalyzer()
        self.clusters = ClusterAnalyzer()
        self.gaps = GapAnalyzer(gap_strategy)
        self.tag_cloud_builder = TagCloudBuilder()
        self.sequencer = LearningPathSequencer()
        self.tree_builder = CategoryTreeBuilder()
        self.mover = CategoryMover(store)
        self.statistics = statistics or StatisticsAnalyzer()

    # =========================================================================
    # SNAPSHOT / GRAPH
    # =========================================================================

    def snapshot(self, user_id: int, document_ids: Iterable[int] = None) -> EntitySnapshot:
        return self.loader.load(user_id, document_ids=document_ids)

    def graph(self, user_id: int, document_ids: Iterable[int] = None) -> KnowledgeGraph:
        return self.builder.build(self.snapshot(user_id, document_ids))

    def full_graph(self, user_id: int, document_ids: Iterable[int] = None) -> KnowledgeGraph:
        """Categories, documents and tags with their structural edges."""
        return self.graph(user_id, document_ids)

    def tag_cloud(self, user_id: int) -> List[TagCloudEntry]:
        return self.tag_cloud_builder.build(self.graph(user_id))

    # =========================================================================
    # SIMILARITY (bounded, cancellable)
    # =========================================================================

    # Executor jobs: snapshot loading and graph building run inside the timeout.

    def relation_graph(self, user_id: int, token: CancellationToken = None) -> KnowledgeGraph:
        graph = self.graph(user_id)
        check_cancelled(token, "relation_graph")
        return self.similarity.relation_graph(graph, token=token)

    def rank_similar(self, user_id: int, document_id: int, limit: int,
                     token: CancellationToken = None) -> List[SimilarDocument]:
        graph = self.graph(user_id)
        check_cancelled(token, "rank_similar")
        return self.similarity.similar_documents(graph, document_id, limit, token=token)

    def document_relations(self, user_id: int, token: CancellationToken = None) -> KnowledgeGraph:
        return self.executor.run(self.relation_graph, user_id, token=token)

    async def document_relations_async(self, user_id: int,
                                       is_disconnected: Callable[[], Awaitable[bool]] = None) -> KnowledgeGraph:
        return await self.executor.run_async(
            self.relation_graph, user_id, is_disconnected=is_disconnected
        )

    def _resolve_similarity_target(self, user_id: int, document_id: int,
                                   limit: Optional[int]) -> int:
        limit = self.config.similar_documents_limit if limit is None else limit
        validate_input(limit >= 0, "limit", "must not be negative", limit)
        require_owned(self.store.get_document(document_id), "Document", document_id, user_id)
        return limit

    def similar_documents(self, user_id: int, document_id: int, limit: int = None,
                          token: CancellationToken = None) -> List[SimilarDocument]:
        limit = self._resolve_similarity_target(user_id, document_id, limit)
        return self.executor.run(self.rank_similar, user_id, document_id, limit, token=token)

    async def similar_documents_async(self, user_id: int, document_id: int, limit: int = None,
                                      is_disconnected: Callable[[], Awaitable[bool]] = None) -> List[SimilarDocument]:
        limit = self._resolve_similarity_target(user_id, document_id, limit)
        return await self.executor.run_async(
            self.rank_similar, user_id, document_id, limit,
            is_disconnected=is_disconnected
        )

    # =========================================================================
    # GRAPH METRICS
    # =========================================================================

    def central_nodes(self, user_id: int) -> List[CentralNode]:
        return self.centrality.rank(self.graph(user_id))

    def relation_density(self, user_id: int) -> DensityResult:
        return self.density.analyze(self.graph(user_id))

    def knowledge_clusters(self, user_id: int) -> ClusterResult:
        return self.clusters.analyze(self.graph(user_id))

    def knowledge_gaps(self, user_id: int) -> GapResult:
        return self.gaps.analyze(self.graph(user_id))

    # =========================================================================
    # LEARNING PATH
    # =========================================================================

    def learning_path(self, user_id: int, goal: str = None,
                      document_ids: Iterable[int] = None) -> LearningPathResult:
        snapshot = self.snapshot(user_id, document_ids)
        if goal is None:
            return self.sequencer.sequence(snapshot)
        return self.sequencer.personalized(snapshot, goal)

    # =========================================================================
    # CATEGORIES
    # =========================================================================

    def category_tree(self, user_id: int) -> CategoryTree:
        snapshot = self.snapshot(user_id)
        return self.tree_builder.build(snapshot.categories, snapshot.document_counts_by_category())

    def move_category(self, user_id: int, category_id: int,
                      new_parent_id: Optional[int]) -> Category:
        return self.mover.move(user_id, category_id, new_parent_id)

    def delete_category(self, user_id: int, category_id: int) -> bool:
        return self.mover.delete(user_id, category_id)

    # =========================================================================
    # STATISTICS
    # =========================================================================

    def overview(self, user_id: int) -> OverviewResult:
        return self.statistics.overview(self.snapshot(user_id))

    def learning_efficiency(self, user_id: int, days: int = 30) -> EfficiencyResult:
        return self.statistics.learning_efficiency(self.snapshot(user_id), days)

    def creation_trend(self, user_id: int, months: int = 6) -> TrendResult:
        return self.statistics.creation_trend(self.snapshot(user_id), months)

    def activity(self, user_id: int, days: int = 7) -> ActivityResult:
        return self.statistics.activity(self.snapshot(user_id), days)

    def coverage(self, user_id: int) -> CoverageResult:
        return self.statistics.coverage(self.snapshot(user_id))

    def category_distribution(self, user_id: int) -> DistributionResult:
        return self.statistics.category_distribution(self.snapshot(user_id))

    def close(self) -> None:
        self.executor.shutdown(wait=False)
