"""
Knowledge Graph Analysis Module

Build a typed graph from a user's documents, categories and tags, and compute
similarity, centrality, density, clusters, coverage gaps, learning paths and
the category hierarchy.
"""

from .snapshot import (
    EntitySnapshot,
    SnapshotLoader,
)

from .knowledge_graph import (
    # Graph structures
    NodeKind,
    EdgeKind,
    Node,
    Edge,
    KnowledgeGraph,

    # Construction
    GraphBuilder,
    build_knowledge_graph,
    node_id,
)

from .similarity import SimilarityEngine, shared_tag_count

from .graph_metrics import (
    CentralityRanker,
    DensityAnalyzer,
    ClusterAnalyzer,
    GapAnalyzer,
    GapSuggestionStrategy,
    StaticGapSuggestions,
    TagCloudBuilder,
)

from .learning_path import LearningPathSequencer

from .category_tree import (
    CategoryTree,
    CategoryTreeNode,
    CategoryTreeBuilder,
    CategoryMover,
)

from .statistics import StatisticsAnalyzer

from .executor import AnalysisExecutor, CancellationToken

__all__ = [
    # Snapshot
    "EntitySnapshot",
    "SnapshotLoader",

    # Graph
    "NodeKind",
    "EdgeKind",
    "Node",
    "Edge",
    "KnowledgeGraph",
    "GraphBuilder",
    "build_knowledge_graph",
    "node_id",

    # Analytics
    "SimilarityEngine",
    "shared_tag_count",
    "CentralityRanker",
    "DensityAnalyzer",
    "ClusterAnalyzer",
    "GapAnalyzer",
    "GapSuggestionStrategy",
    "StaticGapSuggestions",
    "TagCloudBuilder",
    "LearningPathSequencer",
    "StatisticsAnalyzer",

    # Categories
    "CategoryTree",
    "CategoryTreeNode",
    "CategoryTreeBuilder",
    "CategoryMover",

    # Execution
    "AnalysisExecutor",
    "CancellationToken",
]
