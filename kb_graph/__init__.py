"""
Knowledge Graph Analytics

Builds a knowledge graph over a user's documents, categories and tags and
computes similarity, centrality, density, clusters, coverage gaps, learning
paths, the category hierarchy and usage statistics.
"""

__version__ = "1.0.0"

from .exceptions import (
    KnowledgeBaseException,
    NotFoundError,
    ForbiddenError,
    ValidationError,
    ConflictError,
    CycleDetectedError,
    GraphIntegrityError,
    AnalysisError,
    AnalysisTimeoutError,
    AnalysisCancelledError,
)
from .service import KnowledgeGraphService

__all__ = [
    "__version__",
    "KnowledgeGraphService",
    "KnowledgeBaseException",
    "NotFoundError",
    "ForbiddenError",
    "ValidationError",
    "ConflictError",
    "CycleDetectedError",
    "GraphIntegrityError",
    "AnalysisError",
    "AnalysisTimeoutError",
    "AnalysisCancelledError",
]
