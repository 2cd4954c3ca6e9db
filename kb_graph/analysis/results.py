"""
Result records returned to the request layer.

One explicit record per endpoint. ``to_dict`` renders the camelCase shape
the front end consumes.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass
class TagCloudEntry:
    name: str
    weight: int

    @property
    def font_size(self) -> int:
        return max(12, min(30, self.weight * 5))

    def to_dict(self) -> Dict:
        return {"name": self.name, "weight": self.weight, "fontSize": self.font_size}


@dataclass
class CentralNode:
    """A document ranked by its number of tag connections."""
    id: int
    title: str
    connection_count: int

    def to_dict(self) -> Dict:
        return {"id": self.id, "title": self.title, "connectionCount": self.connection_count}


@dataclass
class DensityResult:
    """Connectivity density of a corpus, 0..100, with a coarse level."""
    value: int
    level: str
    actual_connections: int = 0
    possible_connections: int = 0

    def to_dict(self) -> Dict:
        return {"value": self.value, "level": self.level}


@dataclass
class ClusterResult:
    """Documents per non-empty category, in category order."""
    clusters: Dict[str, int] = field(default_factory=dict)
    total_clusters: int = 0

    def to_dict(self) -> Dict:
        return {"clusters": dict(self.clusters), "totalClusters": self.total_clusters}


@dataclass
class GapResult:
    """Category coverage and suggestions for filling the gaps."""
    total_categories: int
    covered_categories: int
    coverage_rate: float
    uncovered_categories: List[str] = field(default_factory=list)
    suggested_tags: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        return {
            "totalCategories": self.total_categories,
            "coveredCategories": self.covered_categories,
            "coverageRate": self.coverage_rate,
            "uncoveredCategories": list(self.uncovered_categories),
            "suggestedTags": list(self.suggested_tags)
        }


@dataclass
class LearningPathNode:
    document_id: int
    name: str
    created_time: str
    size: int
    color: str
    latest: bool = False

    def to_dict(self) -> Dict:
        return {
            "id": self.document_id,
            "name": self.name,
            "value": self.created_time,
            "size": self.size,
            "color": self.color,
            "latest": self.latest
        }


@dataclass
class LearningPathLink:
    source: int
    target: int

    def to_dict(self) -> Dict:
        return {"source": self.source, "target": self.target}


@dataclass
class LearningPathResult:
    """Chronological traversal of a user's documents."""
    nodes: List[LearningPathNode] = field(default_factory=list)
    links: List[LearningPathLink] = field(default_factory=list)
    start_date: str = ""
    latest_date: str = ""
    goal: Optional[str] = None

    @property
    def total_steps(self) -> int:
        return len(self.nodes)

    def to_dict(self) -> Dict:
        data = {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [l.to_dict() for l in self.links],
            "totalSteps": self.total_steps,
            "startDate": self.start_date,
            "latestDate": self.latest_date
        }
        if self.goal is not None:
            data["goal"] = self.goal
        return data


@dataclass
class SimilarDocument:
    id: int
    title: str
    similarity_score: int

    def to_dict(self) -> Dict:
        return {"id": self.id, "title": self.title, "similarityScore": self.similarity_score}


# =============================================================================
# STATISTICS
# =============================================================================

@dataclass
class TrendResult:
    """Documents created per calendar month, oldest month first."""
    months: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return dict(self.months)


@dataclass
class ActivityResult:
    daily_activity: Dict[str, int] = field(default_factory=dict)
    total_activity: int = 0
    active_days: int = 0
    activity_rate: float = 0.0
    average_daily_activity: float = 0.0
    activity_level: str = "inactive"

    def to_dict(self) -> Dict:
        return {
            "dailyActivity": dict(self.daily_activity),
            "totalActivity": self.total_activity,
            "activeDays": self.active_days,
            "activityRate": self.activity_rate,
            "averageDailyActivity": self.average_daily_activity,
            "activityLevel": self.activity_level
        }


@dataclass
class CoverageResult:
    category_coverage: float = 0.0
    tag_coverage: float = 0.0
    knowledge_density: float = 0.0

    def to_dict(self) -> Dict:
        return {
            "categoryCoverage": self.category_coverage,
            "tagCoverage": self.tag_coverage,
            "knowledgeDensity": self.knowledge_density
        }


@dataclass
class DistributionResult:
    """Direct documents per category name, plus the uncategorized count."""
    categories: Dict[str, int] = field(default_factory=dict)
    uncategorized: int = 0

    def to_dict(self) -> Dict:
        return {**self.categories, "Uncategorized": self.uncategorized}


@dataclass
class OverviewResult:
    """Entity totals plus documents created in the last week."""
    total_documents: int = 0
    total_categories: int = 0
    total_tags: int = 0
    recent_documents: int = 0

    def to_dict(self) -> Dict:
        return {
            "totalDocuments": self.total_documents,
            "totalCategories": self.total_categories,
            "totalTags": self.total_tags,
            "recentDocuments": self.recent_documents
        }


@dataclass
class EfficiencyResult:
    documents_created: int = 0
    average_documents_per_day: float = 0.0
    average_content_length: float = 0.0
    categories_used: int = 0

    def to_dict(self) -> Dict:
        return {
            "documentsCreated": self.documents_created,
            "averageDocumentsPerDay": self.average_documents_per_day,
            "averageContentLength": self.average_content_length,
            "categoriesUsed": self.categories_used
        }
