"""
Knowledge-base statistics over a snapshot: overview totals, creation trend,
recent activity, learning efficiency, coverage and category distribution.
"""

from datetime import date, datetime, timedelta
from typing import Callable, Dict

from ..exceptions import validate_input
from .results import (
    ActivityResult,
    CoverageResult,
    DistributionResult,
    EfficiencyResult,
    OverviewResult,
    TrendResult,
)
from .snapshot import EntitySnapshot

UNCATEGORIZED = "Uncategorized"

# Window behind the overview's recentDocuments count
RECENT_DAYS = 7


def activity_level(average_daily: float) -> str:
    if average_daily >= 2:
        return "very active"
    if average_daily >= 1:
        return "active"
    if average_daily >= 0.5:
        return "moderate"
    return "inactive"


def _shift_month(year: int, month: int, delta: int):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


class StatisticsAnalyzer:
    """
    Time-windowed statistics.

    ``clock`` returns "now"; tests pin it to a fixed datetime.
    """

    def __init__(self, clock: Callable[[], datetime] = None):
        self.clock = clock or datetime.now

    def overview(self, snapshot: EntitySnapshot) -> OverviewResult:
        """Totals per entity kind; recent documents cover today and the six days before."""
        cutoff = self.clock().date() - timedelta(days=RECENT_DAYS)
        recent = sum(1 for d in snapshot.documents if d.created_time.date() > cutoff)

        return OverviewResult(
            total_documents=len(snapshot.documents),
            total_categories=len(snapshot.categories),
            total_tags=len(snapshot.tags),
            recent_documents=recent
        )

    def learning_efficiency(self, snapshot: EntitySnapshot, days: int = 30) -> EfficiencyResult:
        """Output and content volume over the last ``days`` days, today included."""
        validate_input(days is not None and days > 0, "days", "must be positive", days)

        end: date = self.clock().date()
        start = end - timedelta(days=days - 1)
        window = [d for d in snapshot.documents if start <= d.created_time.date() <= end]

        if not window:
            return EfficiencyResult()

        lengths = [len(d.content) if d.content is not None else 0 for d in window]
        return EfficiencyResult(
            documents_created=len(window),
            average_documents_per_day=len(window) / days,
            average_content_length=sum(lengths) / len(lengths),
            categories_used=len({d.category_id for d in window if d.category_id is not None})
        )

    def creation_trend(self, snapshot: EntitySnapshot, months: int = 6) -> TrendResult:
        validate_input(months is not None and months > 0, "months", "must be positive", months)

        today = self.clock().date()
        counts: Dict[str, int] = {}
        for offset in range(months - 1, -1, -1):
            year, month = _shift_month(today.year, today.month, -offset)
            counts[f"{year:04d}-{month:02d}"] = 0

        for document in snapshot.documents:
            key = f"{document.created_time.year:04d}-{document.created_time.month:02d}"
            if key in counts:
                counts[key] += 1

        return TrendResult(months=counts)

    def activity(self, snapshot: EntitySnapshot, days: int = 7) -> ActivityResult:
        validate_input(days is not None and days > 0, "days", "must be positive", days)

        end: date = self.clock().date()
        start = end - timedelta(days=days - 1)

        daily: Dict[str, int] = {}
        for i in range(days):
            daily[(start + timedelta(days=i)).isoformat()] = 0

        for document in snapshot.documents:
            key = document.created_time.date().isoformat()
            if key in daily:
                daily[key] += 1

        total = sum(daily.values())
        active_days = sum(1 for count in daily.values() if count > 0)
        average = total / days

        return ActivityResult(
            daily_activity=daily,
            total_activity=total,
            active_days=active_days,
            activity_rate=active_days / days * 100,
            average_daily_activity=average,
            activity_level=activity_level(average)
        )

    def coverage(self, snapshot: EntitySnapshot) -> CoverageResult:
        counts = snapshot.document_counts_by_category()
        categories = snapshot.categories
        covered = sum(1 for c in categories if counts.get(c.id, 0) > 0)

        used_tags = {tag_id for tag_ids in snapshot.tag_ids_by_document.values() for tag_id in tag_ids}
        tags_with_documents = sum(1 for t in snapshot.tags if t.id in used_tags)

        return CoverageResult(
            category_coverage=covered / len(categories) * 100 if categories else 0.0,
            tag_coverage=tags_with_documents / len(snapshot.tags) * 100 if snapshot.tags else 0.0,
            knowledge_density=len(snapshot.documents) / len(categories) if categories else 0.0
        )

    def category_distribution(self, snapshot: EntitySnapshot) -> DistributionResult:
        counts = snapshot.document_counts_by_category()
        distribution: Dict[str, int] = {}
        for category in snapshot.categories:
            distribution[category.name] = distribution.get(category.name, 0) + counts.get(category.id, 0)

        uncategorized = sum(1 for d in snapshot.documents if d.category_id is None)
        return DistributionResult(categories=distribution, uncategorized=uncategorized)
