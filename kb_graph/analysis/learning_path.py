"""
Learning path sequencing.

Orders a user's documents chronologically into a path. Later steps are drawn
larger and the most recent one is highlighted.
"""

import logging
from typing import List

from ..exceptions import validate_input
from ..store.entities import Document
from .results import LearningPathLink, LearningPathNode, LearningPathResult
from .snapshot import EntitySnapshot

logger = logging.getLogger(__name__)

BASE_NODE_SIZE = 20
NODE_SIZE_STEP = 2
PATH_COLOR = "#37A2DA"
LATEST_COLOR = "#ff0000"


def matches_goal(document: Document, goal: str) -> bool:
    """Case-insensitive substring match on title or content."""
    needle = goal.casefold()
    if needle in (document.title or "").casefold():
        return True
    return needle in (document.content or "").casefold()


class LearningPathSequencer:
    """
    Build chronological learning paths.

    Usage:
        sequencer = LearningPathSequencer()
        path = sequencer.sequence(snapshot)
        focused = sequencer.personalized(snapshot, goal="python")
    """

    def sequence(self, snapshot: EntitySnapshot) -> LearningPathResult:
        return self._build(snapshot.documents)

    def personalized(self, snapshot: EntitySnapshot, goal: str) -> LearningPathResult:
        validate_input(goal is not None and goal.strip() != "", "goal", "must not be blank", goal)
        goal = goal.strip()

        selected = [d for d in snapshot.documents if matches_goal(d, goal)]
        logger.debug(f"Learning goal '{goal}' matched {len(selected)} of {len(snapshot.documents)} documents")

        path = self._build(selected)
        path.goal = goal
        return path

    def _build(self, documents: List[Document]) -> LearningPathResult:
        # sorted() is stable: documents created at the same instant keep store order
        ordered = sorted(documents, key=lambda d: d.created_time)
        last = len(ordered) - 1

        nodes = []
        links = []
        for i, doc in enumerate(ordered):
            nodes.append(LearningPathNode(
                document_id=doc.id,
                name=doc.title,
                created_time=doc.created_time.isoformat(),
                size=BASE_NODE_SIZE + i * NODE_SIZE_STEP,
                color=LATEST_COLOR if i == last else PATH_COLOR,
                latest=i == last
            ))
            if i > 0:
                links.append(LearningPathLink(source=i - 1, target=i))

        return LearningPathResult(
            nodes=nodes,
            links=links,
            start_date=nodes[0].created_time if nodes else "",
            latest_date=nodes[-1].created_time if nodes else ""
        )
