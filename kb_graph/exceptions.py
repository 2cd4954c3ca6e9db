"""
Custom Exceptions for the Knowledge Graph Analytics Engine

Provides clear, actionable error messages and a small error hierarchy.
Every error raised here is local and recoverable: analytics are pure
functions of a freshly loaded snapshot, so a failed call leaves nothing
behind.
"""

from typing import Dict, Iterable, Optional


class KnowledgeBaseException(Exception):
    """Base exception for all knowledge-base analytics errors."""

    def __init__(self, message: str, details: dict = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def error_name(self) -> str:
        return self.__class__.__name__

    def to_dict(self) -> Dict:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.error_name,
            "message": self.message,
            "details": self.details
        }


# Lookup Errors

class NotFoundError(KnowledgeBaseException):
    """Raised when a referenced document, category or tag does not exist."""

    def __init__(self, resource_type: str, resource_id):
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            {"resource_type": resource_type, "resource_id": resource_id}
        )


class ForbiddenError(NotFoundError):
    """
    Raised when an entity exists but belongs to another user.

    Rendered exactly like NotFoundError so callers cannot probe for the
    existence of other users' data.
    """

    @property
    def error_name(self) -> str:
        return NotFoundError.__name__


# Input Errors

class ValidationError(KnowledgeBaseException):
    """Raised when request input is malformed (negative limit, bad window, ...)."""

    def __init__(self, field_name: str, message: str, value=None):
        super().__init__(
            f"Invalid {field_name}: {message}",
            {"field": field_name, "value": value}
        )


# Structural Errors

class ConflictError(KnowledgeBaseException):
    """Raised when an operation would violate the category structure."""
    pass


class CycleDetectedError(KnowledgeBaseException):
    """Raised when category parent/child data contains a cycle."""

    def __init__(self, category_ids: Iterable[int]):
        ids = sorted(category_ids)
        super().__init__(
            f"Cycle detected in category hierarchy involving: {ids}",
            {"category_ids": ids}
        )


class GraphIntegrityError(KnowledgeBaseException):
    """Raised when an edge references a node missing from its graph."""

    def __init__(self, source: str, target: str):
        super().__init__(
            f"Edge {source} -> {target} references a node outside the graph",
            {"source": source, "target": target}
        )


# Execution Errors

class AnalysisError(KnowledgeBaseException):
    """Base class for analysis execution errors."""
    pass


class AnalysisTimeoutError(AnalysisError):
    """Raised when an analysis exceeds its time budget."""

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            f"Operation '{operation}' timed out after {timeout_seconds}s",
            {"operation": operation, "timeout_seconds": timeout_seconds}
        )


class AnalysisCancelledError(AnalysisError):
    """Raised when an in-flight analysis is cancelled by its caller."""

    def __init__(self, operation: Optional[str] = None):
        super().__init__(
            f"Operation '{operation or 'analysis'}' was cancelled",
            {"operation": operation}
        )


# Utility Functions

def validate_input(condition: bool, field_name: str, message: str, value=None):
    """
    Validate input and raise ValidationError if condition is False.

    Usage:
        validate_input(limit >= 0, "limit", "must not be negative", limit)
    """
    if not condition:
        raise ValidationError(field_name, message, value)


def require_owned(entity, resource_type: str, resource_id, user_id: int):
    """
    Require that an entity exists and belongs to user_id.

    Usage:
        doc = require_owned(store.get_document(doc_id), "Document", doc_id, user_id)
    """
    if entity is None:
        raise NotFoundError(resource_type, resource_id)
    if entity.user_id != user_id:
        raise ForbiddenError(resource_type, resource_id)
    return entity
