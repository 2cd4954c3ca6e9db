"""
Unit tests for the error hierarchy.
"""

import pytest

from kb_graph.exceptions import (
    AnalysisCancelledError,
    AnalysisTimeoutError,
    ConflictError,
    CycleDetectedError,
    ForbiddenError,
    KnowledgeBaseException,
    NotFoundError,
    ValidationError,
    require_owned,
    validate_input,
)
from kb_graph.store import Document

from conftest import BASE_TIME, OTHER_USER, OWNER


class TestExceptions:

    def test_forbidden_renders_like_not_found(self):
        """Another user's entity is indistinguishable from a missing one."""
        forbidden = ForbiddenError("Document", 7)
        missing = NotFoundError("Document", 7)

        assert isinstance(forbidden, NotFoundError)
        assert forbidden.message == missing.message
        assert forbidden.to_dict() == missing.to_dict()

    def test_to_dict(self):
        error = AnalysisTimeoutError("relation_graph", 30)

        assert error.to_dict() == {
            "error": "AnalysisTimeoutError",
            "message": "Operation 'relation_graph' timed out after 30s",
            "details": {"operation": "relation_graph", "timeout_seconds": 30}
        }
        assert isinstance(error, KnowledgeBaseException)

    def test_validate_input(self):
        validate_input(True, "limit", "must not be negative", 1)

        with pytest.raises(ValidationError) as exc_info:
            validate_input(False, "limit", "must not be negative", -1)

        assert exc_info.value.message == "Invalid limit: must not be negative"
        assert exc_info.value.details == {"field": "limit", "value": -1}

    def test_require_owned(self):
        document = Document(id=1, title="Doc", user_id=OWNER, created_time=BASE_TIME)

        assert require_owned(document, "Document", 1, OWNER) is document

        with pytest.raises(ForbiddenError):
            require_owned(document, "Document", 1, OTHER_USER)
        with pytest.raises(NotFoundError):
            require_owned(None, "Document", 1, OWNER)


class TestStatusCodes:
    """HTTP status codes the API renders for each error."""

    @pytest.mark.parametrize("error,status_code", [
        (NotFoundError("Document", 1), 404),
        (ForbiddenError("Document", 1), 404),
        (ValidationError("limit", "must not be negative", -1), 400),
        (ConflictError("Category has children"), 409),
        (CycleDetectedError([2, 3]), 409),
        (AnalysisTimeoutError("relation_graph", 30), 503),
        (AnalysisCancelledError("relation_graph"), 499),
        (KnowledgeBaseException("unexpected"), 500),
    ])
    def test_status_code_for(self, error, status_code):
        from kb_graph.api import status_code_for

        assert status_code_for(error) == status_code
