"""
Integration tests for the knowledge graph REST API.
"""

import pytest
from fastapi.testclient import TestClient

from kb_graph.api import create_app
from kb_graph.config.settings import AnalyticsConfig
from kb_graph.service import KnowledgeGraphService

from conftest import make_category, make_document

API = "/api/knowledge-graph"


@pytest.fixture
def make_client():
    services = []

    def factory(store, config=None):
        config = config or AnalyticsConfig(max_workers=2, timeout_seconds=5)
        service = KnowledgeGraphService(store, config=config)
        services.append(service)
        return TestClient(create_app(service=service))

    yield factory
    for service in services:
        service.close()


@pytest.fixture
def client(make_client, two_user_store):
    """Relation scenario plus an empty category tree and another user's data."""
    two_user_store.add_category(make_category(1, "Python"))
    two_user_store.add_category(make_category(2, "Async", parent_id=1))
    two_user_store.add_category(make_category(3, "Empty"))
    two_user_store.get_document(1).category_id = 1
    two_user_store.get_document(2).category_id = 2
    return make_client(two_user_store)


class TestGraphEndpoints:
    """Tests for graph view endpoints."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_full_graph(self, client):
        response = client.get(f"{API}/full/1")

        assert response.status_code == 200
        data = response.json()
        assert len(data["nodes"]) == 3 + 3 + 4
        assert {"source": "document:1", "target": "category:1", "label": "belongs to"} in data["edges"]

    def test_full_graph_scoped(self, client):
        response = client.get(f"{API}/full/1", params={"document_ids": [1, 2]})

        kinds = [n["kind"] for n in response.json()["nodes"]]
        assert kinds.count("document") == 2

    def test_document_relations(self, client):
        response = client.get(f"{API}/document-relations/1")

        assert response.status_code == 200
        weighted = [e for e in response.json()["edges"] if "weight" in e]
        assert [(e["source"], e["target"], e["weight"]) for e in weighted] == [
            ("document:1", "document:2", 1)
        ]

    def test_tag_cloud(self, client):
        response = client.get(f"{API}/tag-cloud/1")

        assert response.json()[1] == {"name": "B", "weight": 2, "fontSize": 12}

    def test_learning_path(self, client):
        response = client.get(f"{API}/learning-path/1")

        data = response.json()
        assert data["totalSteps"] == 3
        assert [n["name"] for n in data["nodes"]] == ["D1", "D2", "D3"]

    def test_learning_path_with_goal(self, client):
        response = client.get(f"{API}/learning-path/1", params={"goal": "d2"})

        data = response.json()
        assert data["goal"] == "d2"
        assert [n["id"] for n in data["nodes"]] == [2]

    def test_learning_path_blank_goal(self, client):
        response = client.get(f"{API}/learning-path/1", params={"goal": "  "})

        assert response.status_code == 400
        assert response.json()["error"] == "ValidationError"


class TestAnalyticsEndpoints:
    """Tests for analytics endpoints."""

    def test_central_nodes(self, client):
        response = client.get(f"{API}/central-nodes/1")

        assert [n["id"] for n in response.json()] == [1, 2, 3]

    def test_relation_density(self, client):
        assert client.get(f"{API}/relation-density/1").json() == {"value": 100, "level": "high"}

    def test_knowledge_clusters(self, client):
        response = client.get(f"{API}/knowledge-clusters/1")

        assert response.json() == {"clusters": {"Python": 1, "Async": 1}, "totalClusters": 2}

    def test_knowledge_gaps(self, client):
        data = client.get(f"{API}/knowledge-gaps/1").json()

        assert data["totalCategories"] == 3
        assert data["coveredCategories"] == 2
        assert data["uncoveredCategories"] == ["Empty"]

    def test_similar_documents(self, client):
        response = client.get(f"{API}/similar-documents/1", params={"document_id": 1, "limit": 5})

        assert response.status_code == 200
        assert response.json() == [{"id": 2, "title": "D2", "similarityScore": 1}]

    def test_similar_documents_negative_limit(self, client):
        response = client.get(f"{API}/similar-documents/1", params={"document_id": 1, "limit": -1})

        assert response.status_code == 400

    def test_similar_documents_missing(self, client):
        response = client.get(f"{API}/similar-documents/1", params={"document_id": 999})

        assert response.status_code == 404

    def test_other_users_document_looks_missing(self, client):
        """A 404 for another user's document is byte-for-byte a NotFound."""
        response = client.get(f"{API}/similar-documents/1", params={"document_id": 50})

        assert response.status_code == 404
        assert response.json() == {
            "error": "NotFoundError",
            "message": "Document not found: 50",
            "details": {"resource_type": "Document", "resource_id": 50}
        }

    @pytest.mark.parametrize("path,params", [
        ("document-relations/1", None),
        ("similar-documents/1", {"document_id": 1}),
    ])
    def test_timeout_is_service_unavailable(self, make_client, two_user_store, path, params):
        client = make_client(two_user_store, AnalyticsConfig(max_workers=1, timeout_seconds=0))

        response = client.get(f"{API}/{path}", params=params)

        assert response.status_code == 503
        assert response.json()["error"] == "AnalysisTimeoutError"


class TestCategoryEndpoints:
    """Tests for category endpoints."""

    def test_category_tree(self, client):
        data = client.get(f"{API}/category-tree/1").json()

        assert [c["name"] for c in data] == ["Python", "Empty"]
        assert data[0]["children"][0]["name"] == "Async"
        assert data[0]["totalDocumentCount"] == 2

    def test_move_category(self, client):
        response = client.post(f"{API}/categories/3/move", json={"user_id": 1, "parent_id": 2})

        assert response.status_code == 200
        assert response.json()["parent_id"] == 2

    def test_move_into_descendant(self, client):
        response = client.post(f"{API}/categories/1/move", json={"user_id": 1, "parent_id": 2})

        assert response.status_code == 409
        assert response.json()["error"] == "ConflictError"
        tree = client.get(f"{API}/category-tree/1").json()
        assert tree[0]["parentId"] is None

    def test_delete_category(self, client):
        assert client.delete(f"{API}/categories/3", params={"user_id": 1}).json() == {"deleted": True}
        assert client.delete(f"{API}/categories/1", params={"user_id": 1}).status_code == 409
        assert client.delete(f"{API}/categories/50", params={"user_id": 1}).status_code == 404

    def test_cyclic_categories(self, make_client, store):
        store.add_category(make_category(1, "X", parent_id=2))
        store.add_category(make_category(2, "Y", parent_id=1))

        response = make_client(store).get(f"{API}/category-tree/1")

        assert response.status_code == 409
        assert response.json()["error"] == "CycleDetectedError"


class TestStatisticsEndpoints:
    """Tests for statistics endpoints."""

    def test_overview(self, client):
        data = client.get(f"{API}/statistics/overview/1").json()

        assert data == {
            "totalDocuments": 3,
            "totalCategories": 3,
            "totalTags": 4,
            "recentDocuments": 0
        }

    def test_efficiency(self, client):
        """Fixture documents are from 2024, outside the default 30-day window."""
        data = client.get(f"{API}/statistics/efficiency/1").json()

        assert data == {
            "documentsCreated": 0,
            "averageDocumentsPerDay": 0.0,
            "averageContentLength": 0.0,
            "categoriesUsed": 0
        }
        assert client.get(f"{API}/statistics/efficiency/1", params={"days": 0}).status_code == 400

    def test_trend(self, client):
        data = client.get(f"{API}/statistics/trend/1", params={"months": 3}).json()

        assert len(data) == 3

    def test_trend_invalid_months(self, client):
        assert client.get(f"{API}/statistics/trend/1", params={"months": 0}).status_code == 400

    def test_activity(self, client):
        data = client.get(f"{API}/statistics/activity/1").json()

        assert len(data["dailyActivity"]) == 7
        assert data["activityLevel"] in {"very active", "active", "moderate", "inactive"}

    def test_coverage(self, client):
        data = client.get(f"{API}/statistics/coverage/1").json()

        assert data["tagCoverage"] == 100.0
        assert data["knowledgeDensity"] == 1.0

    def test_distribution(self, client):
        data = client.get(f"{API}/statistics/distribution/1").json()

        assert data == {"Python": 1, "Async": 1, "Empty": 0, "Uncategorized": 1}

    def test_empty_user(self, client):
        """A user with no data gets empty results, not errors."""
        assert client.get(f"{API}/central-nodes/7").json() == []
        assert client.get(f"{API}/relation-density/7").json() == {"value": 0, "level": "low"}
        assert client.get(f"{API}/knowledge-gaps/7").json()["coverageRate"] == 0.0
        assert client.get(f"{API}/category-tree/7").json() == []


def test_create_app_from_store(store):
    """create_app builds its own service around a given store."""
    store.add_document(make_document(1, "Only"))
    app = create_app(store=store)

    response = TestClient(app).get(f"{API}/full/1")
    app.state.service.close()

    assert [n["label"] for n in response.json()["nodes"]] == ["Only"]


def test_shutdown_closes_executor(store):
    """Leaving the app's lifespan shuts the analysis pool down."""
    service = KnowledgeGraphService(store, config=AnalyticsConfig(max_workers=1, timeout_seconds=5))

    with TestClient(create_app(service=service)) as client:
        assert client.get("/health").status_code == 200

    with pytest.raises(RuntimeError):
        service.executor.run(lambda token: None)
