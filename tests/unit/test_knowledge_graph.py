"""
Unit tests for knowledge graph module.
"""

import json

import pytest

from conftest import OWNER, make_category, make_document, make_tag


class TestKnowledgeGraph:
    """Tests for KnowledgeGraph class."""

    def test_create_empty_graph(self):
        """Test creating an empty knowledge graph."""
        from kb_graph.analysis.knowledge_graph import KnowledgeGraph

        graph = KnowledgeGraph()

        assert graph.node_count() == 0
        assert graph.edge_count() == 0

    def test_add_node_is_idempotent(self):
        """Re-adding a node id keeps the first node."""
        from kb_graph.analysis.knowledge_graph import KnowledgeGraph, Node, NodeKind

        graph = KnowledgeGraph()
        first = graph.add_node(Node(id="document:1", label="First", kind=NodeKind.DOCUMENT))
        second = graph.add_node(Node(id="document:1", label="Second", kind=NodeKind.DOCUMENT))

        assert second is first
        assert graph.node_count() == 1
        assert len(graph.nodes_of_kind(NodeKind.DOCUMENT)) == 1

    def test_add_edge_requires_both_endpoints(self):
        """An edge to a missing node is a construction bug."""
        from kb_graph.analysis.knowledge_graph import EdgeKind, KnowledgeGraph, Node, NodeKind
        from kb_graph.exceptions import GraphIntegrityError

        graph = KnowledgeGraph()
        graph.add_node(Node(id="document:1", label="Doc", kind=NodeKind.DOCUMENT))

        with pytest.raises(GraphIntegrityError):
            graph.add_edge("document:1", "tag:9", EdgeKind.TAGGED_WITH)

        assert graph.edge_count() == 0

    def test_adjacency_queries(self):
        """Test outgoing, incoming and neighbors."""
        from kb_graph.analysis.knowledge_graph import EdgeKind, KnowledgeGraph, Node, NodeKind

        graph = KnowledgeGraph()
        graph.add_node(Node(id="document:1", label="Doc", kind=NodeKind.DOCUMENT))
        graph.add_node(Node(id="tag:1", label="python", kind=NodeKind.TAG))
        graph.add_node(Node(id="category:1", label="Code", kind=NodeKind.CATEGORY))
        graph.add_edge("document:1", "tag:1", EdgeKind.TAGGED_WITH)
        graph.add_edge("document:1", "category:1", EdgeKind.BELONGS_TO_CATEGORY)

        assert len(graph.outgoing("document:1")) == 2
        assert graph.neighbors("document:1", EdgeKind.TAGGED_WITH) == ["tag:1"]
        assert len(graph.incoming("category:1", EdgeKind.BELONGS_TO_CATEGORY)) == 1
        assert graph.incoming("tag:1", EdgeKind.BELONGS_TO_CATEGORY) == []

    def test_edge_labels(self):
        """Structural edges carry fixed labels; similarity edges report their weight."""
        from kb_graph.analysis.knowledge_graph import Edge, EdgeKind

        tagged = Edge(source="document:1", target="tag:1", kind=EdgeKind.TAGGED_WITH)
        similar = Edge(source="document:1", target="document:2", kind=EdgeKind.SIMILAR_TO, weight=3)

        assert tagged.to_dict() == {"source": "document:1", "target": "tag:1", "label": "tagged"}
        assert similar.to_dict()["label"] == "related (3 shared tags)"
        assert similar.to_dict()["weight"] == 3

    def test_export_json(self, tmp_path, relation_store):
        """Test exporting graph to JSON."""
        from kb_graph.analysis import SnapshotLoader, build_knowledge_graph

        graph = build_knowledge_graph(SnapshotLoader(relation_store).load(OWNER))
        output = graph.export_json(str(tmp_path / "graph.json"))

        with open(output) as f:
            data = json.load(f)

        assert len(data["nodes"]) == 7
        assert data["statistics"]["tag_count"] == 4
        assert "exported_at" in data

    def test_export_graphml_escapes_labels(self, tmp_path, store):
        """Labels are XML-escaped in GraphML output."""
        from kb_graph.analysis import SnapshotLoader, build_knowledge_graph

        store.add_document(make_document(1, "Pros & <Cons>"))
        graph = build_knowledge_graph(SnapshotLoader(store).load(OWNER))
        output = graph.export_graphml(str(tmp_path / "graph.graphml"))

        with open(output) as f:
            content = f.read()

        assert "Pros &amp; &lt;Cons&gt;" in content
        assert 'id="document:1"' in content


class TestGraphBuilder:
    """Tests for building a graph from a snapshot."""

    def test_node_count_matches_entities(self, relation_store, coverage_store, tree_store):
        """Every category, document and tag becomes exactly one node."""
        from kb_graph.analysis import GraphBuilder, SnapshotLoader

        for store in (relation_store, coverage_store, tree_store):
            snapshot = SnapshotLoader(store).load(OWNER)
            graph = GraphBuilder().build(snapshot)

            expected = len(snapshot.categories) + len(snapshot.documents) + len(snapshot.tags)
            assert graph.node_count() == expected

    def test_insertion_order_and_display_defaults(self, store):
        """Categories come first, then documents, then tags."""
        from kb_graph.analysis import GraphBuilder, SnapshotLoader

        store.add_tag(make_tag(1, "python"))
        store.add_document(make_document(1, "Doc", category_id=1))
        store.add_category(make_category(1, "Code"))
        store.tag_document(1, 1)

        view = GraphBuilder().build(SnapshotLoader(store).load(OWNER)).to_dict()

        assert [n["kind"] for n in view["nodes"]] == ["category", "document", "tag"]
        assert [n["size"] for n in view["nodes"]] == [40, 30, 25]
        assert [n["color"] for n in view["nodes"]] == ["#5470c6", "#91cc75", "#fac858"]

    def test_structural_edges(self, tree_store):
        """Documents link to categories and child categories to parents."""
        from kb_graph.analysis import EdgeKind, GraphBuilder, SnapshotLoader

        graph = GraphBuilder().build(SnapshotLoader(tree_store).load(OWNER))
        stats = graph.get_statistics()

        assert stats["edge_counts"][EdgeKind.BELONGS_TO_CATEGORY.value] == 2
        assert stats["edge_counts"][EdgeKind.SUBCATEGORY_OF.value] == 2
        assert graph.neighbors("category:3", EdgeKind.SUBCATEGORY_OF) == ["category:2"]

    def test_dangling_category_reference_is_skipped(self, store):
        """A document pointing at a missing category keeps its node but loses the edge."""
        from kb_graph.analysis import GraphBuilder, SnapshotLoader

        store.add_document(make_document(1, "Orphan", category_id=404))

        graph = GraphBuilder().build(SnapshotLoader(store).load(OWNER))

        assert graph.has_node("document:1")
        assert graph.edge_count() == 0
        assert graph.skipped_references == [
            {"source": "document:1", "target": "category:404", "kind": "BELONGS_TO_CATEGORY"}
        ]

    def test_dangling_parent_reference_is_skipped(self, store):
        """A category whose parent is missing keeps its node but loses the edge."""
        from kb_graph.analysis import GraphBuilder, SnapshotLoader

        store.add_category(make_category(1, "Root"))
        store.add_category(make_category(2, "Stray", parent_id=99))

        graph = GraphBuilder().build(SnapshotLoader(store).load(OWNER))

        assert graph.has_node("category:2")
        assert graph.edge_count() == 0
        assert graph.skipped_references == [
            {"source": "category:2", "target": "category:99", "kind": "SUBCATEGORY_OF"}
        ]

    def test_other_users_data_is_invisible(self, two_user_store):
        """The graph only holds the requesting user's entities."""
        from kb_graph.analysis import GraphBuilder, SnapshotLoader

        graph = GraphBuilder().build(SnapshotLoader(two_user_store).load(OWNER))

        assert not graph.has_node("document:50")
        assert not graph.has_node("category:50")

    def test_scoped_snapshot(self, relation_store):
        """Scoping to document ids keeps every category and tag but only those documents."""
        from kb_graph.analysis import GraphBuilder, NodeKind, SnapshotLoader

        snapshot = SnapshotLoader(relation_store).load(OWNER, document_ids=[1])
        graph = GraphBuilder().build(snapshot)

        assert [n.entity_id for n in graph.nodes_of_kind(NodeKind.DOCUMENT)] == [1]
        assert len(graph.nodes_of_kind(NodeKind.TAG)) == 4
        assert graph.edge_count() == 2
