"""
Knowledge Graph Construction

Builds a typed, heterogeneous graph from one user's documents, categories
and tags.

Architecture:
┌─────────────────────────────────────────────────────────────────────────────┐
│                         KNOWLEDGE GRAPH                                      │
├─────────────────────────────────────────────────────────────────────────────┤
│                                                                              │
│  ┌─────────────┐  BELONGS_TO_CATEGORY  ┌─────────────┐                      │
│  │  Documents  │──────────────────────▶│  Categories │──┐                   │
│  └─────────────┘                       └─────────────┘  │ SUBCATEGORY_OF    │
│     │      ▲                                  ▲         │                   │
│     │      │ SIMILAR_TO (shared tag count)    └─────────┘                   │
│     │      ▼                                                                │
│     │   Documents                                                           │
│     │ TAGGED_WITH                                                           │
│     ▼                                                                        │
│  ┌─────────────┐                                                            │
│  │    Tags     │                                                            │
│  └─────────────┘                                                            │
│                                                                              │
│  Node ids are namespaced ("document:42", "category:3", "tag:7") so ids     │
│  never collide across kinds.                                                │
└─────────────────────────────────────────────────────────────────────────────┘
"""

import json
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional
from xml.sax.saxutils import escape, quoteattr

from ..exceptions import GraphIntegrityError
from .snapshot import EntitySnapshot

logger = logging.getLogger(__name__)


# =============================================================================
# DATA STRUCTURES
# =============================================================================

class NodeKind(Enum):
    """Kinds of entity a node can represent."""
    DOCUMENT = "document"
    CATEGORY = "category"
    TAG = "tag"


class EdgeKind(Enum):
    """Kinds of relation between two nodes."""
    BELONGS_TO_CATEGORY = "BELONGS_TO_CATEGORY"
    TAGGED_WITH = "TAGGED_WITH"
    SUBCATEGORY_OF = "SUBCATEGORY_OF"
    SIMILAR_TO = "SIMILAR_TO"


# Display defaults used by the graph views
NODE_SIZES = {
    NodeKind.CATEGORY: 40,
    NodeKind.DOCUMENT: 30,
    NodeKind.TAG: 25,
}

NODE_COLORS = {
    NodeKind.CATEGORY: "#5470c6",
    NodeKind.DOCUMENT: "#91cc75",
    NodeKind.TAG: "#fac858",
}

EDGE_LABELS = {
    EdgeKind.BELONGS_TO_CATEGORY: "belongs to",
    EdgeKind.TAGGED_WITH: "tagged",
    EdgeKind.SUBCATEGORY_OF: "subcategory of",
}


def node_id(kind: NodeKind, entity_id) -> str:
    """Namespaced node id for an entity."""
    return f"{kind.value}:{entity_id}"


@dataclass
class Node:
    """A node in the knowledge graph."""
    id: str
    label: str
    kind: NodeKind
    weight: float = 1.0
    entity_id: Optional[int] = None
    color: Optional[str] = None

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "label": self.label,
            "kind": self.kind.value,
            "size": self.weight,
            "color": self.color or NODE_COLORS[self.kind]
        }


@dataclass
class Edge:
    """An edge (relationship) in the knowledge graph."""
    source: str
    target: str
    kind: EdgeKind
    weight: float = 1.0

    @property
    def label(self) -> str:
        if self.kind == EdgeKind.SIMILAR_TO:
            return f"related ({int(self.weight)} shared tags)"
        return EDGE_LABELS[self.kind]

    def to_dict(self) -> Dict:
        data = {
            "source": self.source,
            "target": self.target,
            "label": self.label
        }
        # Structural edges all weigh 1, only derived edges report a weight
        if self.kind == EdgeKind.SIMILAR_TO:
            data["weight"] = self.weight
        return data


# =============================================================================
# KNOWLEDGE GRAPH
# =============================================================================

class KnowledgeGraph:
    """
    A typed node/edge graph over one user's knowledge base.

    Usage:
        graph = GraphBuilder().build(snapshot)

        # Query
        tags = graph.neighbors("document:42", EdgeKind.TAGGED_WITH)
        docs = graph.nodes_of_kind(NodeKind.DOCUMENT)

        # Export
        graph.export_json("knowledge_graph.json")
    """

    def __init__(self):
        self.nodes: Dict[str, Node] = {}
        self.edges: List[Edge] = []

        # Indexes for fast lookup, in insertion order
        self._nodes_by_kind: Dict[NodeKind, List[Node]] = defaultdict(list)

        # Adjacency lists
        self._outgoing: Dict[str, List[Edge]] = defaultdict(list)
        self._incoming: Dict[str, List[Edge]] = defaultdict(list)

        # References dropped during construction (dangling foreign keys)
        self.skipped_references: List[Dict] = []

    def add_node(self, node: Node) -> Node:
        """Add a node to the graph. Re-adding an id returns the existing node."""
        if node.id in self.nodes:
            return self.nodes[node.id]

        self.nodes[node.id] = node
        self._nodes_by_kind[node.kind].append(node)
        return node

    def add_edge(self, source: str, target: str, kind: EdgeKind,
                 weight: float = 1.0) -> Edge:
        """Add an edge. Both endpoints must already be nodes of this graph."""
        if source not in self.nodes or target not in self.nodes:
            raise GraphIntegrityError(source, target)

        edge = Edge(source=source, target=target, kind=kind, weight=weight)

        self.edges.append(edge)
        self._outgoing[source].append(edge)
        self._incoming[target].append(edge)

        return edge

    def skip_reference(self, source: str, target: str, kind: EdgeKind) -> None:
        """Record and log a reference to an entity outside the snapshot."""
        logger.warning(f"Skipping {kind.value} edge {source} -> {target}: target not in snapshot")
        self.skipped_references.append({
            "source": source,
            "target": target,
            "kind": kind.value
        })

    # =========================================================================
    # QUERY METHODS
    # =========================================================================

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes

    def get_node(self, node_id: str) -> Optional[Node]:
        return self.nodes.get(node_id)

    def node_count(self) -> int:
        return len(self.nodes)

    def edge_count(self) -> int:
        return len(self.edges)

    def nodes_of_kind(self, kind: NodeKind) -> List[Node]:
        return list(self._nodes_by_kind.get(kind, []))

    def outgoing(self, node_id: str, kind: EdgeKind = None) -> List[Edge]:
        edges = self._outgoing.get(node_id, [])
        if kind is None:
            return list(edges)
        return [e for e in edges if e.kind == kind]

    def incoming(self, node_id: str, kind: EdgeKind = None) -> List[Edge]:
        edges = self._incoming.get(node_id, [])
        if kind is None:
            return list(edges)
        return [e for e in edges if e.kind == kind]

    def neighbors(self, node_id: str, kind: EdgeKind) -> List[str]:
        """Targets of a node's outgoing edges of one kind."""
        return [e.target for e in self.outgoing(node_id, kind)]

    def get_statistics(self) -> Dict:
        """Get graph statistics."""
        return {
            "total_nodes": len(self.nodes),
            "total_edges": len(self.edges),
            "document_count": len(self._nodes_by_kind.get(NodeKind.DOCUMENT, [])),
            "category_count": len(self._nodes_by_kind.get(NodeKind.CATEGORY, [])),
            "tag_count": len(self._nodes_by_kind.get(NodeKind.TAG, [])),
            "edge_counts": self._count_edges_by_type(),
            "skipped_references": len(self.skipped_references)
        }

    def _count_edges_by_type(self) -> Dict[str, int]:
        """Count edges by type."""
        counts = defaultdict(int)
        for edge in self.edges:
            counts[edge.kind.value] += 1
        return dict(counts)

    # =========================================================================
    # EXPORT METHODS
    # =========================================================================

    def to_dict(self) -> Dict:
        """Graph view model: nodes and edges in insertion order."""
        return {
            "nodes": [n.to_dict() for n in self.nodes.values()],
            "edges": [e.to_dict() for e in self.edges]
        }

    def export_json(self, output_path: str) -> str:
        """Export graph to JSON format."""
        export_data = {
            "exported_at": datetime.now().isoformat(),
            "statistics": self.get_statistics(),
            **self.to_dict()
        }

        with open(output_path, 'w') as f:
            json.dump(export_data, f, indent=2, default=str)

        return output_path

    def export_graphml(self, output_path: str) -> str:
        """Export graph to GraphML format (for visualization tools)."""
        lines = [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<graphml xmlns="http://graphml.graphdrawing.org/xmlns">',
            '  <key id="kind" for="node" attr.name="kind" attr.type="string"/>',
            '  <key id="label" for="node" attr.name="label" attr.type="string"/>',
            '  <key id="weight" for="edge" attr.name="weight" attr.type="double"/>',
            '  <key id="edge_kind" for="edge" attr.name="edge_kind" attr.type="string"/>',
            '  <graph id="G" edgedefault="directed">'
        ]

        for node in self.nodes.values():
            lines.append(f'    <node id={quoteattr(node.id)}>')
            lines.append(f'      <data key="kind">{node.kind.value}</data>')
            lines.append(f'      <data key="label">{escape(node.label)}</data>')
            lines.append('    </node>')

        for i, edge in enumerate(self.edges):
            lines.append(
                f'    <edge id="e{i}" source={quoteattr(edge.source)} target={quoteattr(edge.target)}>'
            )
            lines.append(f'      <data key="weight">{edge.weight}</data>')
            lines.append(f'      <data key="edge_kind">{edge.kind.value}</data>')
            lines.append('    </edge>')

        lines.append('  </graph>')
        lines.append('</graphml>')

        with open(output_path, 'w') as f:
            f.write('\n'.join(lines))

        return output_path


# =============================================================================
# GRAPH BUILDER
# =============================================================================

class GraphBuilder:
    """
    Assemble a KnowledgeGraph from an entity snapshot.

    Node insertion order is categories, then documents, then tags. A foreign
    key pointing outside the snapshot is logged and its edge skipped; the
    build never fails on data.
    """

    def build(self, snapshot: EntitySnapshot) -> KnowledgeGraph:
        graph = KnowledgeGraph()

        for category in snapshot.categories:
            graph.add_node(Node(
                id=node_id(NodeKind.CATEGORY, category.id),
                label=category.name,
                kind=NodeKind.CATEGORY,
                weight=NODE_SIZES[NodeKind.CATEGORY],
                entity_id=category.id
            ))

        for document in snapshot.documents:
            graph.add_node(Node(
                id=node_id(NodeKind.DOCUMENT, document.id),
                label=document.title,
                kind=NodeKind.DOCUMENT,
                weight=NODE_SIZES[NodeKind.DOCUMENT],
                entity_id=document.id
            ))

        for tag in snapshot.tags:
            graph.add_node(Node(
                id=node_id(NodeKind.TAG, tag.id),
                label=tag.name,
                kind=NodeKind.TAG,
                weight=NODE_SIZES[NodeKind.TAG],
                entity_id=tag.id
            ))

        # Document -> category
        for document in snapshot.documents:
            if document.category_id is None:
                continue
            self._link(
                graph,
                node_id(NodeKind.DOCUMENT, document.id),
                node_id(NodeKind.CATEGORY, document.category_id),
                EdgeKind.BELONGS_TO_CATEGORY
            )

        # Document -> tag, grouped by tag
        for tag in snapshot.tags:
            for document in snapshot.documents_for_tag(tag.id):
                self._link(
                    graph,
                    node_id(NodeKind.DOCUMENT, document.id),
                    node_id(NodeKind.TAG, tag.id),
                    EdgeKind.TAGGED_WITH
                )

        # Child category -> parent category
        for category in snapshot.categories:
            if category.parent_id is None:
                continue
            self._link(
                graph,
                node_id(NodeKind.CATEGORY, category.id),
                node_id(NodeKind.CATEGORY, category.parent_id),
                EdgeKind.SUBCATEGORY_OF
            )

        logger.info(
            f"Built knowledge graph for user {snapshot.user_id}: "
            f"{graph.node_count()} nodes, {graph.edge_count()} edges"
        )
        return graph

    @staticmethod
    def _link(graph: KnowledgeGraph, source: str, target: str, kind: EdgeKind) -> None:
        if not graph.has_node(source) or not graph.has_node(target):
            graph.skip_reference(source, target, kind)
            return
        graph.add_edge(source, target, kind)


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def build_knowledge_graph(snapshot: EntitySnapshot) -> KnowledgeGraph:
    """Build a knowledge graph from a snapshot."""
    return GraphBuilder().build(snapshot)
