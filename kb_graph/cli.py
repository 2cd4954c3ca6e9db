#!/usr/bin/env python3
"""
Knowledge Graph Analytics CLI

Command-line interface for running the knowledge-graph analytics over a JSON
record fixture.

Usage:
    # Full graph for user 1
    kb-graph --data records.json --user 1 graph

    # Documents sharing tags with document 42
    kb-graph --data records.json --user 1 similar 42 --limit 5

    # Export the graph for a visualization tool
    kb-graph --data records.json --user 1 export --format graphml -o graph.graphml

    # Start API server
    kb-graph serve --port 8000
"""

import argparse
import json
import os
import sys
from typing import List, Optional

from .config.settings import configure_logging, settings
from .exceptions import KnowledgeBaseException
from .service import KnowledgeGraphService
from .store.memory import InMemoryRecordStore


def load_service(args) -> KnowledgeGraphService:
    """Build a service over the record fixture named by --data or KB_DATA_FILE."""
    data_path = args.data or settings.store.data_file
    if not data_path:
        raise SystemExit("Error: no record fixture given (use --data or set KB_DATA_FILE)")
    if not os.path.exists(data_path):
        raise SystemExit(f"Error: record fixture not found at {data_path}")
    return KnowledgeGraphService(InMemoryRecordStore.load_json(data_path))


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_graph(service, args):
    """Print the full knowledge graph."""
    print_json(service.full_graph(args.user, document_ids=args.documents).to_dict())


def cmd_relations(service, args):
    print_json(service.document_relations(args.user).to_dict())


def cmd_tag_cloud(service, args):
    print_json([entry.to_dict() for entry in service.tag_cloud(args.user)])


def cmd_learning_path(service, args):
    print_json(service.learning_path(args.user, goal=args.goal).to_dict())


def cmd_central_nodes(service, args):
    print_json([node.to_dict() for node in service.central_nodes(args.user)])


def cmd_density(service, args):
    print_json(service.relation_density(args.user).to_dict())


def cmd_clusters(service, args):
    print_json(service.knowledge_clusters(args.user).to_dict())


def cmd_gaps(service, args):
    print_json(service.knowledge_gaps(args.user).to_dict())


def cmd_similar(service, args):
    """Documents sharing tags with a reference document."""
    results = service.similar_documents(args.user, args.document_id, args.limit)
    print_json([doc.to_dict() for doc in results])


def cmd_category_tree(service, args):
    print_json(service.category_tree(args.user).to_dict())


def cmd_overview(service, args):
    print_json(service.overview(args.user).to_dict())


def cmd_trend(service, args):
    print_json(service.creation_trend(args.user, args.months).to_dict())


def cmd_activity(service, args):
    print_json(service.activity(args.user, args.days).to_dict())


def cmd_efficiency(service, args):
    """Output and content volume over a window of days."""
    print_json(service.learning_efficiency(args.user, args.days).to_dict())


def cmd_coverage(service, args):
    print_json(service.coverage(args.user).to_dict())


def cmd_distribution(service, args):
    print_json(service.category_distribution(args.user).to_dict())


def cmd_export(service, args):
    """Export the full knowledge graph."""
    graph = service.full_graph(args.user)
    if args.format == "graphml":
        path = graph.export_graphml(args.output or "knowledge_graph.graphml")
    else:
        path = graph.export_json(args.output or "knowledge_graph.json")

    stats = graph.get_statistics()
    print(f"Exported {stats['total_nodes']} nodes and {stats['total_edges']} edges to: {path}")


def cmd_serve(args):
    """Start the API server."""
    from .api.server import create_app
    import uvicorn

    if args.data:
        settings.store.data_file = args.data

    print(f"Starting Knowledge Graph API server on port {args.port}...")

    app = create_app()
    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


COMMANDS = {
    "graph": cmd_graph,
    "relations": cmd_relations,
    "tag-cloud": cmd_tag_cloud,
    "learning-path": cmd_learning_path,
    "central-nodes": cmd_central_nodes,
    "density": cmd_density,
    "clusters": cmd_clusters,
    "gaps": cmd_gaps,
    "similar": cmd_similar,
    "category-tree": cmd_category_tree,
    "overview": cmd_overview,
    "trend": cmd_trend,
    "activity": cmd_activity,
    "efficiency": cmd_efficiency,
    "coverage": cmd_coverage,
    "distribution": cmd_distribution,
    "export": cmd_export,
}


# =============================================================================
# MAIN
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kb-graph",
        description="Knowledge Graph Analytics CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Category hierarchy with document counts
  kb-graph --data records.json --user 1 category-tree

  # Learning path restricted to a goal
  kb-graph --data records.json --user 1 learning-path --goal python

  # Last 12 months of document creation
  kb-graph --data records.json --user 1 trend --months 12
"""
    )

    # Global arguments
    parser.add_argument("--data", help="Path to a JSON record fixture (default: KB_DATA_FILE)")
    parser.add_argument("--user", type=int, default=1, help="User whose knowledge base to analyze")

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    graph_parser = subparsers.add_parser("graph", help="Full knowledge graph")
    graph_parser.add_argument("--documents", type=int, nargs="+", help="Restrict to these document ids")

    subparsers.add_parser("relations", help="Document relation graph")
    subparsers.add_parser("tag-cloud", help="Tag usage weights")

    path_parser = subparsers.add_parser("learning-path", help="Chronological learning path")
    path_parser.add_argument("--goal", help="Keep only documents matching this goal")

    subparsers.add_parser("central-nodes", help="Documents with the most tags")
    subparsers.add_parser("density", help="Relation density")
    subparsers.add_parser("clusters", help="Documents per category")
    subparsers.add_parser("gaps", help="Category coverage gaps")

    similar_parser = subparsers.add_parser("similar", help="Documents sharing tags with a document")
    similar_parser.add_argument("document_id", type=int, help="Reference document id")
    similar_parser.add_argument("--limit", type=int, default=None, help="Maximum results")

    subparsers.add_parser("category-tree", help="Category hierarchy")

    subparsers.add_parser("overview", help="Entity totals and recent documents")

    trend_parser = subparsers.add_parser("trend", help="Documents created per month")
    trend_parser.add_argument("--months", type=int, default=6, help="Number of months")

    activity_parser = subparsers.add_parser("activity", help="Recent daily activity")
    activity_parser.add_argument("--days", type=int, default=7, help="Window length in days")

    efficiency_parser = subparsers.add_parser("efficiency", help="Learning efficiency over a window")
    efficiency_parser.add_argument("--days", type=int, default=30, help="Window length in days")

    subparsers.add_parser("coverage", help="Category and tag coverage")
    subparsers.add_parser("distribution", help="Documents per category name")

    export_parser = subparsers.add_parser("export", help="Export knowledge graph")
    export_parser.add_argument("--format", choices=["json", "graphml"], default="json")
    export_parser.add_argument("--output", "-o", help="Output file path")

    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument("--host", default=settings.api.host, help="Host to bind")
    serve_parser.add_argument("--port", type=int, default=settings.api.port, help="Port to bind")

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    configure_logging()

    if args.command == "serve":
        cmd_serve(args)
        return 0

    service = load_service(args)
    try:
        COMMANDS[args.command](service, args)
    except KnowledgeBaseException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    finally:
        service.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
