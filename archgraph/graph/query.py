"""Query entry point: level graph, then the requested view."""

from __future__ import annotations

import pathlib
from typing import Any, Optional, Sequence

import structlog

from archgraph.core.hierarchy import Classifier, detect_hierarchy
from archgraph.graph.builder import build_level_graph
from archgraph.graph.resolver import ImportResolver
from archgraph.graph.views import build_focused_graph, build_neighbors_graph
from archgraph.models.graph import EdgeKind, Graph, HierarchyLevel, HierarchyNode
from archgraph.models.parsed import ParsedFile
from archgraph.models.query import GraphQuery, InternalLevel, QueryLevel, ViewMode

logger = structlog.get_logger(__name__)


def build_dependency_graph(
    files: Sequence[ParsedFile],
    query: Optional[GraphQuery] = None,
    resolver: Optional[ImportResolver] = None,
    project_root: Optional[str | pathlib.Path] = None,
    classify: Classifier = detect_hierarchy,
) -> Graph:
    """Build the graph described by *query* from parsed files.

    Args:
        files: Parsed source files of the project.
        query: Level, edge kinds and view options.  Defaults to a global
            file-level import graph.
        resolver: Session resolver; pass the same instance across calls
            to reuse loaded alias tables.
        project_root: Root used for alias resolution.
        classify: Hierarchy classifier for files without hierarchy facts.

    Returns:
        The resulting :class:`Graph`.
    """
    query = query or GraphQuery()
    resolver = resolver or ImportResolver()

    if query.mode == ViewMode.FOCUSED:
        graph = build_focused_graph(
            files,
            query.level,
            query.edge_kinds,
            query.focus_key,
            query.internal_level,
            resolver,
            project_root,
            classify,
        )
    else:
        graph = build_level_graph(files, query.level, query.edge_kinds, resolver, project_root, classify)
        if query.mode == ViewMode.NEIGHBORS:
            graph = build_neighbors_graph(graph, query.focus_key, query.neighbor_depth)

    logger.info(
        "graph_built",
        level=query.level.value,
        mode=query.mode.value,
        focus_key=query.focus_key,
        files=len(files),
        nodes=len(graph.nodes),
        edges=len(graph.edges),
    )
    return graph


def summarize_graph(graph: Graph, files: Sequence[ParsedFile], query: GraphQuery, detail: bool = True) -> dict[str, Any]:
    """Return node/edge counts for *graph*.

    The brief form only reports totals; the detailed form adds a count per
    requested edge kind (each kind present, for interface graphs) and the
    number of module/component nodes.
    """
    summary: dict[str, Any] = {
        "total_files": len(files),
        "total_nodes": len(graph.nodes),
        "total_edges": len(graph.edges),
    }
    if not detail:
        return summary

    if query.level == QueryLevel.INTERFACE or (
        query.mode == ViewMode.FOCUSED and query.internal_level == InternalLevel.INTERFACE
    ):
        # Interface graphs carry implement/use edges regardless of the requested kinds.
        kinds = dict.fromkeys(EdgeKind(edge.kind) for edge in graph.edges)
    else:
        kinds = dict.fromkeys(EdgeKind(k) for k in query.edge_kinds)
    for kind in kinds:
        summary[f"total_{kind.value}_edges"] = sum(1 for _ in graph.edges_of_kind(kind))

    for level in (HierarchyLevel.MODULE, HierarchyLevel.COMPONENT):
        if query.level.value == level.value:
            summary[f"total_{level.value}s"] = sum(
                1 for node in graph.nodes if isinstance(node, HierarchyNode) and node.level == level
            )
    return summary
