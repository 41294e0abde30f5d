"""Graph construction, aggregation, views and diffing."""

from archgraph.graph.builder import (
    build_file_graph,
    build_hierarchy_graph,
    build_interface_graph,
    build_level_graph,
    generate_node_id,
)
from archgraph.graph.diff import detect_cycles, diff_graphs
from archgraph.graph.query import build_dependency_graph, summarize_graph
from archgraph.graph.resolver import ImportResolver
from archgraph.graph.views import build_focused_graph, build_neighbors_graph

__all__ = [
    "ImportResolver",
    "build_file_graph",
    "build_hierarchy_graph",
    "build_interface_graph",
    "build_level_graph",
    "build_focused_graph",
    "build_neighbors_graph",
    "build_dependency_graph",
    "summarize_graph",
    "diff_graphs",
    "detect_cycles",
    "generate_node_id",
]
