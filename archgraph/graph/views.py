"""Focused and neighbors views over the dependency graph.

- **Focused** rebuilds a graph from only the files inside one group, so
  it shows what is *inside* the target, never its siblings.
- **Neighbors** starts from the nodes matching a key and expands through
  dependencies and dependents for a bounded number of rounds.

A focus key that matches nothing yields an empty :class:`Graph`.
"""

from __future__ import annotations

import pathlib
from collections import defaultdict
from typing import Iterable, Optional, Sequence

import structlog

from archgraph.core.hierarchy import Classifier, classification_of, detect_hierarchy, group_key
from archgraph.graph.builder import build_file_graph, build_interface_graph
from archgraph.graph.resolver import ImportResolver
from archgraph.models.graph import EdgeKind, Graph
from archgraph.models.parsed import ParsedFile
from archgraph.models.query import InternalLevel, QueryLevel

logger = structlog.get_logger(__name__)


def matches_focus(
    file: ParsedFile,
    level: QueryLevel | str,
    focus_key: str,
    classify: Classifier = detect_hierarchy,
) -> bool:
    """Return ``True`` if *file* lies inside *focus_key* at *level*.

    Component focus accepts either ``module/component`` or the bare
    component name.  File and interface focus match the file path exactly
    or by a suffix that starts at a path segment.
    """
    level = QueryLevel(level)
    if level in (QueryLevel.FILE, QueryLevel.INTERFACE):
        return file.path == focus_key or file.path.endswith("/" + focus_key.lstrip("/"))

    info = classification_of(file, classify)
    if group_key(info, level) == focus_key:
        return True
    return level == QueryLevel.COMPONENT and info.component == focus_key


def build_focused_graph(
    files: Sequence[ParsedFile],
    level: QueryLevel | str,
    edge_kinds: Optional[Iterable[EdgeKind | str]],
    focus_key: str,
    internal_level: InternalLevel | str = InternalLevel.FILE,
    resolver: Optional[ImportResolver] = None,
    project_root: Optional[str | pathlib.Path] = None,
    classify: Classifier = detect_hierarchy,
) -> Graph:
    """Build the graph of the files inside *focus_key*.

    The input files are filtered first and the graph is rebuilt from the
    survivors at *internal_level*; imports leaving the focus target
    resolve to nothing and are dropped.

    Args:
        files: All parsed files of the project.
        level: Level *focus_key* is expressed at.
        edge_kinds: Edge kinds for a file-level rebuild.
        focus_key: Group key or path of the focus target.
        internal_level: ``file`` or ``interface``.
        resolver: Session resolver.
        project_root: Root used for alias resolution.
        classify: Hierarchy classifier.

    Returns:
        The focused :class:`Graph`, empty when nothing matches.
    """
    matched = [file for file in files if matches_focus(file, level, focus_key, classify)]
    if not matched:
        logger.info("focus_no_match", level=QueryLevel(level).value, focus_key=focus_key)
        return Graph()

    logger.debug("focus_matched", focus_key=focus_key, files=len(matched))
    if InternalLevel(internal_level) == InternalLevel.INTERFACE:
        return build_interface_graph(matched)
    return build_file_graph(matched, edge_kinds, resolver, project_root)


def find_seed_ids(graph: Graph, focus_key: str) -> list[str]:
    """Return ids of the nodes matching *focus_key*.

    Tiers are tried in order (exact path, path suffix, path substring)
    and the first tier with any match wins.
    """
    for predicate in (
        lambda path: path == focus_key,
        lambda path: path.endswith(focus_key),
        lambda path: focus_key in path,
    ):
        seeds = [node.id for node in graph.nodes if predicate(node.path)]
        if seeds:
            return seeds
    return []


def build_neighbors_graph(graph: Graph, focus_key: str, depth: int = 1) -> Graph:
    """Return the subgraph within *depth* hops of the nodes matching *focus_key*.

    Each round adds both the dependencies (outgoing) and the dependents
    (incoming) of the current frontier.  The result holds every included
    node and every edge whose endpoints are both included.

    Args:
        graph: A built graph at any level.
        focus_key: Path, path suffix or path fragment of the seed node(s).
        depth: Number of expansion rounds; ``0`` keeps only the seeds.

    Returns:
        The induced :class:`Graph`, empty when no node matches.

    Raises:
        ValueError: If *depth* is negative.
    """
    if depth < 0:
        raise ValueError(f"depth must be >= 0, got {depth}")

    seeds = find_seed_ids(graph, focus_key)
    if not seeds:
        logger.info("neighbors_no_match", focus_key=focus_key)
        return Graph()

    adjacency: dict[str, set[str]] = defaultdict(set)
    for edge in graph.edges:
        adjacency[edge.from_id].add(edge.to_id)
        adjacency[edge.to_id].add(edge.from_id)

    included = set(seeds)
    frontier = set(seeds)
    for _ in range(depth):
        reached = set()
        for node_id in frontier:
            reached |= adjacency.get(node_id, set())
        frontier = reached - included
        if not frontier:
            break
        included |= frontier

    logger.debug("neighbors_expanded", focus_key=focus_key, seeds=len(seeds), depth=depth, nodes=len(included))
    return Graph(
        nodes=[node for node in graph.nodes if node.id in included],
        edges=[edge for edge in graph.edges if edge.from_id in included and edge.to_id in included],
    )
