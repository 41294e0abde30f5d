"""Graph diffing and circular dependency detection.

:func:`diff_graphs` compares two snapshots built from the same query:
nodes are matched by id and edges by ``(kind, from, to)``.  Each result
graph carries, besides its added/removed/modified items, the unchanged
endpoint nodes (``status=normal``) its edges refer to, so every returned
graph is self-contained.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import structlog

from archgraph.core.hierarchy import Classifier, classification_of, detect_hierarchy, group_key
from archgraph.models.graph import EdgeKind, Graph, Status
from archgraph.models.parsed import ParsedFile
from archgraph.models.query import DiffResult, DiffSummary, FileChanges, QueryLevel

logger = structlog.get_logger(__name__)


def _with_endpoints(nodes: list, edges: list, source: Graph) -> Graph:
    """Build a graph of *nodes*/*edges*, pulling missing endpoints from *source*."""
    present = {node.id for node in nodes}
    by_id = {node.id: node for node in source.nodes}
    context = []
    for edge in edges:
        for node_id in (edge.from_id, edge.to_id):
            if node_id in present:
                continue
            node = by_id.get(node_id)
            if node is not None:
                context.append(node.model_copy(update={"status": Status.NORMAL}))
                present.add(node_id)
    return Graph(nodes=list(nodes) + context, edges=list(edges))


def _count(items: Iterable, status: Status) -> int:
    return sum(1 for item in items if item.status == status)


def _modified_keys(
    paths: Iterable[str],
    level: QueryLevel | str,
    files: Optional[Sequence[ParsedFile]],
    classify: Classifier,
) -> set[str]:
    """Map modified file paths to the node paths they appear under at *level*.

    File and interface nodes carry file paths; group nodes carry the group
    key their files were classified into.
    """
    level = QueryLevel(level)
    if level in (QueryLevel.FILE, QueryLevel.INTERFACE):
        return set(paths)

    known = {file.path: file for file in files or ()}
    keys = set()
    for path in paths:
        file = known.get(path)
        info = classification_of(file, classify) if file is not None else classify(path)
        key = group_key(info, level)
        if key:
            keys.add(key)
    return keys


def detect_cycles(graph: Graph) -> list[list[str]]:
    """Find circular import chains in *graph*.

    Iterative depth-first search over import edges with an explicit
    stack.  Reaching a node that is already on the stack records the
    stack slice from that node plus the node itself, closing the loop
    (``a -> b -> a`` is reported as ``[a, b, a]``).  Nodes are reported by
    their paths.

    Returns:
        Every cycle found, in discovery order.
    """
    adjacency: dict[str, list[str]] = {}
    for edge in graph.edges_of_kind(EdgeKind.IMPORT):
        targets = adjacency.setdefault(edge.from_id, [])
        if edge.to_id not in targets:
            targets.append(edge.to_id)

    paths = {node.id: node.path for node in graph.nodes}
    visited: set[str] = set()
    cycles: list[list[str]] = []

    for root in adjacency:
        if root in visited:
            continue

        path: list[str] = [root]
        on_stack: set[str] = {root}
        visited.add(root)
        stack = [iter(adjacency.get(root, ()))]

        while stack:
            neighbor = next(stack[-1], None)
            if neighbor is None:
                stack.pop()
                on_stack.discard(path.pop())
                continue
            if neighbor in on_stack:
                start = path.index(neighbor)
                cycles.append([paths.get(n, n) for n in path[start:] + [neighbor]])
            elif neighbor not in visited:
                visited.add(neighbor)
                on_stack.add(neighbor)
                path.append(neighbor)
                stack.append(iter(adjacency.get(neighbor, ())))

    return cycles


def diff_graphs(
    old: Graph,
    new: Graph,
    changes: FileChanges | None = None,
    level: QueryLevel | str = QueryLevel.FILE,
    files: Optional[Sequence[ParsedFile]] = None,
    classify: Classifier = detect_hierarchy,
) -> DiffResult:
    """Compute the difference between two graph snapshots.

    Args:
        old: Graph built before the change.
        new: Graph built after the change.
        changes: Changed file paths; ``modified`` paths mark nodes present
            in both graphs (and every edge touching them) as modified.
        level: Level both graphs were built at.  At group levels each
            modified path marks the group its file was classified into.
        files: Parsed files of the new snapshot; their own hierarchy facts
            take precedence over *classify*.
        classify: Hierarchy classifier used when building the graphs.

    Returns:
        A :class:`DiffResult` whose summary also reports import cycles of
        the *new* graph.
    """
    changes = changes or FileChanges()

    old_ids = old.node_ids()
    new_ids = new.node_ids()
    old_edge_keys = {edge.identity for edge in old.edges}
    new_edge_keys = {edge.identity for edge in new.edges}

    added_nodes = [n.model_copy(update={"status": Status.ADDED}) for n in new.nodes if n.id not in old_ids]
    added_edges = [
        e.model_copy(update={"status": Status.ADDED}) for e in new.edges if e.identity not in old_edge_keys
    ]
    removed_nodes = [n.model_copy(update={"status": Status.REMOVED}) for n in old.nodes if n.id not in new_ids]
    removed_edges = [
        e.model_copy(update={"status": Status.REMOVED}) for e in old.edges if e.identity not in new_edge_keys
    ]

    modified_paths = _modified_keys(changes.modified, level, files, classify)
    modified_nodes = [
        n.model_copy(update={"status": Status.MODIFIED})
        for n in new.nodes
        if n.id in old_ids and n.path in modified_paths
    ]
    modified_ids = {n.id for n in modified_nodes}
    modified_edges = [
        e.model_copy(update={"status": Status.MODIFIED})
        for e in new.edges
        if e.from_id in modified_ids or e.to_id in modified_ids
    ]

    added = _with_endpoints(added_nodes, added_edges, new)
    removed = _with_endpoints(removed_nodes, removed_edges, old)
    modified = _with_endpoints(modified_nodes, modified_edges, new)

    cycles = detect_cycles(new)
    if cycles:
        logger.warning(
            "circular_dependencies_detected",
            count=len(cycles),
            sample=[" -> ".join(cycle) for cycle in cycles[:3]],
        )

    summary = DiffSummary(
        added_nodes=_count(added.nodes, Status.ADDED),
        removed_nodes=_count(removed.nodes, Status.REMOVED),
        modified_nodes=_count(modified.nodes, Status.MODIFIED),
        added_edges=_count(added.edges, Status.ADDED),
        removed_edges=_count(removed.edges, Status.REMOVED),
        modified_edges=_count(modified.edges, Status.MODIFIED),
        has_circular_dependency=bool(cycles),
        circular_paths=cycles or None,
    )

    logger.info(
        "graph_diff_computed",
        added_nodes=summary.added_nodes,
        removed_nodes=summary.removed_nodes,
        modified_nodes=summary.modified_nodes,
        added_edges=summary.added_edges,
        removed_edges=summary.removed_edges,
        cycles=len(cycles),
    )
    return DiffResult(added=added, removed=removed, modified=modified, summary=summary)
