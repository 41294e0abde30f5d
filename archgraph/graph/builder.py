"""Graph builders: file level, aggregated hierarchy levels and interfaces.

All builders are pure functions of their input: node ids are derived
from paths and names only, so building twice from the same files yields
the same nodes and edges regardless of input order.
"""

from __future__ import annotations

import hashlib
import pathlib
import posixpath
from typing import Iterable, Optional, Sequence

import structlog

from archgraph.core.hierarchy import Classifier, classification_of, detect_hierarchy, group_key
from archgraph.graph.edges import create_implement_edges, create_import_edges, create_render_edges
from archgraph.graph.resolver import ImportResolver
from archgraph.models.graph import (
    AbstractKind,
    AbstractNode,
    EdgeKind,
    Graph,
    HierarchyLevel,
    HierarchyNode,
    ImplementEdge,
    ImportEdge,
    UseEdge,
)
from archgraph.models.parsed import ParsedFile
from archgraph.models.query import QueryLevel

logger = structlog.get_logger(__name__)

_EDGE_FACTORIES = {
    EdgeKind.IMPORT: create_import_edges,
    EdgeKind.IMPLEMENT: create_implement_edges,
    EdgeKind.RENDER: create_render_edges,
}


# ------------------------------------------------------------------
# Node ids
# ------------------------------------------------------------------


def _path_hash(path: str) -> str:
    return hashlib.sha256(path.encode("utf-8")).hexdigest()[-8:]


def generate_node_id(file_path: str) -> str:
    """Return the file-node id for *file_path* (``file:<stem>-<hash8>``)."""
    stem = posixpath.splitext(posixpath.basename(file_path.replace("\\", "/")))[0]
    return f"file:{stem}-{_path_hash(file_path)}"


def generate_group_id(level: HierarchyLevel | QueryLevel | str, key: str) -> str:
    """Return the id of the group *key* at *level* (``module:auth``)."""
    return f"{HierarchyLevel(level).value}:{key}"


def generate_abstract_id(kind: AbstractKind | str, name: str, file_path: str) -> str:
    """Return the id of a type declaration (``interface:IAuth-<hash8>``)."""
    return f"{AbstractKind(kind).value}:{name}-{_path_hash(file_path)}"


# ------------------------------------------------------------------
# File level
# ------------------------------------------------------------------


def _file_nodes(files: Iterable[ParsedFile]) -> dict[str, HierarchyNode]:
    nodes: dict[str, HierarchyNode] = {}
    for file in files:
        if file.path not in nodes:
            nodes[file.path] = HierarchyNode(
                id=generate_node_id(file.path),
                level=HierarchyLevel.FILE,
                path=file.path,
            )
    return nodes


def build_file_graph(
    files: Sequence[ParsedFile],
    edge_kinds: Optional[Iterable[EdgeKind | str]] = None,
    resolver: Optional[ImportResolver] = None,
    project_root: Optional[str | pathlib.Path] = None,
) -> Graph:
    """Build the file-level dependency graph.

    Args:
        files: Parsed source files; one node is created per distinct path.
        edge_kinds: Edge kinds to build.  Defaults to imports only.
            ``use`` edges only exist at interface level and add nothing here.
        resolver: Session resolver (a fresh one when omitted).
        project_root: Root used for alias resolution.

    Returns:
        A :class:`Graph` of file nodes and the requested edges.
    """
    resolver = resolver or ImportResolver()
    kinds = [EdgeKind(kind) for kind in (edge_kinds or [EdgeKind.IMPORT])]

    file_nodes = _file_nodes(files)
    path_to_id = {path: node.id for path, node in file_nodes.items()}

    edges = []
    for kind in dict.fromkeys(kinds):
        factory = _EDGE_FACTORIES.get(kind)
        if factory is None:
            continue
        edges.extend(factory(files, resolver, path_to_id, project_root))

    logger.debug(
        "file_graph_built",
        nodes=len(file_nodes),
        edges=len(edges),
        edge_kinds=[kind.value for kind in kinds],
    )
    return Graph(nodes=list(file_nodes.values()), edges=edges)


# ------------------------------------------------------------------
# Hierarchy levels
# ------------------------------------------------------------------


def build_hierarchy_graph(
    files: Sequence[ParsedFile],
    level: QueryLevel | HierarchyLevel | str,
    resolver: Optional[ImportResolver] = None,
    project_root: Optional[str | pathlib.Path] = None,
    classify: Classifier = detect_hierarchy,
) -> Graph:
    """Aggregate files into architecture, module or component nodes.

    Files without a key at *level* are left out.  Imports between files
    of the same group are dropped, and any number of imports between two
    groups becomes a single edge.  File nodes are not part of the result.

    Args:
        files: Parsed source files.
        level: ``architecture``, ``module`` or ``component``.
        resolver: Session resolver (a fresh one when omitted).
        project_root: Root used for alias resolution.
        classify: Hierarchy classifier for files without hierarchy facts.

    Returns:
        A :class:`Graph` of group nodes and aggregated import edges.

    Raises:
        ValueError: If *level* is not an aggregation level.
    """
    level = QueryLevel(level)
    if level not in (QueryLevel.ARCHITECTURE, QueryLevel.MODULE, QueryLevel.COMPONENT):
        raise ValueError(f"Not an aggregation level: {level.value}")
    hierarchy_level = HierarchyLevel(level.value)

    path_to_key: dict[str, str] = {}
    groups: dict[str, HierarchyNode] = {}

    for file in files:
        info = classification_of(file, classify)
        key = group_key(info, level)
        if key is None:
            continue
        path_to_key[file.path] = key
        if key not in groups:
            groups[key] = HierarchyNode(
                id=generate_group_id(hierarchy_level, key),
                level=hierarchy_level,
                path=key,
                parent=_group_parent(level, key, info.module, info.architecture),
            )

    file_graph = build_file_graph(files, [EdgeKind.IMPORT], resolver, project_root)
    id_to_path = {node.id: node.path for node in file_graph.nodes}

    seen: set[tuple[str, str]] = set()
    edges: list[ImportEdge] = []
    for edge in file_graph.edges_of_kind(EdgeKind.IMPORT):
        from_key = path_to_key.get(id_to_path[edge.from_id])
        to_key = path_to_key.get(id_to_path[edge.to_id])
        if from_key is None or to_key is None or from_key == to_key:
            continue
        if (from_key, to_key) in seen:
            continue
        seen.add((from_key, to_key))
        edges.append(ImportEdge(from_id=groups[from_key].id, to_id=groups[to_key].id))

    logger.debug(
        "hierarchy_graph_built",
        level=level.value,
        groups=len(groups),
        edges=len(edges),
        excluded_files=len(files) - len(path_to_key),
    )
    return Graph(nodes=list(groups.values()), edges=edges)


def _group_parent(
    level: QueryLevel,
    key: str,
    module: Optional[str],
    architecture: Optional[str],
) -> Optional[str]:
    if level == QueryLevel.COMPONENT and module and key != module:
        return generate_group_id(HierarchyLevel.MODULE, module)
    if level == QueryLevel.MODULE and architecture:
        return generate_group_id(HierarchyLevel.ARCHITECTURE, architecture)
    return None


# ------------------------------------------------------------------
# Interface level
# ------------------------------------------------------------------


def build_interface_graph(files: Sequence[ParsedFile]) -> Graph:
    """Build a graph of type declarations and their relationships.

    ``extends`` and ``implements`` become implement edges, ``references``
    become use edges.  Target names are looked up in a single name table
    in which a later declaration of the same name replaces an earlier one;
    names not declared in any file are dropped.

    Args:
        files: Parsed source files with ``type_definitions``.

    Returns:
        A :class:`Graph` of :class:`AbstractNode` and implement/use edges.
    """
    nodes: dict[str, AbstractNode] = {}
    name_to_id: dict[str, str] = {}
    declarations = []

    for file in files:
        file_id = generate_node_id(file.path)
        for definition in file.type_definitions or []:
            node_id = generate_abstract_id(definition.kind, definition.name, file.path)
            nodes[node_id] = AbstractNode(
                id=node_id,
                kind=definition.kind,
                path=file.path,
                name=definition.name,
                is_exported=definition.is_exported,
                parent=file_id,
            )
            name_to_id[definition.name] = node_id
            declarations.append((node_id, definition))

    edges: dict[tuple[str, str, str, str], ImplementEdge | UseEdge] = {}
    for node_id, definition in declarations:
        for target_name in (definition.extends or []) + (definition.implements or []):
            target_id = name_to_id.get(target_name)
            if target_id is None:
                continue
            key = (EdgeKind.IMPLEMENT.value, node_id, target_id, target_name)
            if key not in edges:
                edges[key] = ImplementEdge(from_id=node_id, to_id=target_id, symbol_name=target_name)

        for target_name in definition.references or []:
            target_id = name_to_id.get(target_name)
            if target_id is None or target_id == node_id:
                continue
            key = (EdgeKind.USE.value, node_id, target_id, target_name)
            if key not in edges:
                edges[key] = UseEdge(from_id=node_id, to_id=target_id, symbol_name=target_name)

    logger.debug("interface_graph_built", nodes=len(nodes), edges=len(edges))
    return Graph(nodes=list(nodes.values()), edges=list(edges.values()))


def build_level_graph(
    files: Sequence[ParsedFile],
    level: QueryLevel | str,
    edge_kinds: Optional[Iterable[EdgeKind | str]] = None,
    resolver: Optional[ImportResolver] = None,
    project_root: Optional[str | pathlib.Path] = None,
    classify: Classifier = detect_hierarchy,
) -> Graph:
    """Dispatch to the builder for *level*."""
    level = QueryLevel(level)
    if level == QueryLevel.FILE:
        return build_file_graph(files, edge_kinds, resolver, project_root)
    if level == QueryLevel.INTERFACE:
        return build_interface_graph(files)
    return build_hierarchy_graph(files, level, resolver, project_root, classify)
