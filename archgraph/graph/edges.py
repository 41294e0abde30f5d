"""Edge factories: turn per-file facts into typed edges between file nodes.

Each factory takes the parsed files, an :class:`ImportResolver` and a
``path -> node id`` map of the file nodes in the graph being built.  A
reference whose target cannot be resolved to one of those files is
dropped; no factory ever emits an edge to a node that does not exist.
"""

from __future__ import annotations

import pathlib
import posixpath
from typing import Iterable, Mapping, Optional

import structlog

from archgraph.graph.resolver import ImportResolver, is_expected_external
from archgraph.models.graph import ImplementEdge, ImportEdge, RenderEdge
from archgraph.models.parsed import ImportInfo, ParsedFile

logger = structlog.get_logger(__name__)

_SCRIPT_EXTENSIONS: tuple[str, ...] = (".ts", ".tsx", ".js", ".jsx", ".mts", ".cts", ".mjs", ".cjs")


def create_import_edges(
    files: Iterable[ParsedFile],
    resolver: ImportResolver,
    path_to_id: Mapping[str, str],
    project_root: Optional[str | pathlib.Path] = None,
) -> list[ImportEdge]:
    """Create one import edge per distinct (importer, imported) file pair.

    Repeated imports of the same target, including type-only and dynamic
    variants, collapse into a single edge.

    Args:
        files: Parsed source files.
        resolver: Session resolver.
        path_to_id: File path to file-node id for every node in the graph.
        project_root: Root used for alias resolution.

    Returns:
        Deduplicated :class:`ImportEdge` list in discovery order.
    """
    edges: dict[tuple[str, str], ImportEdge] = {}

    for file in files:
        from_id = path_to_id.get(file.path)
        if from_id is None:
            continue

        for imp in file.imports:
            resolved = resolver.resolve(file.path, imp.import_path, path_to_id, project_root)
            if resolved is None:
                kind = resolver.classify(imp.import_path, project_root)
                if not is_expected_external(kind):
                    logger.warning(
                        "import_unresolved",
                        file=file.path,
                        specifier=imp.import_path,
                        specifier_kind=kind.value,
                    )
                continue

            to_id = path_to_id[resolved]
            key = (from_id, to_id)
            if key not in edges:
                edges[key] = ImportEdge(from_id=from_id, to_id=to_id)

    return list(edges.values())


def create_implement_edges(
    files: Iterable[ParsedFile],
    resolver: ImportResolver,
    path_to_id: Mapping[str, str],
    project_root: Optional[str | pathlib.Path] = None,
) -> list[ImplementEdge]:
    """Create edges from classes to the files of the interfaces they implement.

    Interfaces declared in the implementing file have no import path and
    are skipped: implementing a same-file interface is not a dependency
    between files.

    Args:
        files: Parsed source files.
        resolver: Session resolver.
        path_to_id: File path to file-node id.
        project_root: Root used for alias resolution.

    Returns:
        :class:`ImplementEdge` list deduplicated by (from, to, symbol).
    """
    edges: dict[tuple[str, str, str], ImplementEdge] = {}

    for file in files:
        from_id = path_to_id.get(file.path)
        if from_id is None or not file.implements:
            continue

        for info in file.implements:
            for interface in info.interfaces:
                import_path = info.interface_paths.get(interface)
                if import_path is None:
                    logger.debug(
                        "implement_local_interface",
                        file=file.path,
                        class_name=info.class_name,
                        interface=interface,
                    )
                    continue

                resolved = resolver.resolve(file.path, import_path, path_to_id, project_root)
                if resolved is None:
                    logger.warning(
                        "implement_target_unresolved",
                        file=file.path,
                        class_name=info.class_name,
                        interface=interface,
                        specifier=import_path,
                    )
                    continue

                to_id = path_to_id[resolved]
                key = (from_id, to_id, interface)
                if key not in edges:
                    edges[key] = ImplementEdge(
                        from_id=from_id,
                        to_id=to_id,
                        symbol_name=interface,
                        import_path=import_path,
                    )

    return list(edges.values())


def create_render_edges(
    files: Iterable[ParsedFile],
    resolver: ImportResolver,
    path_to_id: Mapping[str, str],
    project_root: Optional[str | pathlib.Path] = None,
) -> list[RenderEdge]:
    """Create edges from components to the components they render.

    The rendered name is matched against the file's own imports by the
    last segment of each import path, so ``<Header />`` maps to
    ``import Header from './Header'``.  Positions are carried over
    unchanged; the same target may appear at several positions.

    Args:
        files: Parsed source files.
        resolver: Session resolver.
        path_to_id: File path to file-node id.
        project_root: Root used for alias resolution.

    Returns:
        :class:`RenderEdge` list deduplicated by (from, to, position).
    """
    edges: dict[tuple[str, str, int], RenderEdge] = {}

    for file in files:
        from_id = path_to_id.get(file.path)
        if from_id is None or not file.renders:
            continue

        name_to_import = component_import_map(file.imports)

        for render in file.renders:
            base_name = render.component_name.split(".", 1)[0]
            import_path = name_to_import.get(base_name)
            if import_path is None:
                logger.warning(
                    "render_component_unmatched",
                    file=file.path,
                    component=render.component_name,
                )
                continue

            resolved = resolver.resolve(file.path, import_path, path_to_id, project_root)
            if resolved is None:
                logger.warning(
                    "render_target_unresolved",
                    file=file.path,
                    component=render.component_name,
                    specifier=import_path,
                )
                continue

            to_id = path_to_id[resolved]
            key = (from_id, to_id, render.position)
            if key not in edges:
                edges[key] = RenderEdge(from_id=from_id, to_id=to_id, position=render.position)

    return list(edges.values())


def component_import_map(imports: Iterable[ImportInfo]) -> dict[str, str]:
    """Map candidate component names to the import specifiers they come from.

    The name of an import is the last path segment without its script
    extension; an ``index`` module is named after its directory.  The
    first import claiming a name wins.
    """
    mapping: dict[str, str] = {}
    for imp in imports:
        segment = posixpath.basename(imp.import_path.rstrip("/"))
        stem, ext = posixpath.splitext(segment)
        name = stem if ext in _SCRIPT_EXTENSIONS else segment
        if name == "index":
            name = posixpath.basename(posixpath.dirname(imp.import_path.rstrip("/")))
        if name and name not in mapping:
            mapping[name] = imp.import_path
    return mapping
