"""Mermaid ``graph LR`` rendering of dependency graphs."""

from __future__ import annotations

import os
import posixpath
import re
from typing import Optional

from archgraph.core.hierarchy import get_parent_label
from archgraph.models.graph import (
    AbstractNode,
    EdgeKind,
    Graph,
    HierarchyLevel,
    HierarchyNode,
    RenderEdge,
)

_INVALID_ID_CHARS = re.compile(r"[^a-zA-Z0-9_\-:]")


def generate_mermaid(
    graph: Graph,
    use_relative_paths: bool = True,
    project_root: Optional[str | os.PathLike[str]] = None,
) -> str:
    """Render *graph* as Mermaid flowchart text.

    Edge styles: import ``-->``, implement ``-.->|implements|``, render
    ``==>|<position>|`` and use ``-.->|uses|``.

    Args:
        graph: The graph to render.
        use_relative_paths: Label file nodes relative to *project_root*
            (when given).  ``False`` labels them with the bare file name.
        project_root: Root used for relative labels.

    Returns:
        Mermaid source text, one statement per line.
    """
    lines = ["graph LR"]

    if not graph.nodes:
        lines.append("  %% No nodes to display")
        return "\n".join(lines)

    for node in graph.nodes:
        lines.append(f'  {sanitize_node_id(node.id)}["{_node_label(node, use_relative_paths, project_root)}"]')

    for edge in graph.edges:
        from_id = sanitize_node_id(edge.from_id)
        to_id = sanitize_node_id(edge.to_id)
        if edge.kind == EdgeKind.IMPORT:
            lines.append(f"  {from_id} --> {to_id}")
        elif edge.kind == EdgeKind.IMPLEMENT:
            lines.append(f"  {from_id} -.->|implements| {to_id}")
        elif isinstance(edge, RenderEdge):
            lines.append(f"  {from_id} ==>|{edge.position}| {to_id}")
        elif edge.kind == EdgeKind.USE:
            lines.append(f"  {from_id} -.->|uses| {to_id}")

    return "\n".join(lines)


def sanitize_node_id(node_id: str) -> str:
    """Replace characters Mermaid does not accept in node ids with ``_``."""
    return _INVALID_ID_CHARS.sub("_", node_id)


def _node_label(
    node: HierarchyNode | AbstractNode,
    use_relative_paths: bool,
    project_root: Optional[str | os.PathLike[str]],
) -> str:
    if isinstance(node, AbstractNode):
        label = f"{node.kind.value} {node.name}"
    elif node.level == HierarchyLevel.FILE:
        label = _file_label(node.path, use_relative_paths, project_root)
    elif node.level in (HierarchyLevel.MODULE, HierarchyLevel.COMPONENT):
        label = get_parent_label(node.path)
    else:
        label = node.path
    return label.replace('"', "#quot;")


def _file_label(
    file_path: str,
    use_relative_paths: bool,
    project_root: Optional[str | os.PathLike[str]],
) -> str:
    if not use_relative_paths:
        return posixpath.basename(file_path)
    if project_root is None or not posixpath.isabs(file_path):
        return file_path
    relative = os.path.relpath(file_path, os.fspath(project_root)).replace(os.sep, "/")
    return file_path if relative.startswith("..") else relative
