"""Hierarchy detection from directory structure.

Architecture, module and component boundaries are derived from directory
depth below ``src/``; no directory names other than ``src``, ``packages``
and ``apps`` are special:

- architecture: ``packages/<name>/...`` or ``apps/<name>/...`` above ``src``
- module: ``src/<module>/file.ts`` (files directly in ``src`` belong to
  the ``__root__`` module)
- component: ``src/<module>/<component>/.../file.ts``
- file: anything without a ``src`` directory
"""

from __future__ import annotations

from typing import Callable, Optional

from archgraph.models.graph import HierarchyLevel
from archgraph.models.parsed import HierarchyInfo, ParsedFile
from archgraph.models.query import QueryLevel

ROOT_MODULE = "__root__"

_ARCHITECTURE_DIRS = ("packages", "apps")

Classifier = Callable[[str], HierarchyInfo]


def detect_hierarchy(file_path: str) -> HierarchyInfo:
    """Classify *file_path* into architecture/module/component.

    Examples::

        detect_hierarchy("src/parser/lexer/scanner.ts")
        # level=component, parent="parser/lexer", module="parser", component="lexer"

        detect_hierarchy("packages/server/src/core/types.ts")
        # level=module, parent="core", architecture="server", module="core"
    """
    parts = file_path.replace("\\", "/").split("/")

    if "src" not in parts:
        return HierarchyInfo(level=HierarchyLevel.FILE)
    src_index = parts.index("src")

    architecture: Optional[str] = None
    for marker in _ARCHITECTURE_DIRS:
        if marker in parts:
            arch_index = parts.index(marker)
            if arch_index < src_index - 1:
                architecture = parts[arch_index + 1]
            break

    after_src = parts[src_index + 1 :]
    depth = len(after_src) - 1  # directories between src/ and the file

    if depth < 1:
        return HierarchyInfo(
            level=HierarchyLevel.MODULE,
            parent=ROOT_MODULE,
            architecture=architecture,
            module=ROOT_MODULE,
        )

    module = after_src[0]
    if depth == 1:
        return HierarchyInfo(
            level=HierarchyLevel.MODULE,
            parent=module,
            architecture=architecture,
            module=module,
        )

    # Deeper nesting still belongs to the second-level directory.
    component = after_src[1]
    return HierarchyInfo(
        level=HierarchyLevel.COMPONENT,
        parent=f"{module}/{component}",
        architecture=architecture,
        module=module,
        component=component,
    )


def get_parent_label(parent_path: str) -> str:
    """Return a short display label for a group path.

    The part after ``src/`` is used when present, otherwise the last two
    segments (``'src/modules/auth'`` -> ``'modules/auth'``).
    """
    parts = parent_path.split("/")
    if "src" in parts:
        src_index = parts.index("src")
        if src_index < len(parts) - 1:
            return "/".join(parts[src_index + 1 :])
    return "/".join(parts[-2:])


def classification_of(file: ParsedFile, classify: Classifier = detect_hierarchy) -> HierarchyInfo:
    """Return the file's own hierarchy facts, or classify its path."""
    if file.hierarchy is not None:
        return file.hierarchy
    return classify(file.path)


def group_key(info: HierarchyInfo, level: QueryLevel | HierarchyLevel | str) -> Optional[str]:
    """Return the grouping key of *info* at *level*, or ``None``.

    Architecture never falls back to another tag.  Component groups are
    ``module/component`` and fall back to the bare module for flat layouts.
    """
    level = QueryLevel(level)
    if level == QueryLevel.ARCHITECTURE:
        return info.architecture or None
    if level == QueryLevel.MODULE:
        return info.module or None
    if level == QueryLevel.COMPONENT:
        if info.module and info.component:
            return f"{info.module}/{info.component}"
        return info.module or None
    return None
