"""Per-file extraction facts handed from the parser to the graph builders.

A :class:`ParsedFile` is produced once per source file and treated as
read-only input.  Every fact category except ``imports`` is optional; a
missing category simply contributes no edges.  A record without a
``path`` fails validation, since the builders cannot place it anywhere.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from archgraph.models.graph import AbstractKind, HierarchyLevel


class ImportInfo(BaseModel):
    """One import specifier found in a file.

    Attributes:
        import_path: The specifier exactly as written (``'./utils'``).
        is_type_only: ``import type { X } from ...``.
        is_dynamic: ``import('./x')``.
    """

    model_config = ConfigDict(frozen=True)

    import_path: str
    is_type_only: bool = False
    is_dynamic: bool = False


class ImplementInfo(BaseModel):
    """A class together with the interfaces it implements.

    ``interface_paths`` maps interface names to the import specifier they
    were imported from; names declared in the same file have no entry.
    """

    model_config = ConfigDict(frozen=True)

    class_name: str
    interfaces: list[str] = Field(default_factory=list)
    interface_paths: dict[str, str] = Field(default_factory=dict)


class RenderInfo(BaseModel):
    """A JSX component usage such as ``<Header />`` or ``<UI.Button />``."""

    model_config = ConfigDict(frozen=True)

    component_name: str
    position: int = Field(..., ge=0)
    is_namespaced: bool = False


class HierarchyInfo(BaseModel):
    """Architecture/module/component membership of a file.

    Attributes:
        level: Deepest level the file was classified at.
        parent: Parent group path (``'parser/lexer'``).
        architecture: Monorepo package/app name (``'server'``).
        module: Module name (``'parser'``).
        component: Component name (``'lexer'``).
    """

    model_config = ConfigDict(frozen=True)

    level: HierarchyLevel = HierarchyLevel.FILE
    parent: Optional[str] = None
    architecture: Optional[str] = None
    module: Optional[str] = None
    component: Optional[str] = None


class TypeDefinition(BaseModel):
    """An interface, type alias, class or enum declared in a file."""

    model_config = ConfigDict(frozen=True)

    kind: AbstractKind
    name: str
    is_exported: bool = False
    extends: Optional[list[str]] = None
    implements: Optional[list[str]] = None
    references: Optional[list[str]] = None


class ParsedFile(BaseModel):
    """All extraction facts for a single source file."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Path of the source file.")
    imports: list[ImportInfo] = Field(default_factory=list)
    implements: Optional[list[ImplementInfo]] = None
    renders: Optional[list[RenderInfo]] = None
    hierarchy: Optional[HierarchyInfo] = None
    type_definitions: Optional[list[TypeDefinition]] = None
