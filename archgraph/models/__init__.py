"""Pydantic v2 data models for the archgraph dependency graph schema."""

from archgraph.models.graph import (
    AbstractKind,
    AbstractNode,
    Edge,
    EdgeKind,
    Graph,
    HierarchyLevel,
    HierarchyNode,
    ImplementEdge,
    ImportEdge,
    Node,
    RenderEdge,
    Status,
    UseEdge,
)
from archgraph.models.parsed import (
    HierarchyInfo,
    ImplementInfo,
    ImportInfo,
    ParsedFile,
    RenderInfo,
    TypeDefinition,
)
from archgraph.models.query import (
    DiffResult,
    DiffSummary,
    FileChanges,
    GraphQuery,
    InternalLevel,
    QueryLevel,
    ViewMode,
)

__all__ = [
    "Status",
    "HierarchyLevel",
    "AbstractKind",
    "EdgeKind",
    "HierarchyNode",
    "AbstractNode",
    "Node",
    "ImportEdge",
    "RenderEdge",
    "ImplementEdge",
    "UseEdge",
    "Edge",
    "Graph",
    "ImportInfo",
    "ImplementInfo",
    "RenderInfo",
    "HierarchyInfo",
    "TypeDefinition",
    "ParsedFile",
    "QueryLevel",
    "ViewMode",
    "InternalLevel",
    "GraphQuery",
    "FileChanges",
    "DiffSummary",
    "DiffResult",
]
