"""Query options and diff result models."""

from __future__ import annotations

import enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator

from archgraph.config import settings
from archgraph.models.graph import EdgeKind, Graph


class QueryLevel(str, enum.Enum):
    """Granularity a graph can be built at."""

    FILE = "file"
    COMPONENT = "component"
    MODULE = "module"
    ARCHITECTURE = "architecture"
    INTERFACE = "interface"


class ViewMode(str, enum.Enum):
    """How the built graph is filtered.

    - ``global``: the complete graph at the requested level.
    - ``focused``: only what is inside the focus target.
    - ``neighbors``: the focus node plus dependencies and dependents.
    """

    GLOBAL = "global"
    FOCUSED = "focused"
    NEIGHBORS = "neighbors"


class InternalLevel(str, enum.Enum):
    """Granularity used inside a focused view."""

    FILE = "file"
    INTERFACE = "interface"


class GraphQuery(BaseModel):
    """Options accepted by :func:`archgraph.graph.query.build_dependency_graph`.

    Attributes:
        level: Hierarchy level of the graph.
        edge_kinds: Edge kinds to build at file level.
        mode: View filter to apply.
        focus_key: Target of the focused/neighbors view.
        neighbor_depth: BFS rounds in neighbors mode.
        internal_level: Granularity inside a focused view.
    """

    level: QueryLevel = Field(QueryLevel.FILE, description="Hierarchy level.")
    edge_kinds: list[EdgeKind] = Field(
        default_factory=lambda: [EdgeKind.IMPORT],
        description="Edge kinds to include.",
    )
    mode: ViewMode = Field(ViewMode.GLOBAL, description="View filter.")
    focus_key: Optional[str] = Field(None, description="Focus target (required unless mode is global).")
    neighbor_depth: int = Field(
        default_factory=lambda: settings.default_neighbor_depth,
        ge=0,
        description="Neighbor expansion depth.",
    )
    internal_level: InternalLevel = Field(InternalLevel.FILE, description="Level inside a focused view.")

    @model_validator(mode="after")
    def _require_focus_key(self) -> "GraphQuery":
        if self.mode != ViewMode.GLOBAL and not self.focus_key:
            raise ValueError(f"focus_key is required when mode is '{self.mode.value}'")
        return self


class FileChanges(BaseModel):
    """File paths touched between two snapshots."""

    added: list[str] = Field(default_factory=list)
    modified: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)


class DiffSummary(BaseModel):
    """Counts for a :class:`DiffResult` plus cycle information."""

    added_nodes: int = 0
    removed_nodes: int = 0
    modified_nodes: int = 0
    added_edges: int = 0
    removed_edges: int = 0
    modified_edges: int = 0
    has_circular_dependency: bool = False
    circular_paths: Optional[list[list[str]]] = None


class DiffResult(BaseModel):
    """Added, removed and modified subgraphs between two snapshots."""

    added: Graph = Field(default_factory=Graph)
    removed: Graph = Field(default_factory=Graph)
    modified: Graph = Field(default_factory=Graph)
    summary: DiffSummary = Field(default_factory=DiffSummary)
