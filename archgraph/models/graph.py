"""Graph data models for nodes, edges, and the dependency graph.

Nodes and edges are closed discriminated unions: a node is either a
:class:`HierarchyNode` (tagged ``type="hierarchy"``) or an
:class:`AbstractNode` (``type="abstract"``), and an edge is one of four
variants tagged by ``kind``.  Every variant is frozen; status changes are
made with ``model_copy(update=...)`` so a returned :class:`Graph` is never
mutated in place.
"""

from __future__ import annotations

import enum
from typing import Annotated, Iterator, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Status(str, enum.Enum):
    """Change status of a node or edge (``normal`` outside of diffs)."""

    NORMAL = "normal"
    ADDED = "added"
    MODIFIED = "modified"
    REMOVED = "removed"


class HierarchyLevel(str, enum.Enum):
    """Structural levels a :class:`HierarchyNode` can represent."""

    ARCHITECTURE = "architecture"
    MODULE = "module"
    COMPONENT = "component"
    FILE = "file"


class AbstractKind(str, enum.Enum):
    """Kinds of type declarations represented by an :class:`AbstractNode`."""

    INTERFACE = "interface"
    TYPE = "type"
    CLASS = "class"
    ENUM = "enum"


class EdgeKind(str, enum.Enum):
    """The fixed set of edge kinds a renderer has to handle."""

    IMPORT = "import"
    RENDER = "render"
    IMPLEMENT = "implement"
    USE = "use"


# ------------------------------------------------------------------
# Nodes
# ------------------------------------------------------------------


class HierarchyNode(BaseModel):
    """A structural grouping: an architecture, module, component or file.

    Attributes:
        id: Deterministic identifier derived from ``path`` and ``level``.
        level: Granularity of the grouping.
        path: File path for file nodes; the group key otherwise.
        parent: Id of the enclosing group, when known.
        status: Diff status.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["hierarchy"] = "hierarchy"
    id: str = Field(..., description="Deterministic unique identifier.")
    level: HierarchyLevel = Field(..., description="Hierarchy level.")
    path: str = Field(..., description="File path or group key.")
    parent: Optional[str] = Field(None, description="Enclosing group id.")
    status: Status = Field(Status.NORMAL, description="Diff status.")


class AbstractNode(BaseModel):
    """A type declaration (interface, type alias, class or enum).

    Attributes:
        id: Deterministic identifier derived from kind, name and file path.
        kind: Declaration kind.
        path: Path of the defining file.
        name: Declared name.
        is_exported: Whether the declaration is exported.
        parent: Id of the defining file node, when known.
        status: Diff status.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["abstract"] = "abstract"
    id: str = Field(..., description="Deterministic unique identifier.")
    kind: AbstractKind = Field(..., description="Declaration kind.")
    path: str = Field(..., description="Defining file path.")
    name: str = Field(..., description="Declared name.")
    is_exported: bool = Field(False, description="Exported from its module.")
    parent: Optional[str] = Field(None, description="Defining file node id.")
    status: Status = Field(Status.NORMAL, description="Diff status.")


Node = Annotated[Union[HierarchyNode, AbstractNode], Field(discriminator="type")]


# ------------------------------------------------------------------
# Edges
# ------------------------------------------------------------------


class _EdgeBase(BaseModel):
    """Fields shared by every edge variant.

    ``from`` is a Python keyword, so the endpoints are stored as
    ``from_id``/``to_id`` and serialized under their ``from``/``to`` aliases.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    from_id: str = Field(..., alias="from", description="Originating node id.")
    to_id: str = Field(..., alias="to", description="Destination node id.")
    status: Status = Field(Status.NORMAL, description="Diff status.")

    @property
    def identity(self) -> tuple[str, str, str]:
        """``(kind, from, to)``: the key edges are matched by when diffing."""
        return (self.kind, self.from_id, self.to_id)  # type: ignore[attr-defined]


class ImportEdge(_EdgeBase):
    """``import { foo } from './bar'``: a plain module dependency."""

    kind: Literal["import"] = "import"


class RenderEdge(_EdgeBase):
    """``<Parent><Child /></Parent>``: a JSX composition dependency."""

    kind: Literal["render"] = "render"
    position: int = Field(..., ge=0, description="Zero-based order of appearance.")
    slot_name: Optional[str] = Field(None, description="Named slot, if any.")
    conditional: Optional[bool] = Field(None, description="Rendered conditionally.")


class ImplementEdge(_EdgeBase):
    """``class Foo implements IBar`` (also used for ``extends``)."""

    kind: Literal["implement"] = "implement"
    symbol_name: str = Field(..., description="Implemented or extended type name.")
    import_path: Optional[str] = Field(None, description="Import specifier of the type.")


class UseEdge(_EdgeBase):
    """``function foo(user: User)``: a type reference."""

    kind: Literal["use"] = "use"
    symbol_name: str = Field(..., description="Referenced type name.")
    import_path: Optional[str] = Field(None, description="Import specifier of the type.")


Edge = Annotated[
    Union[ImportEdge, RenderEdge, ImplementEdge, UseEdge],
    Field(discriminator="kind"),
]


# ------------------------------------------------------------------
# Graph
# ------------------------------------------------------------------


class Graph(BaseModel):
    """A dependency graph: nodes unique by id plus the edges between them.

    Attributes:
        nodes: All nodes; no ordering is implied.
        edges: All edges; each endpoint is the id of a node in ``nodes``.
    """

    model_config = ConfigDict(frozen=True)

    nodes: list[Node] = Field(default_factory=list, description="Graph nodes.")
    edges: list[Edge] = Field(default_factory=list, description="Graph edges.")

    def node_ids(self) -> set[str]:
        """Return the ids of all nodes."""
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> Optional[Union[HierarchyNode, AbstractNode]]:
        """Return the node with *node_id*, or ``None``."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edges_of_kind(self, kind: EdgeKind | str) -> Iterator[Union[ImportEdge, RenderEdge, ImplementEdge, UseEdge]]:
        """Yield the edges whose kind equals *kind*."""
        wanted = EdgeKind(kind).value
        for edge in self.edges:
            if edge.kind == wanted:
                yield edge

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.edges
