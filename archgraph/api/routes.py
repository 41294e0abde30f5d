"""FastAPI route definitions for the archgraph HTTP API.

- ``POST /graph``: scan a project and return the requested graph view,
  its summary and/or its Mermaid rendering.
- ``POST /graph/diff``: build two snapshots and return their diff.
- ``GET /health``: liveness probe.

Graph construction is synchronous and CPU-bound, so it is dispatched to a
worker thread via ``asyncio.to_thread`` to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import pathlib
from typing import Any, Literal, Optional

import structlog
from pydantic import BaseModel, Field

from fastapi import APIRouter, HTTPException, status

from archgraph import __version__
from archgraph.core.ingestion import parse_project
from archgraph.graph.diff import diff_graphs
from archgraph.graph.query import build_dependency_graph, summarize_graph
from archgraph.graph.resolver import ImportResolver
from archgraph.models.graph import EdgeKind, Graph
from archgraph.models.parsed import ParsedFile
from archgraph.models.query import (
    DiffResult,
    FileChanges,
    GraphQuery,
    InternalLevel,
    QueryLevel,
    ViewMode,
)
from archgraph.visualization.mermaid import generate_mermaid

logger = structlog.get_logger(__name__)

router = APIRouter()


# ------------------------------------------------------------------
# Request / Response schemas
# ------------------------------------------------------------------


class GraphRequest(BaseModel):
    """Payload for ``POST /graph``.

    Attributes:
        path: Absolute local path to the project to scan.
        blacklist: Optional glob patterns to exclude.
        level: Hierarchy level of the graph.
        edge_kinds: Edge kinds to include.
        mode: ``global``, ``focused`` or ``neighbors``.
        focus_key: Focus target for the focused/neighbors views.
        neighbor_depth: BFS depth for neighbors mode.
        internal_level: Granularity inside a focused view.
        format: Return the graph as JSON, Mermaid text, or both.
        verbosity: ``brief`` summaries only report totals.
    """

    path: str = Field(..., description="Absolute local path to the project.")
    blacklist: list[str] | None = Field(None, description="Optional glob patterns to exclude.")
    level: QueryLevel = Field(QueryLevel.FILE, description="Hierarchy level.")
    edge_kinds: list[EdgeKind] = Field(
        default_factory=lambda: [EdgeKind.IMPORT],
        description="Edge kinds to include.",
    )
    mode: ViewMode = Field(ViewMode.GLOBAL, description="View filter.")
    focus_key: Optional[str] = Field(None, description="Focus target.")
    neighbor_depth: Optional[int] = Field(None, description="Neighbor expansion depth.")
    internal_level: InternalLevel = Field(InternalLevel.FILE, description="Level inside a focused view.")
    format: Literal["json", "mermaid", "both"] = Field("json", description="Output format.")
    verbosity: Literal["brief", "detail"] = Field("detail", description="Summary detail.")

    def to_query(self) -> GraphQuery:
        """Build the validated :class:`GraphQuery` for this request.

        Raises:
            pydantic.ValidationError: If the query options are inconsistent.
        """
        options: dict[str, Any] = {
            "level": self.level,
            "edge_kinds": self.edge_kinds,
            "mode": self.mode,
            "focus_key": self.focus_key,
            "internal_level": self.internal_level,
        }
        if self.neighbor_depth is not None:
            options["neighbor_depth"] = self.neighbor_depth
        return GraphQuery(**options)


class GraphResponse(BaseModel):
    """Response from ``POST /graph``.

    Attributes:
        status: Human-readable status message.
        summary: Node/edge counts of the returned graph.
        graph: The graph, unless only Mermaid output was requested.
        mermaid: Mermaid text, when requested.
    """

    status: str = Field("success", description="Status message.")
    summary: dict[str, Any] = Field(..., description="Graph statistics.")
    graph: Optional[Graph] = Field(None, description="The dependency graph.")
    mermaid: Optional[str] = Field(None, description="Mermaid diagram text.")


class DiffRequest(BaseModel):
    """Payload for ``POST /graph/diff``.

    Attributes:
        old: Request describing the baseline snapshot.
        new: Request describing the updated snapshot.
        changes: Files added/modified/removed between the snapshots.
        include_mermaid: Also render the added subgraph as Mermaid.
    """

    old: GraphRequest
    new: GraphRequest
    changes: FileChanges = Field(default_factory=FileChanges)
    include_mermaid: bool = Field(False, description="Render the added subgraph.")


class DiffResponse(BaseModel):
    """Response from ``POST /graph/diff``."""

    status: str = Field("success", description="Status message.")
    result: DiffResult
    mermaid: Optional[str] = None


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


async def _build(request: GraphRequest, resolver: ImportResolver) -> tuple[Graph, list[ParsedFile], GraphQuery]:
    query = request.to_query()
    files = await parse_project(request.path, blacklist=request.blacklist)
    graph = await asyncio.to_thread(
        build_dependency_graph,
        files,
        query,
        resolver,
        pathlib.Path(request.path).resolve(),
    )
    return graph, files, query


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------


@router.post(
    "/graph",
    response_model=GraphResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Build a dependency graph",
    description=(
        "Scan a local TypeScript/JavaScript project and return its dependency "
        "graph at the requested level, optionally filtered to a focused or "
        "neighbors view, as JSON and/or Mermaid."
    ),
)
async def build_graph(request: GraphRequest) -> GraphResponse:
    """Build the graph described by *request*.

    Raises:
        HTTPException: 400 for a bad path or invalid query, 500 on
            unexpected errors.
    """
    try:
        graph, files, query = await _build(request, ImportResolver())
    except (FileNotFoundError, NotADirectoryError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except Exception as exc:
        logger.exception("graph_request_failed", path=request.path)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Graph build failed: {exc}",
        )

    return GraphResponse(
        summary=summarize_graph(graph, files, query, detail=request.verbosity == "detail"),
        graph=graph if request.format in ("json", "both") else None,
        mermaid=(
            generate_mermaid(graph, project_root=request.path)
            if request.format in ("mermaid", "both")
            else None
        ),
    )


@router.post(
    "/graph/diff",
    response_model=DiffResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_200_OK,
    summary="Diff two graph snapshots",
)
async def diff_graph(request: DiffRequest) -> DiffResponse:
    """Build the ``old`` and ``new`` graphs and return their difference.

    Raises:
        HTTPException: 400 for a bad path or invalid query, 500 on
            unexpected errors.
    """
    resolver = ImportResolver()
    try:
        old_graph, _, _ = await _build(request.old, resolver)
        new_graph, new_files, query = await _build(request.new, resolver)
        graph_level = query.internal_level.value if query.mode == ViewMode.FOCUSED else query.level.value
        result = await asyncio.to_thread(
            diff_graphs, old_graph, new_graph, request.changes, graph_level, new_files
        )
    except (FileNotFoundError, NotADirectoryError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except Exception as exc:
        logger.exception("diff_request_failed", old=request.old.path, new=request.new.path)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Graph diff failed: {exc}",
        )

    return DiffResponse(
        result=result,
        mermaid=generate_mermaid(result.added, project_root=request.new.path) if request.include_mermaid else None,
    )


@router.get("/health", summary="Liveness probe")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": __version__}
