"""Tests for the focused and neighbors views."""

import pytest

from archgraph.graph.builder import build_file_graph, generate_node_id
from archgraph.graph.views import build_focused_graph, build_neighbors_graph, find_seed_ids, matches_focus
from archgraph.models.graph import AbstractNode, EdgeKind
from archgraph.models.parsed import TypeDefinition

from conftest import make_file


class TestFocusedView:
    """Tests for build_focused_graph."""

    def test_module_focus_keeps_only_inner_files(self, resolver, layered_files):
        graph = build_focused_graph(layered_files, "module", [EdgeKind.IMPORT], "auth", resolver=resolver)

        assert {node.path for node in graph.nodes} == {"src/auth/login.ts", "src/auth/session.ts"}
        assert [(e.from_id, e.to_id) for e in graph.edges] == [
            (generate_node_id("src/auth/session.ts"), generate_node_id("src/auth/login.ts"))
        ]

    def test_component_focus_accepts_bare_name(self, resolver):
        files = [
            make_file("src/ui/button/Button.tsx", "./Icon"),
            make_file("src/ui/button/Icon.tsx"),
            make_file("src/ui/form/Input.tsx"),
        ]

        by_key = build_focused_graph(files, "component", None, "ui/button", resolver=resolver)
        by_name = build_focused_graph(files, "component", None, "button", resolver=resolver)

        assert by_key.node_ids() == by_name.node_ids()
        assert len(by_key.nodes) == 2
        assert len(by_key.edges) == 1

    def test_no_match_yields_empty_graph(self, resolver, layered_files):
        graph = build_focused_graph(layered_files, "module", None, "billing", resolver=resolver)

        assert graph.is_empty

    def test_interface_internal_level(self, resolver):
        files = [
            make_file(
                "src/auth/types.ts",
                type_definitions=[
                    TypeDefinition(kind="interface", name="Session", references=["Token"]),
                    TypeDefinition(kind="type", name="Token"),
                ],
            ),
            make_file("src/db/types.ts", type_definitions=[TypeDefinition(kind="interface", name="Row")]),
        ]

        graph = build_focused_graph(files, "module", None, "auth", internal_level="interface", resolver=resolver)

        assert all(isinstance(node, AbstractNode) for node in graph.nodes)
        assert {node.name for node in graph.nodes} == {"Session", "Token"}
        assert [edge.kind for edge in graph.edges] == ["use"]

    def test_file_focus_matches_path_suffix(self):
        parsed = make_file("src/auth/login.ts")

        assert matches_focus(parsed, "file", "src/auth/login.ts")
        assert matches_focus(parsed, "file", "auth/login.ts")
        assert not matches_focus(parsed, "file", "session.ts")

    def test_file_focus_suffix_starts_at_segment(self):
        parsed = make_file("src/data.ts")

        assert matches_focus(parsed, "file", "data.ts")
        assert not matches_focus(parsed, "file", "a.ts")
        assert not matches_focus(parsed, "interface", "ta.ts")


class TestNeighborsView:
    """Tests for build_neighbors_graph."""

    @pytest.fixture
    def chain(self, resolver):
        files = [
            make_file("src/a.ts", "./b"),
            make_file("src/b.ts", "./c"),
            make_file("src/c.ts", "./d"),
            make_file("src/d.ts"),
        ]
        return build_file_graph(files, resolver=resolver)

    def test_depth_zero_keeps_only_seeds(self, chain):
        graph = build_neighbors_graph(chain, "src/b.ts", depth=0)

        assert [node.path for node in graph.nodes] == ["src/b.ts"]
        assert graph.edges == []

    def test_depth_one_adds_dependencies_and_dependents(self, chain):
        graph = build_neighbors_graph(chain, "src/b.ts", depth=1)

        assert {node.path for node in graph.nodes} == {"src/a.ts", "src/b.ts", "src/c.ts"}
        assert len(graph.edges) == 2

    def test_large_depth_stops_when_exhausted(self, chain):
        graph = build_neighbors_graph(chain, "src/a.ts", depth=10)

        assert graph.node_ids() == chain.node_ids()
        assert len(graph.edges) == len(chain.edges)

    def test_no_seed_yields_empty_graph(self, chain):
        assert build_neighbors_graph(chain, "missing.ts").is_empty

    def test_negative_depth_rejected(self, chain):
        with pytest.raises(ValueError):
            build_neighbors_graph(chain, "src/a.ts", depth=-1)

    def test_exact_match_beats_suffix_match(self, resolver):
        graph = build_file_graph([make_file("src/a.ts"), make_file("lib/src/a.ts")], resolver=resolver)

        assert find_seed_ids(graph, "src/a.ts") == [generate_node_id("src/a.ts")]
        assert len(find_seed_ids(graph, "a.ts")) == 2
        assert find_seed_ids(graph, "lib/") == [generate_node_id("lib/src/a.ts")]
