"""Tests for project extraction."""

import asyncio

import pytest
from structlog.testing import capture_logs

from archgraph.core.ingestion import parse_project
from archgraph.graph.query import build_dependency_graph
from archgraph.parsers.typescript_parser import TypeScriptParser


@pytest.fixture
def project(write_project):
    return write_project(
        {
            "src/main.ts": "import { greet } from './util/greet';\ngreet();\n",
            "src/util/greet.ts": "export function greet() { return 'hi'; }\n",
            "src/ui/App.tsx": "import Button from './Button';\nexport const App = () => <Button />;\n",
            "src/ui/Button.tsx": "export default function Button() { return <button />; }\n",
            "node_modules/lib/index.ts": "export const x = 1;\n",
        }
    )


class TestParseProject:
    """Tests for parse_project."""

    def test_parses_sorted_files(self, project):
        files = asyncio.run(parse_project(project))

        assert [f.path for f in files] == [
            "src/main.ts",
            "src/ui/App.tsx",
            "src/ui/Button.tsx",
            "src/util/greet.ts",
        ]
        assert [r.component_name for r in files[1].renders] == ["Button"]

    def test_end_to_end_graph(self, project):
        files = asyncio.run(parse_project(str(project)))

        graph = build_dependency_graph(files)

        assert len(graph.edges) == 2
        assert len(graph.nodes) == 4

    def test_missing_directory(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            asyncio.run(parse_project(tmp_path / "missing"))

    def test_not_a_directory(self, tmp_path):
        target = tmp_path / "file.ts"
        target.write_text("")

        with pytest.raises(NotADirectoryError):
            asyncio.run(parse_project(target))

    def test_parse_failures_are_skipped(self, project, monkeypatch):
        def _boom(self, file_path, source):
            raise RuntimeError("bad grammar")

        monkeypatch.setattr(TypeScriptParser, "parse_file", _boom)

        with capture_logs() as logs:
            files = asyncio.run(parse_project(project))

        assert files == []
        assert sum(1 for log in logs if log["event"] == "parse_failed") == 4
