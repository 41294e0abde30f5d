"""Pytest configuration and fixtures for archgraph tests."""

from pathlib import Path
from typing import Callable

import pytest

from archgraph.graph.resolver import ImportResolver
from archgraph.models.parsed import ImportInfo, ParsedFile


def make_file(path: str, *imports: str, **facts) -> ParsedFile:
    """Build a ParsedFile importing each specifier in *imports*."""
    return ParsedFile(
        path=path,
        imports=[ImportInfo(import_path=spec) for spec in imports],
        **facts,
    )


@pytest.fixture
def resolver() -> ImportResolver:
    """A fresh resolver (empty alias cache) per test."""
    return ImportResolver()


@pytest.fixture
def layered_files() -> list[ParsedFile]:
    """Two modules: ``auth`` depends on ``db`` through several files."""
    return [
        make_file("src/auth/login.ts", "../db/client", "react"),
        make_file("src/auth/session.ts", "./login", "../db/client", "../db/client"),
        make_file("src/db/client.ts", "pg"),
        make_file("src/index.ts", "./auth/session"),
    ]


@pytest.fixture
def write_project(tmp_path: Path) -> Callable[[dict[str, str]], Path]:
    """Write ``{relative path: source}`` under a temporary project root."""

    def _write(sources: dict[str, str], root: Path = tmp_path) -> Path:
        for rel_path, source in sources.items():
            target = root / rel_path
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(source, encoding="utf-8")
        return root

    return _write
