"""Extraction orchestrator that ties the crawler and parsers together.

This is the entry point for scanning a project: it crawls the file tree,
dispatches each file to the parser for its grammar, and returns the
per-file extraction facts the graph builders consume.
"""

from __future__ import annotations

import pathlib

import structlog

from archgraph.core.crawler import FileCrawler, get_grammar_for_file
from archgraph.models.parsed import ParsedFile
from archgraph.parsers.base import BaseLanguageParser
from archgraph.parsers.factory import ParserFactory
from archgraph.parsers.typescript_parser import TsxParser, TypeScriptParser

logger = structlog.get_logger(__name__)


def _build_factory(repo_root: pathlib.Path) -> ParserFactory:
    """Create a :class:`ParserFactory` pre-loaded with the built-in parsers.

    Args:
        repo_root: Project root directory.

    Returns:
        A ready-to-use factory instance.
    """
    factory = ParserFactory(repo_root)
    factory.register("typescript", TypeScriptParser)
    factory.register("tsx", TsxParser)
    return factory


async def parse_project(
    repo_path: str | pathlib.Path,
    blacklist: list[str] | None = None,
) -> list[ParsedFile]:
    """Scan a local project and extract one :class:`ParsedFile` per source file.

    This is an **async** function so it can be awaited from FastAPI route
    handlers.  Parsing itself is CPU-bound and runs synchronously; route
    handlers dispatch the whole build with ``asyncio.to_thread``.

    Args:
        repo_path: Path to the project root directory.
        blacklist: Optional override for the default crawler blacklist.

    Returns:
        Parsed files sorted by their repo-relative path.

    Raises:
        FileNotFoundError: If *repo_path* does not exist.
        NotADirectoryError: If *repo_path* is not a directory.
    """
    root = pathlib.Path(repo_path).resolve()

    if not root.exists():
        raise FileNotFoundError(f"Project path does not exist: {root}")
    if not root.is_dir():
        raise NotADirectoryError(f"Project path is not a directory: {root}")

    logger.info("extraction_started", repo=str(root))

    crawler = FileCrawler(root, blacklist=blacklist)
    factory = _build_factory(root)

    parsed: list[ParsedFile] = []
    files_failed = 0

    for file_path in crawler.crawl():
        grammar = get_grammar_for_file(file_path)
        if grammar is None:
            continue

        parser: BaseLanguageParser | None = factory.get(grammar)
        if parser is None:
            logger.warning("no_parser_for_grammar", grammar=grammar, file=str(file_path))
            continue

        try:
            source = file_path.read_bytes()
            parsed.append(parser.parse_file(file_path, source))
        except Exception:
            files_failed += 1
            logger.exception("parse_failed", file=str(file_path), grammar=grammar)

    parsed.sort(key=lambda f: f.path)

    logger.info(
        "extraction_finished",
        repo=str(root),
        files_parsed=len(parsed),
        files_failed=files_failed,
    )
    return parsed
