"""Recursive source-file crawler with .gitignore-style blacklist filtering.

Uses ``pathlib`` for all file-system operations and ``pathspec`` for
glob-pattern matching against the configurable blacklist.
"""

from __future__ import annotations

import pathlib
from typing import Iterator

import pathspec
import structlog

from archgraph.config import settings

logger = structlog.get_logger(__name__)

# Extension -> tree-sitter grammar used by the TypeScript parser.
EXTENSION_GRAMMAR_MAP: dict[str, str] = {
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
    ".jsx": "tsx",
    ".js": "tsx",
    ".mjs": "tsx",
    ".cjs": "tsx",
}


class FileCrawler:
    """Recursively walks a project tree, yielding TypeScript/JavaScript files.

    Respects a configurable blacklist of glob patterns (similar to
    ``.gitignore``).  Files exceeding ``max_file_size_bytes`` are skipped.

    Args:
        root: The root directory to scan.
        blacklist: Optional list of glob patterns to exclude.  Falls back
            to :pyattr:`archgraph.config.Settings.default_blacklist`.
        max_file_size_bytes: Skip files larger than this.  Falls back to
            :pyattr:`archgraph.config.Settings.max_file_size_bytes`.
        extensions: File suffixes to yield.  Falls back to
            :pyattr:`archgraph.config.Settings.source_extensions`.
    """

    def __init__(
        self,
        root: pathlib.Path,
        blacklist: list[str] | None = None,
        max_file_size_bytes: int | None = None,
        extensions: list[str] | None = None,
    ) -> None:
        self.root = root.resolve()
        self.blacklist = blacklist if blacklist is not None else settings.default_blacklist
        self.max_file_size_bytes = max_file_size_bytes or settings.max_file_size_bytes
        self.extensions = {ext.lower() for ext in (extensions or settings.source_extensions)}
        self._spec = pathspec.PathSpec.from_lines("gitwildmatch", self.blacklist)

    def _is_excluded(self, path: pathlib.Path) -> bool:
        try:
            relative = path.relative_to(self.root)
        except ValueError:
            return False
        posix = relative.as_posix()
        # Directory patterns only match with a trailing slash.
        if path.is_dir():
            posix += "/"
        return self._spec.match_file(posix)

    def _is_supported(self, path: pathlib.Path) -> bool:
        return path.suffix.lower() in self.extensions

    def crawl(self) -> Iterator[pathlib.Path]:
        """Yield all supported source files under :pyattr:`root`.

        Blacklisted directories are pruned so their children are never
        visited.  Files are yielded in sorted order.

        Yields:
            Absolute ``pathlib.Path`` objects for each source file.
        """
        logger.info("crawl_started", root=str(self.root))
        file_count = 0

        for path in self._walk(self.root):
            file_count += 1
            yield path

        logger.info("crawl_finished", root=str(self.root), files_found=file_count)

    def _walk(self, directory: pathlib.Path) -> Iterator[pathlib.Path]:
        try:
            entries = sorted(directory.iterdir())
        except PermissionError:
            logger.warning("permission_denied", path=str(directory))
            return

        for entry in entries:
            if self._is_excluded(entry):
                logger.debug("excluded", path=str(entry))
                continue

            if entry.is_dir():
                yield from self._walk(entry)
            elif entry.is_file():
                if not self._is_supported(entry):
                    continue
                try:
                    size = entry.stat().st_size
                except OSError:
                    logger.warning("stat_failed", path=str(entry))
                    continue
                if size > self.max_file_size_bytes:
                    logger.warning(
                        "file_too_large",
                        path=str(entry),
                        size=size,
                        limit=self.max_file_size_bytes,
                    )
                    continue
                yield entry


def get_grammar_for_file(path: pathlib.Path) -> str | None:
    """Return the tree-sitter grammar name (``typescript``/``tsx``) for *path*."""
    return EXTENSION_GRAMMAR_MAP.get(path.suffix.lower())
