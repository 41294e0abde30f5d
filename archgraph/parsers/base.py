"""Abstract base class for the tree-sitter based extractors.

Every grammar dialect subclasses :class:`BaseLanguageParser` and turns
the bytes of one source file into a :class:`ParsedFile`.
"""

from __future__ import annotations

import abc
import pathlib

from archgraph.models.parsed import ParsedFile


class BaseLanguageParser(abc.ABC):
    """Contract that every language parser must fulfil.

    Subclasses are responsible for:

    1. Initialising the appropriate ``tree-sitter`` ``Language`` and ``Parser``.
    2. Extracting imports, implementations, JSX renders and type
       definitions from the concrete syntax tree.

    Args:
        repo_root: The root of the repository being scanned, used to
            compute the repo-relative paths stored in ``ParsedFile.path``.
    """

    def __init__(self, repo_root: pathlib.Path) -> None:
        self.repo_root = repo_root.resolve()

    @abc.abstractmethod
    def parse_file(self, file_path: pathlib.Path, source: bytes) -> ParsedFile:
        """Parse *source* and return the extraction facts of the file.

        Args:
            file_path: Absolute path to the source file.
            source: Raw bytes of the source file.

        Returns:
            The file's :class:`ParsedFile`.
        """

    def _relative_path(self, file_path: pathlib.Path) -> str:
        """Return a POSIX-style repo-relative path string."""
        try:
            return file_path.resolve().relative_to(self.repo_root).as_posix()
        except ValueError:
            return file_path.as_posix()

    @staticmethod
    def _node_text(node: object) -> str:
        """Decode the UTF-8 text of a tree-sitter node."""
        # tree_sitter.Node exposes ``text`` as ``bytes | None``.
        text: bytes | None = getattr(node, "text", None)
        if text is None:
            return ""
        return text.decode("utf-8", errors="replace")

    @staticmethod
    def _strip_quotes(text: str) -> str:
        """Remove surrounding quotes from a string literal."""
        for q in ('"', "'", "`"):
            if len(text) >= 2 and text.startswith(q) and text.endswith(q):
                return text[1:-1]
        return text
