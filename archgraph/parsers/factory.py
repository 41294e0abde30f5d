"""Factory for obtaining the correct grammar-specific parser at runtime.

Supporting another grammar dialect requires only:

1. Creating a new subclass of :class:`BaseLanguageParser`.
2. Registering it via :meth:`ParserFactory.register`.
"""

from __future__ import annotations

import pathlib
from typing import Type

import structlog

from archgraph.parsers.base import BaseLanguageParser

logger = structlog.get_logger(__name__)


class ParserFactory:
    """Registry-based factory that maps grammar names to parser classes.

    Usage::

        factory = ParserFactory(repo_root)
        factory.register("tsx", TsxParser)
        parser = factory.get("tsx")
    """

    def __init__(self, repo_root: pathlib.Path) -> None:
        self._repo_root = repo_root.resolve()
        self._registry: dict[str, Type[BaseLanguageParser]] = {}
        self._instances: dict[str, BaseLanguageParser] = {}

    def register(self, grammar: str, parser_cls: Type[BaseLanguageParser]) -> None:
        """Register a parser class for *grammar*.

        Args:
            grammar: Lowercase grammar identifier (``"typescript"``, ``"tsx"``).
            parser_cls: A concrete subclass of :class:`BaseLanguageParser`.
        """
        self._registry[grammar] = parser_cls
        # A re-registration must not keep serving the old instance.
        self._instances.pop(grammar, None)
        logger.debug("parser_registered", grammar=grammar, cls=parser_cls.__name__)

    def get(self, grammar: str) -> BaseLanguageParser | None:
        """Return a (cached) parser instance for *grammar*.

        Returns:
            A parser instance, or ``None`` if nothing is registered for
            the requested grammar.
        """
        if grammar in self._instances:
            return self._instances[grammar]

        cls = self._registry.get(grammar)
        if cls is None:
            logger.warning("no_parser_registered", grammar=grammar)
            return None

        instance = cls(self._repo_root)
        self._instances[grammar] = instance
        return instance

    @property
    def supported_grammars(self) -> list[str]:
        """Return a sorted list of registered grammar identifiers."""
        return sorted(self._registry.keys())
