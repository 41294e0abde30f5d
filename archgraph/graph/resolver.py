"""Import specifier resolution against the set of parsed files.

:class:`ImportResolver` is the long-lived object of one analysis session.
It turns ``'./utils'`` or ``'@/core/types'`` into the path of a known
file, and caches the ``compilerOptions.paths`` alias table of every
project root it has seen so the config file is read once per root.

Specifiers that can never be resolved to a project file (Node built-ins,
npm packages, string literals that are not paths at all) are classified
by a pluggable predicate so callers can stay quiet about them.
"""

from __future__ import annotations

import enum
import json
import pathlib
import posixpath
import re
from dataclasses import dataclass, field
from typing import Callable, Collection, Optional

import structlog

from archgraph.config import settings

logger = structlog.get_logger(__name__)

# Suffixes tried, in order, after the literal specifier.
RESOLVE_EXTENSIONS: tuple[str, ...] = (
    "",
    ".ts",
    ".tsx",
    ".js",
    ".jsx",
    ".mts",
    ".cts",
    "/index.ts",
    "/index.js",
)

# ESM-style TypeScript imports name the emitted ``.js`` file.
_EMITTED_EXTENSIONS: tuple[str, ...] = (".js", ".jsx", ".mjs", ".cjs")

NODE_BUILTINS: frozenset[str] = frozenset(
    {
        "assert", "async_hooks", "buffer", "child_process", "cluster",
        "console", "constants", "crypto", "dgram", "diagnostics_channel",
        "dns", "domain", "events", "fs", "http", "http2", "https",
        "inspector", "module", "net", "os", "path", "perf_hooks", "process",
        "punycode", "querystring", "readline", "repl", "stream",
        "string_decoder", "sys", "timers", "tls", "trace_events", "tty",
        "url", "util", "v8", "vm", "wasi", "worker_threads", "zlib",
    }
)

# npm package names: optional scope, lowercase-ish, no whitespace.
_PACKAGE_NAME = re.compile(r"^(@[a-z0-9][\w.~-]*/)?[a-z0-9~][\w.~-]*(/[^\s]*)?$", re.IGNORECASE)

# String literals are matched first so "@/*" patterns survive comment stripping.
_JSONC_TOKEN = re.compile(r'("(?:\\.|[^"\\])*")|//[^\n]*|/\*.*?\*/', re.DOTALL)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


class SpecifierKind(str, enum.Enum):
    """Classification of an import specifier."""

    RELATIVE = "relative"
    ALIASED = "aliased"
    BUILTIN = "builtin"
    PACKAGE = "package"
    NON_PATH = "non_path"


@dataclass(frozen=True)
class AliasRule:
    """One ``compilerOptions.paths`` entry.

    Attributes:
        prefix: Pattern text before ``*`` (the whole pattern when exact).
        suffix: Pattern text after ``*``.
        wildcard: Whether the pattern contains ``*``.
        targets: Replacement paths relative to the project root, each
            possibly containing ``*``.
    """

    prefix: str
    suffix: str
    wildcard: bool
    targets: tuple[str, ...]

    def match(self, specifier: str) -> Optional[str]:
        """Return the text captured by ``*`` (``""`` for exact patterns)."""
        if not self.wildcard:
            return "" if specifier == self.prefix else None
        if (
            specifier.startswith(self.prefix)
            and specifier.endswith(self.suffix)
            and len(specifier) >= len(self.prefix) + len(self.suffix)
        ):
            return specifier[len(self.prefix) : len(specifier) - len(self.suffix)]
        return None


@dataclass(frozen=True)
class AliasTable:
    """Alias rules loaded from one project's config file."""

    rules: tuple[AliasRule, ...] = ()
    source: Optional[str] = None

    def matches(self, specifier: str) -> bool:
        return any(rule.match(specifier) is not None for rule in self.rules)

    def candidates(self, specifier: str) -> list[str]:
        """Return root-relative paths *specifier* may refer to."""
        found: list[str] = []
        for rule in self.rules:
            captured = rule.match(specifier)
            if captured is None:
                continue
            for target in rule.targets:
                found.append(target.replace("*", captured, 1))
        return found


def classify_specifier(specifier: str, aliases: Optional[AliasTable] = None) -> SpecifierKind:
    """Classify *specifier* as relative, aliased, built-in, package or non-path.

    Args:
        specifier: The import string as written in the source.
        aliases: Alias table of the importing project, if any.

    Returns:
        The :class:`SpecifierKind` of the specifier.
    """
    if specifier.startswith((".", "/")):
        return SpecifierKind.RELATIVE
    if aliases is not None and aliases.matches(specifier):
        return SpecifierKind.ALIASED
    if specifier.startswith("node:") or specifier.split("/", 1)[0] in NODE_BUILTINS:
        return SpecifierKind.BUILTIN
    if not specifier or not _PACKAGE_NAME.match(specifier):
        return SpecifierKind.NON_PATH
    return SpecifierKind.PACKAGE


def is_expected_external(kind: SpecifierKind) -> bool:
    """Return ``True`` for specifiers that are never worth a warning."""
    return kind not in (SpecifierKind.RELATIVE, SpecifierKind.ALIASED)


def _parse_config_text(text: str) -> dict:
    """Parse a tsconfig-style document, tolerating comments and trailing commas."""
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        cleaned = _JSONC_TOKEN.sub(lambda m: m.group(1) or "", text)
        cleaned = _TRAILING_COMMA.sub(r"\1", cleaned)
        return json.loads(cleaned)


def load_alias_table(project_root: pathlib.Path, config_files: Optional[list[str]] = None) -> AliasTable:
    """Read path aliases from the first config file found under *project_root*.

    A config file that cannot be parsed is logged and yields an empty
    table; it never aborts the build.

    Args:
        project_root: Directory holding ``tsconfig.json`` / ``jsconfig.json``.
        config_files: Config file names to try, in order.  Defaults to
            :pyattr:`archgraph.config.Settings.alias_config_files`.

    Returns:
        The loaded :class:`AliasTable` (possibly empty).
    """
    for name in config_files or settings.alias_config_files:
        config_path = project_root / name
        if not config_path.is_file():
            continue

        try:
            data = _parse_config_text(config_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("alias_config_invalid", path=str(config_path), error=str(exc))
            return AliasTable(source=str(config_path))

        options = data.get("compilerOptions") if isinstance(data, dict) else None
        if not isinstance(options, dict):
            return AliasTable(source=str(config_path))

        base_url = str(options.get("baseUrl") or ".")
        paths = options.get("paths") or {}
        if not isinstance(paths, dict):
            logger.warning("alias_config_invalid", path=str(config_path), error="paths is not an object")
            return AliasTable(source=str(config_path))

        rules: list[AliasRule] = []
        for pattern, targets in paths.items():
            if isinstance(targets, str):
                targets = [targets]
            if not isinstance(targets, list):
                continue
            prefix, star, suffix = str(pattern).partition("*")
            rules.append(
                AliasRule(
                    prefix=prefix,
                    suffix=suffix,
                    wildcard=bool(star),
                    targets=tuple(
                        posixpath.normpath(posixpath.join(base_url, str(target))) for target in targets
                    ),
                )
            )

        logger.debug("alias_config_loaded", path=str(config_path), rules=len(rules))
        return AliasTable(rules=tuple(rules), source=str(config_path))

    return AliasTable()


@dataclass
class ImportResolver:
    """Resolves import specifiers for one analysis session.

    Usage::

        resolver = ImportResolver()
        target = resolver.resolve("src/app.ts", "./utils", known_paths, project_root)

    Attributes:
        classifier: Predicate used to classify specifiers; replaceable so
            the heuristics can be exercised or swapped independently.
        config_files: Alias config file names searched per project root.
    """

    classifier: Callable[[str, Optional[AliasTable]], SpecifierKind] = classify_specifier
    config_files: Optional[list[str]] = None
    _alias_cache: dict[str, AliasTable] = field(default_factory=dict, init=False, repr=False)

    # ------------------------------------------------------------------
    # Alias cache
    # ------------------------------------------------------------------

    def aliases_for(self, project_root: Optional[str | pathlib.Path]) -> Optional[AliasTable]:
        """Return the (cached) alias table of *project_root*."""
        if project_root is None:
            return None
        key = str(pathlib.Path(project_root).resolve())
        table = self._alias_cache.get(key)
        if table is None:
            table = load_alias_table(pathlib.Path(key), self.config_files)
            self._alias_cache[key] = table
        return table

    def clear_cache(self) -> None:
        """Forget every loaded alias table."""
        self._alias_cache.clear()

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def classify(self, specifier: str, project_root: Optional[str | pathlib.Path] = None) -> SpecifierKind:
        """Classify *specifier* with the session's predicate and aliases."""
        return self.classifier(specifier, self.aliases_for(project_root))

    def resolve(
        self,
        from_path: str,
        specifier: str,
        known_paths: Collection[str],
        project_root: Optional[str | pathlib.Path] = None,
    ) -> Optional[str]:
        """Resolve *specifier* imported by *from_path* to a known file path.

        Args:
            from_path: Path of the importing file.
            specifier: The import string.
            known_paths: Paths of every file in the build.
            project_root: Project root used to locate alias config.

        Returns:
            The matching path from *known_paths*, or ``None`` when the
            specifier is external or cannot be found.
        """
        if specifier.startswith((".", "/")):
            base = posixpath.normpath(posixpath.join(posixpath.dirname(from_path), specifier))
            return self._match_known(base, known_paths)

        aliases = self.aliases_for(project_root)
        if aliases is None or not aliases.rules:
            return None

        root_prefix = ""
        if posixpath.isabs(from_path) and project_root is not None:
            root_prefix = pathlib.Path(project_root).resolve().as_posix()

        for candidate in aliases.candidates(specifier):
            base = posixpath.normpath(posixpath.join(root_prefix, candidate)) if root_prefix else candidate
            resolved = self._match_known(base, known_paths)
            if resolved is not None:
                return resolved
        return None

    @staticmethod
    def _match_known(base: str, known_paths: Collection[str]) -> Optional[str]:
        for suffix in RESOLVE_EXTENSIONS:
            candidate = base + suffix
            if candidate in known_paths:
                return candidate

        stem, ext = posixpath.splitext(base)
        if ext in _EMITTED_EXTENSIONS:
            for suffix in RESOLVE_EXTENSIONS[1:]:
                candidate = stem + suffix
                if candidate in known_paths:
                    return candidate
        return None
