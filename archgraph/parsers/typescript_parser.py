"""Tree-sitter based extractor for TypeScript, TSX and JavaScript files.

Extracts, per file:

- import specifiers (static, type-only, re-exports, ``import()`` and
  ``require()``);
- ``implements`` clauses with the import path of each interface;
- JSX usages of imported components, numbered in document order;
- interface, type alias, class and enum declarations together with the
  type names they extend, implement and reference.
"""

from __future__ import annotations

import pathlib
from typing import Iterator, Optional

import structlog
import tree_sitter_typescript as tstypescript
from tree_sitter import Language, Node, Parser

from archgraph.core.hierarchy import detect_hierarchy
from archgraph.models.graph import AbstractKind
from archgraph.models.parsed import (
    ImplementInfo,
    ImportInfo,
    ParsedFile,
    RenderInfo,
    TypeDefinition,
)
from archgraph.parsers.base import BaseLanguageParser

logger = structlog.get_logger(__name__)

TS_LANGUAGE = Language(tstypescript.language_typescript())
TSX_LANGUAGE = Language(tstypescript.language_tsx())

_CLASS_NODES = ("class_declaration", "abstract_class_declaration")


class TypeScriptParser(BaseLanguageParser):
    """Extracts dependency facts from ``.ts``/``.mts``/``.cts`` files.

    Args:
        repo_root: Repository root for relative path computation.
    """

    language: Language = TS_LANGUAGE

    def __init__(self, repo_root: pathlib.Path) -> None:
        super().__init__(repo_root)
        self._parser = Parser(self.language)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def parse_file(self, file_path: pathlib.Path, source: bytes) -> ParsedFile:
        """Parse a source file and return its extraction facts.

        Args:
            file_path: Absolute path to the file.
            source: Raw bytes of the file.

        Returns:
            :class:`ParsedFile` with a repo-relative ``path``.
        """
        rel_path = self._relative_path(file_path)
        tree = self._parser.parse(source)
        root = tree.root_node
        if root.has_error:
            logger.debug("syntax_errors", file=rel_path)

        symbol_imports = self._symbol_import_map(root)
        implements = self._extract_implements(root, symbol_imports)
        renders = self._extract_renders(root, symbol_imports)
        type_definitions = self._extract_type_definitions(root)

        return ParsedFile(
            path=rel_path,
            imports=self._extract_imports(root),
            implements=implements or None,
            renders=renders or None,
            hierarchy=detect_hierarchy(rel_path),
            type_definitions=type_definitions or None,
        )

    # ------------------------------------------------------------------
    # Imports
    # ------------------------------------------------------------------

    def _extract_imports(self, root: Node) -> list[ImportInfo]:
        """Collect every import specifier in the file, in document order."""
        imports: list[ImportInfo] = []
        for node in _walk(root):
            if node.type in ("import_statement", "export_statement"):
                specifier = self._source_specifier(node)
                if specifier:
                    imports.append(
                        ImportInfo(
                            import_path=specifier,
                            is_type_only=any(child.type == "type" for child in node.children),
                        )
                    )
            elif node.type == "call_expression":
                func = node.child_by_field_name("function")
                if func is None:
                    continue
                is_dynamic = func.type == "import"
                if not is_dynamic and not (func.type == "identifier" and self._node_text(func) == "require"):
                    continue
                specifier = self._first_string_argument(node)
                if specifier:
                    imports.append(ImportInfo(import_path=specifier, is_dynamic=is_dynamic))
        return imports

    def _source_specifier(self, node: Node) -> Optional[str]:
        source = node.child_by_field_name("source")
        if source is None:
            return None
        return self._strip_quotes(self._node_text(source)) or None

    def _first_string_argument(self, call: Node) -> Optional[str]:
        args = call.child_by_field_name("arguments")
        if args is None:
            return None
        for child in args.named_children:
            if child.type == "string":
                return self._strip_quotes(self._node_text(child)) or None
            if child.type == "template_string" and not any(
                grandchild.type == "template_substitution" for grandchild in child.named_children
            ):
                return self._strip_quotes(self._node_text(child)) or None
            return None
        return None

    def _symbol_import_map(self, root: Node) -> dict[str, str]:
        """Map every locally bound imported name to its import specifier.

        Covers default (``import A``), named (``import { A as B }``) and
        namespace (``import * as ns``) bindings.
        """
        mapping: dict[str, str] = {}
        for statement in root.children:
            if statement.type != "import_statement":
                continue
            specifier = self._source_specifier(statement)
            clause = next((c for c in statement.children if c.type == "import_clause"), None)
            if not specifier or clause is None:
                continue

            for child in clause.children:
                if child.type == "identifier":
                    mapping[self._node_text(child)] = specifier
                elif child.type == "named_imports":
                    for spec in child.named_children:
                        if spec.type != "import_specifier":
                            continue
                        local = spec.child_by_field_name("alias") or spec.child_by_field_name("name")
                        if local is not None:
                            mapping[self._node_text(local)] = specifier
                elif child.type == "namespace_import":
                    ident = next((c for c in child.children if c.type == "identifier"), None)
                    if ident is not None:
                        mapping[self._node_text(ident)] = specifier
        return mapping

    # ------------------------------------------------------------------
    # implements
    # ------------------------------------------------------------------

    def _extract_implements(self, root: Node, symbol_imports: dict[str, str]) -> list[ImplementInfo]:
        implementations: list[ImplementInfo] = []
        for node in _walk(root):
            if node.type not in _CLASS_NODES:
                continue
            name_node = node.child_by_field_name("name")
            if name_node is None:
                continue

            names = self._heritage_names(node, "implements_clause")
            if not names:
                continue

            interface_paths: dict[str, str] = {}
            for name, qualifier in names:
                import_path = symbol_imports.get(name) or symbol_imports.get(qualifier)
                if import_path:
                    interface_paths[name] = import_path

            implementations.append(
                ImplementInfo(
                    class_name=self._node_text(name_node),
                    interfaces=[name for name, _ in names],
                    interface_paths=interface_paths,
                )
            )
        return implementations

    def _heritage_names(self, class_node: Node, clause_type: str) -> list[tuple[str, str]]:
        """Return ``(name, qualifier)`` pairs listed in a class heritage clause."""
        heritage = next((c for c in class_node.children if c.type == "class_heritage"), None)
        if heritage is None:
            return []
        clause = next((c for c in heritage.children if c.type == clause_type), None)
        if clause is None:
            return []
        names = []
        for child in clause.named_children:
            resolved = self._type_name(child)
            if resolved is not None:
                names.append(resolved)
        return names

    def _type_name(self, node: Node) -> Optional[tuple[str, str]]:
        """Reduce a type expression to ``(name, qualifier)``.

        ``IStore<User>`` -> ``("IStore", "IStore")``;
        ``ns.IBar`` -> ``("IBar", "ns")``.
        """
        if node.type in ("type_identifier", "identifier"):
            text = self._node_text(node)
            return text, text
        if node.type == "generic_type":
            name = node.child_by_field_name("name")
            return self._type_name(name) if name is not None else None
        if node.type in ("nested_type_identifier", "member_expression"):
            name = node.child_by_field_name("name") or node.child_by_field_name("property")
            if name is None:
                return None
            qualifier = self._node_text(node).split(".", 1)[0]
            return self._node_text(name), qualifier
        return None

    # ------------------------------------------------------------------
    # JSX renders
    # ------------------------------------------------------------------

    def _extract_renders(self, root: Node, symbol_imports: dict[str, str]) -> list[RenderInfo]:
        """Collect imported components used in JSX, numbered in document order.

        Lowercase tags (HTML elements) and components defined in the file
        itself are not recorded.
        """
        renders: list[RenderInfo] = []
        for node in _walk(root):
            if node.type == "jsx_self_closing_element":
                name_node = node.child_by_field_name("name")
            elif node.type == "jsx_element":
                opening = node.child_by_field_name("open_tag") or next(
                    (c for c in node.children if c.type == "jsx_opening_element"), None
                )
                name_node = opening.child_by_field_name("name") if opening is not None else None
            else:
                continue
            if name_node is None:
                continue

            name = self._node_text(name_node)
            head = name.split(".", 1)[0]
            if not head or not head[0].isupper() or head not in symbol_imports:
                continue
            renders.append(
                RenderInfo(component_name=name, position=len(renders), is_namespaced="." in name)
            )
        return renders

    # ------------------------------------------------------------------
    # Type definitions
    # ------------------------------------------------------------------

    def _extract_type_definitions(self, root: Node) -> list[TypeDefinition]:
        definitions: list[TypeDefinition] = []
        for node in _walk(root):
            name_node = node.child_by_field_name("name") if node.type in _DECLARATION_KINDS else None
            if name_node is None:
                continue

            name = self._node_text(name_node)
            parent = node.parent
            exported = parent is not None and parent.type == "export_statement"
            kind = _DECLARATION_KINDS[node.type]

            extends: list[str] = []
            implements: list[str] = []
            references: list[str] = []

            if kind == AbstractKind.INTERFACE:
                clause = next((c for c in node.children if c.type == "extends_type_clause"), None)
                if clause is not None:
                    extends = [n for n, _ in filter(None, map(self._type_name, clause.named_children))]
                references = self._type_references(node.child_by_field_name("body"), name)
            elif kind == AbstractKind.TYPE:
                references = self._type_references(node.child_by_field_name("value"), name)
            elif kind == AbstractKind.CLASS:
                extends = [n for n, _ in self._heritage_names(node, "extends_clause")]
                implements = [n for n, _ in self._heritage_names(node, "implements_clause")]
                references = self._type_references(node.child_by_field_name("body"), name)

            definitions.append(
                TypeDefinition(
                    kind=kind,
                    name=name,
                    is_exported=exported,
                    extends=extends or None,
                    implements=implements or None,
                    references=references or None,
                )
            )
        return definitions

    def _type_references(self, node: Optional[Node], own_name: str) -> list[str]:
        """Return the distinct type names used under *node*, excluding *own_name*."""
        if node is None:
            return []
        seen: dict[str, None] = {}
        for child in _walk(node):
            if child.type == "type_identifier":
                text = self._node_text(child)
                if text != own_name:
                    seen.setdefault(text, None)
        return list(seen)


class TsxParser(TypeScriptParser):
    """Same extraction with the TSX grammar (``.tsx``, ``.jsx``, ``.js``)."""

    language: Language = TSX_LANGUAGE


_DECLARATION_KINDS: dict[str, AbstractKind] = {
    "interface_declaration": AbstractKind.INTERFACE,
    "type_alias_declaration": AbstractKind.TYPE,
    "class_declaration": AbstractKind.CLASS,
    "abstract_class_declaration": AbstractKind.CLASS,
    "enum_declaration": AbstractKind.ENUM,
}


def _walk(node: Node) -> Iterator[Node]:
    """Pre-order traversal with an explicit stack."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))
