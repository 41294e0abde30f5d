"""Tests for the tree-sitter TypeScript/TSX extractor."""

from pathlib import Path

import pytest

from archgraph.models.graph import AbstractKind, HierarchyLevel
from archgraph.parsers.factory import ParserFactory
from archgraph.parsers.typescript_parser import TsxParser, TypeScriptParser


def _parse(parser_cls, root: Path, rel_path: str, source: str):
    target = root / rel_path
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(source, encoding="utf-8")
    return parser_cls(root).parse_file(target, source.encode("utf-8"))


class TestImports:
    """Tests for import extraction."""

    def test_all_import_forms(self, tmp_path):
        source = (
            "import { a } from './a';\n"
            "import type { T } from './types';\n"
            "import './side-effect';\n"
            "export { b } from './b';\n"
            "export * from './all';\n"
            "export async function load() {\n"
            "  const c = await import('./c');\n"
            "  return c;\n"
            "}\n"
            "const fs = require('fs');\n"
        )

        parsed = _parse(TypeScriptParser, tmp_path, "src/app/main.ts", source)

        assert [imp.import_path for imp in parsed.imports] == [
            "./a",
            "./types",
            "./side-effect",
            "./b",
            "./all",
            "./c",
            "fs",
        ]
        flags = {imp.import_path: (imp.is_type_only, imp.is_dynamic) for imp in parsed.imports}
        assert flags["./types"] == (True, False)
        assert flags["./a"] == (False, False)
        assert flags["./c"] == (False, True)
        assert flags["fs"] == (False, False)

    def test_path_and_hierarchy(self, tmp_path):
        parsed = _parse(TypeScriptParser, tmp_path, "src/auth/login.ts", "export const x = 1;\n")

        assert parsed.path == "src/auth/login.ts"
        assert parsed.hierarchy.level == HierarchyLevel.MODULE
        assert parsed.hierarchy.module == "auth"
        assert parsed.implements is None
        assert parsed.renders is None

    def test_syntax_errors_do_not_abort(self, tmp_path):
        parsed = _parse(TypeScriptParser, tmp_path, "src/broken.ts", "import { a } from './a';\nconst = ;\n")

        assert [imp.import_path for imp in parsed.imports] == ["./a"]


class TestImplements:
    """Tests for class implements extraction."""

    def test_imported_and_local_interfaces(self, tmp_path):
        source = (
            "import { IRepo } from './repo';\n"
            "import * as contracts from './contracts';\n"
            "interface ILocal {}\n"
            "export class Service implements IRepo, ILocal, contracts.IAudited {}\n"
        )

        parsed = _parse(TypeScriptParser, tmp_path, "src/service.ts", source)

        assert len(parsed.implements) == 1
        info = parsed.implements[0]
        assert info.class_name == "Service"
        assert info.interfaces == ["IRepo", "ILocal", "IAudited"]
        assert info.interface_paths == {"IRepo": "./repo", "IAudited": "./contracts"}

    def test_generic_interface_and_alias(self, tmp_path):
        source = "import { IStore as Store } from './store';\nclass Users implements Store<User> {}\n"

        parsed = _parse(TypeScriptParser, tmp_path, "src/users.ts", source)

        assert parsed.implements[0].interfaces == ["Store"]
        assert parsed.implements[0].interface_paths == {"Store": "./store"}


class TestRenders:
    """Tests for JSX render extraction."""

    def test_imported_components_in_document_order(self, tmp_path):
        source = (
            "import Header from './Header';\n"
            "import { Footer } from './Footer';\n"
            "import * as UI from './ui';\n"
            "const Local = () => <span />;\n"
            "export function App() {\n"
            "  return (\n"
            "    <div>\n"
            "      <Header />\n"
            "      <UI.Button>go</UI.Button>\n"
            "      <Local />\n"
            "      <Footer />\n"
            "    </div>\n"
            "  );\n"
            "}\n"
        )

        parsed = _parse(TsxParser, tmp_path, "src/App.tsx", source)

        assert [(r.component_name, r.position, r.is_namespaced) for r in parsed.renders] == [
            ("Header", 0, False),
            ("UI.Button", 1, True),
            ("Footer", 2, False),
        ]


class TestTypeDefinitions:
    """Tests for type definition extraction."""

    def test_declarations(self, tmp_path):
        source = (
            "export interface User extends Base {\n"
            "  role: Role;\n"
            "  manager?: User;\n"
            "}\n"
            "interface Base {}\n"
            "type Id = string | UserId;\n"
            "export enum Role { Admin, Guest }\n"
            "export abstract class Repo implements IRepo {\n"
            "  find(id: Id): User { throw new Error(String(id)); }\n"
            "}\n"
        )

        parsed = _parse(TypeScriptParser, tmp_path, "src/models.ts", source)
        by_name = {definition.name: definition for definition in parsed.type_definitions}

        assert set(by_name) == {"User", "Base", "Id", "Role", "Repo"}

        user = by_name["User"]
        assert user.kind == AbstractKind.INTERFACE
        assert user.is_exported
        assert user.extends == ["Base"]
        assert user.references == ["Role"]

        assert not by_name["Base"].is_exported
        assert by_name["Id"].kind == AbstractKind.TYPE
        assert by_name["Id"].references == ["UserId"]
        assert by_name["Role"].kind == AbstractKind.ENUM

        repo = by_name["Repo"]
        assert repo.kind == AbstractKind.CLASS
        assert repo.implements == ["IRepo"]
        assert set(repo.references) == {"Id", "User"}


class TestParserFactory:
    """Tests for ParserFactory."""

    def test_registry_and_caching(self, tmp_path):
        factory = ParserFactory(tmp_path)
        factory.register("typescript", TypeScriptParser)
        factory.register("tsx", TsxParser)

        parser = factory.get("tsx")

        assert isinstance(parser, TsxParser)
        assert factory.get("tsx") is parser
        assert factory.supported_grammars == ["tsx", "typescript"]

    @pytest.mark.parametrize("grammar", ["python", ""])
    def test_unknown_grammar(self, tmp_path, grammar):
        assert ParserFactory(tmp_path).get(grammar) is None
