"""Tests for import specifier resolution and classification."""

import json

import pytest
from structlog.testing import capture_logs

from archgraph.graph.resolver import (
    AliasTable,
    ImportResolver,
    SpecifierKind,
    classify_specifier,
    load_alias_table,
)


class TestRelativeResolution:
    """Tests for relative specifiers."""

    @pytest.mark.parametrize(
        "from_path,specifier,known,expected",
        [
            ("src/app.ts", "./utils", {"src/utils.ts"}, "src/utils.ts"),
            ("src/app.ts", "./Button", {"src/Button.tsx"}, "src/Button.tsx"),
            ("src/app.ts", "./components", {"src/components/index.ts"}, "src/components/index.ts"),
            ("src/a/b.ts", "../c", {"src/c.js"}, "src/c.js"),
            ("src/app.ts", "./utils.js", {"src/utils.ts"}, "src/utils.ts"),
            ("src/app.ts", "./data.json", {"src/data.json"}, "src/data.json"),
        ],
    )
    def test_resolves_known_file(self, resolver, from_path, specifier, known, expected):
        assert resolver.resolve(from_path, specifier, known) == expected

    def test_literal_match_wins_over_extensions(self, resolver):
        known = {"src/utils", "src/utils.ts"}

        assert resolver.resolve("src/app.ts", "./utils", known) == "src/utils"

    def test_unknown_target_returns_none(self, resolver):
        assert resolver.resolve("src/app.ts", "./missing", {"src/app.ts"}) is None

    def test_package_without_aliases_returns_none(self, resolver):
        assert resolver.resolve("src/app.ts", "react", {"src/react.ts"}) is None


class TestAliasResolution:
    """Tests for tsconfig path aliases."""

    def test_wildcard_alias(self, resolver, tmp_path):
        (tmp_path / "tsconfig.json").write_text(
            json.dumps({"compilerOptions": {"baseUrl": ".", "paths": {"@/*": ["src/*"]}}})
        )

        resolved = resolver.resolve("src/app.ts", "@/core/types", {"src/core/types.ts"}, tmp_path)

        assert resolved == "src/core/types.ts"

    def test_base_url_is_applied(self, resolver, tmp_path):
        (tmp_path / "tsconfig.json").write_text(
            json.dumps({"compilerOptions": {"baseUrl": "./src", "paths": {"~/*": ["*"]}}})
        )

        assert resolver.resolve("src/app.ts", "~/lib/db", {"src/lib/db.ts"}, tmp_path) == "src/lib/db.ts"

    def test_exact_alias(self, resolver, tmp_path):
        (tmp_path / "tsconfig.json").write_text(
            json.dumps({"compilerOptions": {"paths": {"config": ["src/config/index.ts"]}}})
        )

        assert resolver.resolve("src/app.ts", "config", {"src/config/index.ts"}, tmp_path) == "src/config/index.ts"

    def test_absolute_importer_paths(self, resolver, tmp_path):
        """Test alias targets are anchored at the root for absolute paths."""
        (tmp_path / "tsconfig.json").write_text(json.dumps({"compilerOptions": {"paths": {"@/*": ["src/*"]}}}))
        root = tmp_path.resolve().as_posix()
        known = {f"{root}/src/core/types.ts"}

        resolved = resolver.resolve(f"{root}/src/app.ts", "@/core/types", known, tmp_path)

        assert resolved == f"{root}/src/core/types.ts"

    def test_jsconfig_is_used_when_no_tsconfig(self, resolver, tmp_path):
        (tmp_path / "jsconfig.json").write_text(json.dumps({"compilerOptions": {"paths": {"#/*": ["lib/*"]}}}))

        assert resolver.resolve("lib/a.js", "#/b", {"lib/b.js"}, tmp_path) == "lib/b.js"

    def test_comments_and_trailing_commas_tolerated(self, tmp_path):
        (tmp_path / "tsconfig.json").write_text(
            "{\n"
            "  // editor settings\n"
            '  "compilerOptions": {\n'
            '    "paths": { "@/*": ["src/*"], },  /* aliases */\n'
            "  },\n"
            "}\n"
        )

        table = load_alias_table(tmp_path)

        assert table.candidates("@/x") == ["src/x"]

    def test_malformed_config_yields_empty_table(self, resolver, tmp_path):
        (tmp_path / "tsconfig.json").write_text("{ this is not json")

        with capture_logs() as logs:
            resolved = resolver.resolve("src/app.ts", "@/core/types", {"src/core/types.ts"}, tmp_path)

        assert resolved is None
        assert any(log["event"] == "alias_config_invalid" for log in logs)

    def test_alias_table_is_cached_per_root(self, resolver, tmp_path):
        config = tmp_path / "tsconfig.json"
        config.write_text(json.dumps({"compilerOptions": {"paths": {"@/*": ["src/*"]}}}))

        first = resolver.aliases_for(tmp_path)
        config.write_text(json.dumps({"compilerOptions": {"paths": {"~/*": ["src/*"]}}}))

        assert resolver.aliases_for(tmp_path) is first
        assert resolver.aliases_for(str(tmp_path)) is first

        resolver.clear_cache()
        assert resolver.aliases_for(tmp_path).matches("~/a")

    def test_caches_are_per_resolver(self, tmp_path):
        (tmp_path / "tsconfig.json").write_text(json.dumps({"compilerOptions": {"paths": {"@/*": ["src/*"]}}}))

        assert ImportResolver().aliases_for(tmp_path) is not ImportResolver().aliases_for(tmp_path)


class TestClassification:
    """Tests for classify_specifier."""

    @pytest.mark.parametrize(
        "specifier,expected",
        [
            ("./utils", SpecifierKind.RELATIVE),
            ("../a/b", SpecifierKind.RELATIVE),
            ("/abs/path", SpecifierKind.RELATIVE),
            ("fs", SpecifierKind.BUILTIN),
            ("fs/promises", SpecifierKind.BUILTIN),
            ("node:path", SpecifierKind.BUILTIN),
            ("react", SpecifierKind.PACKAGE),
            ("@scope/pkg/sub", SpecifierKind.PACKAGE),
            ("lodash.merge", SpecifierKind.PACKAGE),
            ("", SpecifierKind.NON_PATH),
            ("hello world", SpecifierKind.NON_PATH),
            ("@/core", SpecifierKind.NON_PATH),
        ],
    )
    def test_without_aliases(self, specifier, expected):
        assert classify_specifier(specifier) == expected

    def test_alias_match_is_aliased(self, tmp_path):
        (tmp_path / "tsconfig.json").write_text(json.dumps({"compilerOptions": {"paths": {"@/*": ["src/*"]}}}))
        table = load_alias_table(tmp_path)

        assert classify_specifier("@/core", table) == SpecifierKind.ALIASED
        assert classify_specifier("@/core", AliasTable()) == SpecifierKind.NON_PATH

    def test_classifier_is_pluggable(self):
        resolver = ImportResolver(classifier=lambda spec, aliases: SpecifierKind.PACKAGE)

        assert resolver.classify("./anything") == SpecifierKind.PACKAGE
