"""Tree-sitter extractors for TypeScript/JavaScript and the parser factory."""

from archgraph.parsers.factory import ParserFactory
from archgraph.parsers.typescript_parser import TsxParser, TypeScriptParser

__all__ = ["ParserFactory", "TypeScriptParser", "TsxParser"]
