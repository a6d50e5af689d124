"""JavaScript/TypeScript import scanner using tree-sitter."""

from __future__ import annotations

import threading
from pathlib import Path

from tree_sitter_language_pack import get_parser

from circular_deps.scanner.base import BaseImportScanner

# Suffix -> tree-sitter grammar. ".d.ts" and friends fall under ".ts".
_GRAMMARS = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

# import x from '...', import '...', import x = require('...'),
# export * from '...', export {a} from '...'
_REFERENCE_NODES = {"import_statement", "export_statement"}


class JsImportScanner(BaseImportScanner):
    extensions = tuple(_GRAMMARS)

    def __init__(self):
        # Parsers are not shared between prefetch threads.
        self._local = threading.local()

    def scan_source(self, source: str, file_path: Path) -> list[str]:
        source_bytes = source.encode("utf-8")
        tree = self._get_parser(_GRAMMARS[file_path.suffix]).parse(source_bytes)

        specifiers: list[str] = []
        stack = [tree.root_node]
        while stack:
            node = stack.pop()
            if node.type in _REFERENCE_NODES:
                specifier = self._module_source(node, source_bytes)
                if specifier:
                    specifiers.append(specifier)
                continue
            stack.extend(reversed(node.children))
        return specifiers

    def _module_source(self, node, source_bytes: bytes) -> str | None:
        """Module string of a statement, without quotes."""
        string_node = node.child_by_field_name("source")
        if string_node is None:
            for child in node.children:
                if child.type == "import_require_clause":
                    string_node = child.child_by_field_name("source")
                    break
        if string_node is None or string_node.type != "string":
            return None
        text = source_bytes[string_node.start_byte:string_node.end_byte].decode("utf-8", errors="replace")
        return text[1:-1]

    def _get_parser(self, grammar_name: str):
        cache = getattr(self._local, "parsers", None)
        if cache is None:
            cache = self._local.parsers = {}
        if grammar_name not in cache:
            cache[grammar_name] = get_parser(grammar_name)
        return cache[grammar_name]
