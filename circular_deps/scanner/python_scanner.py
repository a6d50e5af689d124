"""Python import scanner using the ast module."""

from __future__ import annotations

import ast
from pathlib import Path

from circular_deps.scanner.base import BaseImportScanner

# Bodies that only run when called; imports in them are not import-time edges.
_DEFERRED_NODES = (ast.FunctionDef, ast.AsyncFunctionDef, ast.Lambda)


class PythonImportScanner(BaseImportScanner):
    extensions = (".py", ".pyi")

    def scan_source(self, source: str, file_path: Path) -> list[str]:
        tree = ast.parse(source, filename=str(file_path))
        specifiers: list[str] = []
        self._collect(tree, specifiers)
        return specifiers

    def _collect(self, node: ast.AST, specifiers: list[str]) -> None:
        for child in ast.iter_child_nodes(node):
            if isinstance(child, _DEFERRED_NODES):
                continue
            if isinstance(child, ast.Import):
                specifiers.extend(alias.name for alias in child.names)
            elif isinstance(child, ast.ImportFrom):
                specifiers.extend(self._from_import_specifiers(child))
            else:
                self._collect(child, specifiers)

    @staticmethod
    def _from_import_specifiers(node: ast.ImportFrom) -> list[str]:
        """`from a import b` yields `a.b`; the resolver decides if `b` is a module."""
        prefix = "." * node.level + (node.module or "")
        result: list[str] = []
        for alias in node.names:
            if alias.name == "*":
                result.append(prefix)
            elif prefix.endswith("."):
                result.append(prefix + alias.name)
            else:
                result.append(f"{prefix}.{alias.name}")
        return result
