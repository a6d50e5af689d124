"""Import scanner registry and dispatcher."""

from __future__ import annotations

from pathlib import Path

from circular_deps.scanner.base import BaseImportScanner
from circular_deps.scanner.js_scanner import JsImportScanner
from circular_deps.scanner.python_scanner import PythonImportScanner

_SCANNERS: list[BaseImportScanner] = [
    PythonImportScanner(),
    JsImportScanner(),
]


def get_scanner(file_path: Path) -> BaseImportScanner:
    for scanner in _SCANNERS:
        if scanner.handles(file_path):
            return scanner
    raise ValueError(f"No import scanner for file: {file_path}")


def is_scannable(file_path: Path) -> bool:
    return any(scanner.handles(file_path) for scanner in _SCANNERS)


def extract_specifiers(file_path: Path) -> list[str]:
    """Return the module specifiers referenced by a source file."""
    return get_scanner(file_path).scan_file(file_path)


__all__ = [
    "BaseImportScanner",
    "PythonImportScanner",
    "JsImportScanner",
    "get_scanner",
    "is_scannable",
    "extract_specifiers",
]
