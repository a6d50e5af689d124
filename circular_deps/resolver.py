"""Module resolvers: map a specifier found in a file to another project file.

A resolver is any callable ``(source_file, specifier) -> Path | None``.
``None`` marks the specifier as unresolved (third-party, generated or
missing), which the analyzer records as a warning.
"""

from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Callable, Iterable

from circular_deps.scanner import is_scannable

logger = logging.getLogger(__name__)

ModuleResolver = Callable[[Path, str], "Path | None"]

DEFAULT_JS_EXTENSIONS = ("ts", "tsx", "js", "jsx", "mjs", "d.ts")
PYTHON_SUFFIXES = (".py", ".pyi")


def _is_within(path: Path, root: Path | None) -> bool:
    if root is None:
        return True
    try:
        path.relative_to(root)
        return True
    except ValueError:
        return False


class PythonModuleResolver:
    """Resolve dotted and relative Python module specifiers to files."""

    def __init__(self, roots: Iterable[Path], project_root: Path | None = None):
        self.roots = [Path(r).resolve() for r in roots]
        self.project_root = project_root.resolve() if project_root else None

    def __call__(self, source_file: Path, specifier: str) -> Path | None:
        if specifier.startswith("."):
            level = len(specifier) - len(specifier.lstrip("."))
            base = source_file.parent
            for _ in range(level - 1):
                base = base.parent
            parts = [p for p in specifier[level:].split(".") if p]
            return self._find(source_file, [base], parts, allow_package=True)
        return self._find(source_file, self.roots, specifier.split("."), allow_package=False)

    def _find(
        self,
        source_file: Path,
        bases: list[Path],
        parts: list[str],
        allow_package: bool,
    ) -> Path | None:
        # The last name of `from pkg import name` may be an attribute, so
        # fall back one level to the containing module.
        candidates = [parts]
        if parts and (len(parts) > 1 or allow_package):
            candidates.append(parts[:-1])

        for index, names in enumerate(candidates):
            for base in bases:
                found = self._module_file(base, names)
                if found is None or not _is_within(found, self.project_root):
                    continue
                if index > 0 and found == source_file.resolve():
                    return None
                return found
        return None

    @staticmethod
    def _module_file(base: Path, names: list[str]) -> Path | None:
        target = base.joinpath(*names)
        if names:
            for suffix in PYTHON_SUFFIXES:
                module = target.parent / (target.name + suffix)
                if module.is_file():
                    return module.resolve()
        for suffix in PYTHON_SUFFIXES:
            package = target / ("__init__" + suffix)
            if package.is_file():
                return package.resolve()
        return None


class JsModuleResolver:
    """Resolve relative, aliased and base-url JS/TS specifiers to files."""

    def __init__(
        self,
        project_root: Path | None = None,
        base_url: Path | None = None,
        paths: dict[str, list[str]] | None = None,
        extensions: Iterable[str] = DEFAULT_JS_EXTENSIONS,
    ):
        self.project_root = project_root.resolve() if project_root else None
        self.base_url = base_url.resolve() if base_url else self.project_root
        self.paths = paths or {}
        self.extensions = [ext.lstrip(".") for ext in extensions]

    def __call__(self, source_file: Path, specifier: str) -> Path | None:
        if specifier.startswith("."):
            return self._resolve_file(source_file.parent / specifier)

        for target in self._alias_targets(specifier):
            resolved = self._resolve_file(target)
            if resolved is not None:
                return resolved

        if self.base_url is not None:
            return self._resolve_file(self.base_url / specifier)
        return None

    def _alias_targets(self, specifier: str) -> list[Path]:
        base = self.base_url or Path.cwd()
        targets: list[Path] = []
        for pattern, replacements in self.paths.items():
            if "*" in pattern:
                prefix, _, suffix = pattern.partition("*")
                if not (specifier.startswith(prefix) and specifier.endswith(suffix)):
                    continue
                if len(specifier) < len(prefix) + len(suffix):
                    continue
                matched = specifier[len(prefix):len(specifier) - len(suffix)]
                targets.extend(base / r.replace("*", matched) for r in replacements)
            elif pattern == specifier:
                targets.extend(base / r for r in replacements)
        return targets

    def _resolve_file(self, full_path: Path) -> Path | None:
        if full_path.is_file() and is_scannable(full_path):
            return self._accept(full_path)
        for ext in self.extensions:
            candidate = full_path.parent / f"{full_path.name}.{ext}"
            if candidate.is_file() and is_scannable(candidate):
                return self._accept(candidate)
        # Directories come last: a sibling source file wins over a folder.
        if full_path.is_dir():
            return self._resolve_file(full_path / "index")
        return None

    def _accept(self, path: Path) -> Path | None:
        resolved = path.resolve()
        if not _is_within(resolved, self.project_root):
            return None
        return resolved


class ExtensionDispatchResolver:
    """Pick the Python or JS resolver based on the importing file's suffix."""

    def __init__(self, python: ModuleResolver, javascript: ModuleResolver):
        self.python = python
        self.javascript = javascript

    def __call__(self, source_file: Path, specifier: str) -> Path | None:
        if source_file.suffix in PYTHON_SUFFIXES:
            return self.python(source_file, specifier)
        return self.javascript(source_file, specifier)


def load_resolver_function(reference: str) -> ModuleResolver:
    """Import a resolver given as ``package.module:callable``."""
    module_path, sep, attr = reference.partition(":")
    if not sep:
        module_path, _, attr = reference.rpartition(".")
    if not module_path or not attr:
        raise ValueError(f"Invalid resolver reference: {reference!r}")

    module = importlib.import_module(module_path)
    try:
        func = getattr(module, attr)
    except AttributeError:
        raise ValueError(f"Module {module_path!r} has no attribute {attr!r}") from None
    if not callable(func):
        raise ValueError(f"Resolver {reference!r} is not callable")
    logger.debug("Loaded custom resolver %s", reference)
    return func


__all__ = [
    "ModuleResolver",
    "PythonModuleResolver",
    "JsModuleResolver",
    "ExtensionDispatchResolver",
    "load_resolver_function",
]
