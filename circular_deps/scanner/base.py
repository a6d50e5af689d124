"""Abstract base import scanner."""

from __future__ import annotations

import abc
from pathlib import Path


class BaseImportScanner(abc.ABC):
    """Base class for language-specific import scanners."""

    extensions: tuple[str, ...]

    @abc.abstractmethod
    def scan_source(self, source: str, file_path: Path) -> list[str]:
        """Return the module specifiers referenced by the given source."""

    def scan_file(self, file_path: Path) -> list[str]:
        """Read a file and return its module specifiers, de-duplicated in order."""
        source = file_path.read_text(encoding="utf-8", errors="replace")
        return list(dict.fromkeys(self.scan_source(source, file_path)))

    def handles(self, file_path: Path) -> bool:
        return file_path.name.endswith(self.extensions)
