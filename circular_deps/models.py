"""Data models for the circular dependency check."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TypeVar, Union

T = TypeVar("T")

# [n0, n1, ..., nk] with n0 == nk. Path nodes during detection, str in goldens.
ReferenceChain = list[T]

# Canonical, sorted list of chains of baseline-relative paths.
Golden = list[list[str]]


@dataclass(frozen=True)
class Resolved:
    """A reference that maps to a file inside the project."""
    path: Path


@dataclass(frozen=True)
class Unresolved:
    """A reference that could not be mapped (third-party, generated, missing)."""
    specifier: str


ReferenceTarget = Union[Resolved, Unresolved]


@dataclass
class GoldenDiff:
    """Result of comparing the current golden against the approved one."""
    new: Golden = field(default_factory=list)
    fixed: Golden = field(default_factory=list)

    @property
    def is_matching(self) -> bool:
        return not self.new and not self.fixed


@dataclass
class CycleReport:
    """Result of one analysis pass over the configured file set."""
    files: list[Path] = field(default_factory=list)
    cycles: list[ReferenceChain[Path]] = field(default_factory=list)
    golden: Golden = field(default_factory=list)
    unresolved_modules: set[str] = field(default_factory=set)
    unresolved_files: dict[Path, list[str]] = field(default_factory=dict)
    parse_failures: dict[Path, str] = field(default_factory=dict)

    @property
    def warnings_count(self) -> int:
        return (
            len(self.unresolved_modules)
            + len(self.unresolved_files)
            + len(self.parse_failures)
        )
