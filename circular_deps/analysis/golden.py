"""Golden codec and differ: canonical, persisted form of the detected cycles."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Iterable

from circular_deps.analysis.analyzer import cycle_key
from circular_deps.models import Golden, GoldenDiff, ReferenceChain

logger = logging.getLogger(__name__)


class GoldenFormatError(ValueError):
    """Raised when a golden does not have the list-of-closed-chains shape."""


def to_relative_path(base_dir: Path, path: Path | str) -> str:
    """Path relative to base_dir with forward slashes, on every platform."""
    if not os.path.isabs(path):
        return str(path).replace("\\", "/")
    return os.path.relpath(path, base_dir).replace("\\", "/")


def normalize_chain(chain: ReferenceChain[str]) -> ReferenceChain[str]:
    """Rotate a closed chain to start at its smallest member and close it again."""
    key = cycle_key(chain)
    if not key:
        return []
    return list(key) + [key[0]]


def normalize_golden(golden: Iterable[ReferenceChain[str]]) -> Golden:
    """Canonicalize rotations, drop duplicates and sort."""
    unique = {tuple(normalize_chain(list(chain))) for chain in golden}
    return sorted(list(chain) for chain in unique)


def encode_golden(chains: Iterable[ReferenceChain], base_dir: Path) -> Golden:
    """Convert reference chains into a golden.

    Absolute paths become paths relative to base_dir. Cycles are rotated
    the same way no matter which node the analyzer visited first, and
    sorted so that discovery order never changes the golden.
    """
    relative = [[to_relative_path(base_dir, node) for node in chain] for chain in chains]
    return normalize_golden(relative)


def decode_golden(data: Any) -> list[ReferenceChain[str]]:
    """Validate a loaded golden and return it as reference chains of strings."""
    if not isinstance(data, list):
        raise GoldenFormatError("Golden must be a list of reference chains")
    chains: list[ReferenceChain[str]] = []
    for index, chain in enumerate(data):
        if not isinstance(chain, list) or not chain:
            raise GoldenFormatError(f"Entry {index} is not a non-empty list")
        if not all(isinstance(node, str) for node in chain):
            raise GoldenFormatError(f"Entry {index} contains a non-string path")
        if len(chain) < 2 or chain[0] != chain[-1]:
            raise GoldenFormatError(f"Entry {index} is not a closed chain: {chain}")
        chains.append(list(chain))
    return chains


def compare_goldens(actual: Golden, expected: Golden) -> GoldenDiff:
    """Split the difference between two goldens into new and fixed cycles.

    Chains are matched by their canonical rotation; order within each
    result follows the golden it came from.
    """
    actual_keys = {cycle_key(c) for c in actual}
    expected_keys = {cycle_key(c) for c in expected}
    return GoldenDiff(
        new=[c for c in actual if cycle_key(c) not in expected_keys],
        fixed=[c for c in expected if cycle_key(c) not in actual_keys],
    )


def read_golden(path: Path) -> Golden:
    """Load a golden file. Raises OSError or GoldenFormatError."""
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise GoldenFormatError(f"Golden file {path} is not valid JSON: {e}") from e
    return decode_golden(data)


def write_golden(path: Path, golden: Golden) -> None:
    """Write a golden atomically: temp file in the same directory, then replace."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    content = json.dumps(golden, indent=2) + "\n"

    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, path)
    except BaseException:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise
    logger.debug("Wrote %d cycle(s) to %s", len(golden), path)
