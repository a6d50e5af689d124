"""File discovery: expand glob patterns into the set of files to check."""

from __future__ import annotations

import fnmatch
import glob
import logging
from pathlib import Path, PurePosixPath

logger = logging.getLogger(__name__)


def discover_files(
    patterns: list[str],
    exclude: list[str] | None = None,
    skip_dirs: list[str] | None = None,
) -> list[Path]:
    """Expand recursive glob patterns into a sorted list of absolute file paths.

    ``exclude`` entries are fnmatch patterns matched against the absolute
    posix path. ``skip_dirs`` entries are matched against each directory
    name below the pattern's fixed prefix, so a project that itself lives
    under e.g. ``build/`` is not skipped wholesale.
    """
    exclude = exclude or []
    skip_dirs = skip_dirs or []
    found: set[Path] = set()

    for pattern in patterns:
        root = _static_root(pattern)
        for match in glob.glob(pattern, recursive=True):
            path = Path(match).resolve()
            if not path.is_file():
                continue
            if _is_excluded(path, exclude) or _in_skipped_dir(Path(match), root, skip_dirs):
                continue
            found.add(path)

    files = sorted(found)
    logger.debug("Discovered %d file(s) for pattern(s) %s", len(files), patterns)
    return files


def _static_root(pattern: str) -> Path:
    """Leading part of a pattern that contains no glob magic."""
    parts: list[str] = []
    for part in PurePosixPath(pattern).parts:
        if glob.has_magic(part):
            break
        parts.append(part)
    return Path(*parts) if parts else Path(".")


def _is_excluded(path: Path, exclude: list[str]) -> bool:
    posix = path.as_posix()
    return any(fnmatch.fnmatch(posix, pattern) for pattern in exclude)


def _in_skipped_dir(match: Path, root: Path, skip_dirs: list[str]) -> bool:
    try:
        relative = match.relative_to(root)
    except ValueError:
        relative = match
    for part in relative.parent.parts:
        for pattern in skip_dirs:
            if fnmatch.fnmatch(part, pattern):
                return True
    return False
