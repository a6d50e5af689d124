"""Dependency analyzer: builds per-file reference edges and enumerates cycles."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Iterator

from circular_deps.models import ReferenceChain, ReferenceTarget, Resolved, Unresolved
from circular_deps.resolver import ModuleResolver
from circular_deps.scanner import extract_specifiers

logger = logging.getLogger(__name__)

SpecifierExtractor = Callable[[Path], list[str]]


def canonical_path(path: Path | str) -> Path:
    return Path(path).resolve()


def cycle_key(chain: ReferenceChain) -> tuple[str, ...]:
    """Rotation-independent identity of a closed chain.

    The open cycle (closing node dropped) is rotated to start at its
    smallest member, compared as strings.
    """
    nodes = [str(n) for n in chain]
    if len(nodes) > 1 and nodes[0] == nodes[-1]:
        nodes = nodes[:-1]
    if not nodes:
        return ()
    start = min(range(len(nodes)), key=nodes.__getitem__)
    return tuple(nodes[start:] + nodes[:start])


@dataclass
class CycleSearch:
    """Traversal state shared by every find_cycles call of one run."""
    explored: set[Path] = field(default_factory=set)
    reported: set[tuple[str, ...]] = field(default_factory=set)

    def record(self, chain: ReferenceChain[Path]) -> bool:
        """Remember a cycle; False if it was already reported in another rotation."""
        key = cycle_key(chain)
        if key in self.reported:
            return False
        self.reported.add(key)
        return True


@dataclass
class _Frame:
    node: Path
    targets: Iterator[Path]
    low: int
    pending_mark: int


@dataclass
class _FileEdges:
    edges: list[ReferenceTarget]
    unresolved: list[str]
    failure: str | None = None


class Analyzer:
    """Build reference edges for source files and find cycles between them.

    Edges are computed once per file and cached. Unresolved specifiers are
    collected in ``unresolved_modules`` and ``unresolved_files``; files that
    fail to scan are collected in ``parse_failures``. None of these abort
    the analysis.
    """

    def __init__(
        self,
        resolve_module: ModuleResolver,
        extract: SpecifierExtractor = extract_specifiers,
    ):
        self.resolve_module = resolve_module
        self._extract = extract
        self._lock = threading.Lock()
        self._edge_cache: dict[Path, list[ReferenceTarget]] = {}
        self.unresolved_modules: set[str] = set()
        self.unresolved_files: dict[Path, list[str]] = {}
        self.parse_failures: dict[Path, str] = {}

    def get_edges(self, file_path: Path | str) -> list[ReferenceTarget]:
        """Return the outgoing references of a file, scanning it on first use."""
        key = canonical_path(file_path)
        with self._lock:
            cached = self._edge_cache.get(key)
        if cached is not None:
            return cached

        computed = self._compute_edges(key)
        with self._lock:
            if key in self._edge_cache:
                return self._edge_cache[key]
            self._edge_cache[key] = computed.edges
            if computed.failure is not None:
                self.parse_failures[key] = computed.failure
            if computed.unresolved:
                self.unresolved_modules.update(computed.unresolved)
                self.unresolved_files.setdefault(key, []).extend(computed.unresolved)
        return computed.edges

    def prefetch(self, files: Iterable[Path], jobs: int = 1) -> None:
        """Compute edges for many files up front, in parallel when jobs > 1."""
        unique = list(dict.fromkeys(canonical_path(f) for f in files))
        if jobs <= 1 or len(unique) <= 1:
            for path in unique:
                self.get_edges(path)
            return

        logger.debug("Scanning %d file(s) with %d worker(s)", len(unique), jobs)
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            # list() re-raises anything unexpected from a worker
            list(pool.map(self.get_edges, unique))

    def find_cycles(
        self,
        entry: Path | str,
        search: CycleSearch | None = None,
    ) -> list[ReferenceChain[Path]]:
        """Depth-first search for cycles reachable from entry.

        A node goes into ``search.explored`` once nothing reachable from it
        can close a cycle through a node still on the path below it; such
        nodes are never expanded again in this run. Nodes popped while part
        of an open cycle stay unmarked so other cycles through them are
        still found.
        """
        if search is None:
            search = CycleSearch()
        entry = canonical_path(entry)
        if entry in search.explored:
            return []

        cycles: list[ReferenceChain[Path]] = []
        path: list[Path] = []
        depth_of: dict[Path, int] = {}
        frames: list[_Frame] = []
        pending: list[Path] = []

        def push(node: Path) -> None:
            depth_of[node] = len(path)
            frames.append(_Frame(
                node=node,
                targets=iter(self._resolved_targets(node)),
                low=len(path),
                pending_mark=len(pending),
            ))
            path.append(node)

        push(entry)
        while frames:
            frame = frames[-1]
            target = next(frame.targets, None)
            if target is not None:
                depth = depth_of.get(target)
                if depth is not None:
                    frame.low = min(frame.low, depth)
                    chain = path[depth:] + [target]
                    if search.record(chain):
                        cycles.append(chain)
                elif target not in search.explored:
                    push(target)
                continue

            frames.pop()
            path.pop()
            del depth_of[frame.node]
            depth = len(path)
            if frame.low >= depth:
                search.explored.add(frame.node)
                search.explored.update(pending[frame.pending_mark:])
                del pending[frame.pending_mark:]
            else:
                pending.append(frame.node)
                parent = frames[-1]
                parent.low = min(parent.low, frame.low)

        return cycles

    def _resolved_targets(self, node: Path) -> list[Path]:
        targets = [t.path for t in self.get_edges(node) if isinstance(t, Resolved)]
        return list(dict.fromkeys(targets))

    def _compute_edges(self, file_path: Path) -> _FileEdges:
        try:
            specifiers = self._extract(file_path)
        except Exception as e:
            logger.debug("Could not scan %s: %s", file_path, e)
            return _FileEdges(edges=[], unresolved=[], failure=f"{type(e).__name__}: {e}")

        edges: list[ReferenceTarget] = []
        unresolved: list[str] = []
        for specifier in specifiers:
            target = self._resolve(file_path, specifier)
            if isinstance(target, Unresolved):
                unresolved.append(target.specifier)
            edges.append(target)
        return _FileEdges(edges=edges, unresolved=unresolved)

    def _resolve(self, source: Path, specifier: str) -> ReferenceTarget:
        try:
            resolved = self.resolve_module(source, specifier)
        except Exception:
            logger.debug("Resolver failed for %r in %s", specifier, source, exc_info=True)
            resolved = None
        if resolved is None:
            return Unresolved(specifier)
        return Resolved(canonical_path(resolved))
