"""Cycle analysis: reference graph, cycle search and golden handling."""

from circular_deps.analysis.analyzer import Analyzer, CycleSearch, cycle_key
from circular_deps.analysis.golden import (
    GoldenFormatError,
    compare_goldens,
    decode_golden,
    encode_golden,
    normalize_golden,
    read_golden,
    write_golden,
)

__all__ = [
    "Analyzer",
    "CycleSearch",
    "cycle_key",
    "GoldenFormatError",
    "compare_goldens",
    "decode_golden",
    "encode_golden",
    "normalize_golden",
    "read_golden",
    "write_golden",
]
