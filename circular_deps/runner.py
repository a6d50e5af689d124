"""Check orchestrator: discover -> analyze -> encode -> compare -> exit status."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from circular_deps.analysis import (
    Analyzer,
    CycleSearch,
    GoldenFormatError,
    compare_goldens,
    encode_golden,
    read_golden,
    write_golden,
)
from circular_deps.analysis.golden import to_relative_path
from circular_deps.config import CircularDepsConfig
from circular_deps.discovery import discover_files
from circular_deps.models import CycleReport, ReferenceChain

logger = logging.getLogger(__name__)


def analyze(config: CircularDepsConfig, analyzer: Analyzer | None = None) -> CycleReport:
    """Find all cycles between the configured files."""
    if analyzer is None:
        analyzer = Analyzer(config.create_resolver())

    files = discover_files(config.glob, exclude=config.exclude, skip_dirs=config.skip_dirs)
    analyzer.prefetch(files, jobs=config.jobs)

    search = CycleSearch()
    cycles: list[ReferenceChain[Path]] = []
    for file_path in files:
        cycles.extend(analyzer.find_cycles(file_path, search))

    logger.debug("Found %d cycle(s) in %d file(s)", len(cycles), len(files))
    return CycleReport(
        files=files,
        cycles=cycles,
        golden=encode_golden(cycles, config.base_dir),
        unresolved_modules=set(analyzer.unresolved_modules),
        unresolved_files=dict(analyzer.unresolved_files),
        parse_failures=dict(analyzer.parse_failures),
    )


def run(config: CircularDepsConfig, approve: bool = False, print_warnings: bool = False) -> int:
    """Run the check (or approval) and return the process exit status."""
    report = analyze(config)
    actual = report.golden
    golden_file = config.golden_file

    _info(click.style("   Current number of cycles: ", fg="green")
          + click.style(str(len(actual)), fg="yellow"))

    if approve:
        write_golden(golden_file, actual)
        _info(click.style("✅  Updated golden file.", fg="green"))
        return 0

    if not golden_file.exists():
        _error(click.style(f"❌  Could not find golden file: {golden_file}", fg="red"))
        return 1

    _print_warnings(report, config.base_dir, print_warnings)

    try:
        expected = read_golden(golden_file)
    except (OSError, GoldenFormatError) as e:
        _error(click.style(f"❌  Could not read golden file: {e}", fg="red"))
        return 1

    diff = compare_goldens(actual, expected)
    if diff.is_matching:
        _info(click.style("✅  Golden matches current circular dependencies.", fg="green"))
        return 0

    _error(click.style("❌  Golden does not match current circular dependencies.", fg="red"))
    if diff.new:
        _error(click.style("   New circular dependencies which are not allowed:", fg="yellow"))
        for chain in diff.new:
            _error(f"     • {format_chain(chain)}")
        _error("")
    if diff.fixed:
        _error(click.style(
            "   Fixed circular dependencies that need to be removed from the golden:", fg="yellow"))
        for chain in diff.fixed:
            _error(f"     • {format_chain(chain)}")
        _error("")

    _info(click.style(
        f"   Total: {len(diff.new)} new cycle(s), {len(diff.fixed)} fixed cycle(s).\n", fg="yellow"))
    _info(click.style(f"   {_approve_hint(config)}", fg="yellow"))
    return 1


def format_chain(chain: ReferenceChain[str]) -> str:
    return " → ".join(chain)


def _approve_hint(config: CircularDepsConfig) -> str:
    if config.approve_command:
        return f"Please approve the new golden with: {config.approve_command}"
    config_arg = to_relative_path(Path.cwd(), config.config_path) if config.config_path else "<config>"
    return (
        "Please update the golden. The following command can be run: "
        f"circular-deps approve --config {config_arg}"
    )


def _print_warnings(report: CycleReport, base_dir: Path, itemize: bool) -> None:
    # Only itemized with --warnings.
    if not report.warnings_count:
        return
    if not itemize:
        unresolved = len(report.unresolved_modules) + len(report.unresolved_files)
        _info(click.style(f"⚠  {unresolved} imports could not be resolved.", fg="yellow"))
        if report.parse_failures:
            _info(click.style(
                f"⚠  {len(report.parse_failures)} files could not be scanned.", fg="yellow"))
        _info(click.style(
            '   Please rerun with "--warnings" to inspect unresolved imports.', fg="yellow"))
        return

    if report.unresolved_modules or report.unresolved_files:
        _info(click.style("⚠  The following imports could not be resolved:", fg="yellow"))
        for specifier in sorted(report.unresolved_modules):
            _info(f"  • {specifier}")
        for source in sorted(report.unresolved_files):
            _info(f"  • {to_relative_path(base_dir, source)}")
            for specifier in sorted(report.unresolved_files[source]):
                _info(f"      {specifier}")
    if report.parse_failures:
        _info(click.style("⚠  The following files could not be scanned:", fg="yellow"))
        for source in sorted(report.parse_failures):
            _info(f"  • {to_relative_path(base_dir, source)}: {report.parse_failures[source]}")


def _info(message: str) -> None:
    click.echo(message)


def _error(message: str) -> None:
    click.echo(message, err=True)
