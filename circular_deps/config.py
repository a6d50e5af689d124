"""Configuration for the circular dependency check, loaded from YAML."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from circular_deps.resolver import (
    DEFAULT_JS_EXTENSIONS,
    ExtensionDispatchResolver,
    JsModuleResolver,
    ModuleResolver,
    PythonModuleResolver,
    load_resolver_function,
)

logger = logging.getLogger(__name__)

RESOLVER_KINDS = ("auto", "python", "javascript", "custom")

DEFAULT_EXCLUDE = ["**/node_modules/**"]
DEFAULT_SKIP_DIRS = [
    "node_modules", ".git", "__pycache__", ".venv", "venv",
    ".tox", ".nox", ".eggs", "*.egg-info",
]


class ConfigError(ValueError):
    """Raised when the configuration file is missing, malformed or invalid."""


@dataclass
class ResolverConfig:
    """How module specifiers are mapped to project files."""
    kind: str = "auto"
    roots: list[Path] = field(default_factory=list)
    base_url: Path | None = None
    paths: dict[str, list[str]] = field(default_factory=dict)
    extensions: list[str] = field(default_factory=lambda: list(DEFAULT_JS_EXTENSIONS))
    function: str | None = None


@dataclass
class CircularDepsConfig:
    """Configuration for one circular dependency check."""
    base_dir: Path
    golden_file: Path
    glob: list[str]
    exclude: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))
    skip_dirs: list[str] = field(default_factory=lambda: list(DEFAULT_SKIP_DIRS))
    approve_command: str | None = None
    jobs: int = 1
    resolver: ResolverConfig = field(default_factory=ResolverConfig)
    config_path: Path | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any], config_dir: Path) -> CircularDepsConfig:
        """Create config from a mapping; relative paths are taken from config_dir."""
        missing = [key for key in ("base_dir", "golden_file", "glob") if not data.get(key)]
        if missing:
            raise ConfigError(f"Missing required configuration key(s): {', '.join(missing)}")

        unknown = set(data) - {f.name for f in fields(cls)}
        if unknown:
            logger.warning("Ignoring unknown configuration key(s): %s", ", ".join(sorted(unknown)))

        patterns = data["glob"]
        if isinstance(patterns, str):
            patterns = [patterns]

        try:
            jobs = int(data.get("jobs", 1))
        except (TypeError, ValueError):
            raise ConfigError(f"'jobs' must be an integer, got {data.get('jobs')!r}") from None

        base_dir = _resolve_path(config_dir, data["base_dir"])
        return cls(
            base_dir=base_dir,
            golden_file=_resolve_path(config_dir, data["golden_file"]),
            glob=[_resolve_pattern(config_dir, p) for p in patterns],
            exclude=list(data.get("exclude", DEFAULT_EXCLUDE) or []),
            skip_dirs=list(data.get("skip_dirs", DEFAULT_SKIP_DIRS) or []),
            approve_command=data.get("approve_command"),
            jobs=max(1, jobs),
            resolver=_resolver_from_dict(data.get("resolver") or {}, config_dir),
        )

    def create_resolver(self) -> ModuleResolver:
        """Build the module resolver described by the resolver section."""
        rc = self.resolver
        if rc.kind == "custom":
            if not rc.function:
                raise ConfigError("Resolver kind 'custom' requires 'resolver.function'")
            try:
                return load_resolver_function(rc.function)
            except (ImportError, ValueError) as e:
                raise ConfigError(f"Could not load resolver {rc.function!r}: {e}") from e

        python = PythonModuleResolver(rc.roots or [self.base_dir], project_root=self.base_dir)
        javascript = JsModuleResolver(
            project_root=self.base_dir,
            base_url=rc.base_url,
            paths=rc.paths,
            extensions=rc.extensions,
        )
        if rc.kind == "python":
            return python
        if rc.kind == "javascript":
            return javascript
        return ExtensionDispatchResolver(python=python, javascript=javascript)


def load_config(config_path: Path) -> CircularDepsConfig:
    """Load and validate a YAML configuration file."""
    config_path = Path(config_path).resolve()
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read configuration file at {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Could not parse configuration file at {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")

    config = CircularDepsConfig.from_dict(data, config_path.parent)
    config.config_path = config_path
    logger.debug("Loaded configuration from %s", config_path)
    return config


def _resolver_from_dict(data: dict[str, Any], config_dir: Path) -> ResolverConfig:
    if not isinstance(data, dict):
        raise ConfigError("'resolver' must be a mapping")
    kind = data.get("kind", "auto")
    if kind not in RESOLVER_KINDS:
        raise ConfigError(
            f"Unknown resolver kind {kind!r}; expected one of {', '.join(RESOLVER_KINDS)}"
        )
    paths = data.get("paths") or {}
    return ResolverConfig(
        kind=kind,
        roots=[_resolve_path(config_dir, r) for r in data.get("roots") or []],
        base_url=_resolve_path(config_dir, data["base_url"]) if data.get("base_url") else None,
        paths={k: [v] if isinstance(v, str) else list(v) for k, v in paths.items()},
        extensions=list(data.get("extensions") or DEFAULT_JS_EXTENSIONS),
        function=data.get("function"),
    )


def _resolve_path(config_dir: Path, value: str) -> Path:
    path = Path(value)
    if not path.is_absolute():
        path = config_dir / path
    return path.resolve()


def _resolve_pattern(config_dir: Path, pattern: str) -> str:
    if Path(pattern).is_absolute():
        return pattern
    return (config_dir / pattern).as_posix()
