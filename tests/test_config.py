"""Tests for YAML configuration loading."""

import logging
import os.path
from pathlib import Path

import pytest

from circular_deps.config import (
    DEFAULT_EXCLUDE,
    CircularDepsConfig,
    ConfigError,
    load_config,
)
from circular_deps.resolver import ExtensionDispatchResolver, JsModuleResolver, PythonModuleResolver


def write_config(tmp_path: Path, text: str) -> Path:
    config_path = tmp_path / "circular-deps.yaml"
    config_path.write_text(text, encoding="utf-8")
    return config_path


def test_minimal_config(tmp_path):
    config_path = write_config(tmp_path, (
        "base_dir: src\n"
        "golden_file: golden.json\n"
        "glob: src/**/*.ts\n"
    ))

    config = load_config(config_path)
    root = tmp_path.resolve()

    assert config.base_dir == root / "src"
    assert config.golden_file == root / "golden.json"
    assert config.glob == [(root / "src/**/*.ts").as_posix()]
    assert config.exclude == DEFAULT_EXCLUDE
    assert config.jobs == 1
    assert config.approve_command is None
    assert config.resolver.kind == "auto"
    assert config.config_path == config_path.resolve()


def test_full_config(tmp_path):
    config_path = write_config(tmp_path, (
        "base_dir: .\n"
        "golden_file: ci/golden.json\n"
        "glob:\n"
        "  - 'app/**/*.py'\n"
        "  - 'web/**/*.ts'\n"
        "exclude: ['**/generated/**']\n"
        "skip_dirs: [build]\n"
        "approve_command: make approve-cycles\n"
        "jobs: 4\n"
        "resolver:\n"
        "  kind: javascript\n"
        "  base_url: web\n"
        "  paths:\n"
        "    '@app/*': 'web/app/*'\n"
        "    '@lib/*': ['web/lib/*', 'vendor/*']\n"
        "  extensions: [ts, js]\n"
    ))

    config = load_config(config_path)
    root = tmp_path.resolve()

    assert config.base_dir == root
    assert len(config.glob) == 2
    assert config.exclude == ["**/generated/**"]
    assert config.skip_dirs == ["build"]
    assert config.approve_command == "make approve-cycles"
    assert config.jobs == 4
    assert config.resolver.kind == "javascript"
    assert config.resolver.base_url == root / "web"
    assert config.resolver.paths == {"@app/*": ["web/app/*"], "@lib/*": ["web/lib/*", "vendor/*"]}
    assert config.resolver.extensions == ["ts", "js"]
    assert isinstance(config.create_resolver(), JsModuleResolver)


def test_absolute_paths_are_kept(tmp_path):
    project = (tmp_path / "project").resolve()
    config = CircularDepsConfig.from_dict(
        {"base_dir": str(project), "golden_file": str(project / "g.json"), "glob": [f"{project}/*.py"]},
        config_dir=tmp_path / "elsewhere",
    )

    assert config.base_dir == project
    assert config.golden_file == project / "g.json"
    assert config.glob == [f"{project}/*.py"]


@pytest.mark.parametrize("missing", ["base_dir", "golden_file", "glob"])
def test_missing_required_key(tmp_path, missing):
    data = {"base_dir": ".", "golden_file": "golden.json", "glob": "*.py"}
    del data[missing]

    with pytest.raises(ConfigError, match=missing):
        CircularDepsConfig.from_dict(data, tmp_path)


def test_unknown_keys_are_ignored_with_warning(tmp_path, caplog):
    data = {"base_dir": ".", "golden_file": "golden.json", "glob": "*.py", "globs": "typo"}

    with caplog.at_level(logging.WARNING, logger="circular_deps.config"):
        CircularDepsConfig.from_dict(data, tmp_path)

    assert "globs" in caplog.text


def test_invalid_jobs(tmp_path):
    data = {"base_dir": ".", "golden_file": "golden.json", "glob": "*.py", "jobs": "many"}

    with pytest.raises(ConfigError, match="jobs"):
        CircularDepsConfig.from_dict(data, tmp_path)


def test_unknown_resolver_kind(tmp_path):
    data = {"base_dir": ".", "golden_file": "g.json", "glob": "*.py", "resolver": {"kind": "ruby"}}

    with pytest.raises(ConfigError, match="Unknown resolver kind"):
        CircularDepsConfig.from_dict(data, tmp_path)


def test_resolver_must_be_mapping(tmp_path):
    data = {"base_dir": ".", "golden_file": "g.json", "glob": "*.py", "resolver": "python"}

    with pytest.raises(ConfigError, match="mapping"):
        CircularDepsConfig.from_dict(data, tmp_path)


def test_invalid_yaml(tmp_path):
    config_path = write_config(tmp_path, "base_dir: [unclosed\n")

    with pytest.raises(ConfigError, match="Could not parse"):
        load_config(config_path)


def test_not_a_mapping(tmp_path):
    config_path = write_config(tmp_path, "- just\n- a list\n")

    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(config_path)


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Could not read"):
        load_config(tmp_path / "nope.yaml")


class TestCreateResolver:
    def _config(self, tmp_path, **resolver):
        data = {"base_dir": ".", "golden_file": "g.json", "glob": "*.py", "resolver": resolver}
        return CircularDepsConfig.from_dict(data, tmp_path)

    def test_auto(self, tmp_path):
        assert isinstance(self._config(tmp_path).create_resolver(), ExtensionDispatchResolver)

    def test_python(self, tmp_path):
        assert isinstance(self._config(tmp_path, kind="python").create_resolver(), PythonModuleResolver)

    def test_custom(self, tmp_path):
        config = self._config(tmp_path, kind="custom", function="os.path:join")

        assert config.create_resolver() is os.path.join

    def test_custom_requires_function(self, tmp_path):
        with pytest.raises(ConfigError, match="requires"):
            self._config(tmp_path, kind="custom").create_resolver()

    def test_custom_cannot_be_loaded(self, tmp_path):
        config = self._config(tmp_path, kind="custom", function="no_such_module_for_tests:resolve")

        with pytest.raises(ConfigError, match="Could not load resolver"):
            config.create_resolver()


def test_empty_exclude_and_skip_dirs_disable_defaults(tmp_path):
    data = {"base_dir": ".", "golden_file": "g.json", "glob": "*.ts", "exclude": [], "skip_dirs": []}

    config = CircularDepsConfig.from_dict(data, tmp_path)

    assert config.exclude == []
    assert config.skip_dirs == []


def test_null_exclude_disables_defaults(tmp_path):
    config_path = write_config(tmp_path, (
        "base_dir: .\n"
        "golden_file: g.json\n"
        "glob: '*.ts'\n"
        "exclude:\n"
    ))

    assert load_config(config_path).exclude == []
