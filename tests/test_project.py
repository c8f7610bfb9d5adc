"""Tests for project file loading."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

from speccode.exceptions import ConfigError, ConfigurationMissingError
from speccode.models import GeneratorTarget
from speccode.project import (
    DEFAULT_PROJECT_FILENAME,
    load_projects,
    parse_projects,
    resolve_target,
)


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadProjects:
    def test_mapping_form(self, tmp_path: Path) -> None:
        config = _write(
            tmp_path / "repo" / ".speccode.yaml",
            """
code:
  acme:
    widgets:
      version: 1.0.0
      generators:
        go_models: ./models
        ts_client: src/client.ts
""",
        )

        projects = load_projects(config)

        assert len(projects) == 1
        project = projects[0]
        assert (project.organization, project.application, project.version) == (
            "acme",
            "widgets",
            "1.0.0",
        )
        assert project.generators == (
            GeneratorTarget(generator="go_models", target=str(tmp_path / "repo" / "models")),
            GeneratorTarget(generator="ts_client", target=str(tmp_path / "repo" / "src" / "client.ts")),
        )

    def test_list_form_and_multiple_targets(self, tmp_path: Path) -> None:
        config = _write(
            tmp_path / ".speccode.yaml",
            """
code:
  acme:
    widgets:
      generators:
        - generator: go_models
          target: models/
        - generator: ts_client
          target: [a.ts, b.ts]
""",
        )

        project = load_projects(config)[0]

        assert [g.generator for g in project.generators] == ["go_models", "ts_client", "ts_client"]
        assert project.generators[0].target == str(tmp_path / "models") + os.sep
        assert project.generators[2].target == str(tmp_path / "b.ts")

    def test_version_defaults_to_latest(self, tmp_path: Path) -> None:
        config = _write(tmp_path / "p.yaml", "code:\n  acme:\n    widgets:\n      generators: {}\n")
        assert load_projects(config)[0].version == "latest"

    def test_quoted_version_keeps_its_text(self, tmp_path: Path) -> None:
        config = _write(tmp_path / "p.yaml", 'code:\n  acme:\n    widgets:\n      version: "1.10"\n')
        assert load_projects(config)[0].version == "1.10"

    @pytest.mark.parametrize("raw", ["1.10", "2", "2024-01-01", "true"])
    def test_unquoted_non_string_version_is_rejected(self, tmp_path: Path, raw: str) -> None:
        config = _write(tmp_path / "p.yaml", f"code:\n  acme:\n    widgets:\n      version: {raw}\n")
        with pytest.raises(ConfigError, match="version of 'acme/widgets' must be quoted"):
            load_projects(config)

    def test_projects_keep_file_order(self, tmp_path: Path) -> None:
        config = _write(
            tmp_path / "p.yaml",
            "code:\n  zeta:\n    b: {}\n    a: {}\n  alpha:\n    c: {}\n",
        )
        assert [p.label for p in load_projects(config)] == ["zeta/b", "zeta/a", "alpha/c"]

    def test_json_is_accepted(self, tmp_path: Path) -> None:
        data = {"code": {"acme": {"widgets": {"version": "1.0.0", "generators": {"g": "out"}}}}}
        config = _write(tmp_path / "p.json", json.dumps(data))
        assert load_projects(config)[0].generators[0].generator == "g"

    def test_default_path_in_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)
        _write(tmp_path / DEFAULT_PROJECT_FILENAME, "code:\n  acme:\n    widgets: {}\n")
        assert load_projects()[0].label == "acme/widgets"

    def test_empty_file_has_no_projects(self, tmp_path: Path) -> None:
        assert load_projects(_write(tmp_path / "p.yaml", "")) == []

    def test_projects_are_frozen(self, tmp_path: Path) -> None:
        project = load_projects(_write(tmp_path / "p.yaml", "code:\n  acme:\n    widgets: {}\n"))[0]
        with pytest.raises(Exception):
            project.version = "2.0.0"  # type: ignore[misc]


class TestLoadErrors:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationMissingError, match="not found"):
            load_projects(tmp_path / "nope.yaml")

    def test_missing_file_is_a_config_error(self) -> None:
        assert issubclass(ConfigurationMissingError, ConfigError)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        config = _write(tmp_path / "p.yaml", "code: [unclosed\n")
        with pytest.raises(ConfigError, match="Invalid YAML"):
            load_projects(config)

    @pytest.mark.parametrize(
        "document,fragment",
        [
            (["a"], "top level"),
            ({"code": ["acme"]}, "'code'"),
            ({"code": {"acme": "widgets"}}, "organization 'acme'"),
            ({"code": {"acme": {"widgets": "1.0"}}}, "acme/widgets"),
            ({"code": {"acme": {"widgets": {"version": None}}}}, "invalid version"),
            ({"code": {"acme": {"widgets": {"generators": "go"}}}}, "mapping or a list"),
            ({"code": {"acme": {"widgets": {"generators": [{"generator": "g"}]}}}}, "'target'"),
            ({"code": {"acme": {"widgets": {"generators": {"g": ""}}}}}, "invalid target"),
            ({"code": {"acme": {"widgets": {"generators": {"g": 3}}}}}, "invalid target"),
        ],
    )
    def test_structural_errors(self, tmp_path: Path, document: object, fragment: str) -> None:
        with pytest.raises(ConfigError) as excinfo:
            parse_projects(document, base_dir=tmp_path)
        assert fragment in str(excinfo.value)


class TestResolveTarget:
    def test_relative_to_base(self, tmp_path: Path) -> None:
        assert resolve_target(tmp_path, "./a/../b/c.txt") == str(tmp_path / "b" / "c.txt")

    def test_absolute_kept(self, tmp_path: Path) -> None:
        absolute = str(tmp_path / "x")
        assert resolve_target(Path("/elsewhere"), absolute) == absolute

    def test_trailing_separator_kept(self, tmp_path: Path) -> None:
        assert resolve_target(tmp_path, "out/").endswith(os.sep)
