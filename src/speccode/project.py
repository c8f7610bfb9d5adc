"""Load the project file that drives ``speccode update``.

The project file lives at the root of a working tree (default
``.speccode.yaml``) and maps organizations and applications to the
generators whose output the tree keeps checked in::

    code:
      acme:                              # organization
        widgets:                         # application
          version: "1.0.0"               # optional, defaults to "latest"
          generators:
            go_models: ./models          # generator: target
            ts_client:                   # one generator, several targets
              - src/client.ts
              - vendor/client.ts

``generators`` may also be written as a list of mappings::

          generators:
            - generator: go_models
              target: ./models

JSON is a subset of YAML, so a JSON project file works too. Target paths are
resolved relative to the directory holding the project file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Union

import yaml

from speccode.exceptions import ConfigError, ConfigurationMissingError
from speccode.models import LATEST_VERSION, GeneratorTarget, Project

DEFAULT_PROJECT_FILENAME = ".speccode.yaml"


def default_project_path() -> Path:
    """``.speccode.yaml`` in the current working directory."""
    return Path.cwd() / DEFAULT_PROJECT_FILENAME


def load_projects(path: Union[str, Path, None] = None) -> list[Project]:
    """Load and validate every project from a project file.

    Args:
        path: Project file path. Defaults to :func:`default_project_path`.

    Returns:
        Projects in file order, each with its generator targets in file order.

    Raises:
        ConfigurationMissingError: If the file does not exist.
        ConfigError: If the file cannot be read, is not valid YAML, or does
            not have the expected structure.
    """
    config_path = Path(path) if path is not None else default_project_path()
    if not config_path.is_file():
        raise ConfigurationMissingError(f"Project file not found: {config_path}")

    try:
        content = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"Cannot read project file {config_path}: {exc}") from exc

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in project file {config_path}: {exc}") from exc

    return parse_projects(data, base_dir=config_path.parent, source=str(config_path))


def parse_projects(data: Any, base_dir: Path, source: str = "<project file>") -> list[Project]:
    """Turn the decoded project document into :class:`Project` objects.

    Raises:
        ConfigError: On any structural problem; the message names the
            offending ``org/app`` entry.
    """
    if data is None:
        return []
    if not isinstance(data, dict):
        raise ConfigError(f"{source}: expected a mapping at the top level")

    code = data.get("code")
    if code is None:
        return []
    if not isinstance(code, dict):
        raise ConfigError(f"{source}: 'code' must map organizations to applications")

    projects: list[Project] = []
    for org, apps in code.items():
        if not isinstance(apps, dict):
            raise ConfigError(f"{source}: organization '{org}' must map applications to settings")
        for app, settings in apps.items():
            label = f"{org}/{app}"
            settings = settings or {}
            if not isinstance(settings, dict):
                raise ConfigError(f"{source}: settings for '{label}' must be a mapping")

            version = settings.get("version", LATEST_VERSION)
            if version is None or isinstance(version, (dict, list)):
                raise ConfigError(f"{source}: '{label}' has an invalid version: {version!r}")
            # YAML reads 1.10 as the float 1.1; only the quoted text is exact.
            if not isinstance(version, str):
                raise ConfigError(
                    f"{source}: version of '{label}' must be quoted "
                    f"(YAML read it as {type(version).__name__} {version!r})"
                )

            targets = _parse_generators(settings.get("generators"), base_dir, label, source)
            projects.append(
                Project(
                    organization=str(org),
                    application=str(app),
                    version=version,
                    generators=tuple(targets),
                )
            )
    return projects


def _parse_generators(
    raw: Any, base_dir: Path, label: str, source: str
) -> list[GeneratorTarget]:
    if raw is None:
        return []

    pairs: list[tuple[str, Any]] = []
    if isinstance(raw, dict):
        pairs = [(str(k), v) for k, v in raw.items()]
    elif isinstance(raw, list):
        for entry in raw:
            if not isinstance(entry, dict) or "generator" not in entry or "target" not in entry:
                raise ConfigError(
                    f"{source}: generators of '{label}' must be mappings "
                    "with 'generator' and 'target' keys"
                )
            pairs.append((str(entry["generator"]), entry["target"]))
    else:
        raise ConfigError(f"{source}: 'generators' of '{label}' must be a mapping or a list")

    targets: list[GeneratorTarget] = []
    for generator, target in pairs:
        paths = target if isinstance(target, list) else [target]
        for p in paths:
            if not isinstance(p, str) or not p.strip():
                raise ConfigError(
                    f"{source}: generator '{generator}' of '{label}' has an invalid target: {p!r}"
                )
            targets.append(
                GeneratorTarget(generator=generator, target=resolve_target(base_dir, p))
            )
    return targets


def resolve_target(base_dir: Path, target: str) -> str:
    """Resolve *target* against *base_dir*, keeping a trailing separator.

    The trailing separator is how a user marks a target that does not exist
    yet as a directory, so it has to survive path joining.
    """
    expanded = os.path.expanduser(target)
    resolved = str(base_dir / expanded) if not os.path.isabs(expanded) else expanded
    resolved = os.path.normpath(resolved)
    if target.endswith(("/", os.sep)):
        resolved += os.sep
    return resolved
