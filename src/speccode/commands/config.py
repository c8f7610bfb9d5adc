"""Config commands -- view and modify global configuration and profiles.

Provides the ``speccode config`` sub-command group for reading, updating and
resetting the user's :class:`~speccode.models.GlobalConfig`, plus listing and
deleting the saved connection profiles.
"""

from __future__ import annotations

import typer

from speccode.output import error, format_response, info, print_table, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show() -> None:
    """Show the global configuration and the config directory."""
    from speccode.config import get_config_dir, load_global_config

    config = load_global_config()
    info(f"Config directory: {get_config_dir()}")
    format_response(config.model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Config key (dot notation, e.g. 'output.format')."),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to the type of
    the current value (bool, int or str) and the result is validated before
    it is saved.

    Example::

        speccode config set default_profile internal
        speccode config set output.format json
    """
    from speccode.config import load_global_config, save_global_config
    from speccode.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")

    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    coerced: object = value
    if isinstance(current, bool):
        coerced = value.lower() in ("true", "1", "yes")
    elif isinstance(current, int):
        try:
            coerced = int(value)
        except ValueError:
            error(f"Expected integer for {key}, got: {value}")
            raise typer.Exit(code=2) from None
    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValueError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")


@config_app.command("reset")
def config_reset(ctx: typer.Context) -> None:
    """Reset the global configuration to defaults (profiles are kept)."""
    from speccode.commands.common import context_options
    from speccode.config import save_global_config
    from speccode.models import GlobalConfig

    if not context_options(ctx).get("force", False):
        if not typer.confirm("Reset all config to defaults?"):
            info("Cancelled.")
            raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")


@config_app.command("profiles")
def config_profiles() -> None:
    """List saved connection profiles."""
    from speccode.config import list_profiles, load_global_config, load_profile

    default = load_global_config().default_profile
    rows = []
    for name in list_profiles():
        profile = load_profile(name)
        rows.append(
            [
                name,
                profile.api_uri,
                profile.token_source or "",
                "*" if name == default else "",
            ]
        )
    print_table(["name", "api_uri", "token_source", "default"], rows, title="Profiles")


@config_app.command("delete-profile")
def config_delete_profile(
    ctx: typer.Context,
    name: str = typer.Argument(help="Profile to delete."),
) -> None:
    """Delete a saved profile."""
    from speccode.commands.common import context_options
    from speccode.config import delete_profile, load_global_config, save_global_config

    if not context_options(ctx).get("force", False):
        if not typer.confirm(f"Delete profile '{name}'?"):
            info("Cancelled.")
            raise typer.Exit()

    delete_profile(name)
    config = load_global_config()
    if config.default_profile == name:
        config.default_profile = None
        save_global_config(config)
    success(f"Deleted profile '{name}'.")
