"""Init command -- create a connection profile.

Implements ``speccode init``, the first-time setup step. It writes a
:class:`~speccode.models.Profile` naming the service URI and where the API
token comes from, and optionally makes it the default profile in the global
config. Tokens themselves are never written to the profile.
"""

from __future__ import annotations

from typing import Optional

import typer

from speccode.output import error, info, success, suggest


def init_command(
    ctx: typer.Context,
    name: str = typer.Option("default", "--name", "-n", help="Profile name."),
    api_uri: Optional[str] = typer.Option(
        None, "--api-uri", help="Service URI (default: the public service)."
    ),
    token_source: Optional[str] = typer.Option(
        None,
        "--token-source",
        help="Where the token comes from: env:VAR, file:/path, or prompt.",
    ),
    auth_scheme: str = typer.Option(
        "basic", "--auth-scheme", help="How the token is sent: basic or bearer."
    ),
    make_default: bool = typer.Option(
        True, "--default/--no-default", help="Make this the default profile."
    ),
) -> None:
    """Create or replace a connection profile.

    Raises:
        typer.Exit: With code 2 for an invalid name, token source or scheme,
            or when the profile exists and the user declines to replace it.

    Example::

        speccode init --token-source env:SPECCODE_TOKEN
        speccode init --name internal --api-uri https://specs.internal --token-source file:~/.token
    """
    from speccode.auth import AUTH_SCHEMES
    from speccode.commands.common import context_options
    from speccode.config import (
        DEFAULT_API_URI,
        load_global_config,
        profile_exists,
        save_global_config,
        save_profile,
    )
    from speccode.models import Profile

    if not name or "/" in name or name.startswith("."):
        error(f"Invalid profile name: {name!r}")
        raise typer.Exit(code=2)

    if token_source is not None and not (
        token_source.startswith(("env:", "file:")) or token_source == "prompt"
    ):
        error(f"Unknown token source: {token_source} (use env:VAR, file:/path or prompt)")
        raise typer.Exit(code=2)

    if auth_scheme.lower() not in AUTH_SCHEMES:
        error(f"Unknown auth scheme: {auth_scheme} (use {' or '.join(AUTH_SCHEMES)})")
        raise typer.Exit(code=2)

    force = context_options(ctx).get("force", False)
    if profile_exists(name) and not force:
        if not typer.confirm(f"Profile '{name}' exists. Replace it?"):
            info("Cancelled.")
            raise typer.Exit(code=2)

    profile = Profile(
        name=name,
        api_uri=api_uri or DEFAULT_API_URI,
        token_source=token_source,
        auth_scheme=auth_scheme.lower(),
    )
    save_profile(profile)
    success(f"Saved profile '{name}' ({profile.api_uri})")

    if make_default:
        config = load_global_config()
        config.default_profile = name
        save_global_config(config)
        info(f"Default profile: {name}")

    suggest("Try: speccode list organizations")
