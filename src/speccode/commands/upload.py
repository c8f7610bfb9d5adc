"""Upload command -- publish a spec file as a new application version."""

from __future__ import annotations

from pathlib import Path

import typer

from speccode.output import error, format_response, success


def upload_command(
    ctx: typer.Context,
    org: str = typer.Argument(help="Organization key."),
    app: str = typer.Argument(help="Application key."),
    file: Path = typer.Argument(help="Spec file to upload."),
    version: str = typer.Option(..., "--version", help="Version label to publish."),
) -> None:
    """Upload a spec file.

    Validation errors reported by the service are printed one per line and
    the command exits with :data:`~speccode.exit_codes.EXIT_CONFLICT`.

    Example::

        speccode upload acme widgets api.json --version 1.2.0
    """
    from speccode.commands.common import open_api
    from speccode.exceptions import ConflictError

    with open_api(ctx) as api:
        try:
            created = api.upload(org, app, version, file)
        except ConflictError as exc:
            for message in exc.messages:
                error(message)
            raise typer.Exit(code=exc.exit_code) from None

    success(f"Uploaded {file} as {org}/{app}@{version}")
    format_response(created)
