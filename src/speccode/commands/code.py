"""Code command -- fetch one generator's output for one application version.

Without ``--dir`` the generated files are printed to stdout (a ``==> name``
header goes to stderr before each file when there is more than one). With
``--dir`` the files are synchronized into that directory through the same
sync engine and apply step ``speccode update`` uses, so unchanged files are
left alone.
"""

from __future__ import annotations

import os
from typing import Optional

import typer

from speccode.output import info, print_data


def code_command(
    ctx: typer.Context,
    org: str = typer.Argument(help="Organization key."),
    app: str = typer.Argument(help="Application key."),
    version: str = typer.Argument(help="Version, or 'latest'."),
    generator: str = typer.Argument(help="Generator key."),
    directory: Optional[str] = typer.Option(
        None, "--dir", "-d", help="Write the files into this directory instead of printing them."
    ),
) -> None:
    """Fetch generated code.

    Example::

        speccode code acme widgets latest go_models
        speccode code acme widgets 1.0.0 go_models --dir ./models
    """
    from speccode.client import CodeProvider
    from speccode.commands.common import open_api
    from speccode.exceptions import ConflictError, NotFoundError, ServerError
    from speccode.models import FetchConflict, FetchNotFound, FileSet

    with open_api(ctx) as api:
        provider = CodeProvider(api)
        if directory is not None:
            _sync_into(ctx, provider, org, app, version, generator, directory)
            return
        result = provider.fetch(org, app, version, generator)

    if isinstance(result, FetchNotFound):
        raise NotFoundError(f"No {generator} code for {org}/{app}@{version}")
    if isinstance(result, FetchConflict):
        raise ConflictError(result.messages)
    if not isinstance(result, FileSet):
        raise ServerError(result.describe(), status_code=result.status_code, body=result.body)

    many = len(result.files) > 1
    for generated in result.files:
        if many:
            info(f"==> {generated.name}")
        print_data(generated.contents)


def _sync_into(
    ctx: typer.Context, provider, org: str, app: str, version: str, generator: str, directory: str
) -> None:
    from speccode.commands.common import print_status, write_updates
    from speccode.exceptions import SyncError
    from speccode.models import GeneratorTarget, Project
    from speccode.sync import SyncEngine

    target = directory if directory.endswith(("/", os.sep)) else directory + os.sep
    project = Project(
        organization=org,
        application=app,
        version=version,
        generators=(GeneratorTarget(generator=generator, target=target),),
    )
    plan = SyncEngine(provider).plan_updates([project], on_status=print_status)
    if plan.errors:
        raise SyncError(f"{generator} failed for {org}/{app}@{version}")
    result = write_updates(ctx, plan.updates)
    if result is not None and not result.ok:
        raise SyncError(f"{len(result.failed)} file(s) could not be written")
