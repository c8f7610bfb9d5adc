"""Update command -- bring checked-in generated code up to date.

Implements ``speccode update``. The project file is loaded first (a missing
or malformed file fails before any network call), then every configured
target is compared with the service's current output and a status line is
printed per target as it is computed. Staged updates are written last, one
``<generator> => <path>`` line per file. With ``--dry-run`` they are listed
on stderr and nothing is written.

Targets that hit a conflict or server error, and files that fail to write,
do not stop the run; they are summarised at the end and the command exits
with :data:`~speccode.exit_codes.EXIT_SYNC_FAILURE`.
"""

from __future__ import annotations

from typing import Optional

import typer

from speccode.output import error, info, success, suggest


def update_command(
    ctx: typer.Context,
    path: Optional[str] = typer.Option(
        None,
        "--path",
        help="Project file (default: ./.speccode.yaml).",
    ),
    latest: bool = typer.Option(
        False,
        "--latest",
        help="Use the latest version of every application instead of the pinned one.",
    ),
) -> None:
    """Synchronize generated code for every project in the project file.

    Example::

        speccode update
        speccode update --path ../api/.speccode.yaml --latest
    """
    from speccode.client import CodeProvider
    from speccode.commands.common import open_api, print_status, write_updates
    from speccode.exceptions import ConfigurationMissingError, SyncError
    from speccode.project import default_project_path, load_projects
    from speccode.sync import SyncEngine, SyncSettings

    try:
        projects = load_projects(path)
    except ConfigurationMissingError as exc:
        error(str(exc))
        suggest(f"Create {default_project_path().name} or pass --path")
        raise typer.Exit(code=1) from None

    if not projects:
        info("No projects configured.")
        return

    with open_api(ctx) as api:
        engine = SyncEngine(CodeProvider(api), SyncSettings(use_latest=latest))
        plan = engine.plan_updates(projects, on_status=print_status)

    if plan.updates:
        result = write_updates(ctx, plan.updates)
    else:
        result = None
        info("Everything is up to date.")

    problems: list[str] = []
    if plan.errors:
        problems.append(f"{len(plan.errors)} target(s) failed")
    if result is not None and not result.ok:
        problems.append(f"{len(result.failed)} file(s) could not be written")
    if problems:
        raise SyncError(", ".join(problems))

    if result is not None:
        success(f"Updated {len(result.written)} file(s).")
