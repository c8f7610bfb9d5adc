"""List commands -- browse organizations, applications and versions.

Provides the ``speccode list`` sub-command group. Each command walks every
page of the endpoint unless ``--limit`` asks for a single page.
"""

from __future__ import annotations

from typing import Callable, Optional, TypeVar

import typer

from speccode.output import print_table

T = TypeVar("T")

list_app = typer.Typer(no_args_is_help=True)


def _collect(
    fetch_page: Callable[[int, int], list[T]],
    limit: Optional[int],
    offset: int,
) -> list[T]:
    from speccode.client import paginate

    if limit is not None:
        return fetch_page(limit, offset)
    if offset:
        return list(paginate(lambda lim, off: fetch_page(lim, off + offset)))
    return list(paginate(fetch_page))


_LIMIT = typer.Option(None, "--limit", min=1, help="Return a single page of this size.")
_OFFSET = typer.Option(0, "--offset", min=0, help="Skip this many entries.")


@list_app.command("organizations")
def list_organizations(
    ctx: typer.Context,
    limit: Optional[int] = _LIMIT,
    offset: int = _OFFSET,
) -> None:
    """List the organizations visible to the active profile."""
    from speccode.commands.common import open_api

    with open_api(ctx) as api:
        orgs = _collect(api.list_organizations, limit, offset)
    print_table(["key", "name"], [[o.key, o.name] for o in orgs], title="Organizations")


@list_app.command("applications")
def list_applications(
    ctx: typer.Context,
    org: str = typer.Argument(help="Organization key."),
    limit: Optional[int] = _LIMIT,
    offset: int = _OFFSET,
) -> None:
    """List the applications of an organization."""
    from speccode.commands.common import open_api

    with open_api(ctx) as api:
        apps = _collect(
            lambda lim, off: api.list_applications(org, limit=lim, offset=off), limit, offset
        )
    print_table(["key", "name"], [[a.key, a.name] for a in apps], title=f"Applications in {org}")


@list_app.command("versions")
def list_versions(
    ctx: typer.Context,
    org: str = typer.Argument(help="Organization key."),
    app: str = typer.Argument(help="Application key."),
    limit: Optional[int] = _LIMIT,
    offset: int = _OFFSET,
) -> None:
    """List the published versions of an application."""
    from speccode.commands.common import open_api

    with open_api(ctx) as api:
        versions = _collect(
            lambda lim, off: api.list_versions(org, app, limit=lim, offset=off), limit, offset
        )
    print_table(["version"], [[v.version] for v in versions], title=f"Versions of {org}/{app}")
