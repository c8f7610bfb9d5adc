"""Helpers shared by the commands that talk to the remote service."""

from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional

import typer

from speccode.apply import apply_updates
from speccode.client import ApiClient, SyncClient
from speccode.config import resolve_profile
from speccode.models import ApplyResult, StatusRecord, SyncStatus, UpdateItem
from speccode.output import debug, error, info, print_line

_STATUS_STYLES = {
    SyncStatus.UNCHANGED: "dim",
    SyncStatus.CHANGED: "yellow",
    SyncStatus.NOT_FOUND: "magenta",
    SyncStatus.ERROR: "red",
}


def context_options(ctx: typer.Context) -> dict:
    """Options stored by the root callback, or ``{}`` when run standalone."""
    return ctx.obj if isinstance(ctx.obj, dict) else {}


@contextmanager
def open_api(ctx: typer.Context) -> Iterator[ApiClient]:
    """Resolve the active profile and yield a connected :class:`ApiClient`."""
    opts = context_options(ctx)
    profile = resolve_profile(opts.get("profile"), opts.get("api_uri"))
    debug(f"Using profile '{profile.name}' at {profile.api_uri}")
    with SyncClient(
        profile,
        dry_run=opts.get("dry_run", False),
        transport=opts.get("transport"),
    ) as client:
        yield ApiClient(client)


def display_path(path: str) -> str:
    """*path* relative to the working directory when it lies beneath it."""
    try:
        rel = os.path.relpath(path)
    except ValueError:
        return path
    return path if rel.startswith("..") else rel


def print_status(record: StatusRecord) -> None:
    """One line per sync target: ``org/app generator target: status``."""
    target = display_path(record.target) if record.target else "-"
    print_line(
        f"{record.organization}/{record.application} {record.generator} "
        f"{target}: {record.status.value}",
        _STATUS_STYLES[record.status],
    )
    for message in record.messages:
        error(f"  {record.generator}: {message}")


def print_write(item: UpdateItem, failure: str | None) -> None:
    """One line per write: ``generator => target``."""
    if failure is None:
        print_line(f"{item.generator} => {display_path(item.target)}", "green")
    else:
        error(f"{item.generator} => {display_path(item.target)}: {failure}")


def write_updates(ctx: typer.Context, updates: list[UpdateItem]) -> Optional[ApplyResult]:
    """Apply *updates*, or only list them under ``--dry-run``.

    Returns:
        The apply result, or ``None`` when nothing was written.
    """
    if not context_options(ctx).get("dry_run", False):
        return apply_updates(updates, on_write=print_write)
    for item in updates:
        info(f"[dry-run] {item.generator} => {display_path(item.target)}")
    info(f"Dry run: {len(updates)} file(s) not written.")
    return None
