"""Decide which generated files on disk are out of date.

:class:`SyncEngine` walks every (project, generator, target) triple in
order, asks the code provider for the generator's current output, and
compares each returned file with the file on disk. The comparison ignores
leading and trailing whitespace, so a missing trailing newline never counts
as a change. A file that does not exist compares as empty.

The engine never writes; it returns a :class:`~speccode.models.SyncPlan`
whose ``updates`` are handed to :func:`~speccode.apply.apply_updates`.
Status records are also passed to an ``on_status`` callback as soon as they
are known, so a slow run shows progress.

Error policy: a conflict or server error for one target is recorded as a
``SyncStatus.ERROR`` record and the engine moves on to the next target.
Updates staged before or after it are kept. A returned file whose name
would land outside its directory target gets its own ``ERROR`` record and
is never staged. Connection errors are not caught and end the run.
"""

from __future__ import annotations

import logging
import os
from typing import Callable, Iterable, Optional, Protocol, Union

from pydantic import BaseModel

from speccode.models import (
    LATEST_VERSION,
    FetchConflict,
    FetchError,
    FetchNotFound,
    FileSet,
    GeneratorTarget,
    Project,
    StatusRecord,
    SyncPlan,
    SyncStatus,
    UpdateItem,
)

logger = logging.getLogger(__name__)

StatusCallback = Callable[[StatusRecord], None]


class Provider(Protocol):
    def fetch(
        self, org: str, app: str, version: str, generator: str
    ) -> Union[FileSet, FetchError]: ...


class SyncSettings(BaseModel):
    """Knobs for one sync run.

    Attributes:
        use_latest: Ask for the ``latest`` version of every project instead
            of the version pinned in the project file.
    """

    use_latest: bool = False


def compare_contents(existing: str, new: str) -> SyncStatus:
    """Compare file contents, ignoring leading and trailing whitespace."""
    if existing.strip() == new.strip():
        return SyncStatus.UNCHANGED
    return SyncStatus.CHANGED


def is_directory_target(target: str, file_count: int) -> bool:
    """Whether generated files go *inside* ``target`` rather than *at* it.

    A target is a directory when it already is one, when it ends with a path
    separator, or when it is not an existing file and either has no suffix
    (``./models``) or has to hold more than one file.
    """
    if os.path.isdir(target):
        return True
    if target.endswith(("/", os.sep)):
        return True
    if os.path.isfile(target):
        return False
    return file_count > 1 or not os.path.splitext(target)[1]


def target_path(target: str, file_name: str, file_count: int) -> str:
    """Where one generated file lands for a configured target.

    Raises:
        ValueError: If a directory target would place *file_name* outside
            that directory (an absolute name or one that climbs with ``..``).
    """
    if not is_directory_target(target, file_count):
        return target
    path = os.path.join(target, file_name)
    base = os.path.abspath(target)
    resolved = os.path.abspath(path)
    if (
        os.path.isabs(file_name)
        or resolved == base
        or os.path.commonpath([base, resolved]) != base
    ):
        raise ValueError(f"file name {file_name!r} escapes target directory {target}")
    return path


def read_existing(path: str) -> str:
    """Current contents of *path*, or ``""`` if it is not a file."""
    if not os.path.isfile(path):
        return ""
    with open(path, encoding="utf-8", errors="replace", newline="") as f:
        return f.read()


class SyncEngine:
    """Plans updates for a set of projects.

    Args:
        provider: Source of generated code (see
            :class:`~speccode.client.provider.CodeProvider`).
        settings: Run settings; defaults to pinned versions.
    """

    def __init__(self, provider: Provider, settings: Optional[SyncSettings] = None) -> None:
        self._provider = provider
        self._settings = settings or SyncSettings()

    def version_for(self, project: Project) -> str:
        return LATEST_VERSION if self._settings.use_latest else project.version

    def plan_updates(
        self,
        projects: Iterable[Project],
        on_status: Optional[StatusCallback] = None,
    ) -> SyncPlan:
        """Compare every configured target with the provider's output.

        Args:
            projects: Projects in reporting order.
            on_status: Called with each status record as soon as it is known.

        Returns:
            The staged updates in the order they should be written, and all
            status records in the order they were produced.
        """
        plan = SyncPlan()

        def emit(record: StatusRecord) -> None:
            plan.statuses.append(record)
            if on_status is not None:
                on_status(record)

        for project in projects:
            for target in project.generators:
                self._plan_target(project, target, plan, emit)
        return plan

    def _plan_target(
        self,
        project: Project,
        target: GeneratorTarget,
        plan: SyncPlan,
        emit: StatusCallback,
    ) -> None:
        version = self.version_for(project)
        result = self._provider.fetch(
            project.organization, project.application, version, target.generator
        )

        if not isinstance(result, FileSet):
            status = SyncStatus.NOT_FOUND if isinstance(result, FetchNotFound) else SyncStatus.ERROR
            if isinstance(result, FetchConflict) and result.messages:
                messages = list(result.messages)
            else:
                messages = [] if status == SyncStatus.NOT_FOUND else [result.describe()]
            logger.debug(
                "%s %s@%s: %s", target.generator, project.label, version, result.describe()
            )
            emit(
                StatusRecord(
                    organization=project.organization,
                    application=project.application,
                    generator=target.generator,
                    target=target.target,
                    status=status,
                    messages=messages,
                )
            )
            return

        file_count = len(result.files)
        for generated in result.files:
            try:
                path = target_path(target.target, generated.name, file_count)
            except ValueError as exc:
                logger.warning("%s %s: %s", target.generator, project.label, exc)
                emit(
                    StatusRecord(
                        organization=project.organization,
                        application=project.application,
                        generator=target.generator,
                        target=target.target,
                        status=SyncStatus.ERROR,
                        messages=[str(exc)],
                    )
                )
                continue
            status = compare_contents(read_existing(path), generated.contents)
            if status == SyncStatus.CHANGED:
                plan.updates.append(
                    UpdateItem(target=path, contents=generated.contents, generator=target.generator)
                )
            emit(
                StatusRecord(
                    organization=project.organization,
                    application=project.application,
                    generator=target.generator,
                    target=path,
                    status=status,
                )
            )
