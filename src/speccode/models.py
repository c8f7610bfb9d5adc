"""Canonical Pydantic models shared across all speccode modules.

This is the single source of truth for data shapes in the project. The models
fall into three groups:

**Configuration models** -- serialised as JSON in the user's config directory:
    :class:`RequestConfig`, :class:`OutputConfig`, :class:`GlobalConfig`, and
    :class:`Profile`.

**Remote service models** -- returned by the API client:
    :class:`Organization`, :class:`Application`, :class:`Version`,
    :class:`GeneratedFile`, :class:`FileSet`, and the fetch error variants
    :class:`FetchNotFound`, :class:`FetchConflict`, :class:`FetchServerError`.

**Sync models** -- produced by :mod:`speccode.project`, :mod:`speccode.sync`
and :mod:`speccode.apply`:
    :class:`GeneratorTarget`, :class:`Project`, :class:`UpdateItem`,
    :class:`SyncStatus`, :class:`StatusRecord`, :class:`SyncPlan`,
    :class:`WriteFailure`, and :class:`ApplyResult`.

Sync models are frozen: once a project is loaded or an update is staged it
is never mutated.
"""

from __future__ import annotations

import enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


LATEST_VERSION = "latest"
"""Sentinel version asking the remote service for its most recent version."""


# --- Config models ---


class RequestConfig(BaseModel):
    """HTTP request settings applied to every call made with a profile."""

    timeout: int = Field(default=30, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    max_retries: int = Field(
        default=0, description="Retry attempts on 5xx and network errors"
    )


class OutputConfig(BaseModel):
    """Default output format preferences stored in :class:`GlobalConfig`."""

    format: str = Field(
        default="auto", description="Output format: auto, json, plain, rich"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/speccode/config.json``.

    Loaded and saved by :func:`~speccode.config.load_global_config` and
    :func:`~speccode.config.save_global_config`. See
    :func:`~speccode.config.resolve_profile` for the precedence chain.
    """

    default_profile: Optional[str] = None
    auto_select_single_profile: bool = True
    output: OutputConfig = Field(default_factory=OutputConfig)


class Profile(BaseModel):
    """A named connection to the remote code-generation service.

    Stored as JSON under the ``profiles/`` config directory and created with
    ``speccode init``.

    Example::

        Profile(
            name="default",
            api_uri="https://api.apibuilder.io",
            token_source="env:SPECCODE_TOKEN",
        )
    """

    model_config = ConfigDict(extra="allow")

    name: str
    api_uri: str = Field(description="Base URI of the remote service")
    token_source: Optional[str] = Field(
        default=None,
        description="Credential source: env:VAR, file:/path, prompt",
    )
    auth_scheme: str = Field(
        default="basic", description="How the token is sent: basic or bearer"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


# --- Remote service models ---


class Organization(BaseModel):
    """An organization on the remote service."""

    model_config = ConfigDict(extra="allow")

    key: str
    name: str = ""
    guid: Optional[str] = None


class Application(BaseModel):
    """An application (published API specification) within an organization."""

    model_config = ConfigDict(extra="allow")

    key: str
    name: str = ""
    guid: Optional[str] = None


class Version(BaseModel):
    """A published version of an application."""

    model_config = ConfigDict(extra="allow")

    version: str
    guid: Optional[str] = None


class GeneratedFile(BaseModel):
    """One file produced by a generator run."""

    model_config = ConfigDict(frozen=True)

    generator: str
    name: str
    contents: str


class FileSet(BaseModel):
    """The non-empty, ordered set of files one generator produced.

    Single-file responses are represented as a one-element FileSet, so the
    sync engine never has to branch on the response shape.
    """

    model_config = ConfigDict(frozen=True)

    generator: str
    files: list[GeneratedFile] = Field(min_length=1)


class FetchNotFound(BaseModel):
    """The service has no output for this (org, app, version, generator)."""

    model_config = ConfigDict(frozen=True)

    def describe(self) -> str:
        return "not found"


class FetchConflict(BaseModel):
    """The service rejected the request with validation messages."""

    model_config = ConfigDict(frozen=True)

    messages: list[str] = Field(default_factory=list)

    def describe(self) -> str:
        return "; ".join(self.messages) or "validation failed"


class FetchServerError(BaseModel):
    """The service answered with an unexpected error status."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    body: str = ""

    def describe(self) -> str:
        if self.body:
            return f"HTTP {self.status_code}: {self.body[:200]}"
        return f"HTTP {self.status_code}"


FetchError = Union[FetchNotFound, FetchConflict, FetchServerError]


# --- Sync models ---


class GeneratorTarget(BaseModel):
    """A generator key paired with the local path its output belongs at."""

    model_config = ConfigDict(frozen=True)

    generator: str
    target: str


class Project(BaseModel):
    """One (organization, application, version) entry of the project file."""

    model_config = ConfigDict(frozen=True)

    organization: str
    application: str
    version: str = LATEST_VERSION
    generators: tuple[GeneratorTarget, ...] = ()

    @property
    def label(self) -> str:
        """``org/app`` string used in status output."""
        return f"{self.organization}/{self.application}"


class UpdateItem(BaseModel):
    """A pending write: new contents for one target path."""

    model_config = ConfigDict(frozen=True)

    target: str
    contents: str
    generator: str


class SyncStatus(str, enum.Enum):
    """Outcome of comparing one generated file (or target) with the disk."""

    UNCHANGED = "unchanged"
    CHANGED = "changed"
    NOT_FOUND = "not found"
    ERROR = "error"


class StatusRecord(BaseModel):
    """Status of one (project, generator[, file]) for reporting."""

    model_config = ConfigDict(frozen=True)

    organization: str
    application: str
    generator: str
    target: Optional[str] = None
    status: SyncStatus
    messages: list[str] = Field(default_factory=list)


class SyncPlan(BaseModel):
    """Everything :meth:`~speccode.sync.SyncEngine.plan_updates` decided."""

    updates: list[UpdateItem] = Field(default_factory=list)
    statuses: list[StatusRecord] = Field(default_factory=list)

    @property
    def errors(self) -> list[StatusRecord]:
        """Status records for targets that failed with a conflict or server error."""
        return [s for s in self.statuses if s.status == SyncStatus.ERROR]


class WriteFailure(BaseModel):
    """An update that could not be written."""

    item: UpdateItem
    message: str


class ApplyResult(BaseModel):
    """Aggregate outcome of :func:`~speccode.apply.apply_updates`."""

    written: list[UpdateItem] = Field(default_factory=list)
    failed: list[WriteFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed
