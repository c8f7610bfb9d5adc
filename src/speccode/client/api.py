"""Typed endpoint methods for the remote code-generation service.

:class:`ApiClient` sits on top of :class:`~speccode.client.sync_client.SyncClient`
and turns the service's resource paths into Python methods returning
:mod:`speccode.models` objects:

=====================================  ==================================
Method                                 Endpoint
=====================================  ==================================
:meth:`ApiClient.list_organizations`   ``GET /organizations``
:meth:`ApiClient.list_applications`    ``GET /{org}``
:meth:`ApiClient.list_versions`        ``GET /{org}/{app}``
:meth:`ApiClient.get_code`             ``GET /{org}/{app}/{version}/{generator}``
:meth:`ApiClient.upload`               ``PUT /{org}/{app}/{version}``
=====================================  ==================================

List endpoints accept ``limit``/``offset``; :func:`paginate` walks every page.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterator, TypeVar
from urllib.parse import quote

import httpx

from speccode.client.sync_client import SyncClient
from speccode.exceptions import InvalidUsageError, ServerError
from speccode.models import Application, Organization, Version

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 100


def _segment(value: str) -> str:
    """Escape one path segment (keys may contain dots, never slashes)."""
    return quote(value, safe="")


def _json_list(response: httpx.Response) -> list[Any]:
    data = response.json()
    if not isinstance(data, list):
        raise ServerError(
            f"Expected a JSON list from {response.request.url}, got {type(data).__name__}",
            status_code=response.status_code,
            body=response.text,
        )
    return data


def paginate(
    fetch_page: Callable[[int, int], list[T]],
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Iterator[T]:
    """Yield every item from a limit/offset paginated endpoint.

    Stops after the first page shorter than *page_size*.

    Args:
        fetch_page: Called as ``fetch_page(limit, offset)``.
        page_size: Items requested per page.
    """
    if page_size < 1:
        raise InvalidUsageError(f"Page size must be positive, got {page_size}")
    offset = 0
    while True:
        page = fetch_page(page_size, offset)
        yield from page
        if len(page) < page_size:
            return
        offset += page_size


class ApiClient:
    """Typed access to the remote service over an open :class:`SyncClient`.

    Args:
        client: An entered :class:`SyncClient`.
    """

    def __init__(self, client: SyncClient) -> None:
        self._client = client

    @property
    def client(self) -> SyncClient:
        return self._client

    def list_organizations(
        self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> list[Organization]:
        response = self._client.get(
            "/organizations", params={"limit": limit, "offset": offset}
        )
        return [Organization.model_validate(o) for o in _json_list(response)]

    def list_applications(
        self, org: str, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> list[Application]:
        response = self._client.get(
            f"/{_segment(org)}", params={"limit": limit, "offset": offset}
        )
        return [Application.model_validate(a) for a in _json_list(response)]

    def list_versions(
        self, org: str, app: str, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0
    ) -> list[Version]:
        response = self._client.get(
            f"/{_segment(org)}/{_segment(app)}",
            params={"limit": limit, "offset": offset},
        )
        return [Version.model_validate(v) for v in _json_list(response)]

    def get_code(
        self, org: str, app: str, version: str, generator: str, check: bool = True
    ) -> httpx.Response:
        """Request generated code.

        Returns the raw response so that
        :class:`~speccode.client.provider.CodeProvider` can match on the
        status itself; pass ``check=True`` to have error statuses raised.
        """
        path = "/".join(
            ["", _segment(org), _segment(app), _segment(version), _segment(generator)]
        )
        return self._client.get(path, check=check)

    def upload(self, org: str, app: str, version: str, path: Path) -> dict[str, Any]:
        """Upload a spec file as a new version of an application.

        Args:
            org: Organization key.
            app: Application key.
            version: Version label to publish.
            path: Local spec file; its text is sent as the original form.

        Returns:
            The created version as returned by the service.

        Raises:
            InvalidUsageError: If *path* is not a readable file.
            ConflictError: If the service rejects the uploaded file.
        """
        if not path.is_file():
            raise InvalidUsageError(f"File not found: {path}")
        try:
            data = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise InvalidUsageError(f"Cannot read {path}: {exc}") from exc

        response = self._client.put(
            f"/{_segment(org)}/{_segment(app)}/{_segment(version)}",
            json_body={"original_form": {"data": data}},
        )
        body = response.json()
        return body if isinstance(body, dict) else {"result": body}
