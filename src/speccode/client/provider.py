"""Remote code provider: generated files for one generator, as a typed result.

:meth:`CodeProvider.fetch` never raises for HTTP error statuses. It returns
either a :class:`~speccode.models.FileSet` or one of the fetch error
variants, so that the sync engine decides per target what an error means:

* 404 -> :class:`~speccode.models.FetchNotFound`
* 409 / 422 -> :class:`~speccode.models.FetchConflict` with the server's
  validation messages
* any other status >= 400 -> :class:`~speccode.models.FetchServerError`

Network failures still raise :class:`~speccode.exceptions.ConnectionError_`.
"""

from __future__ import annotations

import logging
from typing import Any, Union

from pydantic import ValidationError

from speccode.client.api import ApiClient
from speccode.client.sync_client import CONFLICT_STATUSES, error_messages
from speccode.models import (
    FetchConflict,
    FetchError,
    FetchNotFound,
    FetchServerError,
    FileSet,
    GeneratedFile,
)

logger = logging.getLogger(__name__)


class CodeProvider:
    """Fetches generated code through an :class:`ApiClient`."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    def fetch(
        self, org: str, app: str, version: str, generator: str
    ) -> Union[FileSet, FetchError]:
        """Fetch the files *generator* produces for ``org/app@version``."""
        logger.debug("Fetching %s/%s@%s with %s", org, app, version, generator)
        response = self._api.get_code(org, app, version, generator, check=False)
        status = response.status_code

        if status == 404:
            return FetchNotFound()
        if status in CONFLICT_STATUSES:
            return FetchConflict(messages=error_messages(response))
        if status >= 400:
            return FetchServerError(status_code=status, body=response.text)

        try:
            return parse_file_set(generator, response.json())
        except (ValueError, ValidationError) as exc:
            return FetchServerError(
                status_code=status, body=f"Unreadable code response: {exc}"
            )


def parse_file_set(generator: str, payload: Any) -> FileSet:
    """Build a :class:`FileSet` from a code response body.

    The body carries ``files: [{name, contents}]``. Older generators only
    return a single ``source`` string; that becomes a one-element set whose
    file is named after the generator.

    Raises:
        ValueError: If the payload has neither files nor source.
    """
    if not isinstance(payload, dict):
        raise ValueError(f"expected an object, got {type(payload).__name__}")

    files = [
        GeneratedFile(
            generator=generator, name=entry["name"], contents=entry.get("contents", "")
        )
        for entry in payload.get("files") or []
        if isinstance(entry, dict) and entry.get("name")
    ]
    if not files and isinstance(payload.get("source"), str):
        files = [GeneratedFile(generator=generator, name=generator, contents=payload["source"])]
    if not files:
        raise ValueError("response has no files and no source")
    return FileSet(generator=generator, files=files)
