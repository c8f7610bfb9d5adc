"""Synchronous HTTP client with token auth, dry-run, retry, and error mapping.

This module provides :class:`SyncClient`, the blocking HTTP client every
speccode command talks to the remote service through. It wraps
:class:`httpx.Client` and layers on:

- **Auth injection** -- the header from :func:`~speccode.auth.authenticate`
  is merged into every outgoing request.
- **Dry-run mode** -- write requests (anything but GET) are printed to
  stderr and answered with a synthetic 200 response.
- **Retry with backoff** -- retries on 5xx and network errors with
  exponential delay (1 s, 2 s, 4 s, ...), up to ``max_retries`` times.
- **Error mapping** -- 4xx/5xx statuses become typed
  :class:`~speccode.exceptions.SpeccodeError` subclasses unless the caller
  asks for the raw response with ``check=False``.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any, Optional

import httpx

from speccode.auth import AuthResult, authenticate
from speccode.exceptions import (
    AuthError,
    ConflictError,
    ConnectionError_,
    NotFoundError,
    ServerError,
)
from speccode.models import Profile
from speccode.output import get_output

logger = logging.getLogger(__name__)

CONFLICT_STATUSES = (409, 422)


class SyncClient:
    """Synchronous HTTP client for the remote service.

    Must be used as a context manager so that the underlying transport is
    opened once per command and closed at the end.

    Args:
        profile: Connection profile with ``api_uri``, token source and
            request settings.
        dry_run: When ``True``, non-GET requests are printed to stderr and a
            synthetic 200 response is returned without network I/O.
        transport: Optional httpx transport, used by tests to plug in an
            :class:`httpx.MockTransport`.

    Example::

        with SyncClient(profile) as client:
            response = client.get("/organizations")
    """

    def __init__(
        self,
        profile: Profile,
        dry_run: bool = False,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._profile = profile
        self._dry_run = dry_run
        self._transport = transport
        self._auth_result: Optional[AuthResult] = None
        self._client: Optional[httpx.Client] = None

    @property
    def profile(self) -> Profile:
        return self._profile

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> SyncClient:
        config = self._profile.request
        self._client = httpx.Client(
            base_url=self._profile.api_uri.rstrip("/"),
            timeout=config.timeout,
            verify=config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        self._auth_result = authenticate(self._profile)
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
        check: bool = True,
    ) -> httpx.Response:
        """Make an HTTP request with auth injection, retry, and error mapping.

        Args:
            method: HTTP method (GET or PUT).
            path: URL path appended to the profile's ``api_uri``.
            params: Query parameters. ``None`` values are dropped.
            json_body: JSON-serialisable body.
            check: When ``True`` (default) error statuses raise; when
                ``False`` the response is returned as-is for the caller to
                inspect.

        Returns:
            The :class:`httpx.Response` from the server.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ConflictError: On 409 / 422.
            ServerError: On any other error status.
            ConnectionError_: On network / timeout errors after all retries.
        """
        headers: dict[str, str] = {"Accept": "application/json"}
        if self._auth_result is not None:
            headers.update(self._auth_result.headers)
        clean_params = {k: v for k, v in (params or {}).items() if v is not None}

        if self._dry_run and method.upper() != "GET":
            return self._print_dry_run(method, path, clean_params, json_body)

        response = self._execute_with_retry(method, path, headers, clean_params, json_body)
        logger.debug("%s %s -> %s", method.upper(), path, response.status_code)

        if check:
            raise_for_status(response)
        return response

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("GET", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.request("PUT", path, **kwargs)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _execute_with_retry(
        self,
        method: str,
        path: str,
        headers: dict[str, str],
        params: dict[str, Any],
        json_body: Any,
    ) -> httpx.Response:
        """Execute the request, retrying on 5xx and network errors.

        The delay doubles each attempt: 1 s, 2 s, 4 s, ...
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        max_retries = self._profile.request.max_retries
        output = get_output()

        for attempt in range(max_retries + 1):
            try:
                kwargs: dict[str, Any] = {
                    "method": method,
                    "url": path,
                    "headers": headers,
                    "params": params,
                }
                if json_body is not None:
                    kwargs["json"] = json_body

                response = self._client.request(**kwargs)

                if response.status_code >= 500 and attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Server error {response.status_code}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue

                return response

            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                if attempt < max_retries:
                    delay = 2 ** attempt
                    output.debug(
                        f"Connection error: {exc}, retrying in {delay}s "
                        f"(attempt {attempt + 1}/{max_retries})"
                    )
                    time.sleep(delay)
                    continue
                raise ConnectionError_(
                    f"Connection to {self._profile.api_uri} failed after "
                    f"{max_retries + 1} attempt(s): {exc}"
                ) from exc

        raise ServerError("Request failed after all retries")  # pragma: no cover

    def _print_dry_run(
        self,
        method: str,
        path: str,
        params: dict[str, Any],
        json_body: Any,
    ) -> httpx.Response:
        """Print request details to stderr and return a synthetic 200 response."""
        output = get_output()
        url = f"{self._profile.api_uri.rstrip('/')}{path}"
        output.info(f"[dry-run] {method.upper()} {url}")
        for key, value in params.items():
            output.info(f"  Param: {key}={value}")
        if json_body is not None:
            output.info(f"  Body (JSON): {json.dumps(json_body, indent=2)}")

        return httpx.Response(
            status_code=200,
            headers={"content-type": "application/json"},
            json={"dry_run": True, "message": "Request was not sent"},
            request=httpx.Request(method=method, url=url),
        )


def error_messages(response: httpx.Response) -> list[str]:
    """Extract human-readable messages from an error response body.

    The service answers validation failures with a list of
    ``{"code": ..., "message": ...}`` objects; other services use a single
    object with ``message``/``error``/``detail``. Falls back to the first
    200 characters of the raw body.
    """
    try:
        detail = response.json()
    except ValueError:
        text = response.text[:200] if response.text else ""
        return [text] if text else []

    if isinstance(detail, dict):
        detail = [detail]
    if not isinstance(detail, list):
        return [str(detail)]

    messages: list[str] = []
    for entry in detail:
        if isinstance(entry, dict):
            msg = entry.get("message") or entry.get("error") or entry.get("detail")
            messages.append(str(msg) if msg else json.dumps(entry))
        else:
            messages.append(str(entry))
    return messages


def raise_for_status(response: httpx.Response) -> None:
    """Raise a typed exception for error HTTP status codes."""
    status = response.status_code
    if status < 400:
        return

    messages = error_messages(response)
    if status in CONFLICT_STATUSES:
        raise ConflictError(messages)

    detail = "; ".join(messages)
    full_msg = f"HTTP {status}: {detail}" if detail else f"HTTP {status}"
    if status in (401, 403):
        raise AuthError(full_msg)
    if status == 404:
        raise NotFoundError(full_msg)
    raise ServerError(full_msg, status_code=status, body=response.text)
