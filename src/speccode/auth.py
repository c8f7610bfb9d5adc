"""Token authentication for the remote service.

The service authenticates every call with a single API token. The token is
read from the profile's ``token_source`` (see
:func:`~speccode.config.resolve_credential`) and sent in one of two ways:

* ``basic`` (default) -- the token is the Basic-auth username with an empty
  password: ``Authorization: Basic base64("<token>:")``, per :rfc:`7617`.
* ``bearer`` -- ``Authorization: Bearer <token>``.

A profile without a ``token_source`` talks to the service anonymously, which
is enough for public organizations.
"""

from __future__ import annotations

import base64

from speccode.config import resolve_credential
from speccode.exceptions import AuthError
from speccode.models import Profile

AUTH_SCHEMES = ("basic", "bearer")


class AuthResult:
    """HTTP headers to merge into every outgoing request.

    Args:
        headers: Headers to add (e.g. ``{"Authorization": "Basic ..."}``).
    """

    def __init__(self, headers: dict[str, str] | None = None):
        self.headers = headers or {}


def authenticate(profile: Profile) -> AuthResult:
    """Resolve the profile's token and build the auth header.

    Returns:
        An empty :class:`AuthResult` when the profile has no token source.

    Raises:
        AuthError: If the scheme is unknown or the token resolves empty.
        ConfigError: If the token source cannot be resolved.
    """
    if not profile.token_source:
        return AuthResult()

    scheme = profile.auth_scheme.lower()
    if scheme not in AUTH_SCHEMES:
        raise AuthError(
            f"Unknown auth scheme '{profile.auth_scheme}' "
            f"(expected one of: {', '.join(AUTH_SCHEMES)})"
        )

    token = resolve_credential(profile.token_source).strip()
    if not token:
        raise AuthError(f"Empty API token (source: {profile.token_source})")

    if scheme == "bearer":
        return AuthResult(headers={"Authorization": f"Bearer {token}"})

    encoded = base64.b64encode(f"{token}:".encode("utf-8")).decode("ascii")
    return AuthResult(headers={"Authorization": f"Basic {encoded}"})
