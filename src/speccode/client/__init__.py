"""HTTP access to the remote code-generation service.

Classes:
    :class:`SyncClient` -- blocking client backed by :class:`httpx.Client`
    with token auth, dry-run, retry and error mapping.
    :class:`ApiClient` -- typed endpoint methods on top of ``SyncClient``.
    :class:`CodeProvider` -- generated code as a ``FileSet`` or a typed
    fetch error, consumed by :class:`~speccode.sync.SyncEngine`.

Example::

    from speccode.client import ApiClient, CodeProvider, SyncClient

    with SyncClient(profile) as client:
        provider = CodeProvider(ApiClient(client))
        result = provider.fetch("acme", "widgets", "latest", "go_models")
"""

from speccode.client.api import ApiClient, paginate
from speccode.client.provider import CodeProvider
from speccode.client.sync_client import SyncClient

__all__ = ["ApiClient", "CodeProvider", "SyncClient", "paginate"]
