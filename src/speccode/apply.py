"""Write staged updates to disk.

:func:`apply_updates` writes every :class:`~speccode.models.UpdateItem` in
order, creating parent directories and replacing existing files through
:func:`~speccode.config.atomic_write`. A failed write (permission denied,
disk full, a directory in the way) is recorded and the remaining items are
still attempted, so one bad path never throws away the rest of a sync.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from speccode.config import atomic_write
from speccode.models import ApplyResult, UpdateItem, WriteFailure

logger = logging.getLogger(__name__)

WriteCallback = Callable[[UpdateItem, Optional[str]], None]


def apply_updates(
    updates: Iterable[UpdateItem],
    on_write: Optional[WriteCallback] = None,
) -> ApplyResult:
    """Write each update exactly once, in order.

    Args:
        updates: Items produced by :meth:`~speccode.sync.SyncEngine.plan_updates`.
        on_write: Called after each attempt with the item and ``None`` on
            success or the error message on failure.

    Returns:
        Which items were written and which failed.
    """
    result = ApplyResult()
    for item in updates:
        try:
            atomic_write(Path(item.target), item.contents)
        except OSError as exc:
            message = exc.strerror or str(exc)
            logger.debug("Writing %s failed: %s", item.target, exc)
            result.failed.append(WriteFailure(item=item, message=message))
            if on_write is not None:
                on_write(item, message)
            continue

        result.written.append(item)
        if on_write is not None:
            on_write(item, None)
    return result
