"""Subscribers notified when the global root directory changes."""

from __future__ import annotations

import logging
from collections.abc import Callable

RootDirCallback = Callable[[str], None]


class RootDirCallbacks:
    """Ordered, append-only list of root directory change subscribers.

    Callbacks run synchronously in registration order, after the layout has
    been recomputed, so they may read any path from the context. A callback
    must not change the root directory itself; nothing guards against that.
    Exceptions raised by a callback propagate to whoever changed the root.
    """

    _logger = logging.getLogger(__name__)

    def __init__(self) -> None:
        self._callbacks: list[RootDirCallback] = []

    def add(self, callback: RootDirCallback) -> None:
        """Registers ``callback``. The same callable may be added twice."""

        self._callbacks.append(callback)

    def notify(self, root_dir: str) -> None:
        """Invokes every callback with the new root directory."""

        self._logger.debug("notifying root dir callbacks: count=%s", len(self._callbacks))
        for callback in list(self._callbacks):
            callback(root_dir)

    def __len__(self) -> int:
        return len(self._callbacks)
