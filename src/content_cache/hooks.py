"""Explicit lifecycle-event registry.

The host application owns a ``LifecycleHooks`` instance, passes it to the
cached components it builds, and publishes content events into it. Nothing
is registered globally.

Usage:
    hooks = LifecycleHooks()
    menus = CachedMenu(store, menu_source, namespace="mytheme.menus")
    menus.register(hooks)

    # Later, from the host's save handler
    hooks.publish(LifecycleEvent.CONTENT_SAVED, post_id, content_type="page")
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class LifecycleEvent(Enum):
    CONTENT_CREATED = "content_created"
    CONTENT_UPDATED = "content_updated"
    CONTENT_DELETED = "content_deleted"
    CONTENT_SAVED = "content_saved"


Subscriber = Callable[[int], object]


class LifecycleHooks:
    """Synchronous observer registry for content lifecycle events.

    Subscribers may restrict themselves to one content type (e.g. only
    ``"nav_menu"`` creations); a subscriber registered with
    ``content_type=None`` receives the event for every type.
    """

    def __init__(self) -> None:
        self._subscribers: dict[LifecycleEvent, list[tuple[str | None, Subscriber]]] = defaultdict(list)

    def subscribe(self, event: LifecycleEvent, callback: Subscriber, *, content_type: str | None = None) -> None:
        entry = (content_type, callback)
        if entry not in self._subscribers[event]:
            self._subscribers[event].append(entry)

    def unsubscribe(self, event: LifecycleEvent, callback: Subscriber, *, content_type: str | None = None) -> None:
        entry = (content_type, callback)
        if entry in self._subscribers[event]:
            self._subscribers[event].remove(entry)

    def subscribers(self, event: LifecycleEvent, content_type: str | None = None) -> tuple[Subscriber, ...]:
        """Subscribers that would receive ``event`` for ``content_type``."""
        return tuple(
            callback
            for wanted_type, callback in self._subscribers[event]
            if wanted_type is None or wanted_type == content_type
        )

    def publish(self, event: LifecycleEvent, identifier: int, *, content_type: str = "post") -> int:
        """Call every matching subscriber of ``event`` with ``identifier``.

        A failing subscriber is logged and skipped so the remaining ones
        still run. Returns the number of subscribers that succeeded.
        """
        succeeded = 0
        for callback in self.subscribers(event, content_type):
            try:
                callback(identifier)
            except Exception:
                logger.warning(
                    "Lifecycle subscriber %r failed for %s(%s)", callback, event.value, identifier, exc_info=True
                )
                continue
            succeeded += 1
        logger.debug("Published %s(%s, type=%s) to %d subscribers", event.value, identifier, content_type, succeeded)
        return succeeded
