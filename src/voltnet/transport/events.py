"""In-process publish/subscribe for realtime notifications."""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

Handler = Callable[[Any], Any]

MEASUREMENT = "measurement"
TRANSACTION = "transaction"
SETTLEMENT = "settlement"
OFFER = "offer"
PRICE_UPDATE = "price-update"
BALANCE_UPDATE = "balance-update"
ERROR = "error"

# Kinds delivered by the realtime channel
ROUTED_KINDS = frozenset({
    MEASUREMENT,
    TRANSACTION,
    SETTLEMENT,
    OFFER,
    PRICE_UPDATE,
    BALANCE_UPDATE,
})

EVENT_KINDS = ROUTED_KINDS | {ERROR}


class NotificationRegistry:
    """Ordered handler lists keyed by event kind.

    Handlers run synchronously in subscription order. Subscribing the same
    handler twice means it runs twice per dispatch. A handler that raises is
    logged and skipped; ``dispatch`` itself never raises.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def subscribe(self, kind: str, handler: Handler) -> None:
        if self._closed:
            logger.debug("registry closed, ignoring subscription to %s", kind)
            return
        self._handlers.setdefault(kind, []).append(handler)

    def unsubscribe(self, kind: str, handler: Handler) -> None:
        handlers = self._handlers.get(kind)
        if not handlers:
            return
        try:
            handlers.remove(handler)
        except ValueError:
            return
        if not handlers:
            del self._handlers[kind]

    def dispatch(self, kind: str, payload: Any) -> int:
        """Invoke every handler registered for ``kind``; returns how many ran."""
        if self._closed:
            return 0

        handlers = list(self._handlers.get(kind, ()))
        for handler in handlers:
            try:
                handler(payload)
            except Exception:
                logger.exception("listener %r for %s failed", handler, kind)
        return len(handlers)

    def listener_count(self, kind: str) -> int:
        return len(self._handlers.get(kind, ()))

    def kinds(self) -> list[str]:
        return list(self._handlers)

    def clear(self) -> None:
        self._handlers.clear()

    def close(self) -> None:
        """Drop every handler; later dispatches become no-ops."""
        self._closed = True
        self.clear()
