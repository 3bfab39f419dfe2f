from __future__ import annotations

import asyncio
import logging
from typing import Any

from .di import VoltnetSDK
from .transport.events import ERROR, EVENT_KINDS

logger = logging.getLogger(__name__)


def _log_event(kind: str):
    def _handler(payload: Any) -> None:
        if kind == ERROR:
            logger.warning("realtime error: %s", payload)
        else:
            logger.info("%s: %s", kind, payload)

    return _handler


async def run(sdk: VoltnetSDK) -> None:
    """Log every realtime notification until ``sdk.shutdown`` is set."""
    logger.info("runtime starting")
    logger.debug("settings=%s", sdk.settings.redacted())

    if sdk.client.channel is None:
        logger.error("realtime is disabled, nothing to listen to")
        await sdk.disconnect()
        logger.info("runtime stopped")
        return

    for kind in sorted(EVENT_KINDS):
        sdk.client.subscribe(kind, _log_event(kind))

    try:
        await sdk.client.connect()
        await sdk.shutdown.wait()
    finally:
        await sdk.disconnect()
        logger.info("runtime stopped")
