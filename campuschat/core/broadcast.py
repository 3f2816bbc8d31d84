# campuschat/core/broadcast.py
"""
Shared broadcast connection for cross-worker room fan-out.

One ``Broadcast`` instance per worker process, created only when
``REALTIME_RELAY_URL`` is set. Without it every worker delivers to its own
sockets only.
"""

import logging
from typing import Optional

from broadcaster import Broadcast

logger = logging.getLogger(__name__)

_broadcast: Optional[Broadcast] = None


def is_broadcast_initialized() -> bool:
    return _broadcast is not None


async def connect_broadcast(url: str) -> Broadcast:
    """
    Connect the shared relay.

    Call during application startup (in the lifespan manager).
    """
    global _broadcast

    if _broadcast is not None:
        return _broadcast
    broadcast = Broadcast(url)
    await broadcast.connect()
    _broadcast = broadcast
    logger.info("[BROADCAST] Connected realtime relay: %s", url.split("@")[-1])
    return broadcast


async def disconnect_broadcast() -> None:
    """
    Disconnect the shared relay.

    Call during application shutdown.
    """
    global _broadcast

    if _broadcast is not None:
        await _broadcast.disconnect()
        _broadcast = None
        logger.info("[BROADCAST] Disconnected realtime relay")
