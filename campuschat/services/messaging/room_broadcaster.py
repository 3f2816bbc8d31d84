# campuschat/services/messaging/room_broadcaster.py
"""
Room fan-out for chat messages.

``RoomBroadcaster`` delivers to the connections this worker holds.
``RelayedRoomBroadcaster`` publishes through a shared ``broadcaster``
channel instead, and a listener task on every worker hands each relayed
frame to its local ``RoomBroadcaster``. Publishing never delivers locally
on its own, so each connection receives a frame exactly once.

Delivery is fire-and-forget: no acknowledgement, no retry, no ordering
guarantee across connections.
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional, Protocol

from broadcaster import Broadcast

from ...monitoring.prometheus_metrics import prometheus_metrics
from .events import ServerEvent, build_event
from .rooms import RoomRegistry

logger = logging.getLogger(__name__)

RELAY_CHANNEL = "campuschat:rooms"


class MessageBroadcaster(Protocol):
    """What the message store needs from the realtime layer."""

    async def broadcast_message(self, room: str, payload: Dict[str, Any]) -> None:
        ...


class RoomBroadcaster:
    """Delivers ``receive_message`` frames to every member of a room."""

    def __init__(self, registry: RoomRegistry):
        self.registry = registry

    async def broadcast_message(self, room: str, payload: Dict[str, Any]) -> int:
        """
        Send a message to every connection currently in ``room``.

        Connections whose send fails are dropped from the registry.

        Returns:
            Number of connections the frame was delivered to
        """
        return await self.deliver(room, build_event(ServerEvent.RECEIVE_MESSAGE, payload))

    async def deliver(self, room: str, frame: Dict[str, Any]) -> int:
        members = self.registry.members(room)
        if not members:
            logger.debug(f"[BROADCAST] No connections in room {room}")
            return 0

        results = await asyncio.gather(
            *(connection.send_json(frame) for connection in members), return_exceptions=True
        )

        delivered = 0
        for connection, result in zip(members, results):
            if isinstance(result, BaseException):
                logger.warning(
                    f"[BROADCAST] Dropping connection {connection.connection_id} "
                    f"after failed send to room {room}: {result}"
                )
                self.registry.disconnect(connection.connection_id)
            else:
                delivered += 1

        prometheus_metrics.record_broadcast_delivery("delivered", delivered)
        prometheus_metrics.record_broadcast_delivery("failed", len(members) - delivered)
        logger.debug(f"[BROADCAST] Delivered to {delivered}/{len(members)} connection(s) in {room}")
        return delivered


class RelayedRoomBroadcaster:
    """
    Cross-worker fan-out through a ``broadcaster.Broadcast`` channel.

    The caller owns the ``Broadcast`` connection; ``start`` and ``stop``
    only manage the listener task.
    """

    def __init__(
        self,
        registry: RoomRegistry,
        broadcast: Broadcast,
        channel: str = RELAY_CHANNEL,
    ):
        self.local = RoomBroadcaster(registry)
        self.broadcast = broadcast
        self.channel = channel
        self._listener: Optional[asyncio.Task] = None
        self._subscribed = asyncio.Event()

    async def broadcast_message(self, room: str, payload: Dict[str, Any]) -> None:
        frame = build_event(ServerEvent.RECEIVE_MESSAGE, payload)
        await self.broadcast.publish(
            channel=self.channel, message=json.dumps({"room": room, "frame": frame})
        )
        logger.debug(f"[BROADCAST] Relayed message for room {room}")

    async def start(self) -> None:
        """
        Start the listener and wait until it is subscribed.

        Raises:
            Exception: Whatever the relay raised if subscribing failed
        """
        if self._listener is not None:
            return
        self._subscribed.clear()
        listener = asyncio.create_task(self._listen())
        listener.add_done_callback(self._on_listener_done)
        subscribed = asyncio.create_task(self._subscribed.wait())
        await asyncio.wait({listener, subscribed}, return_when=asyncio.FIRST_COMPLETED)
        if not self._subscribed.is_set():
            subscribed.cancel()
            # Surfaces the subscribe failure, e.g. an unreachable relay
            listener.result()
            raise RuntimeError("Relay listener exited before subscribing")
        self._listener = listener
        logger.info(f"[BROADCAST] Listening for relayed room messages on {self.channel}")

    @property
    def is_listening(self) -> bool:
        return self._listener is not None and not self._listener.done()

    async def stop(self) -> None:
        """Cancel the listener. A listener that already failed is logged, not raised."""
        listener, self._listener = self._listener, None
        if listener is None:
            return
        listener.cancel()
        try:
            await listener
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning(f"[BROADCAST] Relay listener had already failed: {str(e)}")
        logger.info("[BROADCAST] Relay listener stopped")

    def _on_listener_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                f"[BROADCAST] Relay listener on {self.channel} died; relayed messages "
                f"will not reach this worker's sockets: {str(exc)}",
                exc_info=exc,
            )
        else:
            logger.error(f"[BROADCAST] Relay listener on {self.channel} ended unexpectedly")

    async def _listen(self) -> None:
        async with self.broadcast.subscribe(channel=self.channel) as subscriber:
            self._subscribed.set()
            async for event in subscriber:
                await self._handle_relayed(event.message)

    async def _handle_relayed(self, raw: str) -> None:
        try:
            envelope = json.loads(raw)
            room = envelope["room"]
            frame = envelope["frame"]
        except (TypeError, ValueError, KeyError) as e:
            logger.warning(f"[BROADCAST] Ignoring malformed relayed frame: {e}")
            return
        await self.local.deliver(room, frame)
