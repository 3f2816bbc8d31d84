# campuschat/routes/v1/health.py
"""
Health check endpoint for monitoring and load balancer probes.
"""

from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends

from ...api.dependencies.services import get_room_broadcaster, get_room_registry
from ...core.broadcast import is_broadcast_initialized
from ...core.config import settings
from ...core.constants import API_VERSION, SERVICE_NAME
from ...schemas.health import HealthResponse, RealtimeStats
from ...services.messaging.room_broadcaster import MessageBroadcaster, RelayedRoomBroadcaster
from ...services.messaging.rooms import RoomRegistry

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("", response_model=HealthResponse)
def health_check(
    registry: RoomRegistry = Depends(get_room_registry),
    broadcaster: MessageBroadcaster = Depends(get_room_broadcaster),
) -> HealthResponse:
    """
    Health check endpoint.

    Returns basic service info plus this worker's realtime connection and
    room counts. Does not hit the database. Reports ``degraded`` when the
    relay listener has died.
    """
    stats = registry.stats()
    status = "healthy"
    if isinstance(broadcaster, RelayedRoomBroadcaster) and not broadcaster.is_listening:
        logger.warning("[BROADCAST] Health check found the relay listener stopped")
        status = "degraded"

    return HealthResponse(
        status=status,
        service=SERVICE_NAME,
        version=API_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        realtime=RealtimeStats(
            connections=stats["connections"],
            rooms=stats["rooms"],
            relay_enabled=is_broadcast_initialized(),
        ),
    )
