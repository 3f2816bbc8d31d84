# campuschat/schemas/health.py
from pydantic import Field

from ._strict_base import StrictModel


class RealtimeStats(StrictModel):
    connections: int = Field(..., description="Open chat WebSocket connections on this worker")
    rooms: int = Field(..., description="Rooms with at least one member on this worker")
    relay_enabled: bool


class HealthResponse(StrictModel):
    status: str
    service: str
    version: str
    environment: str
    timestamp: str
    realtime: RealtimeStats
