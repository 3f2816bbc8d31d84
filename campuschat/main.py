# campuschat/main.py
from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from .core.broadcast import connect_broadcast, disconnect_broadcast
from .core.config import is_running_tests, settings
from .core.constants import API_PREFIX, API_VERSION, CHAT_PREFIX, SERVICE_NAME
from .database import init_db
from .errors import register_error_handlers
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import (
    chat as chat_v1,
    chat_ws as chat_ws_v1,
    health as health_v1,
    ops as ops_v1,
)
from .services.messaging.room_broadcaster import RelayedRoomBroadcaster, RoomBroadcaster
from .services.messaging.rooms import RoomRegistry

# Configure logging
logging.basicConfig(
    level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{SERVICE_NAME} starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    if settings.auto_create_tables:
        init_db()

    relayed: RelayedRoomBroadcaster | None = None
    if settings.realtime_relay_url:
        broadcast = await connect_broadcast(settings.realtime_relay_url)
        relayed = RelayedRoomBroadcaster(app.state.room_registry, broadcast)
        try:
            await relayed.start()
        except Exception:
            logger.error("[BROADCAST] Could not start the relay listener", exc_info=True)
            await disconnect_broadcast()
            raise
        app.state.room_broadcaster = relayed
    else:
        logger.info("[BROADCAST] No realtime relay configured; delivering to local sockets only")

    try:
        yield
    finally:
        logger.info(f"{SERVICE_NAME} shutting down...")
        try:
            if relayed is not None:
                await relayed.stop()
                app.state.room_broadcaster = RoomBroadcaster(app.state.room_registry)
        finally:
            await disconnect_broadcast()


def create_app() -> FastAPI:
    """
    Build the application.

    The room registry and local broadcaster are created here rather than in
    the lifespan so that clients which skip startup still get working rooms.
    """
    app = FastAPI(
        title="Campus Chat API",
        description="Direct messaging between students and advisors",
        version=API_VERSION,
        lifespan=app_lifespan,
    )

    app.state.room_registry = RoomRegistry()
    app.state.room_broadcaster = RoomBroadcaster(app.state.room_registry)

    register_error_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_v1 = APIRouter(prefix=API_PREFIX)
    api_v1.include_router(health_v1.router, prefix="/health")
    api_v1.include_router(ops_v1.router, prefix="/ops")
    app.include_router(api_v1)
    app.include_router(chat_v1.router, prefix=CHAT_PREFIX)
    app.include_router(chat_ws_v1.router, prefix=CHAT_PREFIX)

    @app.get("/metrics", include_in_schema=False)
    def metrics() -> Response:
        return Response(
            content=prometheus_metrics.get_metrics(),
            media_type=prometheus_metrics.get_content_type(),
        )

    return app


app = create_app()
