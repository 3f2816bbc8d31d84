# campuschat/routes/v1/ops.py
"""
Operational endpoints - API v1

In-process service timings for quick visibility without Prometheus.
Admin only.

Endpoints:
    GET /performance - Per-service operation timings
    POST /performance/reset - Clear the recorded timings
"""

import logging
from typing import List

from fastapi import APIRouter, Depends

from ...api.dependencies.auth import require_admin
from ...api.dependencies.services import (
    get_conversation_service,
    get_message_service,
    get_read_state_service,
)
from ...models.user import User
from ...schemas.monitoring import MetricsResetResponse, ServicePerformanceResponse
from ...services.base import BaseService
from ...services.conversation_service import ConversationService
from ...services.message_service import MessageService
from ...services.read_state_service import ReadStateService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["monitoring"])


def _chat_services(
    message_service: MessageService = Depends(get_message_service),
    conversation_service: ConversationService = Depends(get_conversation_service),
    read_state_service: ReadStateService = Depends(get_read_state_service),
) -> List[BaseService]:
    return [message_service, conversation_service, read_state_service]


@router.get("/performance", response_model=ServicePerformanceResponse)
def get_performance_metrics(
    _: User = Depends(require_admin),
    services: List[BaseService] = Depends(_chat_services),
) -> ServicePerformanceResponse:
    """Timings for every measured chat operation, keyed by service class."""
    return ServicePerformanceResponse(
        services={service.__class__.__name__: service.get_metrics() for service in services}
    )


@router.post("/performance/reset", response_model=MetricsResetResponse)
def reset_performance_metrics(
    admin: User = Depends(require_admin),
    services: List[BaseService] = Depends(_chat_services),
) -> MetricsResetResponse:
    for service in services:
        service.reset_metrics()
    logger.info(f"Service metrics reset by admin {admin.id}")
    return MetricsResetResponse(success=True, message="Service metrics reset")
