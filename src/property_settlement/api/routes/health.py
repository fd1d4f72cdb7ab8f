"""Health check endpoint.

Reports whether the transaction store answers a read. Used by container
healthchecks, load balancers, and monitoring systems.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from property_settlement import __version__
from property_settlement.api.deps import get_app_settings, get_transaction_service
from property_settlement.config import Settings
from property_settlement.logging_config import get_logger
from property_settlement.schemas.transaction import HealthResponse
from property_settlement.services.transaction_service import TransactionService

router = APIRouter(tags=["Health"])
logger = get_logger(__name__)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns the health status of the application and its store.",
)
async def health_check(
    svc: TransactionService = Depends(get_transaction_service),
    settings: Settings = Depends(get_app_settings),
) -> HealthResponse:
    try:
        await svc.list_transactions()
        store_status = "healthy"
    except Exception as exc:
        store_status = f"unhealthy: {exc}"
        logger.error("health.store_check_failed", error=str(exc))

    return HealthResponse(
        status="ok" if store_status == "healthy" else "degraded",
        version=__version__,
        store_backend=settings.store_backend,
        store=store_status,
    )
