"""
Connection Status Router
========================
Read-only status feed plus a manual retry action for presentation layers.
"""

from fastapi import APIRouter

from .coordinator import HealthCoordinator
from .models import ConnectionSnapshot


def create_status_router(
    coordinator: HealthCoordinator,
    prefix: str = "/connection",
) -> APIRouter:
    """
    Create a router exposing the coordinator's status.

    Args:
        coordinator: The application's HealthCoordinator
        prefix: URL prefix for the endpoints

    Returns:
        FastAPI router with ``GET {prefix}`` and ``POST {prefix}/retry``
    """
    router = APIRouter(prefix=prefix, tags=["Connection"])

    @router.get("", response_model=ConnectionSnapshot)
    async def connection_status() -> ConnectionSnapshot:
        """Current connection status; never triggers a probe."""
        return coordinator.snapshot()

    @router.post("/retry", response_model=ConnectionSnapshot)
    async def retry_connection() -> ConnectionSnapshot:
        """Reset breakers and reachability, then re-evaluate."""
        await coordinator.retry()
        return coordinator.snapshot()

    return router
