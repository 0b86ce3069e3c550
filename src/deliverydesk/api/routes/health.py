"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...container import Workspace
from ...db.store import CUSTOMERS_TABLE
from ...errors import RemoteStoreError
from ...services.tracking.osrm_client import check_health as osrm_health_check
from ..deps import get_workspace

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/osrm", status_code=status.HTTP_200_OK)
def health_osrm() -> dict:
    """Check OSRM service health."""
    return {"service": "osrm", "healthy": osrm_health_check()}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database(workspace: Workspace = Depends(get_workspace)) -> dict:
    """Check that the data store answers a minimal read."""
    try:
        workspace.store.select(CUSTOMERS_TABLE, columns="id", limit=1)
    except RemoteStoreError as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    return {"configured": True, "connected": True, "message": "Database connected."}
