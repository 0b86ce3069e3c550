"""Live tracking map endpoints."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...container import Workspace
from ...schemas.tracking import TrackingMapResponse
from ..deps import get_workspace, require_user

router = APIRouter(prefix="/tracking", tags=["tracking"], dependencies=[Depends(require_user)])


@router.get("/map", response_model=TrackingMapResponse, status_code=status.HTTP_200_OK)
async def get_tracking_map(
    courier_id: Optional[str] = Query(default=None, description="Show only this courier's deliveries"),
    workspace: Workspace = Depends(get_workspace),
) -> TrackingMapResponse:
    tracking = workspace.tracking
    if courier_id != tracking.courier_filter:
        await tracking.set_courier_filter(courier_id)
    return TrackingMapResponse.model_validate(tracking.snapshot(), from_attributes=True)


@router.post("/refresh", response_model=TrackingMapResponse, status_code=status.HTTP_200_OK)
async def refresh_tracking(workspace: Workspace = Depends(get_workspace)) -> TrackingMapResponse:
    """Re-run the full load (deliveries, last positions, geocoding)."""
    await workspace.tracking.refresh()
    return TrackingMapResponse.model_validate(workspace.tracking.snapshot(), from_attributes=True)
