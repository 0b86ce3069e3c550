"""Dashboard KPI endpoint."""

from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from ...container import Workspace
from ...schemas.dashboard import DashboardResponse
from ...services.dashboard import compute_dashboard
from ..deps import get_workspace, require_user

router = APIRouter(prefix="/dashboard", tags=["dashboard"], dependencies=[Depends(require_user)])


@router.get("", response_model=DashboardResponse, status_code=status.HTTP_200_OK)
def get_dashboard(
    start: Optional[date] = Query(default=None, description="Inclusive order date lower bound"),
    end: Optional[date] = Query(default=None, description="Inclusive order date upper bound"),
    courier_id: Optional[str] = Query(default=None, description="Optional courier filter"),
    workspace: Workspace = Depends(get_workspace),
) -> DashboardResponse:
    deliveries = workspace.deliveries.refresh()
    customers = workspace.customers.refresh()
    couriers = workspace.couriers.refresh()
    payload = compute_dashboard(
        deliveries,
        total_customers=len(customers),
        total_couriers=len(couriers),
        start=start,
        end=end,
        courier_id=courier_id,
    )
    return DashboardResponse.model_validate(payload)
