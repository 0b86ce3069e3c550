"""Delivery endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query, Response, status

from ...container import Workspace
from ...db.store import AuthUser
from ...errors import NotFoundError, RemoteStoreError
from ...models.domain import LicenseStatus
from ...schemas.deliveries import (
    DeliveryForm,
    DeliveryModel,
    DeliveryTableResponse,
    DeliveryUpdate,
    FormValidationResponse,
)
from ...services.forms import validate_step
from ..deps import get_workspace, require_user
from ..errors import to_http_exception

router = APIRouter(prefix="/deliveries", tags=["deliveries"], dependencies=[Depends(require_user)])


def _ensure_courier_assignable(workspace: Workspace, courier_id: str) -> None:
    """Only couriers with a valid license can receive deliveries."""
    workspace.couriers.refresh()
    try:
        courier = workspace.couriers.get(courier_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if courier.license_status != LicenseStatus.VALID:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Courier {courier.name} has an expired license and cannot be assigned.",
        )


@router.get("", response_model=List[DeliveryModel], status_code=status.HTTP_200_OK)
def list_deliveries(
    status_filter: Optional[str] = Query(default=None, alias="status", description="Optional status filter"),
    courier_id: Optional[str] = Query(default=None, description="Optional courier filter"),
    workspace: Workspace = Depends(get_workspace),
) -> List[DeliveryModel]:
    workspace.deliveries.refresh()
    criteria = {}
    if status_filter:
        criteria["status"] = status_filter
    if courier_id:
        criteria["courier_id"] = courier_id
    return [DeliveryModel.model_validate(item) for item in workspace.deliveries.filter(**criteria)]


@router.get("/table", response_model=DeliveryTableResponse, status_code=status.HTTP_200_OK)
def delivery_table(workspace: Workspace = Depends(get_workspace)) -> DeliveryTableResponse:
    """Tabular view with the realized (delivered) revenue total."""
    items = workspace.deliveries.refresh()
    return DeliveryTableResponse(
        items=[DeliveryModel.model_validate(item) for item in items],
        realized_total=workspace.deliveries.realized_total(),
    )


@router.get("/search", response_model=List[DeliveryModel], status_code=status.HTTP_200_OK)
def search_deliveries(
    q: str = Query(default="", description="Order number fragment or customer name"),
    workspace: Workspace = Depends(get_workspace),
) -> List[DeliveryModel]:
    workspace.deliveries.refresh()
    return [DeliveryModel.model_validate(item) for item in workspace.deliveries.search(q)]


@router.post("/form/steps/{step}", response_model=FormValidationResponse, status_code=status.HTTP_200_OK)
def validate_delivery_step(step: int, payload: Dict[str, Any] = Body(...)) -> FormValidationResponse:
    try:
        errors = validate_step("delivery", step, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return FormValidationResponse(step=step, valid=not errors, errors=errors)


@router.get("/{delivery_id}", response_model=DeliveryModel, status_code=status.HTTP_200_OK)
def get_delivery(delivery_id: str, workspace: Workspace = Depends(get_workspace)) -> DeliveryModel:
    workspace.deliveries.refresh()
    try:
        return DeliveryModel.model_validate(workspace.deliveries.get(delivery_id))
    except NotFoundError as exc:
        raise to_http_exception(exc) from exc


@router.post("", response_model=DeliveryModel, status_code=status.HTTP_201_CREATED)
def create_delivery(
    payload: DeliveryForm,
    workspace: Workspace = Depends(get_workspace),
    user: AuthUser = Depends(require_user),
) -> DeliveryModel:
    _ensure_courier_assignable(workspace, str(payload.courier_id))
    try:
        created = workspace.deliveries.create(payload.to_row(), actor=user)
    except RemoteStoreError as exc:
        raise to_http_exception(exc) from exc
    return DeliveryModel.model_validate(created)


@router.patch("/{delivery_id}", response_model=DeliveryModel, status_code=status.HTTP_200_OK)
def update_delivery(
    delivery_id: str,
    payload: DeliveryUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> DeliveryModel:
    changes = payload.to_changes()
    if changes.get("courier_id"):
        _ensure_courier_assignable(workspace, str(changes["courier_id"]))
    try:
        updated = workspace.deliveries.update(delivery_id, changes)
    except RemoteStoreError as exc:
        raise to_http_exception(exc) from exc
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Delivery {delivery_id} not found")
    return DeliveryModel.model_validate(updated)


@router.delete("/{delivery_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_delivery(delivery_id: str, workspace: Workspace = Depends(get_workspace)) -> Response:
    try:
        workspace.deliveries.delete(delivery_id)
    except RemoteStoreError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
