"""Courier endpoints."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from ...container import Workspace
from ...db.store import AuthUser
from ...errors import NotFoundError, RemoteStoreError
from ...schemas.couriers import CourierForm, CourierModel, CourierUpdate
from ...schemas.deliveries import FormValidationResponse
from ...services.forms import validate_step
from ..deps import get_workspace, require_user
from ..errors import to_http_exception

router = APIRouter(prefix="/couriers", tags=["couriers"], dependencies=[Depends(require_user)])


@router.get("", response_model=List[CourierModel], status_code=status.HTTP_200_OK)
def list_couriers(workspace: Workspace = Depends(get_workspace)) -> List[CourierModel]:
    items = workspace.couriers.refresh()
    return [CourierModel.model_validate(item) for item in items]


@router.get("/available", response_model=List[CourierModel], status_code=status.HTTP_200_OK)
def list_available_couriers(workspace: Workspace = Depends(get_workspace)) -> List[CourierModel]:
    """Couriers with a valid license, the only ones offered for assignment."""
    workspace.couriers.refresh()
    return [CourierModel.model_validate(item) for item in workspace.couriers.available()]


@router.post("/form/steps/{step}", response_model=FormValidationResponse, status_code=status.HTTP_200_OK)
def validate_courier_step(step: int, payload: Dict[str, Any] = Body(...)) -> FormValidationResponse:
    try:
        errors = validate_step("courier", step, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return FormValidationResponse(step=step, valid=not errors, errors=errors)


@router.get("/{courier_id}", response_model=CourierModel, status_code=status.HTTP_200_OK)
def get_courier(courier_id: str, workspace: Workspace = Depends(get_workspace)) -> CourierModel:
    workspace.couriers.refresh()
    try:
        return CourierModel.model_validate(workspace.couriers.get(courier_id))
    except NotFoundError as exc:
        raise to_http_exception(exc) from exc


@router.post("", response_model=CourierModel, status_code=status.HTTP_201_CREATED)
def create_courier(
    payload: CourierForm,
    workspace: Workspace = Depends(get_workspace),
    user: AuthUser = Depends(require_user),
) -> CourierModel:
    try:
        created = workspace.couriers.create(payload.to_row(), actor=user)
    except RemoteStoreError as exc:
        raise to_http_exception(exc) from exc
    return CourierModel.model_validate(created)


@router.patch("/{courier_id}", response_model=CourierModel, status_code=status.HTTP_200_OK)
def update_courier(
    courier_id: str,
    payload: CourierUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> CourierModel:
    try:
        updated = workspace.couriers.update(courier_id, payload.to_changes())
    except RemoteStoreError as exc:
        raise to_http_exception(exc) from exc
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Courier {courier_id} not found")
    return CourierModel.model_validate(updated)


@router.delete("/{courier_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_courier(courier_id: str, workspace: Workspace = Depends(get_workspace)) -> Response:
    try:
        workspace.couriers.delete(courier_id)
    except RemoteStoreError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
