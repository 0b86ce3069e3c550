"""Customer endpoints."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Response, status

from ...container import Workspace
from ...db.store import AuthUser
from ...errors import NotFoundError, RemoteStoreError
from ...schemas.customers import CustomerForm, CustomerModel, CustomerUpdate
from ...schemas.deliveries import FormValidationResponse
from ...services.forms import validate_step
from ..deps import get_workspace, require_user
from ..errors import to_http_exception

router = APIRouter(prefix="/customers", tags=["customers"], dependencies=[Depends(require_user)])


@router.get("", response_model=List[CustomerModel], status_code=status.HTTP_200_OK)
def list_customers(workspace: Workspace = Depends(get_workspace)) -> List[CustomerModel]:
    """Newest first, as fetched from the store."""
    items = workspace.customers.refresh()
    return [CustomerModel.model_validate(item) for item in items]


@router.post("/form/steps/{step}", response_model=FormValidationResponse, status_code=status.HTTP_200_OK)
def validate_customer_step(step: int, payload: Dict[str, Any] = Body(...)) -> FormValidationResponse:
    try:
        errors = validate_step("customer", step, payload)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return FormValidationResponse(step=step, valid=not errors, errors=errors)


@router.get("/{customer_id}", response_model=CustomerModel, status_code=status.HTTP_200_OK)
def get_customer(customer_id: str, workspace: Workspace = Depends(get_workspace)) -> CustomerModel:
    workspace.customers.refresh()
    try:
        return CustomerModel.model_validate(workspace.customers.get(customer_id))
    except NotFoundError as exc:
        raise to_http_exception(exc) from exc


@router.post("", response_model=CustomerModel, status_code=status.HTTP_201_CREATED)
def create_customer(
    payload: CustomerForm,
    workspace: Workspace = Depends(get_workspace),
    user: AuthUser = Depends(require_user),
) -> CustomerModel:
    try:
        created = workspace.customers.create(payload.to_row(), actor=user)
    except RemoteStoreError as exc:
        raise to_http_exception(exc) from exc
    return CustomerModel.model_validate(created)


@router.patch("/{customer_id}", response_model=CustomerModel, status_code=status.HTTP_200_OK)
def update_customer(
    customer_id: str,
    payload: CustomerUpdate,
    workspace: Workspace = Depends(get_workspace),
) -> CustomerModel:
    try:
        updated = workspace.customers.update(customer_id, payload.to_changes())
    except RemoteStoreError as exc:
        raise to_http_exception(exc) from exc
    if updated is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Customer {customer_id} not found")
    return CustomerModel.model_validate(updated)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_customer(customer_id: str, workspace: Workspace = Depends(get_workspace)) -> Response:
    try:
        workspace.customers.delete(customer_id)
    except RemoteStoreError as exc:
        raise to_http_exception(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
