"""Postal code lookup used by the customer form."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ...container import Workspace
from ...errors import PostalCodeError
from ...schemas.postal_codes import PostalAddressModel
from ..deps import get_workspace, require_user
from ..errors import to_http_exception

router = APIRouter(prefix="/postal-codes", tags=["postal-codes"], dependencies=[Depends(require_user)])


@router.get("/{code}", response_model=PostalAddressModel, status_code=status.HTTP_200_OK)
def lookup_postal_code(code: str, workspace: Workspace = Depends(get_workspace)) -> PostalAddressModel:
    try:
        address = workspace.postal_codes.lookup(code)
    except PostalCodeError as exc:
        raise to_http_exception(exc) from exc
    return PostalAddressModel.model_validate(address)
