"""Mapping from application errors to HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status

from ..errors import (
    AuthorizationError,
    BoardMoveError,
    DeliveryDeskError,
    NotFoundError,
    PostalCodeError,
    RemoteStoreError,
)

_STATUS_BY_ERROR: tuple[tuple[type[DeliveryDeskError], int], ...] = (
    (AuthorizationError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (PostalCodeError, status.HTTP_400_BAD_REQUEST),
    (BoardMoveError, status.HTTP_502_BAD_GATEWAY),
    (RemoteStoreError, status.HTTP_502_BAD_GATEWAY),
)


def to_http_exception(exc: DeliveryDeskError) -> HTTPException:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))
