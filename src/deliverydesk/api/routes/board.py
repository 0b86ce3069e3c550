"""Kanban status board endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from ...container import Workspace
from ...errors import BoardMoveError
from ...schemas.deliveries import (
    BoardColumnModel,
    BoardMoveRequest,
    BoardMoveResponse,
    BoardResponse,
    DeliveryModel,
)
from ...services.board import COLUMNS
from ..deps import get_workspace, require_user
from ..errors import to_http_exception

router = APIRouter(prefix="/board", tags=["board"], dependencies=[Depends(require_user)])


@router.get("", response_model=BoardResponse, status_code=status.HTTP_200_OK)
def get_board(workspace: Workspace = Depends(get_workspace)) -> BoardResponse:
    workspace.deliveries.refresh()
    grouped = workspace.board.columns()
    return BoardResponse(
        columns=[
            BoardColumnModel(
                key=column.key,
                title=column.title,
                status=column.status,
                items=[DeliveryModel.model_validate(item) for item in grouped[column.key]],
            )
            for column in COLUMNS
        ]
    )


@router.post("/move", response_model=BoardMoveResponse, status_code=status.HTTP_200_OK)
def move_card(payload: BoardMoveRequest, workspace: Workspace = Depends(get_workspace)) -> BoardMoveResponse:
    """Apply a drag-and-drop; a failed write is reverted and reported as 502."""
    if not workspace.deliveries.items:
        workspace.deliveries.refresh()
    try:
        result = workspace.board.move(payload.active_id, payload.over_id)
    except BoardMoveError as exc:
        raise to_http_exception(exc) from exc
    if result.source_column is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Delivery {payload.active_id} not found")
    return BoardMoveResponse(
        moved=result.moved,
        source_column=result.source_column,
        destination_column=result.destination_column,
        status=result.status,
    )
