"""Recent user-facing notifications."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Query, status

from ...container import Workspace
from ...schemas.notifications import NotificationModel
from ..deps import get_workspace, require_user

router = APIRouter(prefix="/notifications", tags=["notifications"], dependencies=[Depends(require_user)])


@router.get("", response_model=List[NotificationModel], status_code=status.HTTP_200_OK)
def list_notifications(
    limit: int | None = Query(default=None, ge=1, le=500),
    workspace: Workspace = Depends(get_workspace),
) -> List[NotificationModel]:
    return [NotificationModel.model_validate(item) for item in workspace.notifier.recent(limit)]
