"""Notification schema."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class NotificationModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    level: str
    message: str
    created_at: datetime
