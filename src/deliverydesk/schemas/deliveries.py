"""Delivery form, board and response schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.domain import DeadlineStatus, DeliveryStatus


class DeliveryForm(BaseModel):
    order_date: date
    promised_date: date
    description: str = Field(..., min_length=3)
    value: float = Field(..., ge=0.01)
    customer_id: UUID
    courier_id: UUID
    status: DeliveryStatus = DeliveryStatus.ORDER_CONFIRMED
    final_delivery_date: Optional[date] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    destination_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    destination_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    tracking_enabled: bool = False
    tracking_code: Optional[str] = None
    note: Optional[str] = None

    def to_row(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class DeliveryUpdate(BaseModel):
    order_date: Optional[date] = None
    promised_date: Optional[date] = None
    description: Optional[str] = Field(default=None, min_length=3)
    value: Optional[float] = Field(default=None, ge=0.01)
    customer_id: Optional[UUID] = None
    courier_id: Optional[UUID] = None
    status: Optional[DeliveryStatus] = None
    final_delivery_date: Optional[date] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    destination_lat: Optional[float] = Field(default=None, ge=-90, le=90)
    destination_lng: Optional[float] = Field(default=None, ge=-180, le=180)
    tracking_enabled: Optional[bool] = None
    tracking_code: Optional[str] = None
    note: Optional[str] = None

    @field_validator(
        "order_date", "promised_date", "description", "value", "customer_id", "courier_id", "status", "tracking_enabled"
    )
    @classmethod
    def _required_columns_not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    def to_changes(self) -> dict:
        return self.model_dump(mode="json", exclude_unset=True)


class DeliveryModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: Optional[datetime] = None
    order_number: int
    order_date: date
    promised_date: date
    customer_id: Optional[str] = None
    courier_id: Optional[str] = None
    description: str
    value: float
    status: str
    final_delivery_date: Optional[date] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    destination_lat: Optional[float] = None
    destination_lng: Optional[float] = None
    tracking_enabled: bool = False
    tracking_code: Optional[str] = None
    note: Optional[str] = None
    customer_name: Optional[str] = None
    customer_state: Optional[str] = None
    customer_postal_code: Optional[str] = None
    courier_name: Optional[str] = None
    deadline_status: Optional[DeadlineStatus] = None
    max_days: Optional[int] = None
    elapsed_days: Optional[int] = None


class BoardColumnModel(BaseModel):
    key: str
    title: str
    status: DeliveryStatus
    items: List[DeliveryModel]


class BoardResponse(BaseModel):
    columns: List[BoardColumnModel]


class BoardMoveRequest(BaseModel):
    active_id: str = Field(..., description="Id of the dragged delivery card.")
    over_id: Optional[str] = Field(
        default=None,
        description="Drop target: a column key or the id of another card. Null when dropped outside.",
    )


class BoardMoveResponse(BaseModel):
    moved: bool
    source_column: Optional[str] = None
    destination_column: Optional[str] = None
    status: Optional[str] = None


class DeliveryTableResponse(BaseModel):
    items: List[DeliveryModel]
    realized_total: float


class FormValidationResponse(BaseModel):
    step: int
    valid: bool
    errors: Dict[str, str]
