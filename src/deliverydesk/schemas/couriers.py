"""Courier form and response schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ..models.domain import LicenseStatus


class CourierForm(BaseModel):
    registered_on: date = Field(default_factory=date.today)
    name: str = Field(..., min_length=3)
    phone: str = Field(..., min_length=10)
    email: EmailStr
    vehicle_model: str = Field(..., min_length=3)
    vehicle_plate: str = Field(..., min_length=7)
    license_number: str = Field(..., min_length=9)
    license_expiry: date
    note: Optional[str] = None

    def to_row(self) -> dict:
        return self.model_dump(mode="json", exclude_none=True)


class CourierUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=3)
    phone: Optional[str] = Field(default=None, min_length=10)
    email: Optional[EmailStr] = None
    vehicle_model: Optional[str] = Field(default=None, min_length=3)
    vehicle_plate: Optional[str] = Field(default=None, min_length=7)
    license_number: Optional[str] = Field(default=None, min_length=9)
    license_expiry: Optional[date] = None
    note: Optional[str] = None

    @field_validator(
        "name", "phone", "email", "vehicle_model", "vehicle_plate", "license_number", "license_expiry"
    )
    @classmethod
    def _required_columns_not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    def to_changes(self) -> dict:
        return self.model_dump(mode="json", exclude_unset=True)


class CourierModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: Optional[datetime] = None
    registered_on: Optional[date] = None
    name: str
    phone: str
    email: str
    vehicle_model: str
    vehicle_plate: str
    license_number: str
    license_expiry: date
    license_status: LicenseStatus
    note: Optional[str] = None
    user_id: Optional[str] = None
