"""Postal code lookup schema."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class PostalAddressModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    street: str
    district: str
    city: str
    state: str
    postal_code: str
