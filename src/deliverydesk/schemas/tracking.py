"""Tracking map schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from .deliveries import DeliveryModel


class MarkerModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    kind: str
    delivery_id: str
    lat: float
    lng: float
    label: str
    updated_at: Optional[datetime] = None


class RouteOverlayModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    delivery_id: str
    coordinates: List[Tuple[float, float]]
    distance_m: float
    duration_s: float
    distance_label: str
    duration_label: str


class PositionModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    delivery_id: str
    latitude: float
    longitude: float
    timestamp: Optional[datetime] = None


class BoundsModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    south: float
    west: float
    north: float
    east: float


class ActiveCourierModel(BaseModel):
    id: str
    name: str
    active: int


class TrackingMapResponse(BaseModel):
    courier_filter: Optional[str] = None
    loading: bool
    deliveries: List[DeliveryModel]
    couriers: List[ActiveCourierModel]
    positions: List[PositionModel]
    markers: List[MarkerModel]
    routes: List[RouteOverlayModel]
    bounds: Optional[BoundsModel] = None
