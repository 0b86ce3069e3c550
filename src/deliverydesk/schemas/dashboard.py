"""Dashboard API schemas."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class DashboardKpisModel(BaseModel):
    total_deliveries: int
    delivered: int
    pending: int
    problems: int
    late: int
    revenue_total: float
    revenue_realized: float
    revenue_pending: float
    success_rate: float
    average_order_value: float
    total_customers: int
    total_couriers: int


class StatusCountModel(BaseModel):
    status: str
    label: str
    total: int


class NamedCountModel(BaseModel):
    name: str
    total: int


class MonthlyPointModel(BaseModel):
    month: str
    deliveries: int
    revenue: float


class StateCountModel(BaseModel):
    state: str
    total: int


class CourierRankModel(BaseModel):
    courier_id: Optional[str] = None
    name: str
    total: int
    delivered: int
    revenue: float
    success_rate: float


class DashboardResponse(BaseModel):
    kpis: DashboardKpisModel
    by_status: List[StatusCountModel]
    by_courier: List[NamedCountModel]
    by_month: List[MonthlyPointModel]
    by_state: List[StateCountModel]
    top_couriers: List[CourierRankModel]
