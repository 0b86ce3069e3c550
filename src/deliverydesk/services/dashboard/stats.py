"""Dashboard KPIs and chart series computed from the cached delivery list."""

from __future__ import annotations

from collections import Counter
from datetime import date, datetime
from typing import Iterable, Optional, Sequence

from ...models.domain import PROBLEM_STATUSES, STATUS_LABELS, DeadlineStatus, Delivery, DeliveryStatus

UNASSIGNED_LABEL = "Unassigned"
UNKNOWN_STATE = "N/A"
MONTH_KEY_FORMAT = "%b %y"


def filter_deliveries(
    deliveries: Iterable[Delivery],
    start: Optional[date] = None,
    end: Optional[date] = None,
    courier_id: Optional[str] = None,
) -> list[Delivery]:
    """Date range is inclusive on both ends."""

    return [
        delivery
        for delivery in deliveries
        if (start is None or delivery.order_date >= start)
        and (end is None or delivery.order_date <= end)
        and (courier_id is None or str(delivery.courier_id) == str(courier_id))
    ]


def _ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def compute_kpis(deliveries: Sequence[Delivery], total_customers: int, total_couriers: int) -> dict:
    total = len(deliveries)
    delivered = sum(1 for d in deliveries if d.status == DeliveryStatus.DELIVERED)
    problems = sum(1 for d in deliveries if d.status in PROBLEM_STATUSES)
    pending = sum(
        1 for d in deliveries if d.status != DeliveryStatus.DELIVERED and d.status not in PROBLEM_STATUSES
    )
    late = sum(1 for d in deliveries if d.deadline_status == DeadlineStatus.LATE)

    revenue_total = sum(d.value for d in deliveries)
    revenue_realized = sum(d.value for d in deliveries if d.status == DeliveryStatus.DELIVERED)

    return {
        "total_deliveries": total,
        "delivered": delivered,
        "pending": pending,
        "problems": problems,
        "late": late,
        "revenue_total": revenue_total,
        "revenue_realized": revenue_realized,
        "revenue_pending": revenue_total - revenue_realized,
        "success_rate": _ratio(delivered, total) * 100,
        "average_order_value": _ratio(revenue_total, total),
        "total_customers": total_customers,
        "total_couriers": total_couriers,
    }


def status_histogram(deliveries: Sequence[Delivery]) -> list[dict]:
    counts: Counter[str] = Counter(d.status for d in deliveries)
    return [
        {"status": status, "label": STATUS_LABELS.get(status, status), "total": total}
        for status, total in counts.items()
    ]


def deliveries_per_courier(deliveries: Sequence[Delivery]) -> list[dict]:
    counts: Counter[str] = Counter(d.courier_name or UNASSIGNED_LABEL for d in deliveries)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0].lower()))
    return [{"name": name, "total": total} for name, total in ranked]


def month_key(day: date) -> str:
    return day.strftime(MONTH_KEY_FORMAT)


def _month_sort_key(key: str) -> datetime:
    return datetime.strptime(f"01 {key}", f"%d {MONTH_KEY_FORMAT}")


def monthly_series(deliveries: Sequence[Delivery]) -> list[dict]:
    months: dict[str, dict] = {}
    for delivery in deliveries:
        key = month_key(delivery.order_date)
        bucket = months.setdefault(key, {"month": key, "deliveries": 0, "revenue": 0.0})
        bucket["deliveries"] += 1
        bucket["revenue"] += delivery.value
    return sorted(months.values(), key=lambda bucket: _month_sort_key(bucket["month"]))


def deliveries_per_state(deliveries: Sequence[Delivery], top_n: int = 8) -> list[dict]:
    counts: Counter[str] = Counter(d.customer_state or UNKNOWN_STATE for d in deliveries)
    ranked = sorted(counts.items(), key=lambda item: -item[1])
    return [{"state": state, "total": total} for state, total in ranked[:top_n]]


def courier_leaderboard(deliveries: Sequence[Delivery], top_n: int = 5) -> list[dict]:
    stats: dict[Optional[str], dict] = {}
    for delivery in deliveries:
        entry = stats.setdefault(
            delivery.courier_id,
            {
                "courier_id": delivery.courier_id,
                "name": delivery.courier_name or UNASSIGNED_LABEL,
                "total": 0,
                "delivered": 0,
                "revenue": 0.0,
            },
        )
        entry["total"] += 1
        entry["revenue"] += delivery.value
        if delivery.status == DeliveryStatus.DELIVERED:
            entry["delivered"] += 1

    ranked = sorted(stats.values(), key=lambda entry: -entry["total"])
    return [
        {**entry, "success_rate": _ratio(entry["delivered"], entry["total"]) * 100}
        for entry in ranked[:top_n]
    ]


def compute_dashboard(
    deliveries: Iterable[Delivery],
    total_customers: int,
    total_couriers: int,
    *,
    start: Optional[date] = None,
    end: Optional[date] = None,
    courier_id: Optional[str] = None,
) -> dict:
    """Recompute every KPI and series from the full filtered set."""

    filtered = filter_deliveries(deliveries, start=start, end=end, courier_id=courier_id)
    return {
        "kpis": compute_kpis(filtered, total_customers, total_couriers),
        "by_status": status_histogram(filtered),
        "by_courier": deliveries_per_courier(filtered),
        "by_month": monthly_series(filtered),
        "by_state": deliveries_per_state(filtered),
        "top_couriers": courier_leaderboard(filtered),
    }
