from datetime import date

import pytest

from src.deliverydesk.models.domain import DeadlineStatus, Delivery
from src.deliverydesk.services.dashboard import compute_dashboard, compute_kpis, filter_deliveries
from src.deliverydesk.services.dashboard.stats import monthly_series


def _delivery(
    did: str,
    order_date: date,
    status: str,
    value: float,
    courier_id: str | None = "c1",
    courier_name: str | None = "Joao",
    state: str | None = "SP",
    deadline: DeadlineStatus = DeadlineStatus.ON_TIME,
) -> Delivery:
    return Delivery(
        id=did,
        created_at=None,
        order_number=int(did.strip("d") or 0),
        order_date=order_date,
        promised_date=order_date,
        customer_id="cust",
        courier_id=courier_id,
        description="Parcel",
        value=value,
        status=status,
        customer_state=state,
        courier_name=courier_name,
        deadline_status=deadline,
    )


@pytest.fixture
def deliveries() -> list[Delivery]:
    return [
        _delivery("d1", date(2024, 1, 5), "delivered", 100.0),
        _delivery("d2", date(2024, 1, 31), "shipped", 50.0, deadline=DeadlineStatus.LATE),
        _delivery("d3", date(2024, 2, 1), "lost", 30.0, courier_id="c2", courier_name="Ana", state="RJ"),
        _delivery("d4", date(2023, 12, 20), "order_confirmed", 20.0, courier_id=None, courier_name=None, state=None),
    ]


def test_kpis_for_empty_set_are_zero() -> None:
    kpis = compute_kpis([], total_customers=3, total_couriers=2)

    assert kpis["total_deliveries"] == 0
    assert kpis["success_rate"] == 0
    assert kpis["average_order_value"] == 0
    assert kpis["total_customers"] == 3
    assert kpis["total_couriers"] == 2


def test_kpis_partition_statuses(deliveries) -> None:
    kpis = compute_kpis(deliveries, total_customers=10, total_couriers=4)

    assert kpis["total_deliveries"] == 4
    assert kpis["delivered"] == 1
    assert kpis["problems"] == 1
    assert kpis["pending"] == 2
    assert kpis["late"] == 1
    assert kpis["revenue_total"] == pytest.approx(200.0)
    assert kpis["revenue_realized"] == pytest.approx(100.0)
    assert kpis["revenue_pending"] == pytest.approx(100.0)
    assert kpis["success_rate"] == pytest.approx(25.0)
    assert kpis["average_order_value"] == pytest.approx(50.0)


def test_date_filter_is_inclusive(deliveries) -> None:
    filtered = filter_deliveries(deliveries, start=date(2024, 1, 5), end=date(2024, 1, 31))

    assert [d.id for d in filtered] == ["d1", "d2"]


def test_courier_filter(deliveries) -> None:
    assert [d.id for d in filter_deliveries(deliveries, courier_id="c2")] == ["d3"]


def test_monthly_series_is_chronological(deliveries) -> None:
    series = monthly_series(deliveries)

    assert [point["month"] for point in series] == ["Dec 23", "Jan 24", "Feb 24"]
    assert series[1]["deliveries"] == 2
    assert series[1]["revenue"] == pytest.approx(150.0)


def test_dashboard_series(deliveries) -> None:
    payload = compute_dashboard(deliveries, total_customers=10, total_couriers=4, start=date(2024, 1, 1))

    assert payload["kpis"]["total_deliveries"] == 3
    assert payload["by_courier"] == [{"name": "Joao", "total": 2}, {"name": "Ana", "total": 1}]
    assert {entry["state"]: entry["total"] for entry in payload["by_state"]} == {"SP": 2, "RJ": 1}
    top = payload["top_couriers"][0]
    assert top["courier_id"] == "c1"
    assert top["success_rate"] == pytest.approx(50.0)
    labels = {entry["status"]: entry["label"] for entry in payload["by_status"]}
    assert set(labels) == {"delivered", "shipped", "lost"}


def test_unassigned_courier_and_missing_state_labels(deliveries) -> None:
    payload = compute_dashboard(deliveries, total_customers=0, total_couriers=0, end=date(2023, 12, 31))

    assert payload["by_courier"] == [{"name": "Unassigned", "total": 1}]
    assert payload["by_state"] == [{"state": "N/A", "total": 1}]
