from datetime import date, datetime, timezone

from src.deliverydesk.models.domain import DeadlineStatus, DeliveryStatus, LicenseStatus
from src.deliverydesk.services.deadlines import days_between, deadline_status, deadline_window, license_status

NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def test_license_expired_only_when_strictly_before_now() -> None:
    assert license_status(date(2024, 6, 14), NOW) == LicenseStatus.EXPIRED
    assert license_status(date(2024, 7, 1), NOW) == LicenseStatus.VALID
    assert license_status(datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc), NOW) == LicenseStatus.VALID


def test_open_delivery_is_late_after_promised_date() -> None:
    promised = date(2024, 6, 10)
    assert deadline_status(promised, DeliveryStatus.SHIPPED, today=date(2024, 6, 10)) == DeadlineStatus.ON_TIME
    assert deadline_status(promised, DeliveryStatus.SHIPPED, today=date(2024, 6, 11)) == DeadlineStatus.LATE


def test_delivered_uses_final_delivery_date() -> None:
    promised = date(2024, 6, 10)
    on_time = deadline_status(promised, "delivered", final_delivery_date=date(2024, 6, 9), today=date(2024, 7, 1))
    late = deadline_status(promised, "delivered", final_delivery_date=date(2024, 6, 12), today=date(2024, 6, 1))
    assert on_time == DeadlineStatus.DELIVERED_ON_TIME
    assert late == DeadlineStatus.DELIVERED_LATE


def test_delivered_without_final_date_falls_back_to_today() -> None:
    promised = date(2024, 6, 10)
    assert deadline_status(promised, "delivered", today=date(2024, 6, 10)) == DeadlineStatus.DELIVERED_ON_TIME
    assert deadline_status(promised, "delivered", today=date(2024, 6, 20)) == DeadlineStatus.DELIVERED_LATE


def test_deadline_window_counts_whole_days() -> None:
    assert days_between(date(2024, 6, 1), date(2024, 6, 5)) == 4
    assert deadline_window(date(2024, 6, 1), date(2024, 6, 5), today=date(2024, 6, 3)) == (4, 2)
    assert deadline_window(date(2024, 6, 1), date(2024, 6, 5), date(2024, 6, 7), date(2024, 6, 30)) == (4, 6)
