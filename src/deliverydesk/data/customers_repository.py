"""Customer collection backed by the ``customers`` table."""

from __future__ import annotations

from typing import Any, Mapping

from ..db.store import CUSTOMERS_TABLE
from ..models.domain import Customer
from .base import CachedRepository, clean_str, parse_date, parse_datetime


def customer_from_row(row: Mapping[str, Any]) -> Customer:
    return Customer(
        id=str(row["id"]),
        created_at=parse_datetime(row.get("created_at")),
        name=(row.get("name") or "").strip(),
        phone=(row.get("phone") or "").strip(),
        email=(row.get("email") or "").strip(),
        address=(row.get("address") or "").strip(),
        city=(row.get("city") or "").strip(),
        state=(row.get("state") or "").strip(),
        postal_code=(row.get("postal_code") or "").strip(),
        user_id=clean_str(row.get("user_id")),
        cpf=clean_str(row.get("cpf")),
        cnpj=clean_str(row.get("cnpj")),
        complement=clean_str(row.get("complement")),
        note=clean_str(row.get("note")),
        registered_on=parse_date(row.get("registered_on")),
    )


class CustomerRepository(CachedRepository[Customer]):
    table = CUSTOMERS_TABLE
    label = "customer"

    def _from_row(self, row: Mapping[str, Any]) -> Customer:
        return customer_from_row(row)
