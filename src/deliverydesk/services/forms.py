"""Multi-step form definitions and per-step validation."""

from __future__ import annotations

from typing import Any, Mapping, Type

from pydantic import BaseModel, ValidationError

from ..schemas.couriers import CourierForm
from ..schemas.customers import CustomerForm
from ..schemas.deliveries import DeliveryForm

FORM_STEPS: dict[str, tuple[Type[BaseModel], dict[int, tuple[str, ...]]]] = {
    "customer": (
        CustomerForm,
        {
            1: ("registered_on", "name", "person_type", "cpf", "cnpj"),
            2: ("phone", "email"),
            3: ("postal_code", "address", "city", "state", "complement", "note"),
        },
    ),
    "courier": (
        CourierForm,
        {
            1: ("registered_on", "name", "phone", "email"),
            2: ("vehicle_model", "vehicle_plate", "license_number", "license_expiry", "note"),
        },
    ),
    "delivery": (
        DeliveryForm,
        {
            1: ("order_date", "promised_date", "customer_id", "courier_id"),
            2: ("description", "value", "status", "final_delivery_date", "note"),
            3: (
                "origin",
                "destination",
                "destination_lat",
                "destination_lng",
                "tracking_enabled",
                "tracking_code",
            ),
        },
    ),
}


def form_error_map(exc: ValidationError, fields: tuple[str, ...] | None = None) -> dict[str, str]:
    """Flatten pydantic errors into ``{field: message}``, first message per field."""

    errors: dict[str, str] = {}
    for error in exc.errors():
        location = error.get("loc") or ()
        field = str(location[0]) if location else "__root__"
        if fields is not None and field not in fields:
            continue
        errors.setdefault(field, error.get("msg", "Invalid value"))
    return errors


def validate_step(form: str, step: int, data: Mapping[str, Any]) -> dict[str, str]:
    """Validate only the fields belonging to ``step``; returns per-field errors."""

    try:
        model, steps = FORM_STEPS[form]
    except KeyError as exc:
        raise ValueError(f"Unknown form '{form}'.") from exc
    if step not in steps:
        raise ValueError(f"Form '{form}' has no step {step}.")

    try:
        model.model_validate(dict(data))
    except ValidationError as exc:
        return form_error_map(exc, steps[step])
    return {}
