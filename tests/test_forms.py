import pytest
from pydantic import ValidationError

from src.deliverydesk.schemas.auth import SignUpRequest
from src.deliverydesk.schemas.customers import CustomerForm, CustomerUpdate
from src.deliverydesk.services.forms import validate_step


def _customer_payload(**overrides) -> dict:
    return {
        "name": "Maria Silva",
        "person_type": "individual",
        "cpf": "529.982.247-25",
        "phone": "11987654321",
        "email": "maria@example.com",
        "postal_code": "01310-100",
        "address": "Avenida Paulista, 1000",
        "city": "Sao Paulo",
        "state": "SP",
        **overrides,
    }


def test_individual_requires_valid_cpf() -> None:
    with pytest.raises(ValidationError) as excinfo:
        CustomerForm(**_customer_payload(cpf="12345678900"))

    assert [error["loc"] for error in excinfo.value.errors()] == [("cpf",)]


def test_company_requires_valid_cnpj_and_ignores_cpf() -> None:
    form = CustomerForm(**_customer_payload(person_type="company", cpf=None, cnpj="11.222.333/0001-81"))

    row = form.to_row()
    assert row["cnpj"] == "11.222.333/0001-81"
    assert "person_type" not in row
    assert "cpf" not in row

    with pytest.raises(ValidationError):
        CustomerForm(**_customer_payload(person_type="company", cnpj=None))


def test_customer_update_checks_tax_ids_only_when_sent() -> None:
    assert CustomerUpdate(name="New Name").to_changes() == {"name": "New Name"}
    with pytest.raises(ValidationError):
        CustomerUpdate(cpf="11111111111")


def test_step_validation_reports_only_that_steps_fields() -> None:
    errors = validate_step("customer", 1, {"name": "Al", "cpf": "52998224725"})

    assert set(errors) == {"name"}


def test_step_validation_passes_with_complete_step() -> None:
    assert validate_step("customer", 2, {"phone": "11987654321", "email": "maria@example.com"}) == {}
    assert set(validate_step("customer", 2, {"phone": "123", "email": "not-an-email"})) == {"phone", "email"}


def test_delivery_step_checks_value_floor() -> None:
    errors = validate_step("delivery", 2, {"description": "Box", "value": 0})

    assert set(errors) == {"value"}


def test_unknown_form_or_step() -> None:
    with pytest.raises(ValueError):
        validate_step("invoice", 1, {})
    with pytest.raises(ValueError):
        validate_step("courier", 3, {})


def test_sign_up_passwords_must_match() -> None:
    with pytest.raises(ValidationError):
        SignUpRequest(full_name="Ops User", email="ops@example.com", password="secret123", confirm_password="other123")
