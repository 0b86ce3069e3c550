"""Customer form and response schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationInfo, field_validator

from ..services.documents import validate_cnpj, validate_cpf

PersonType = Literal["individual", "company"]


class CustomerForm(BaseModel):
    """Full customer form; ``person_type`` selects which tax id is required."""

    registered_on: date = Field(default_factory=date.today)
    name: str = Field(..., min_length=3)
    person_type: PersonType = "individual"
    cpf: Optional[str] = Field(default=None, validate_default=True)
    cnpj: Optional[str] = Field(default=None, validate_default=True)
    phone: str = Field(..., min_length=10)
    email: EmailStr
    postal_code: str = Field(..., min_length=8)
    address: str = Field(..., min_length=3)
    city: str = Field(..., min_length=3)
    state: str = Field(..., min_length=2)
    complement: Optional[str] = None
    note: Optional[str] = None

    @field_validator("cpf")
    @classmethod
    def _check_cpf(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if info.data.get("person_type") == "individual" and not (value and validate_cpf(value)):
            raise ValueError("Invalid CPF")
        return value

    @field_validator("cnpj")
    @classmethod
    def _check_cnpj(cls, value: Optional[str], info: ValidationInfo) -> Optional[str]:
        if info.data.get("person_type") == "company" and not (value and validate_cnpj(value)):
            raise ValueError("Invalid CNPJ")
        return value

    def to_row(self) -> dict:
        # person_type only drives validation; it is not a column.
        return self.model_dump(mode="json", exclude={"person_type"}, exclude_none=True)


class CustomerUpdate(BaseModel):
    """Partial customer update; tax ids are checksum-validated when present."""

    name: Optional[str] = Field(default=None, min_length=3)
    cpf: Optional[str] = None
    cnpj: Optional[str] = None
    phone: Optional[str] = Field(default=None, min_length=10)
    email: Optional[EmailStr] = None
    postal_code: Optional[str] = Field(default=None, min_length=8)
    address: Optional[str] = Field(default=None, min_length=3)
    city: Optional[str] = Field(default=None, min_length=3)
    state: Optional[str] = Field(default=None, min_length=2)
    complement: Optional[str] = None
    note: Optional[str] = None

    @field_validator("name", "phone", "email", "postal_code", "address", "city", "state")
    @classmethod
    def _required_columns_not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("cpf")
    @classmethod
    def _check_cpf(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not validate_cpf(value):
            raise ValueError("Invalid CPF")
        return value

    @field_validator("cnpj")
    @classmethod
    def _check_cnpj(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not validate_cnpj(value):
            raise ValueError("Invalid CNPJ")
        return value

    def to_changes(self) -> dict:
        return self.model_dump(mode="json", exclude_unset=True)


class CustomerModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: Optional[datetime] = None
    registered_on: Optional[date] = None
    name: str
    cpf: Optional[str] = None
    cnpj: Optional[str] = None
    phone: str
    email: str
    postal_code: str
    address: str
    city: str
    state: str
    complement: Optional[str] = None
    note: Optional[str] = None
    user_id: Optional[str] = None
