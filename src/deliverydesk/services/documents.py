"""Checksum validation for Brazilian tax documents (CPF and CNPJ)."""

from __future__ import annotations

import re

_NON_DIGITS = re.compile(r"\D+")


def only_digits(value: str | None) -> str:
    return _NON_DIGITS.sub("", value or "")


def _cpf_check_digit(digits: str) -> int:
    # Weights run from len+1 down to 2; remainders of 10 map to 0.
    weight = len(digits) + 1
    total = sum(int(digit) * (weight - index) for index, digit in enumerate(digits))
    remainder = (total * 10) % 11
    return 0 if remainder == 10 else remainder


def validate_cpf(value: str | None) -> bool:
    """Return True when ``value`` is a well-formed individual tax id (CPF)."""

    cpf = only_digits(value)
    if len(cpf) != 11 or len(set(cpf)) == 1:
        return False
    if _cpf_check_digit(cpf[:9]) != int(cpf[9]):
        return False
    return _cpf_check_digit(cpf[:10]) == int(cpf[10])


def _cnpj_check_digit(digits: str) -> int:
    position = len(digits) - 7
    total = 0
    for digit in digits:
        total += int(digit) * position
        position -= 1
        if position < 2:
            position = 9
    remainder = total % 11
    return 0 if remainder < 2 else 11 - remainder


def validate_cnpj(value: str | None) -> bool:
    """Return True when ``value`` is a well-formed company tax id (CNPJ)."""

    cnpj = only_digits(value)
    if len(cnpj) != 14 or len(set(cnpj)) == 1:
        return False
    if _cnpj_check_digit(cnpj[:12]) != int(cnpj[12]):
        return False
    return _cnpj_check_digit(cnpj[:13]) == int(cnpj[13])
