"""Postal code (CEP) lookup used to auto-fill address fields."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from ..config import settings
from ..errors import PostalCodeError
from .documents import only_digits

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PostalAddress:
    street: str
    district: str
    city: str
    state: str
    postal_code: str


class PostalCodeClient:
    def __init__(self, base_url: str | None = None, timeout: float | None = None) -> None:
        self.base_url = (base_url or settings.postal_code_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=5.0))

    def lookup(self, code: str) -> PostalAddress:
        """Resolve an 8-digit postal code into street, district, city and state.

        Raises:
            PostalCodeError: when the code is malformed, unknown, or the service fails.
        """
        digits = only_digits(code)
        if len(digits) != 8:
            raise PostalCodeError(f"Invalid postal code '{code}'")

        client = self._get_client()
        try:
            response = client.get(f"{self.base_url}/{digits}/json/")
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Postal code lookup failed for {digits}: {exc}")
            raise PostalCodeError(f"Postal code lookup failed for '{digits}'") from exc
        finally:
            client.close()

        if not isinstance(data, dict) or data.get("erro"):
            raise PostalCodeError(f"Postal code '{digits}' not found")

        return PostalAddress(
            street=data.get("logradouro") or "",
            district=data.get("bairro") or "",
            city=data.get("localidade") or "",
            state=data.get("uf") or "",
            postal_code=data.get("cep") or digits,
        )