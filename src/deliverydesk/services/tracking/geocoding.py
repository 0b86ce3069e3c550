"""Free-text address geocoding against a Nominatim-compatible service."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

import httpx

from ...config import settings

logger = logging.getLogger(__name__)

# Order matters: "Profa." must be expanded before "Prof.".
ADDRESS_ABBREVIATIONS: dict[str, str] = {
    "R.": "Rua",
    "Av.": "Avenida",
    "Ver.": "Vereador",
    "Pres.": "Presidente",
    "Sen.": "Senador",
    "Dep.": "Deputado",
    "Dr.": "Doutor",
    "Profa.": "Professora",
    "Prof.": "Professor",
    "Rod.": "Rodovia",
    "Trav.": "Travessa",
    "Pç.": "Praça",
    "Al.": "Alameda",
    "Estr.": "Estrada",
    "Vl.": "Vila",
    "Jd.": "Jardim",
    "Res.": "Residencial",
}

_ABBREVIATION_PATTERNS = [
    (re.compile(r"\b" + re.escape(abbreviation), re.IGNORECASE), full)
    for abbreviation, full in ADDRESS_ABBREVIATIONS.items()
]
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True, slots=True)
class Coordinates:
    lat: float
    lng: float


def normalize_address(address: str) -> str:
    """Expand street-type and title abbreviations and collapse whitespace."""

    normalized = address
    for pattern, full in _ABBREVIATION_PATTERNS:
        normalized = pattern.sub(full, normalized)
    return _WHITESPACE.sub(" ", normalized).strip()


def qualify_address(address: str, country_name: str) -> str:
    """Append the country unless the address already names it (or the SP state code)."""

    if "SP" in address or country_name in address:
        return address
    return f"{address}, {country_name}"


class Geocoder:
    """Single best-match geocoding with a city/state fallback.

    Calls are synchronous and unthrottled; callers pace consecutive lookups.
    """

    def __init__(
        self,
        base_url: str | None = None,
        country_code: str | None = None,
        country_name: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = (base_url or settings.geocoder_base_url).rstrip("/")
        self.country_code = country_code or settings.geocoder_country_code
        self.country_name = country_name or settings.geocoder_country_name
        self.user_agent = user_agent or settings.geocoder_user_agent
        self.timeout = timeout if timeout is not None else settings.http_timeout_seconds

    def _get_client(self) -> httpx.Client:
        return httpx.Client(
            timeout=httpx.Timeout(self.timeout, connect=5.0),
            headers={"User-Agent": self.user_agent},
        )

    def search(self, query: str) -> Optional[Coordinates]:
        params = {
            "format": "json",
            "q": query,
            "limit": 1,
            "countrycodes": self.country_code,
        }
        client = self._get_client()
        try:
            response = client.get(f"{self.base_url}/search", params=params)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(f"Geocoding request failed for '{query}': {exc}")
            return None
        finally:
            client.close()

        if not isinstance(data, list) or not data:
            return None
        try:
            return Coordinates(lat=float(data[0]["lat"]), lng=float(data[0]["lon"]))
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning(f"Unexpected geocoding payload for '{query}': {exc}")
            return None

    def geocode(self, address: str) -> Optional[Coordinates]:
        """Geocode the full address, falling back to its trailing city/state segment."""

        query = qualify_address(normalize_address(address), self.country_name)
        logger.debug(f"Geocoding '{address}' as '{query}'")
        result = self.search(query)
        if result is not None:
            return result

        logger.warning(f"No geocoding match for '{query}'")
        parts = address.split(",")
        if len(parts) > 1:
            city_state = parts[-1].strip()
            if city_state:
                result = self.search(city_state)
                if result is not None:
                    logger.warning(f"Using approximate city-level location for '{address}': {city_state}")
                    return result
        return None
