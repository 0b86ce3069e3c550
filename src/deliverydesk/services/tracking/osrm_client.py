"""HTTP client for OSRM route geometry between an origin and a destination."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import httpx

from ...config import settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RoutePath:
    coordinates: list[tuple[float, float]]
    distance_m: float
    duration_s: float


class OSRMClient:
    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float = 15.0,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
    ) -> None:
        self.base_url = (base_url or settings.osrm_base_url or "").rstrip("/")
        if not self.base_url:
            raise ValueError("OSRM base URL is not configured.")
        self.profile = profile or settings.osrm_profile
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        self.timeout = timeout

    def _get_client(self) -> httpx.Client:
        return httpx.Client(timeout=httpx.Timeout(self.timeout, connect=10.0))

    def route(self, origin: tuple[float, float], destination: tuple[float, float]) -> RoutePath:
        """Get the street-following path between two (lat, lon) points.

        Returns:
            RoutePath with decoded geometry as (lat, lon) pairs, distance in meters and
            duration in seconds.
        """
        # OSRM route endpoint expects coordinates as "lon,lat;lon,lat"
        coordinate_str = ";".join(f"{lon},{lat}" for lat, lon in (origin, destination))
        params = {
            "overview": "full",
            "geometries": "polyline",
            "steps": "false",
        }
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"

        client = self._get_client()
        try:
            attempt = 0
            while True:
                try:
                    response = client.get(url, params=params)
                    response.raise_for_status()
                    data = response.json()

                    if not isinstance(data, dict):
                        raise ValueError("OSRM route response is not a JSON object")
                    if data.get("code") != "Ok" or not data.get("routes"):
                        error_msg = data.get("message", "Unknown OSRM route error")
                        raise ValueError(f"OSRM route request failed: {error_msg}")

                    return _path_from_route(data["routes"][0])
                except httpx.HTTPStatusError:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise
                    time.sleep(self.backoff_seconds * attempt)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        logger.warning(f"OSRM route request timed out after {self.max_retries} attempts: {e}")
                        raise
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM route timeout, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries})")
                    time.sleep(wait_time)
                except (httpx.ConnectError, httpx.NetworkError, OSError) as e:
                    attempt += 1
                    if attempt > self.max_retries:
                        raise ConnectionError(
                            f"Failed to connect to OSRM service at {self.base_url}: {e}"
                        ) from e
                    wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                    logger.debug(f"OSRM network error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                    time.sleep(wait_time)
        finally:
            client.close()


def _path_from_route(best: dict) -> RoutePath:
    try:
        return RoutePath(
            coordinates=decode_polyline(best.get("geometry") or ""),
            distance_m=float(best.get("distance", 0.0)),
            duration_s=float(best.get("duration", 0.0)),
        )
    except (AttributeError, TypeError) as exc:
        raise ValueError(f"Malformed OSRM route payload: {exc}") from exc


def decode_polyline(polyline: str) -> list[tuple[float, float]]:
    """Decode Google polyline string to list of (lat, lon) coordinates.

    OSRM uses Google's polyline encoding format (precision 5) for route geometry.

    Raises:
        ValueError: if the string ends in the middle of a coordinate.
    """
    coordinates = []
    index = 0
    lat = 0
    lon = 0

    while index < len(polyline):
        shift = 0
        result = 0
        while True:
            if index >= len(polyline):
                raise ValueError("Truncated polyline")
            b = ord(polyline[index]) - 63
            index += 1
            result |= (b & 0x1f) << shift
            shift += 5
            if b < 0x20:
                break
        lat += ~(result >> 1) if (result & 1) else (result >> 1)

        shift = 0
        result = 0
        while True:
            if index >= len(polyline):
                raise ValueError("Truncated polyline")
            b = ord(polyline[index]) - 63
            index += 1
            result |= (b & 0x1f) << shift
            shift += 5
            if b < 0x20:
                break
        lon += ~(result >> 1) if (result & 1) else (result >> 1)

        coordinates.append((lat / 1e5, lon / 1e5))

    return coordinates


def check_health(base_url: str | None = None) -> bool:
    """Check OSRM availability with a minimal two-point route request."""
    base = base_url or settings.osrm_base_url
    if not base:
        return False
    try:
        # Two points in central Sao Paulo
        test_coords = "-46.6333,-23.5505;-46.6388,-23.5489"
        url = f"{base.rstrip('/')}/route/v1/{settings.osrm_profile}/{test_coords}"
        response = httpx.get(url, params={"overview": "false"}, timeout=5.0)
        response.raise_for_status()
        return response.json().get("code") == "Ok"
    except (httpx.HTTPError, ValueError):
        return False
