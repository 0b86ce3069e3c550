"""Live tracking map: geocoding, routing and realtime marker updates."""

from .geocoding import Coordinates, Geocoder, normalize_address
from .map_state import TrackingMap, format_distance, format_duration
from .osrm_client import OSRMClient
from .service import TrackingService

__all__ = [
    "Coordinates",
    "Geocoder",
    "OSRMClient",
    "TrackingMap",
    "TrackingService",
    "format_distance",
    "format_duration",
    "normalize_address",
]
