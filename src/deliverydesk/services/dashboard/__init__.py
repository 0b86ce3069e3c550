"""Dashboard aggregation helpers."""

from .stats import compute_dashboard, compute_kpis, filter_deliveries

__all__ = [
    "compute_dashboard",
    "compute_kpis",
    "filter_deliveries",
]
