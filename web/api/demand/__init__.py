"""Demand API."""

from web.api.demand.views import get_city_activity, get_hotspots, get_records, get_summary

__all__ = [
    "get_records",
    "get_summary",
    "get_hotspots",
    "get_city_activity",
]
