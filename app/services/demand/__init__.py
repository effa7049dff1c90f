"""Demand services - aggregation engine and report service."""

from app.services.demand import aggregation
from app.services.demand.service import LOCAL, REMOTE, SOURCES, DemandReportService

__all__ = [
    "DemandReportService",
    "aggregation",
    "LOCAL",
    "REMOTE",
    "SOURCES",
]
