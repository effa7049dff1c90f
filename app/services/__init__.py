"""Services package - service class exports."""

from app.services.demand.service import DemandReportService

__all__ = [
    "DemandReportService",
]
