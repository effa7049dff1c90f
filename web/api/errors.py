"""API errors and validation helpers."""

from app.models.demand import ALL_CLIENTS, parse_date_key
from app.services.demand import SOURCES


class ValidationError(Exception):
    """Validation error."""

    def __init__(self, message: str = "Validation error"):
        self.message = message
        super().__init__(self.message)


def validate_date_key(date: str) -> None:
    """Validate a YYYY-MM-DD date key."""
    try:
        parse_date_key(date)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def validate_range(start: str, end: str | None) -> None:
    validate_date_key(start)
    if end is not None:
        validate_date_key(end)
        if start > end:
            raise ValidationError(f"Invalid range: {start} is after {end}")


def validate_source(source: str) -> None:
    if source not in SOURCES:
        raise ValidationError(f"Invalid source: {source}. Must be one of {', '.join(SOURCES)}")


def validate_clients(clients: list[str] | None) -> None:
    known = {c.value for c in ALL_CLIENTS}
    for client in clients or []:
        if client not in known:
            raise ValidationError(f"Unknown client: {client}. Must be one of {', '.join(sorted(known))}")
