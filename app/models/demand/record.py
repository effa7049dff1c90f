"""Demand record model and its derived keys."""

import re
from datetime import date, datetime, time, timezone

from pydantic import BaseModel, Field, field_validator, model_validator

# Date keys MUST stay zero-padded YYYY-MM-DD. Remote range reads compare
# daily document ids as strings, which matches chronological order only
# under this exact format.
DATE_KEY_FORMAT = "%Y-%m-%d"
_DATE_KEY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

_UNSAFE_CHARS = re.compile(r"[\s/\\.#$\[\]]")

SYNC_META_ID = "lastSyncStatus"


def date_key(value: date | datetime) -> str:
    """Format a day as a date key."""
    return value.strftime(DATE_KEY_FORMAT)


def parse_date_key(value: str) -> date:
    """Validate a date key and return the day it names.

    Raises ValueError for anything that is not a real zero-padded
    ``YYYY-MM-DD`` day.
    """
    if not isinstance(value, str) or not _DATE_KEY_RE.match(value):
        raise ValueError(f"Invalid date key: {value!r} (expected YYYY-MM-DD)")
    return datetime.strptime(value, DATE_KEY_FORMAT).date()


def start_of_day(key: str) -> datetime:
    """Midnight UTC of a date key."""
    return datetime.combine(parse_date_key(key), time.min, tzinfo=timezone.utc)


def sanitize(part: str) -> str:
    """Replace characters that break a path-safe document id."""
    return _UNSAFE_CHARS.sub("_", part)


def shard_key(client: str, city: str, area: str) -> str:
    """Shard id for a (client, city, area) combination."""
    return f"{sanitize(client)}_{sanitize(city)}_{sanitize(area)}"


class DemandRecord(BaseModel):
    """One demand measurement for a client/city/area on one day."""

    id: str
    client: str
    city: str
    area: str
    demand_score: int = Field(alias="demandScore", ge=0)
    timestamp: datetime
    date: str = ""

    class Config:
        populate_by_name = True
        frozen = True

    @model_validator(mode="before")
    @classmethod
    def _derive_date(cls, data):
        # date defaults to the calendar day of the timestamp
        if isinstance(data, dict) and not data.get("date"):
            ts = data.get("timestamp")
            if isinstance(ts, str):
                ts = datetime.fromisoformat(ts)
            if isinstance(ts, datetime):
                data = {**data, "timestamp": ts, "date": date_key(ts)}
        return data

    @field_validator("date")
    @classmethod
    def _check_date(cls, value: str) -> str:
        parse_date_key(value)
        return value

    @property
    def shard_id(self) -> str:
        return shard_key(self.client, self.city, self.area)

    def to_row(self) -> dict:
        """Flat row for the local cache."""
        return {
            "id": self.id,
            "client": self.client,
            "city": self.city,
            "area": self.area,
            "demand_score": self.demand_score,
            "timestamp": self.timestamp.isoformat(),
            "date": self.date,
        }

    @classmethod
    def from_row(cls, row: dict) -> "DemandRecord":
        return cls(
            id=row["id"],
            client=row["client"],
            city=row["city"],
            area=row["area"],
            demand_score=row["demand_score"],
            timestamp=datetime.fromisoformat(row["timestamp"]),
            date=row["date"],
        )
