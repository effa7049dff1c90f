"""Per-client sheet layouts.

Each client publishes its own sheet format. A field is either a plain
``Column`` read by header name or a ``Computed`` value derived from the whole
row; ``extract`` resolves either kind.
"""

import re
from collections.abc import Callable
from dataclasses import dataclass

from app.models.demand import ClientName

Row = dict[str, str]

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class Column:
    """Value of a named column, stripped."""

    name: str


@dataclass(frozen=True)
class Computed:
    """Value computed from the row, its index and the client."""

    fn: Callable[[Row, int, ClientName], object]


FieldExtractor = Column | Computed


def extract(field: FieldExtractor, row: Row, index: int, client: ClientName) -> object:
    if isinstance(field, Column):
        return (row.get(field.name) or "").strip()
    if isinstance(field, Computed):
        return field.fn(row, index, client)
    raise TypeError(f"Unknown field extractor: {field!r}")


def required_headers(*fields: FieldExtractor) -> list[str]:
    """Headers a sheet must carry for the given fields."""
    return [f.name for f in fields if isinstance(f, Column)]


def parse_int(value: str | None) -> int:
    """Leading integer of a cell, 0 when it does not parse."""
    match = _LEADING_INT.match(value or "")
    return int(match.group(1)) if match else 0


@dataclass(frozen=True)
class SourceConfig:
    """How to turn one client's sheet rows into demand records."""

    id_field: FieldExtractor
    city_field: Column
    area_field: Column
    demand_field: FieldExtractor
    row_filter: Callable[[Row, list[str]], bool] | None = None

    @property
    def required_headers(self) -> list[str]:
        return required_headers(self.id_field, self.city_field, self.area_field, self.demand_field)


def _cell(row: Row, name: str) -> str:
    return (row.get(name) or "").strip()


def _store_id(column: str) -> Computed:
    return Computed(lambda row, index, client: _cell(row, column) or f"{client.value.lower()}-gen-{index}")


def _city_area_id() -> Computed:
    def make(row: Row, index: int, client: ClientName) -> str:
        raw = f"{client.value.lower()}-{_cell(row, 'City Name')}-{_cell(row, 'Area')}-{index}"
        return "_".join(raw.split())

    return Computed(make)


def _zepto_demand(row: Row, index: int, client: ClientName) -> int:
    shifts = ["Morning_FT Demand", "Morning_PT Demand", "Evening_FT Demand", "Evening_PT Demand"]
    return sum(parse_int(row.get(s)) for s in shifts)


def _first_column_is_data(row: Row, headers: list[str]) -> bool:
    # Swiggy sheets repeat the header row inside the data
    first = headers[0] if headers else ""
    value = row.get(first)
    return bool(value) and value != first


SOURCE_CONFIGS: dict[ClientName, SourceConfig] = {
    ClientName.BLINKIT: SourceConfig(
        id_field=_store_id("Store id"),
        city_field=Column("City"),
        area_field=Column("Area"),
        demand_field=Column("Daily demand"),
        row_filter=lambda row, headers: bool(
            _cell(row, "Store id") and _cell(row, "City") and _cell(row, "Area") and "Daily demand" in row
        ),
    ),
    ClientName.SWIGGY_FOOD: SourceConfig(
        id_field=_city_area_id(),
        city_field=Column("City Name"),
        area_field=Column("Area"),
        demand_field=Column("Food"),
        row_filter=_first_column_is_data,
    ),
    ClientName.SWIGGY_IM: SourceConfig(
        id_field=_city_area_id(),
        city_field=Column("City Name"),
        area_field=Column("Area"),
        demand_field=Column("Instamart"),
        row_filter=_first_column_is_data,
    ),
    ClientName.ZEPTO: SourceConfig(
        id_field=_store_id("Store"),
        city_field=Column("City"),
        area_field=Column("Store"),
        demand_field=Computed(_zepto_demand),
        row_filter=lambda row, headers: bool(_cell(row, "Store") and _cell(row, "City")),
    ),
}

if set(SOURCE_CONFIGS) != set(ClientName):
    raise RuntimeError(f"Missing source config for {set(ClientName) - set(SOURCE_CONFIGS)}")


def source_config(client: ClientName) -> SourceConfig:
    return SOURCE_CONFIGS[client]
