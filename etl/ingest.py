"""Upstream ingestion - client demand sheets to demand records."""

import io
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from zoneinfo import ZoneInfo

import httpx
import polars as pl
from loguru import logger

from app.errors import EmptySourceError
from app.models.common import ClientStatus
from app.models.demand import ALL_CLIENTS, ClientName, DemandRecord
from etl.sources import Row, SourceConfig, extract, parse_int, source_config
from settings import TIMEZONE
from sheets_client import SheetsClient

SUCCESS = "success"
ERROR = "error"
EMPTY = "empty"


@dataclass
class UpstreamResult:
    """Records from every fetched client plus per-client status."""

    records: list[DemandRecord] = field(default_factory=list)
    client_statuses: list[ClientStatus] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return sum(1 for s in self.client_statuses if s.status == ERROR)

    def summary(self) -> str:
        ok = len(self.client_statuses) - self.failed
        return f"Fetched {len(self.records)} total records. {ok} sources processed, {self.failed} sources failed."


class MissingHeaderError(ValueError):
    """Sheet lacks a column its client layout needs."""


def parse_csv(text: str) -> tuple[list[str], list[Row]]:
    """Parse CSV text into trimmed headers and string-valued rows."""
    df = pl.read_csv(
        io.BytesIO(text.encode("utf-8")),
        infer_schema_length=0,
        truncate_ragged_lines=True,
    )
    df = df.rename({c: c.strip() for c in df.columns})
    headers = [c for c in df.columns if c]
    return headers, df.select(headers).fill_null("").to_dicts()


def normalize_city(city: str, city_map: Mapping[str, str] | None) -> str:
    """Apply the case-insensitive city remap table."""
    if not city_map:
        return city
    lookup = {k.strip().lower(): v.strip() for k, v in city_map.items()}
    return lookup.get(city.lower(), city)


def parse_rows(
    client: ClientName,
    headers: list[str],
    rows: list[Row],
    fetched_at: datetime,
    config: SourceConfig | None = None,
    city_map: Mapping[str, str] | None = None,
    blacklist: Iterable[str] | None = None,
) -> list[DemandRecord]:
    """Turn one client's sheet rows into records.

    Raises MissingHeaderError when a required column is absent and
    EmptySourceError when nothing usable remains.
    """
    config = config or source_config(client)
    for header in config.required_headers:
        if header not in headers:
            raise MissingHeaderError(f"Missing header: {header}")

    if not rows:
        raise EmptySourceError(f"No data rows parsed for {client}.")

    blocked = {c.strip().lower() for c in blacklist or []}
    if config.row_filter:
        rows = [r for r in rows if config.row_filter(r, headers)]

    records = []
    for index, row in enumerate(rows):
        city = normalize_city(str(extract(config.city_field, row, index, client)), city_map)
        area = str(extract(config.area_field, row, index, client))
        if not city or not area:
            logger.debug("Skipping {} row {}: missing city/area", client, index)
            continue
        if city.lower() in blocked:
            continue

        score = extract(config.demand_field, row, index, client)
        score = parse_int(score) if isinstance(score, str) else int(score or 0)
        records.append(
            DemandRecord(
                id=str(extract(config.id_field, row, index, client)),
                client=client.value,
                city=city,
                area=area,
                demand_score=max(score, 0),
                timestamp=fetched_at,
            )
        )

    if not records:
        raise EmptySourceError("All rows were filtered out (missing city/area or client filter).")
    return records


async def fetch_client(
    sheets: SheetsClient,
    client: ClientName,
    url: str | None,
    fetched_at: datetime,
    city_map: Mapping[str, str] | None = None,
    blacklist: Iterable[str] | None = None,
) -> tuple[list[DemandRecord], ClientStatus]:
    """Fetch and parse one client's sheet; failures become a status, not an exception."""
    if not url or not url.strip():
        logger.warning("URL not configured for client {}. Skipping.", client)
        return [], ClientStatus(client=client.value, status=ERROR, message=f"URL not configured for {client}.")

    try:
        text = await sheets.fetch_csv(url)
        if not text.strip():
            raise EmptySourceError(f"Fetched empty CSV for {client}.")
        headers, rows = parse_csv(text)
        records = parse_rows(client, headers, rows, fetched_at, city_map=city_map, blacklist=blacklist)
    except EmptySourceError as e:
        logger.info("{}: {}", client, e.message)
        return [], ClientStatus(client=client.value, status=EMPTY, message=e.message)
    except httpx.HTTPStatusError as e:
        logger.error("Failed to fetch sheet for {}: {}", client, e)
        return [], ClientStatus(
            client=client.value,
            status=ERROR,
            message=f"HTTP error {e.response.status_code}: {e.response.reason_phrase}",
        )
    except (httpx.HTTPError, MissingHeaderError, pl.exceptions.PolarsError) as e:
        logger.error("Error processing sheet for client {}: {}", client, e)
        return [], ClientStatus(client=client.value, status=ERROR, message=str(e))
    except Exception as e:
        logger.exception("Unexpected error processing sheet for client {}", client)
        return [], ClientStatus(client=client.value, status=ERROR, message=f"Unexpected error: {e}")

    logger.info("{}: {} records", client, len(records))
    return records, ClientStatus(client=client.value, status=SUCCESS, row_count=len(records))


async def fetch_upstream(
    sheet_urls: Mapping[str, str],
    clients: Iterable[ClientName] | None = None,
    city_map: Mapping[str, str] | None = None,
    blacklist: Iterable[str] | None = None,
    sheets: SheetsClient | None = None,
    fetched_at: datetime | None = None,
) -> UpstreamResult:
    """Fetch every requested client sequentially so each status stays attributable."""
    fetched_at = fetched_at or datetime.now(ZoneInfo(TIMEZONE))
    result = UpstreamResult()

    async def run(http: SheetsClient) -> None:
        for client in clients or ALL_CLIENTS:
            records, status = await fetch_client(
                http, client, sheet_urls.get(client.value), fetched_at, city_map, blacklist
            )
            result.records.extend(records)
            result.client_statuses.append(status)

    if sheets is None:
        async with SheetsClient() as http:
            await run(http)
    else:
        await run(sheets)

    logger.info(result.summary())
    return result


async def check_sources(
    sheet_urls: Mapping[str, str],
    sheets: SheetsClient | None = None,
) -> list[ClientStatus]:
    """Health check: fetch each configured sheet and validate its layout."""
    result = await fetch_upstream(sheet_urls, sheets=sheets)
    for status in result.client_statuses:
        logger.info("Source {}: {} ({} rows) {}", status.client, status.status, status.row_count, status.message or "")
    return result.client_statuses
