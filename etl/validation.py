"""Data validation functions."""

import duckdb


def validate_date(conn: duckdb.DuckDBPyConnection, date: str) -> dict:
    """Validate cached demand data for one date."""
    issues = []
    stats = {}

    totals = conn.execute(
        """
        SELECT
            COUNT(*) as records,
            COUNT(DISTINCT client) as clients,
            COUNT(DISTINCT city) as cities,
            COALESCE(SUM(demand_score), 0) as total_demand
        FROM demand_record WHERE date = ?
        """,
        [date],
    ).fetchone()
    stats["records"] = totals[0]
    stats["clients"] = totals[1]
    stats["cities"] = totals[2]
    stats["total_demand"] = totals[3]
    if totals[0] == 0:
        issues.append("No records cached for this date")

    duplicates = conn.execute(
        """
        SELECT COUNT(*) FROM (
            SELECT client, city, area FROM demand_record
            WHERE date = ?
            GROUP BY client, city, area
            HAVING COUNT(*) > 1
        )
        """,
        [date],
    ).fetchone()[0]
    stats["duplicate_shards"] = duplicates
    if duplicates > 0:
        issues.append(f"{duplicates} (client, city, area) groups have more than one record")

    negative = conn.execute(
        "SELECT COUNT(*) FROM demand_record WHERE date = ? AND demand_score < 0", [date]
    ).fetchone()[0]
    stats["negative_scores"] = negative
    if negative > 0:
        issues.append(f"{negative} records have a negative demand score")

    blank = conn.execute(
        """
        SELECT COUNT(*) FROM demand_record
        WHERE date = ? AND (TRIM(city) = '' OR TRIM(area) = '' OR TRIM(client) = '')
        """,
        [date],
    ).fetchone()[0]
    stats["blank_fields"] = blank
    if blank > 0:
        issues.append(f"{blank} records have a blank client, city or area")

    return {
        "date": date,
        "valid": len(issues) == 0,
        "stats": stats,
        "issues": issues,
    }
