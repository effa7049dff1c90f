#!/usr/bin/env python3
"""
Sync demand data between client sheets, the remote store and the local cache.

Usage:
    python sync_data.py                      # Full resync, then cache today locally
    python sync_data.py --local              # Cache today's remote data locally
    python sync_data.py --local 2024-01-05   # Cache one remote day locally
    python sync_data.py --clear-remote       # Delete every remote record
    python sync_data.py --clear-local        # Delete every cached record
    python sync_data.py --status             # Show local cache status
    python sync_data.py --check-sources      # Fetch and validate every client sheet
    python sync_data.py --validate [DATE]    # Check cached data integrity
"""

import asyncio
import sys
from pathlib import Path

# Add project to path
sys.path.insert(0, str(Path(__file__).parent))

from app.container import container
from app.models.common import SyncResult
from app.models.demand import parse_date_key
from app.repositories import close_db, get_db
from etl import check_sources, today_key
from etl.validation import validate_date
from settings import BATCH_OPERATION_CEILING, DB_PATH, SHEET_URLS
from settings.logging import setup_logging

logger = setup_logging()


def _option_value(args: list[str], flag: str) -> str | None:
    """Value following a flag, or None when the flag is last or followed by another flag."""
    idx = args.index(flag)
    if idx + 1 < len(args) and not args[idx + 1].startswith("--"):
        return args[idx + 1]
    return None


def _report(result: SyncResult) -> None:
    status = "✅" if result.success else "❌"
    print(f"\n{status} {result.message}")
    for s in result.client_statuses:
        line = f"  {s.client}: {s.status} ({s.row_count:,} rows)"
        if s.message:
            line += f" - {s.message}"
        print(line)
    if result.partial_count is not None:
        print(f"  Partially saved: {result.partial_count:,}")
    print()


def run_validation(dates: list[str] | None = None) -> bool:
    """Validate cached dates."""
    conn = get_db()

    if not dates:
        dates = [r[0] for r in conn.execute("SELECT DISTINCT date FROM demand_record ORDER BY date DESC").fetchall()]

    if not dates:
        print("\n⚠️  No cached data found. Run 'python sync_data.py --local' first.\n")
        return True

    print("\n" + "=" * 60)
    print("DATA VALIDATION REPORT")
    print("=" * 60)

    all_valid = True
    for date in dates:
        result = validate_date(conn, date)
        status = "✅" if result["valid"] else "❌"
        print(f"\n{date} {status}")
        print(f"  Records: {result['stats']['records']:,}")
        print(f"  Clients: {result['stats']['clients']}")
        print(f"  Cities: {result['stats']['cities']}")
        print(f"  Total demand: {result['stats']['total_demand']:,}")
        if result["issues"]:
            all_valid = False
            for issue in result["issues"]:
                print(f"  ⚠️  {issue}")

    print("\n" + "=" * 60)
    if all_valid:
        print("✅ All data valid!")
    else:
        print("❌ Some issues found. Run a local sync again to fix.")
    print("=" * 60 + "\n")

    return all_valid


def show_status() -> None:
    data = container.reconciler.status()
    last = data["last_synced_at"]
    print(f"\nLocal cache: {DB_PATH}")
    print(f"  Last synced: {last.isoformat() if last else 'never'}")
    print(f"  Records: {data['total_records']:,}")
    print(f"  Dates: {', '.join(data['dates'][:10]) or '-'}\n")


async def run_check_sources() -> bool:
    statuses = await check_sources(SHEET_URLS)
    print()
    for s in statuses:
        mark = "✅" if s.status == "success" else ("⚠️ " if s.status == "empty" else "❌")
        print(f"{mark} {s.client}: {s.status} ({s.row_count:,} rows) {s.message or ''}")
    print()
    return all(s.status != "error" for s in statuses)


async def run_default() -> bool:
    logger.info("Full resync (ceiling {} ops/batch)", BATCH_OPERATION_CEILING)
    result = await container.reconciler.full_resync()
    _report(result)

    logger.info("Caching today's data locally...")
    local = await container.reconciler.sync_today()
    _report(local)
    return result.success and local.success


def main():
    args = sys.argv[1:]

    if "--validate" in args:
        date = _option_value(args, "--validate")
        if date:
            try:
                parse_date_key(date)
            except ValueError as e:
                print(f"\n{e}\n")
                sys.exit(1)
        ok = run_validation([date] if date else None)
        sys.exit(0 if ok else 1)

    if "--check-sources" in args:
        ok = asyncio.run(run_check_sources())
        sys.exit(0 if ok else 1)

    container.init()

    if "--status" in args:
        show_status()
        return

    if "--clear-local" in args:
        result = asyncio.run(container.reconciler.clear_local())
        print(f"\n{'✅' if result.success else '❌'} {result.message}\n")
        sys.exit(0 if result.success else 1)

    if "--clear-remote" in args:
        result = asyncio.run(container.reconciler.clear_remote())
        print(f"\n{'✅' if result.success else '❌'} {result.message}\n")
        sys.exit(0 if result.success else 1)

    if "--local" in args:
        date = _option_value(args, "--local")
        if date in (None, "today"):
            date = today_key()
        try:
            parse_date_key(date)
        except ValueError as e:
            print(f"\n{e}\n")
            print(__doc__)
            sys.exit(1)
        logger.info("Local sync for {}", date)
        result = asyncio.run(container.reconciler.sync_date(date))
        _report(result)
        sys.exit(0 if result.success else 1)

    if args:
        print(__doc__)
        sys.exit(1)

    ok = asyncio.run(run_default())
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    try:
        main()
    finally:
        close_db()
