#!/usr/bin/env python3
import argparse
import json
import os
import sqlite3
import sys
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from marketplace.models import BookingStatus, ServiceProvider  # noqa: E402
from marketplace.services.booking_rules import average_rating  # noqa: E402
from marketplace.services.entity_store import EntityStore  # noqa: E402

DEFAULT_DB = str(Path(__file__).resolve().parents[1] / "data" / "marketplace.sqlite3")


def build_report(providers: List[ServiceProvider], booking_statuses: List[BookingStatus]) -> Dict[str, Any]:
    rows: List[Dict[str, Any]] = []
    drifted = 0
    for provider in providers:
        recomputed = average_rating(provider.reviews)
        matches = recomputed == provider.average_rating
        if not matches:
            drifted += 1
        rows.append(
            {
                "provider_id": provider.id,
                "name": provider.name,
                "review_count": len(provider.reviews),
                "stored_average": provider.average_rating,
                "recomputed_average": recomputed,
                "consistent": matches,
            }
        )
    rows.sort(key=lambda row: (-row["recomputed_average"], -row["review_count"], row["provider_id"]))
    status_counts = Counter(status.value for status in booking_statuses)
    return {
        "total_providers": len(providers),
        "inconsistent_providers": drifted,
        "booking_status_counts": dict(status_counts),
        "providers": rows,
    }


def print_human(report: Dict[str, Any]) -> None:
    print(f"Providers: {report['total_providers']}")
    print(f"Inconsistent averages: {report['inconsistent_providers']}")
    print("Booking statuses:")
    for status, count in sorted(report["booking_status_counts"].items(), key=lambda x: x[1], reverse=True):
        print(f"  - {status}: {count}")
    print("Ratings:")
    for row in report["providers"]:
        flag = "" if row["consistent"] else f" (stored {row['stored_average']})"
        print(f"  - {row['name']} [{row['provider_id']}]: {row['recomputed_average']} over {row['review_count']} reviews{flag}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Recompute provider rating averages from the marketplace store.")
    parser.add_argument("--db", default=os.getenv("MARKETPLACE_DB_PATH", DEFAULT_DB), help="Path to the SQLite store.")
    parser.add_argument("--json-out", default="", help="Optional path to write JSON summary.")
    parser.add_argument("--strict", action="store_true", help="Exit with status 1 if any stored average is inconsistent.")
    args = parser.parse_args(argv)

    if not Path(args.db).exists():
        print(f"Store not found: {args.db}", file=sys.stderr)
        return 2

    store = EntityStore(args.db, read_only=True)
    try:
        report = build_report(store.providers.values(), [booking.status for booking in store.bookings.values()])
    except sqlite3.DatabaseError as exc:
        print(f"Cannot read store {args.db}: {exc}", file=sys.stderr)
        return 2
    print_human(report)

    if args.json_out:
        path = Path(args.json_out)
        path.write_text(json.dumps(report, indent=2) + "\n", encoding="utf-8")
        print(f"Wrote report: {path}")
    if args.strict and report["inconsistent_providers"]:
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
