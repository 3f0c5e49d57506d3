"""
Profile a CSV file on disk from the CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from app.services.csv_profile_service import CSVProfileError, get_csv_profile_service


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Stream a CSV file and print its profile as JSON.")
    parser.add_argument("path", help="Path to the CSV file.")
    parser.add_argument(
        "--no-header",
        dest="header",
        action="store_false",
        help="Treat the first record as data; columns are named 0, 1, ...",
    )
    parser.add_argument(
        "--delimiter",
        default=None,
        help="Single-character delimiter. Sniffed from the first line when omitted.",
    )
    parser.add_argument(
        "--sample-size",
        type=int,
        default=None,
        help="Number of sample rows to include (1-200).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log ingestion events to stderr.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    sample_size = None
    if args.sample_size is not None:
        sample_size = max(1, min(200, args.sample_size))

    service = get_csv_profile_service()
    try:
        summary = service.profile(
            args.path,
            header=args.header,
            delimiter=args.delimiter,
            sample_size=sample_size,
        )
    except CSVProfileError as exc:
        print(json.dumps({"error": str(exc)}), file=sys.stderr)
        return 1

    payload = {
        "status": summary.status.value,
        "headers": summary.headers,
        "total_rows": summary.total_rows,
        "rollups": summary.rollups,
        "sample": summary.sample,
        "warnings": summary.warnings,
    }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
