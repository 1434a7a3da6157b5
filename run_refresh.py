#!/usr/bin/env python3
"""
Command-line script to refresh roster pages.

Fetches each roster page, preparses every athlete on it into the verdict
cache and prints the per-page counts plus the cache status as JSON.

Usage:
    python run_refresh.py https://www.ligainsider.de/fc-bayern-muenchen/1/
    python run_refresh.py URL1 URL2 --filter STARTELF
    python run_refresh.py URL1 -o refresh.json -v
"""

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv
load_dotenv()

from roster_status.config import Settings
from roster_status.filters import FILTER_MAP, resolve_filter
from roster_status.logger import setup_logger
from roster_status.main import RosterStatusService


def main():
    parser = argparse.ArgumentParser(
        description="Fetch roster pages and preparse player availability"
    )
    parser.add_argument("urls", nargs="+", help="Roster page URLs")
    parser.add_argument(
        "--filter", "-f",
        action="append",
        choices=sorted(FILTER_MAP),
        help="Filter variant to populate (repeatable, default: all)"
    )
    parser.add_argument("--output", "-o", help="Output JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    settings = Settings.from_env()
    setup_logger(level=logging.DEBUG if args.verbose else settings.log_level_value)

    filters = [resolve_filter(name) for name in args.filter] if args.filter else None

    service = RosterStatusService(settings=settings)
    pages = []

    try:
        for url in args.urls:
            print(f"Refreshing: {url}", file=sys.stderr)
            count = service.refresh_roster(url, filters)
            pages.append({
                "url": url,
                "status": "success" if count else "empty",
                "refreshedPlayers": count
            })
            print(f"  {'✓' if count else '✗'} {count} verdicts", file=sys.stderr)
    finally:
        service.close()

    output = json.dumps(
        {"pages": pages, "cache": service.cache_status()},
        indent=2,
        ensure_ascii=False
    )

    if args.output:
        Path(args.output).write_text(output)
        print(f"\nSaved to: {args.output}", file=sys.stderr)
    else:
        print(output)


if __name__ == "__main__":
    main()
