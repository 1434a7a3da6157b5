#!/usr/bin/env python3
"""
CLI script to check player availability on one roster page.

Populates the verdict cache for the page (fetched, or read from a saved
HTML file with --html), then prints each player's verdict as JSON.

Usage:
    python run_check.py https://www.ligainsider.de/sc-freiburg/18/ "Grifo" "Höler"
    python run_check.py URL "T. Horn" --filter GESETZT
    python run_check.py URL "Mueller" --html saved_page.html
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
    parser = argparse.ArgumentParser(description="Check player availability on a roster page")
    parser.add_argument("url", help="Roster page URL (cache key, fetched unless --html is given)")
    parser.add_argument("players", nargs="+", help="Player names as spelled by the caller")
    parser.add_argument("--filter", "-f", choices=sorted(FILTER_MAP), help="Filter variant")
    parser.add_argument("--html", help="Use a saved HTML file instead of fetching")
    parser.add_argument("--output", "-o", help="Output JSON file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args()

    settings = Settings.from_env()
    setup_logger(level=logging.DEBUG if args.verbose else settings.log_level_value)

    markup_filter = resolve_filter(args.filter)

    service = RosterStatusService(settings=settings)

    try:
        if args.html:
            html = Path(args.html).read_text(errors="replace")
            count = service.preparse_roster(args.url, html)
        else:
            count = service.refresh_roster(args.url)
    finally:
        service.close()

    if not count:
        print(f"✗ No verdicts produced for {args.url}", file=sys.stderr)

    results = []
    for name in args.players:
        verdict = service.fetch_and_classify(args.url, name, markup_filter)
        results.append({"player": name, **verdict.to_response()})
        mark = "✓" if verdict.is_likely_to_play else "✗"
        print(f"  {mark} {name}: {verdict.reason or 'available'}", file=sys.stderr)

    output = json.dumps(results, indent=2, ensure_ascii=False)

    if args.output:
        Path(args.output).write_text(output)
        print(f"\nSaved to: {args.output}", file=sys.stderr)
    else:
        print(output)


if __name__ == "__main__":
    main()
