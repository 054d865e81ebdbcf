from __future__ import annotations

import argparse
import os
from typing import List, Optional

from .common import log
from .constants import FASTEST_COUNT, PING_TIMEOUT_MS, PROBE_WORKERS, REPORT_FILE
from .measure import measure_servers
from .models import MeasuredRecord
from .net import RelayListError, fetch_relay_list
from .parsing import parse_relay_list
from .ranking import all_results_order, display_order, fastest, filter_by_country
from .report import format_latency, render_report, write_report


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='relayspeed',
        description="Ping every Mullvad relay and write an HTML latency report",
    )
    parser.add_argument('-c', '--country', default=None,
                        help='Only test relays whose country name contains this text, or whose code equals it')
    return parser.parse_args(argv)


def _print_fastest(top: List[MeasuredRecord]) -> None:
    log(f"\nFastest {len(top)} relays:")
    for i, r in enumerate(top, 1):
        log(f"{i}. {r.hostname} ({r.country_name or r.country_code}) - {format_latency(r.latency_ms)}")


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    country_filter = args.country.lower() if args.country else None

    log("Fetching Mullvad relay list...")
    if country_filter:
        log(f"Country filter: {country_filter}")
    log(f"Probe timeout: {PING_TIMEOUT_MS // 1000}s")

    try:
        servers = parse_relay_list(fetch_relay_list())
        servers = filter_by_country(servers, country_filter)
        log(f"Found {len(servers)} relays")

        if PROBE_WORKERS > 1:
            log(f"Probing with {PROBE_WORKERS} workers...\n")
        else:
            log("Probing latency...\n")
        results = measure_servers(servers)

        log("\nGenerating HTML report...")
        all_results = all_results_order(results)
        display = display_order(all_results)
        html_text = render_report(display, all_results, country_filter, PING_TIMEOUT_MS)
        write_report(REPORT_FILE, html_text)

        log(f"Report written: {os.path.abspath(REPORT_FILE)}")
        log(f"Open {REPORT_FILE} in a browser to view the results")

        _print_fastest(fastest(display, FASTEST_COUNT))
    except RelayListError as e:
        log(f"Failed to get relay list: {e}")
        return 1
    except Exception as e:
        log(f"Error: {e}")
        return 1
    return 0


def run() -> None:
    raise SystemExit(main())


if __name__ == '__main__':
    run()
