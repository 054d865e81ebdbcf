from __future__ import annotations

from functools import cmp_to_key
from typing import Iterable, List, Optional, Sequence

from .constants import FASTEST_COUNT
from .models import LatencyStats, MeasuredRecord, ProbeOutcome, ServerRecord, TIMEOUT_LATENCY


def filter_by_country(servers: Iterable[ServerRecord], country_filter: Optional[str]) -> List[ServerRecord]:
    """Keep servers whose country name contains the filter, or whose code equals it.

    Matching is case-insensitive. An empty filter keeps everything.
    """
    servers = list(servers)
    needle = (country_filter or '').strip().lower()
    if not needle:
        return servers
    return [
        s for s in servers
        if needle in s.country_name.lower() or (s.country_code and s.country_code.lower() == needle)
    ]


def _compare_display(a: MeasuredRecord, b: MeasuredRecord) -> float:
    # Unrecognized (None) last; numbers, -1 included, by difference
    if a.latency_ms is None and b.latency_ms is None:
        return 0
    if a.latency_ms is None:
        return 1
    if b.latency_ms is None:
        return -1
    return a.latency_ms - b.latency_ms


def _as_number(latency: Optional[float]) -> float:
    # None subtracts as 0 here
    return 0.0 if latency is None else latency


def _compare_all_results(a: MeasuredRecord, b: MeasuredRecord) -> float:
    a_timeout = a.latency_ms == TIMEOUT_LATENCY
    b_timeout = b.latency_ms == TIMEOUT_LATENCY
    if a_timeout and not b_timeout:
        return 1
    if not a_timeout and b_timeout:
        return -1
    if not a_timeout and not b_timeout:
        return _as_number(a.latency_ms) - _as_number(b.latency_ms)
    return 0


def display_order(results: Sequence[MeasuredRecord]) -> List[MeasuredRecord]:
    """Order for the report table: ascending latency, unrecognized results last.

    Timeouts (-1) compare as plain numbers and therefore lead the list.
    """
    return sorted(results, key=cmp_to_key(_compare_display))


def all_results_order(results: Sequence[MeasuredRecord]) -> List[MeasuredRecord]:
    """Ascending latency with timeouts (-1) after everything else.

    Unrecognized results (None) are ranked as if they measured 0 ms.
    """
    return sorted(results, key=cmp_to_key(_compare_all_results))


def fastest(results: Sequence[MeasuredRecord], count: int = FASTEST_COUNT) -> List[MeasuredRecord]:
    """The `count` lowest latencies, skipping unrecognized results.

    -1 is not special-cased, so timeouts sort ahead of real measurements.
    """
    valid = [r for r in results if r.latency_ms is not None]
    valid.sort(key=lambda r: r.latency_ms)
    return valid[:count]


def compute_stats(results: Sequence[MeasuredRecord]) -> LatencyStats:
    reachable = sum(1 for r in results if r.outcome is ProbeOutcome.SUCCESS)
    timeouts = sum(1 for r in results if r.outcome is ProbeOutcome.TIMEOUT)
    return LatencyStats(reachable=reachable, timeouts=timeouts, total=len(results))
