from __future__ import annotations

import concurrent.futures
import time
from typing import Callable, List, Optional, Sequence

from .common import progress
from .constants import PING_TIMEOUT_MS, PROBE_DELAY_MS, PROBE_WORKERS
from .models import MeasuredRecord, ServerRecord
from .net import ping_latency

Prober = Callable[[str, int], Optional[float]]


def measure_servers(
    servers: Sequence[ServerRecord],
    timeout_ms: int = PING_TIMEOUT_MS,
    workers: int = PROBE_WORKERS,
    delay_ms: int = PROBE_DELAY_MS,
    prober: Prober = ping_latency,
) -> List[MeasuredRecord]:
    """Probe every active server that has an IPv4 address.

    With one worker the probes run strictly one after another. With more,
    a bounded thread pool runs them concurrently; results still come back
    in input order, one per server.
    """
    targets = [s for s in servers if s.ipv4_address and s.active]
    if not targets:
        return []

    def _measure_one(server: ServerRecord) -> MeasuredRecord:
        latency = prober(server.ipv4_address, timeout_ms)
        # Pause between probes so we do not flood the network stack
        if delay_ms > 0:
            time.sleep(delay_ms / 1000.0)
        return MeasuredRecord.from_server(server, latency)

    if workers <= 1:
        return [_measure_one(s) for s in progress(targets, total=len(targets), desc='Probing')]

    workers = min(int(workers), len(targets))
    with concurrent.futures.ThreadPoolExecutor(max_workers=workers) as pool:
        return list(progress(pool.map(_measure_one, targets), total=len(targets), desc='Probing'))
