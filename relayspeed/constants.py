import os
import shutil
import multiprocessing
from typing import Optional

import psutil


def _env_int(name: str, default: int, min_v: Optional[int] = None, max_v: Optional[int] = None) -> int:
    val = os.environ.get(name)
    if val is None:
        return default
    try:
        n = int(val)
    except Exception:
        return default
    if min_v is not None and n < min_v:
        n = min_v
    if max_v is not None and n > max_v:
        n = max_v
    return n


def _env_str(name: str, default: str = '') -> str:
    val = os.environ.get(name)
    if val is None or not val.strip():
        return default
    return val.strip()


def _get_system_specs():
    """Get system CPU cores and total memory in GB."""
    try:
        cpu_cores = multiprocessing.cpu_count()
    except NotImplementedError:
        cpu_cores = 2

    memory_gb = psutil.virtual_memory().total / (1024 ** 3)
    return cpu_cores, memory_gb


def _adaptive_workers(base_per_core: int, max_total: int, min_total: int = 1) -> int:
    """Calculate the worker ceiling based on system specs."""
    cpu_cores, memory_gb = _get_system_specs()

    # Base calculation: workers per core
    workers = cpu_cores * base_per_core

    # Memory constraint (rough estimate: 10MB per ping process)
    max_by_memory = int(memory_gb * 1024 / 10)
    workers = min(workers, max_by_memory)

    return max(min_total, min(workers, max_total))


def _auto_find_mullvad() -> str:
    # Priority 1: explicit env RELAYSPEED_MULLVAD_BIN
    env = _env_str('RELAYSPEED_MULLVAD_BIN')
    if env:
        if os.path.isabs(env) or os.path.exists(env):
            return env
        w = shutil.which(env)
        return w or env

    # Priority 2: PATH lookup
    for name in ('mullvad', 'mullvad.exe'):
        w = shutil.which(name)
        if w:
            return w

    # Let the command fail loudly with the bare name
    return 'mullvad'


MULLVAD_BIN = _auto_find_mullvad()

# Relay listing source
RELAY_LIST_TIMEOUT = _env_int('RELAYSPEED_RELAY_LIST_TIMEOUT', 30, 1, 600)  # seconds
RELAY_LIST_FILE = _env_str('RELAYSPEED_RELAY_LIST_FILE')

# Probing
PING_TIMEOUT_MS = _env_int('RELAYSPEED_PING_TIMEOUT_MS', 10000, 100, 60000)
PROBE_DELAY_MS = _env_int('RELAYSPEED_PROBE_DELAY_MS', 10, 0, 5000)
MAX_PROBE_WORKERS = _adaptive_workers(16, 256)
# 1 keeps the sequential one-probe-at-a-time model
PROBE_WORKERS = _env_int('RELAYSPEED_PROBE_WORKERS', 1, 1, MAX_PROBE_WORKERS)

# Reporting
FASTEST_COUNT = _env_int('RELAYSPEED_FASTEST_COUNT', 10, 1, 1000)
GOOD_LATENCY_MS = _env_int('RELAYSPEED_GOOD_LATENCY_MS', 200, 1, 60000)
MEDIUM_LATENCY_MS = _env_int('RELAYSPEED_MEDIUM_LATENCY_MS', 1000, 1, 60000)
REPORT_FILE = _env_str('RELAYSPEED_REPORT_FILE', 'mullvad-speed-test.html')

# Debug mode - set RELAYSPEED_DEBUG=1 to print the effective parameters
if os.environ.get('RELAYSPEED_DEBUG', '').strip() in ('1', 'true', 'yes'):
    print("\n" + "=" * 60)
    print("RELAYSPEED PARAMETERS")
    print("=" * 60)
    print(f"   MULLVAD_BIN: {MULLVAD_BIN}")
    print(f"   RELAY_LIST_FILE: {RELAY_LIST_FILE or '-'}")
    print(f"   RELAY_LIST_TIMEOUT: {RELAY_LIST_TIMEOUT}s")
    print(f"   PING_TIMEOUT_MS: {PING_TIMEOUT_MS}ms")
    print(f"   PROBE_DELAY_MS: {PROBE_DELAY_MS}ms")
    print(f"   PROBE_WORKERS: {PROBE_WORKERS} (ceiling: {MAX_PROBE_WORKERS})")
    print(f"   FASTEST_COUNT: {FASTEST_COUNT}")
    print(f"   REPORT_FILE: {REPORT_FILE}")
    print("=" * 60 + "\n")
