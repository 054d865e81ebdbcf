from __future__ import annotations

import os
import re
import subprocess
import sys
from typing import List, Optional

from .constants import MULLVAD_BIN, PING_TIMEOUT_MS, RELAY_LIST_FILE, RELAY_LIST_TIMEOUT
from .io_ops import read_text
from .models import TIMEOUT_LATENCY


class RelayListError(RuntimeError):
    """The relay listing could not be obtained."""


def _creationflags() -> int:
    is_windows = os.name == 'nt' or sys.platform.startswith('win')
    return subprocess.CREATE_NO_WINDOW if is_windows and hasattr(subprocess, 'CREATE_NO_WINDOW') else 0


def fetch_relay_list(mullvad_bin: str = MULLVAD_BIN, timeout: int = RELAY_LIST_TIMEOUT,
                     relay_list_file: str = RELAY_LIST_FILE) -> str:
    """Return the raw `mullvad relay list` text.

    Reads `relay_list_file` instead of running the client when one is given.
    Any failure raises RelayListError; no partial output is returned.
    """
    if relay_list_file:
        try:
            return read_text(relay_list_file)
        except OSError as e:
            raise RelayListError(f"cannot read relay list file {relay_list_file}: {e}") from e

    cmd = [mullvad_bin, 'relay', 'list']
    try:
        res = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='ignore',
            timeout=timeout,
            check=True,
            creationflags=_creationflags(),
        )
    except FileNotFoundError as e:
        raise RelayListError(f"{mullvad_bin} not found; is the Mullvad client installed?") from e
    except subprocess.TimeoutExpired as e:
        raise RelayListError(f"'{' '.join(cmd)}' timed out after {timeout}s") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or '').strip()
        raise RelayListError(f"'{' '.join(cmd)}' exited with {e.returncode}: {detail}") from e
    except OSError as e:
        raise RelayListError(f"'{' '.join(cmd)}' failed: {e}") from e
    return res.stdout


def build_ping_command(ip: str, timeout_ms: int = PING_TIMEOUT_MS, platform: Optional[str] = None) -> List[str]:
    """One-packet echo command for `platform` (defaults to the running one)."""
    platform = platform or sys.platform
    timeout_ms = int(timeout_ms)
    if platform.startswith('win'):
        # Windows: -n (count), -w (timeout in ms)
        return ["ping", "-n", "1", "-w", str(timeout_ms), ip]
    if platform == 'darwin':
        # macOS/BSD: -W timeout in ms
        return ["ping", "-c", "1", "-W", str(timeout_ms), ip]
    # Linux: -W timeout in seconds
    timeout_sec = max(1, int(round(timeout_ms / 1000.0)))
    return ["ping", "-c", "1", "-W", str(timeout_sec), ip]


# Per-packet reply, e.g. "time=12.3 ms" (Linux/macOS), "time=12ms" or "time<1ms" (Windows)
PACKET_TIME_REGEX = re.compile(r'time[=<]([\d.]+)\s*ms')
# Summary statistics; iputils prints "rtt ... mdev", BSD "round-trip ... stddev"
SUMMARY_REGEX = re.compile(
    r'(?:rtt|round-trip) min/avg/max/(?:mdev|stddev) = ([\d.]+)/([\d.]+)/([\d.]+)/([\d.]+) ms'
)
WINDOWS_SUMMARY_REGEX = re.compile(r'Average = (\d+)ms')


def parse_ping_output(output: str) -> Optional[float]:
    """Extract the round-trip time in ms; None when no known pattern matches.

    A reply below the timer resolution ("time<1ms") is reported as its bound.
    """
    if not output:
        return None
    m = PACKET_TIME_REGEX.search(output)
    if m:
        try:
            return float(m.group(1))
        except ValueError:
            pass
    # Fall back to the average of the summary line
    m = SUMMARY_REGEX.search(output)
    if m:
        try:
            return float(m.group(2))
        except ValueError:
            pass
    m = WINDOWS_SUMMARY_REGEX.search(output)
    if m:
        return float(m.group(1))
    return None


def ping_latency(ip: str, timeout_ms: int = PING_TIMEOUT_MS) -> Optional[float]:
    """Probe `ip` once.

    Returns the latency in ms, None if ping succeeded but printed nothing we
    recognise, or TIMEOUT_LATENCY (-1) if ping failed, was killed at the
    timeout or could not be started.
    """
    cmd = build_ping_command(ip, timeout_ms)
    py_timeout = (int(timeout_ms) / 1000.0) + 1.0
    try:
        res = subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding='utf-8',
            errors='ignore',
            timeout=py_timeout,
            creationflags=_creationflags(),
        )
    except (subprocess.TimeoutExpired, OSError):
        return TIMEOUT_LATENCY
    if res.returncode != 0:
        return TIMEOUT_LATENCY
    return parse_ping_output(res.stdout)
