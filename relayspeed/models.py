from __future__ import annotations

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional

# Latency sentinel: probe failed or exceeded its timeout
TIMEOUT_LATENCY = -1


class ProbeOutcome(Enum):
    SUCCESS = "success"
    TIMEOUT = "timeout"            # latency == -1
    UNRECOGNIZED = "unrecognized"  # latency is None


def classify_latency(latency_ms: Optional[float]) -> ProbeOutcome:
    if latency_ms is None:
        return ProbeOutcome.UNRECOGNIZED
    if latency_ms == TIMEOUT_LATENCY:
        return ProbeOutcome.TIMEOUT
    return ProbeOutcome.SUCCESS


@dataclass(frozen=True)
class ServerRecord:
    hostname: str
    ipv4_address: str
    country_name: str
    city_name: str
    protocol_info: str
    country_code: str = ""  # 2-letter code from the country header
    city_code: str = ""     # 3-letter code from the city header
    active: bool = True


@dataclass(frozen=True)
class MeasuredRecord(ServerRecord):
    latency_ms: Optional[float] = None  # ms, None = unrecognized output, -1 = timeout

    @classmethod
    def from_server(cls, server: ServerRecord, latency_ms: Optional[float]) -> "MeasuredRecord":
        return cls(**asdict(server), latency_ms=latency_ms)

    @property
    def outcome(self) -> ProbeOutcome:
        return classify_latency(self.latency_ms)


@dataclass(frozen=True)
class LatencyStats:
    reachable: int
    timeouts: int
    total: int
