from __future__ import annotations

import re
from typing import List, Optional

from .models import ServerRecord

# Country: "Sweden (se)"
COUNTRY_REGEX = re.compile(r'^([^\s(][^(]*) \(([a-z]{2})\)$')
# City: "\tGothenburg (got) @ 57.70887°N, 11.97456°W"
CITY_REGEX = re.compile(r'^\t([^(]+) \(([a-z]{3})\) @')
# Server: "\t\tse-got-wg-001 (185.213.154.66, 2a03:1b20:5:f011::a01f) - WireGuard, hosted by 31173 (rented)"
SERVER_REGEX = re.compile(r'^\t\t(\S+) \(([^)]+)\) - (.+)$')
IPV4_REGEX = re.compile(r'(\d+\.\d+\.\d+\.\d+)')


def extract_ipv4(ip_info: str) -> Optional[str]:
    """Return the first dotted-quad found in a server's address list."""
    if not ip_info:
        return None
    m = IPV4_REGEX.search(ip_info)
    return m.group(1) if m else None


def parse_relay_list(text: str) -> List[ServerRecord]:
    """Flatten `mullvad relay list` output into server records.

    Indentation carries the hierarchy: country headers have no leading
    whitespace, cities one tab, servers two tabs. Servers inherit the most
    recent country and city; servers seen before both headers, and servers
    without an IPv4 address, are dropped.
    """
    servers: List[ServerRecord] = []
    country, country_code = '', ''
    city, city_code = '', ''

    for raw in (text or '').split('\n'):
        line = raw.rstrip('\r')

        m = COUNTRY_REGEX.match(line)
        if m:
            country, country_code = m.group(1).strip(), m.group(2)
            continue

        m = CITY_REGEX.match(line)
        if m:
            city, city_code = m.group(1).strip(), m.group(2)
            continue

        m = SERVER_REGEX.match(line)
        if not m or not country or not city:
            continue
        ipv4 = extract_ipv4(m.group(2))
        if not ipv4:
            continue
        servers.append(ServerRecord(
            hostname=m.group(1).strip(),
            ipv4_address=ipv4,
            country_name=country,
            city_name=city,
            protocol_info=m.group(3),
            country_code=country_code,
            city_code=city_code,
        ))

    return servers
