from __future__ import annotations

import html
import math
from datetime import datetime
from string import Template
from typing import Optional, Sequence

from .constants import GOOD_LATENCY_MS, MEDIUM_LATENCY_MS
from .io_ops import write_text_file_atomic
from .models import MeasuredRecord, ProbeOutcome, classify_latency
from .ranking import compute_stats

TIMEOUT_LABEL = 'Timeout'
UNREACHABLE_LABEL = 'Unreachable'


def format_latency(latency: Optional[float]) -> str:
    outcome = classify_latency(latency)
    if outcome is ProbeOutcome.UNRECOGNIZED:
        return UNREACHABLE_LABEL
    if outcome is ProbeOutcome.TIMEOUT:
        return TIMEOUT_LABEL
    # Half-up rounding, never below 1ms
    return f"{max(1, int(math.floor(latency + 0.5)))}ms"


def latency_class(latency: Optional[float]) -> str:
    if classify_latency(latency) is not ProbeOutcome.SUCCESS:
        return 'unknown'
    if latency <= GOOD_LATENCY_MS:
        return 'good'
    if latency <= MEDIUM_LATENCY_MS:
        return 'medium'
    return 'bad'


_ROW = Template("""
                <tr>
                    <td class="country">$country</td>
                    <td class="city">$city</td>
                    <td>$hostname</td>
                    <td class="latency $cls">$latency</td>
                    <td>$ip</td>
                </tr>""")

_PAGE = Template("""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Mullvad VPN Relay Speed Test</title>
    <style>
        body { font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; margin: 0; padding: 20px; background-color: #f5f5f5; }
        .container { max-width: 1200px; margin: 0 auto; background: white; padding: 20px; border-radius: 8px; box-shadow: 0 2px 10px rgba(0,0,0,0.1); }
        h1 { color: #2c3e50; text-align: center; margin-bottom: 30px; }
        .stats { display: flex; justify-content: space-around; margin-bottom: 20px; padding: 15px; background: #ecf0f1; border-radius: 5px; }
        .stat { text-align: center; }
        .stat-number { font-size: 24px; font-weight: bold; color: #e74c3c; }
        .stat-label { color: #7f8c8d; font-size: 14px; }
        .sort-buttons button { padding: 8px 16px; margin-right: 10px; color: white; border: none; border-radius: 4px; cursor: pointer; }
        table { width: 100%; border-collapse: collapse; margin-top: 20px; }
        th, td { padding: 12px; text-align: left; border-bottom: 1px solid #ddd; }
        th { background-color: #34495e; color: white; font-weight: 600; }
        tr:nth-child(even) { background-color: #f8f9fa; }
        tr:hover { background-color: #e8f4f8; }
        .latency { font-weight: bold; }
        .latency.good { color: #27ae60; }
        .latency.medium { color: #f39c12; }
        .latency.bad { color: #e74c3c; }
        .latency.unknown { color: #95a5a6; }
        .country { font-weight: 500; }
        .city { color: #7f8c8d; }
        .timestamp { text-align: center; color: #7f8c8d; margin-top: 30px; padding-top: 20px; border-top: 1px solid #ddd; }
        .threshold-info { background: #d4edda; color: #155724; padding: 10px; border-radius: 4px; margin-bottom: 20px; text-align: center; }
    </style>
</head>
<body>
    <div class="container">
        <h1>Mullvad VPN Relay Speed Test</h1>

        <div class="threshold-info">$info</div>

        <div class="stats">
            <div class="stat">
                <div class="stat-number">$reachable</div>
                <div class="stat-label">Reachable</div>
            </div>
            <div class="stat">
                <div class="stat-number">$timeouts</div>
                <div class="stat-label">Timed out</div>
            </div>
            <div class="stat">
                <div class="stat-number">$total</div>
                <div class="stat-label">Total relays</div>
            </div>
        </div>

        <div class="sort-buttons" style="margin-bottom: 15px;">
            <button onclick="sortTable('latency')" style="background: #3498db;">Sort by latency</button>
            <button onclick="sortTable('country')" style="background: #2ecc71;">Sort by country</button>
            <button onclick="sortTable('city')" style="background: #e74c3c;">Sort by city</button>
        </div>

        <table id="resultsTable">
            <thead>
                <tr>
                    <th>Country</th>
                    <th>City</th>
                    <th>Server</th>
                    <th data-sort="latency">Latency (ms)</th>
                    <th>IP address</th>
                </tr>
            </thead>
            <tbody>$rows
            </tbody>
        </table>

        <div class="timestamp">Report generated: $generated</div>
    </div>

    <script>
        const TIMEOUT_LABEL = '$timeout_label';
        let sortDirection = { latency: 'asc', country: 'asc', city: 'asc' };

        function sortTable(column) {
            const tbody = document.getElementById('resultsTable').querySelector('tbody');
            const rows = Array.from(tbody.querySelectorAll('tr'));

            rows.sort((a, b) => {
                let aVal, bVal;
                if (column === 'latency') {
                    const aText = a.cells[3].textContent;
                    const bText = b.cells[3].textContent;
                    // Timeouts always go last
                    if (aText === TIMEOUT_LABEL && bText !== TIMEOUT_LABEL) return 1;
                    if (aText !== TIMEOUT_LABEL && bText === TIMEOUT_LABEL) return -1;
                    if (aText === TIMEOUT_LABEL && bText === TIMEOUT_LABEL) return 0;
                    aVal = parseFloat(aText);
                    bVal = parseFloat(bText);
                } else if (column === 'country') {
                    aVal = a.cells[0].textContent.toLowerCase();
                    bVal = b.cells[0].textContent.toLowerCase();
                } else {
                    aVal = a.cells[1].textContent.toLowerCase();
                    bVal = b.cells[1].textContent.toLowerCase();
                }
                if (sortDirection[column] === 'asc') {
                    return aVal > bVal ? 1 : aVal < bVal ? -1 : 0;
                }
                return aVal < bVal ? 1 : aVal > bVal ? -1 : 0;
            });

            sortDirection[column] = sortDirection[column] === 'asc' ? 'desc' : 'asc';
            rows.forEach(row => tbody.appendChild(row));
        }

        window.onload = function() { sortTable('latency'); };
    </script>
</body>
</html>
""")


def _render_row(r: MeasuredRecord) -> str:
    return _ROW.substitute(
        country=html.escape(r.country_name or r.country_code),
        city=html.escape(r.city_name or r.city_code or '-'),
        hostname=html.escape(r.hostname),
        cls=latency_class(r.latency_ms),
        latency=format_latency(r.latency_ms),
        ip=html.escape(r.ipv4_address),
    )


def render_report(
    display: Sequence[MeasuredRecord],
    all_results: Sequence[MeasuredRecord],
    country_filter: Optional[str],
    timeout_ms: int,
    generated_at: Optional[datetime] = None,
) -> str:
    """Render the HTML report.

    `display` fills the table in the given order; statistics are computed
    from `all_results`.
    """
    stamp = (generated_at or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')
    parts = [f"{int(round(timeout_ms / 1000.0))}s timeout", "showing all relays"]
    if country_filter:
        parts.append(f"country filter: {html.escape(country_filter)}")
    parts.append(f"tested at: {stamp}")
    stats = compute_stats(all_results)

    return _PAGE.substitute(
        info=' | '.join(parts),
        reachable=stats.reachable,
        timeouts=stats.timeouts,
        total=stats.total,
        rows=''.join(_render_row(r) for r in display),
        generated=stamp,
        timeout_label=TIMEOUT_LABEL,
    )


def write_report(path: str, html_text: str) -> None:
    write_text_file_atomic(path, html_text)
