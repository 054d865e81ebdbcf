#!/usr/bin/env python3
"""
relayspeed Parameter Health Check Script
Run this to validate your current parameter settings and the external tools the probe run depends on.
"""

import multiprocessing
import shutil
import sys
import time
from concurrent.futures import ThreadPoolExecutor

from relayspeed import constants as C
from relayspeed.net import build_ping_command, ping_latency
from relayspeed.report import format_latency


def check_binaries():
    """Check that the relay listing client and ping are available."""
    print("\n🔧 EXTERNAL TOOLS:")
    ok = True
    if C.RELAY_LIST_FILE:
        print(f"✅ Relay list file: {C.RELAY_LIST_FILE} (mullvad client not needed)")
    elif shutil.which(C.MULLVAD_BIN):
        print(f"✅ mullvad client: {shutil.which(C.MULLVAD_BIN)}")
    else:
        print(f"❌ mullvad client not found ({C.MULLVAD_BIN}); set RELAYSPEED_MULLVAD_BIN or RELAYSPEED_RELAY_LIST_FILE")
        ok = False

    ping = shutil.which('ping')
    if ping:
        print(f"✅ ping: {ping}")
        print(f"   Probe command: {' '.join(build_ping_command('<ip>', C.PING_TIMEOUT_MS))}")
    else:
        print("❌ ping not found on PATH")
        ok = False
    return ok


def check_probe():
    """Send one probe to a well-known address."""
    print("\n🌐 PROBE TEST:")
    for ip in ('1.1.1.1', '8.8.8.8'):
        start = time.time()
        latency = ping_latency(ip, min(C.PING_TIMEOUT_MS, 3000))
        took = (time.time() - start) * 1000
        print(f"   {ip}: {format_latency(latency)} (call took {took:.0f}ms)")


def check_worker_feasibility():
    """Test if the probe worker pool can be created successfully."""
    print("\n⚙️ WORKER POOL FEASIBILITY:")

    def dummy_task():
        time.sleep(0.01)
        return "success"

    try:
        with ThreadPoolExecutor(max_workers=C.PROBE_WORKERS) as executor:
            futures = [executor.submit(dummy_task) for _ in range(min(C.PROBE_WORKERS, 20))]
            [f.result() for f in futures]
        print(f"✅ PROBE_WORKERS ({C.PROBE_WORKERS}) - OK")
    except Exception as e:
        print(f"❌ PROBE_WORKERS ({C.PROBE_WORKERS}) - Failed: {str(e)[:50]}")


def analyze_parameters():
    """Analyze current parameter values for potential issues."""
    print("\n🔍 PARAMETER ANALYSIS:")

    cpu_cores = multiprocessing.cpu_count()
    print(f"System CPU cores: {cpu_cores}")

    issues = []

    if C.PROBE_WORKERS > cpu_cores * 16:
        issues.append(f"⚠️ PROBE_WORKERS ({C.PROBE_WORKERS}) very high for {cpu_cores} cores")
    if C.PING_TIMEOUT_MS < 1000:
        issues.append(f"⚠️ PING_TIMEOUT_MS ({C.PING_TIMEOUT_MS}ms) is low; distant relays will time out")
    if C.PROBE_DELAY_MS == 0 and C.PROBE_WORKERS == 1:
        issues.append("⚠️ PROBE_DELAY_MS is 0; probes will be sent back to back")
    if C.GOOD_LATENCY_MS > C.MEDIUM_LATENCY_MS:
        issues.append(f"⚠️ GOOD_LATENCY_MS ({C.GOOD_LATENCY_MS}) above MEDIUM_LATENCY_MS ({C.MEDIUM_LATENCY_MS})")

    if issues:
        for issue in issues:
            print(issue)
    else:
        print("✅ No parameter issues detected")


def show_current_parameters():
    """Display all current parameter values."""
    print("\n🎯 CURRENT PARAMETER VALUES:")
    print("=" * 60)
    print("SOURCE:")
    print(f"  MULLVAD_BIN: {C.MULLVAD_BIN}")
    print(f"  RELAY_LIST_FILE: {C.RELAY_LIST_FILE or '-'}")
    print(f"  RELAY_LIST_TIMEOUT: {C.RELAY_LIST_TIMEOUT}s")
    print("\nPROBING:")
    print(f"  PING_TIMEOUT_MS: {C.PING_TIMEOUT_MS}ms")
    print(f"  PROBE_DELAY_MS: {C.PROBE_DELAY_MS}ms")
    print(f"  PROBE_WORKERS: {C.PROBE_WORKERS} (ceiling {C.MAX_PROBE_WORKERS})")
    print("\nREPORT:")
    print(f"  FASTEST_COUNT: {C.FASTEST_COUNT}")
    print(f"  GOOD_LATENCY_MS: {C.GOOD_LATENCY_MS}")
    print(f"  MEDIUM_LATENCY_MS: {C.MEDIUM_LATENCY_MS}")
    print(f"  REPORT_FILE: {C.REPORT_FILE}")
    print("=" * 60)


def main():
    """Main function to run all checks."""
    print("🔧 relayspeed Parameter Health Check")
    print("====================================")

    show_current_parameters()
    tools_ok = check_binaries()
    if tools_ok:
        check_probe()
    check_worker_feasibility()
    analyze_parameters()

    print("\n" + "=" * 60)
    print("💡 TIPS:")
    print("   • Run with RELAYSPEED_DEBUG=1 to print parameters at startup")
    print("   • Use environment variables to override parameters:")
    print("     RELAYSPEED_PROBE_WORKERS=16 RELAYSPEED_PING_TIMEOUT_MS=3000")
    print("=" * 60)
    return 0 if tools_ok else 1


if __name__ == "__main__":
    sys.exit(main())
