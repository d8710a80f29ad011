"""Connectivity probing: ICMP echo and DNS resolution, run in parallel per tick."""

import platform
import subprocess
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import dns.exception
import dns.resolver

from ..config.defaults import SYSTEM_CONSTANTS
from ..logging_config import get_logger
from ..models.config import WatchdogConfig
from ..models.probe import ConnectivityReport, ProbeKind, ProbeResult, ProbeTarget
from ..models.state import AdapterHandle
from .error_decorators import log_execution_time
from .error_handler import ProbeError
from .interfaces import ConnectivityProberInterface

logger = get_logger("connectivity_prober")


def build_probe_targets(config: WatchdogConfig, gateway: Optional[str] = None) -> List[ProbeTarget]:
    """Freeze the probe target list, with the default gateway first when known."""
    targets = []

    if config.include_default_gateway and gateway:
        targets.append(ProbeTarget(SYSTEM_CONSTANTS["GATEWAY_TARGET_NAME"], ProbeKind.PING, gateway))

    for entry in config.ping_targets:
        address = entry["address"]
        targets.append(ProbeTarget(entry.get("name") or address, ProbeKind.PING, address))

    for entry in config.dns_targets:
        hostname = entry["hostname"]
        targets.append(ProbeTarget(entry.get("name") or hostname, ProbeKind.DNS_RESOLVE, hostname))

    return targets


class ConnectivityProber(ConnectivityProberInterface):
    """Runs every configured probe and waits for all of them before reporting."""

    def __init__(self, max_workers: int = 8, system: Optional[str] = None):
        self.max_workers = max(1, max_workers)
        self.is_windows = (system or platform.system()) == "Windows"
        self.probe_count = 0

    @log_execution_time("connectivity_prober")
    def probe(self, adapter: AdapterHandle, targets: Sequence[ProbeTarget],
              timeout: float) -> ConnectivityReport:
        """Probe all targets through the adapter. Never raises for probe failures."""
        if not targets:
            return ConnectivityReport(results=[], observed_at=datetime.now())

        workers = min(self.max_workers, len(targets))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="probe") as executor:
            futures = [executor.submit(self._run_probe, adapter, target, timeout)
                       for target in targets]
            # Each probe is bounded by its own timeout
            results = [future.result() for future in futures]

        self.probe_count += 1
        report = ConnectivityReport(results=results, observed_at=datetime.now())

        for result in report.failed_results():
            logger.debug(f"Probe {result.target.name} ({result.target.address}) failed: {result.error}")

        return report

    def _run_probe(self, adapter: AdapterHandle, target: ProbeTarget,
                   timeout: float) -> ProbeResult:
        start = time.monotonic()
        try:
            if target.kind == ProbeKind.PING:
                self.ping(target.address, timeout, adapter)
            else:
                self.resolve(target.address, timeout, adapter)
        except Exception as e:
            return ProbeResult(target=target, success=False, observed_at=datetime.now(),
                               error=str(e) or type(e).__name__)

        latency_ms = (time.monotonic() - start) * 1000
        return ProbeResult(target=target, success=True, observed_at=datetime.now(),
                           latency_ms=latency_ms)

    def _ping_command(self, address: str, timeout: float,
                      adapter: Optional[AdapterHandle]) -> List[str]:
        if self.is_windows:
            cmd = ["ping", "-n", "1", "-w", str(max(1, int(timeout * 1000)))]
            if adapter and adapter.ipv4_address:
                cmd += ["-S", adapter.ipv4_address]
        else:
            cmd = ["ping", "-c", "1", "-W", str(max(1, int(round(timeout))))]
            if adapter:
                cmd += ["-I", adapter.name]
        return cmd + [address]

    def ping(self, address: str, timeout: float,
             adapter: Optional[AdapterHandle] = None) -> None:
        """Send a single ICMP echo. Raises ProbeError on failure."""
        cmd = self._ping_command(address, timeout, adapter)
        grace = SYSTEM_CONSTANTS["PING_PROCESS_GRACE_SECONDS"]

        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout + grace)
        except subprocess.TimeoutExpired:
            raise ProbeError(f"ping {address} timed out after {timeout}s")
        except OSError as e:
            raise ProbeError(f"ping could not be executed: {e}")

        if result.returncode != 0:
            raise ProbeError(f"ping {address} failed (exit {result.returncode})")

    def resolve(self, hostname: str, timeout: float,
                adapter: Optional[AdapterHandle] = None) -> List[str]:
        """Resolve A records for hostname. Raises ProbeError on failure."""
        resolver = dns.resolver.Resolver()
        source = adapter.ipv4_address if adapter else None

        try:
            answer = resolver.resolve(hostname, "A", source=source, lifetime=timeout)
        except dns.exception.Timeout:
            raise ProbeError(f"DNS lookup for {hostname} timed out after {timeout}s")
        except dns.resolver.NXDOMAIN:
            raise ProbeError(f"DNS lookup for {hostname} returned NXDOMAIN")
        except dns.exception.DNSException as e:
            raise ProbeError(f"DNS lookup for {hostname} failed: {e}")

        addresses = [rdata.address for rdata in answer]
        if not addresses:
            raise ProbeError(f"DNS lookup for {hostname} returned no addresses")
        return addresses

    def get_probe_info(self) -> Dict[str, Any]:
        """Get prober configuration and counters."""
        return {
            "max_workers": self.max_workers,
            "platform": "windows" if self.is_windows else "posix",
            "rounds_completed": self.probe_count
        }
