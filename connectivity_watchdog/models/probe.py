"""Probe data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional, Sequence


class ProbeKind(Enum):
    """Kind of connectivity probe."""
    PING = "ping"
    DNS_RESOLVE = "dns_resolve"


@dataclass(frozen=True)
class ProbeTarget:
    """A single reachability or name-resolution target."""
    name: str
    kind: ProbeKind
    address: str


@dataclass(frozen=True)
class ProbeResult:
    """Outcome of one probe against one target."""
    target: ProbeTarget
    success: bool
    observed_at: datetime
    error: Optional[str] = None
    latency_ms: Optional[float] = None


def is_overall_healthy(results: Sequence[ProbeResult]) -> bool:
    """Healthy only if at least one ping and at least one DNS lookup succeeded."""
    ping_ok = any(r.success for r in results if r.target.kind == ProbeKind.PING)
    dns_ok = any(r.success for r in results if r.target.kind == ProbeKind.DNS_RESOLVE)
    return ping_ok and dns_ok


@dataclass(frozen=True)
class ConnectivityReport:
    """All probe results gathered during one tick."""
    results: List[ProbeResult]
    observed_at: datetime = field(default_factory=datetime.now)

    @property
    def overall_healthy(self) -> bool:
        return is_overall_healthy(self.results)

    def failed_results(self) -> List[ProbeResult]:
        """Return the results of probes that did not succeed."""
        return [r for r in self.results if not r.success]
