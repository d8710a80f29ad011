"""Watchdog state models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class TrackerState(Enum):
    """Failure tracker states."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    REMEDIATING = "remediating"


@dataclass
class AdapterHandle:
    """Reference to the OS network interface being monitored."""
    name: str
    is_up: bool = True
    speed_mbps: int = 0
    mtu: int = 0
    ipv4_address: Optional[str] = None


@dataclass
class FailureWindow:
    """Interval during which consecutive unhealthy ticks have accumulated."""
    started_at: Optional[datetime] = None
    consecutive_failures: int = 0

    @property
    def is_open(self) -> bool:
        return self.started_at is not None

    def open(self, now: datetime) -> None:
        self.started_at = now
        self.consecutive_failures = 1

    def clear(self) -> None:
        self.started_at = None
        self.consecutive_failures = 0

    def elapsed_seconds(self, now: datetime) -> float:
        if self.started_at is None:
            return 0.0
        return (now - self.started_at).total_seconds()


@dataclass
class Statistics:
    """Counters accumulated over the life of the process."""
    start_time: datetime = field(default_factory=datetime.now)
    total_resets: int = 0
    last_reset_at: Optional[datetime] = None
    last_success_at: Optional[datetime] = None
    last_failure_at: Optional[datetime] = None
    current_status: str = "Starting"
    last_error: str = ""
    current_adapter: Optional[str] = None
    consecutive_failures: int = 0
    failure_duration_seconds: float = 0.0
    total_ticks: int = 0
    healthy_ticks: int = 0
    failed_remediations: int = 0


@dataclass
class WatchdogState:
    """Mutable state owned by the loop driver and threaded through each tick."""
    failure_window: FailureWindow = field(default_factory=FailureWindow)
    statistics: Statistics = field(default_factory=Statistics)
    tracker_state: TrackerState = TrackerState.HEALTHY
    adapter: Optional[AdapterHandle] = None
