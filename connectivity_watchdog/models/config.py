"""Configuration data models."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..config.defaults import DEFAULT_DNS_TARGETS, DEFAULT_PING_TARGETS


@dataclass
class WatchdogConfig:
    """Watchdog configuration settings."""
    # Adapter selection
    adapter_pattern: str = "*"

    # Timing
    failure_threshold_seconds: int = 30
    test_interval_seconds: int = 5
    probe_timeout_seconds: float = 2.0

    # Probe targets
    ping_targets: List[Dict[str, str]] = field(
        default_factory=lambda: [dict(t) for t in DEFAULT_PING_TARGETS])
    dns_targets: List[Dict[str, str]] = field(
        default_factory=lambda: [dict(t) for t in DEFAULT_DNS_TARGETS])
    include_default_gateway: bool = True
    max_parallel_probes: int = 8

    # Logging
    log_level: str = "INFO"
    log_dir: Optional[str] = None
