"""
Connectivity Watchdog

Monitors one network interface, accumulates connectivity failures over time
and resets the interface when failures persist past a threshold.
"""

__version__ = "1.0.0"
__author__ = "Connectivity Watchdog"

from .config_manager import ConfigManager
from .models import (
    ProbeKind,
    ProbeTarget,
    ProbeResult,
    ConnectivityReport,
    TrackerState,
    AdapterHandle,
    FailureWindow,
    Statistics,
    WatchdogState,
    WatchdogConfig
)
from .watchdog import Watchdog, TickOutcome

__all__ = [
    # Core
    'ConfigManager',
    'Watchdog',
    'TickOutcome',

    # Data models
    'ProbeKind',
    'ProbeTarget',
    'ProbeResult',
    'ConnectivityReport',
    'TrackerState',
    'AdapterHandle',
    'FailureWindow',
    'Statistics',
    'WatchdogState',
    'WatchdogConfig'
]
