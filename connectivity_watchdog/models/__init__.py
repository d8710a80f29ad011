"""Data models for the connectivity watchdog."""

from .probe import ProbeKind, ProbeTarget, ProbeResult, ConnectivityReport, is_overall_healthy
from .state import TrackerState, AdapterHandle, FailureWindow, Statistics, WatchdogState
from .config import WatchdogConfig

__all__ = [
    'ProbeKind', 'ProbeTarget', 'ProbeResult', 'ConnectivityReport', 'is_overall_healthy',
    'TrackerState', 'AdapterHandle', 'FailureWindow', 'Statistics', 'WatchdogState',
    'WatchdogConfig'
]
