"""Services for the connectivity watchdog."""

from .interfaces import (
    AdapterProviderInterface,
    ConnectivityProberInterface,
    RemediationActuatorInterface,
    RemediationResult
)
from .adapter_provider import (
    LinuxAdapterProvider,
    WindowsAdapterProvider,
    create_adapter_provider,
    match_adapter_name
)
from .connectivity_prober import ConnectivityProber, build_probe_targets
from .failure_tracker import FailureTracker, TrackerDecision
from .remediation import RemediationActuator
from .statistics_reporter import StatisticsReporter
from .error_handler import (
    ErrorHandler,
    ErrorSeverity,
    WatchdogError,
    AdapterNotFoundError,
    ProbeError,
    RemediationError,
    ProviderUnavailableError
)

__all__ = [
    'AdapterProviderInterface',
    'ConnectivityProberInterface',
    'RemediationActuatorInterface',
    'RemediationResult',
    'LinuxAdapterProvider',
    'WindowsAdapterProvider',
    'create_adapter_provider',
    'match_adapter_name',
    'ConnectivityProber',
    'build_probe_targets',
    'FailureTracker',
    'TrackerDecision',
    'RemediationActuator',
    'StatisticsReporter',
    'ErrorHandler',
    'ErrorSeverity',
    'WatchdogError',
    'AdapterNotFoundError',
    'ProbeError',
    'RemediationError',
    'ProviderUnavailableError'
]
