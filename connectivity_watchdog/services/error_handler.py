"""Error taxonomy and error bookkeeping for the watchdog."""

import traceback
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Any
from dataclasses import dataclass, field
from enum import Enum

from ..config.defaults import SYSTEM_CONSTANTS
from ..logging_config import get_logger


class WatchdogError(Exception):
    """Base class for watchdog errors."""


class AdapterNotFoundError(WatchdogError):
    """No interface matches the adapter pattern this tick."""

    def __init__(self, pattern: str):
        super().__init__(f"No adapter matching '{pattern}' is up")
        self.pattern = pattern


class ProbeError(WatchdogError):
    """A single probe failed or timed out."""


class RemediationError(WatchdogError):
    """The adapter disable/enable primitive failed."""


class ProviderUnavailableError(WatchdogError):
    """The OS adapter API cannot be used at all. Fatal."""


class ErrorSeverity(Enum):
    """Error severity levels."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ComponentStatus(Enum):
    """Component status levels."""
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    FAILED = "failed"
    UNKNOWN = "unknown"


@dataclass
class ErrorRecord:
    """Record of an error occurrence."""
    component_name: str
    error: Exception
    severity: ErrorSeverity
    timestamp: datetime = field(default_factory=datetime.now)
    traceback_str: str = ""

    @property
    def message(self) -> str:
        return f"{type(self.error).__name__}: {self.error}"


class ErrorHandler:
    """Records errors per component so they surface through the status fields."""

    def __init__(self, max_records: Optional[int] = None):
        self.logger = get_logger("error_handler")
        self.max_records = max_records or SYSTEM_CONSTANTS["MAX_ERROR_RECORDS"]
        self.error_records: List[ErrorRecord] = []
        self.total_errors = 0
        self.component_error_counts: Dict[str, int] = {}
        self.component_status: Dict[str, ComponentStatus] = {}

    def register_component(self, component_name: str) -> None:
        """Register a component for error tracking."""
        self.component_error_counts.setdefault(component_name, 0)
        self.component_status[component_name] = ComponentStatus.HEALTHY
        self.logger.debug(f"Component registered: {component_name}")

    def handle_error(self, component_name: str, error: Exception,
                     severity: ErrorSeverity = ErrorSeverity.MEDIUM) -> ErrorRecord:
        """Record an error from a component and log it."""
        error_record = ErrorRecord(
            component_name=component_name,
            error=error,
            severity=severity,
            traceback_str=traceback.format_exc() if error.__traceback__ else ""
        )

        self.error_records.append(error_record)
        if len(self.error_records) > self.max_records:
            self.error_records = self.error_records[-self.max_records:]
        self.total_errors += 1

        self.component_error_counts[component_name] = \
            self.component_error_counts.get(component_name, 0) + 1

        if severity == ErrorSeverity.CRITICAL:
            self.component_status[component_name] = ComponentStatus.FAILED
        elif severity == ErrorSeverity.HIGH:
            self.component_status[component_name] = ComponentStatus.DEGRADED

        log = self.logger.error if severity in (ErrorSeverity.HIGH, ErrorSeverity.CRITICAL) \
            else self.logger.warning
        log(f"Error in {component_name}: {error} (Severity: {severity.value})")

        return error_record

    def mark_recovered(self, component_name: str) -> None:
        """Flag a component healthy again after a successful operation."""
        if self.component_status.get(component_name) not in (None, ComponentStatus.HEALTHY):
            self.logger.info(f"Component recovered: {component_name}")
        self.component_status[component_name] = ComponentStatus.HEALTHY

    @property
    def last_error(self) -> Optional[ErrorRecord]:
        return self.error_records[-1] if self.error_records else None

    @property
    def last_error_message(self) -> str:
        record = self.last_error
        return record.message if record else ""

    def get_error_stats(self) -> Dict[str, Any]:
        """Get error statistics."""
        return {
            "total_errors": self.total_errors,
            "component_error_counts": dict(self.component_error_counts),
            "component_status": {
                name: status.value for name, status in self.component_status.items()
            },
            "last_error": self.last_error_message
        }

    def get_error_summary(self, hours: int = 24) -> Dict[str, Any]:
        """Get summary of retained errors in the last N hours."""
        cutoff_time = datetime.now() - timedelta(hours=hours)
        recent_errors = [e for e in self.error_records if e.timestamp >= cutoff_time]

        component_counts: Dict[str, int] = {}
        severity_counts = {severity.value: 0 for severity in ErrorSeverity}

        for error in recent_errors:
            component_counts[error.component_name] = component_counts.get(error.component_name, 0) + 1
            severity_counts[error.severity.value] += 1

        return {
            "total_errors": len(recent_errors),
            "component_counts": component_counts,
            "severity_counts": severity_counts,
            "time_period_hours": hours
        }
