"""Per-tick statistics accumulation and status reporting."""

from datetime import datetime
from typing import Any, Dict, Optional

from ..logging_config import log_status
from ..models.probe import ConnectivityReport
from ..models.state import Statistics, TrackerState
from .failure_tracker import TrackerDecision
from .interfaces import RemediationResult


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class StatisticsReporter:
    """Updates Statistics once per tick and writes the status line."""

    def __init__(self, emit_status: bool = True):
        self.emit_status = emit_status
        self.last_status_line = ""

    def record_adapter_missing(self, stats: Statistics, pattern: str, error: str,
                               now: datetime) -> None:
        """Record a tick where no adapter matched the pattern."""
        stats.total_ticks += 1
        stats.current_adapter = None
        stats.last_failure_at = now
        stats.current_status = f"Adapter not found ({pattern})"
        stats.last_error = error
        self._emit(stats, None)

    def record_tick(self, stats: Statistics, adapter_name: str, report: ConnectivityReport,
                    decision: TrackerDecision, now: datetime,
                    remediation: Optional[RemediationResult] = None) -> None:
        """Record the outcome of a completed tick."""
        stats.total_ticks += 1
        stats.current_adapter = adapter_name
        stats.consecutive_failures = decision.consecutive_failures
        stats.failure_duration_seconds = decision.failure_duration_seconds

        if report.overall_healthy:
            stats.healthy_ticks += 1
            stats.last_success_at = now
        else:
            stats.last_failure_at = now
            failed = report.failed_results()
            if failed:
                stats.last_error = "; ".join(
                    f"{r.target.name}: {r.error}" for r in failed[:3])

        if remediation is not None:
            stats.total_resets += 1
            stats.last_reset_at = now
            if not remediation.success:
                stats.failed_remediations += 1
                stats.last_error = remediation.error or "Adapter reset failed"

        stats.current_status = self.describe(decision, remediation)
        self._emit(stats, report)

    def record_error(self, stats: Statistics, message: str, now: datetime) -> None:
        """Record an unexpected error raised inside a tick."""
        stats.total_ticks += 1
        stats.last_failure_at = now
        stats.last_error = message
        stats.current_status = "Error during check"
        self._emit(stats, None)

    @staticmethod
    def describe(decision: TrackerDecision,
                 remediation: Optional[RemediationResult] = None) -> str:
        """Human-readable description of the tracker state."""
        if remediation is not None:
            if remediation.success:
                return "Adapter reset, awaiting confirmation"
            return (f"Degraded for {decision.failure_duration_seconds:.0f}s "
                    f"({decision.consecutive_failures} failures), reset failed")

        if decision.state == TrackerState.HEALTHY:
            return "Healthy"
        if decision.state == TrackerState.REMEDIATING:
            return "Remediating"
        return (f"Degraded for {decision.failure_duration_seconds:.0f}s "
                f"({decision.consecutive_failures} failures)")

    def format_status_line(self, stats: Statistics,
                           report: Optional[ConnectivityReport] = None) -> str:
        """Single status line: adapter, probe outcomes, failure duration, resets, last error."""
        parts = [f"Adapter: {stats.current_adapter or '-'}",
                 f"Status: {stats.current_status}"]

        if report is not None:
            outcomes = " ".join(
                f"{r.target.name}={'OK' if r.success else 'FAIL'}" for r in report.results)
            parts.append(f"Probes: {outcomes or '-'}")

        parts.append(f"Failing: {stats.failure_duration_seconds:.0f}s")
        parts.append(f"Resets: {stats.total_resets}")
        parts.append(f"Last error: {stats.last_error or '-'}")
        return " | ".join(parts)

    def _emit(self, stats: Statistics, report: Optional[ConnectivityReport]) -> None:
        self.last_status_line = self.format_status_line(stats, report)
        if self.emit_status:
            log_status(self.last_status_line)

    def get_status(self, stats: Statistics, now: Optional[datetime] = None) -> Dict[str, Any]:
        """JSON-serializable snapshot of the statistics."""
        now = now or datetime.now()
        return {
            "uptime_seconds": (now - stats.start_time).total_seconds(),
            "start_time": _iso(stats.start_time),
            "current_adapter": stats.current_adapter,
            "current_status": stats.current_status,
            "consecutive_failures": stats.consecutive_failures,
            "failure_duration_seconds": stats.failure_duration_seconds,
            "total_resets": stats.total_resets,
            "failed_remediations": stats.failed_remediations,
            "last_reset_at": _iso(stats.last_reset_at),
            "last_success_at": _iso(stats.last_success_at),
            "last_failure_at": _iso(stats.last_failure_at),
            "last_error": stats.last_error,
            "total_ticks": stats.total_ticks,
            "healthy_ticks": stats.healthy_ticks
        }
