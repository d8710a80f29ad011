"""Failure tracking state machine.

The tracker consumes one connectivity verdict per tick and decides whether
the interface is healthy, degraded, or due for remediation::

    HEALTHY   + healthy   -> HEALTHY
    HEALTHY   + unhealthy -> DEGRADED     (window opens, 1 failure)
    DEGRADED  + healthy   -> HEALTHY      (window cleared)
    DEGRADED  + unhealthy -> DEGRADED     (failure counted)
                          -> REMEDIATING  (once the window reaches the threshold)
    REMEDIATING + reset ok     -> HEALTHY   (window cleared)
    REMEDIATING + reset failed -> DEGRADED  (window kept, so the next
                                             unhealthy tick retries at once)

The tracker holds no state of its own. It operates on the ``WatchdogState``
owned by the loop driver.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Union

from ..logging_config import get_logger
from ..models.probe import ConnectivityReport
from ..models.state import TrackerState, WatchdogState

logger = get_logger("failure_tracker")


@dataclass(frozen=True)
class TrackerDecision:
    """What the tracker concluded for one tick."""
    state: TrackerState
    should_remediate: bool
    consecutive_failures: int
    failure_duration_seconds: float


class FailureTracker:
    """Decides when accumulated failures warrant an adapter reset."""

    def __init__(self, failure_threshold_seconds: float):
        if failure_threshold_seconds < 0:
            raise ValueError("failure_threshold_seconds must be >= 0")
        self.failure_threshold_seconds = failure_threshold_seconds

    def observe(self, state: WatchdogState, report: Union[ConnectivityReport, bool],
                now: datetime) -> TrackerDecision:
        """Fold one tick's verdict into the state and decide on remediation."""
        healthy = report if isinstance(report, bool) else report.overall_healthy
        window = state.failure_window

        if healthy:
            if state.tracker_state != TrackerState.HEALTHY:
                logger.info(f"Connectivity restored after {window.consecutive_failures} "
                            f"failed tick(s), {window.elapsed_seconds(now):.0f}s")
            window.clear()
            state.tracker_state = TrackerState.HEALTHY
            return self._decision(state, now, should_remediate=False)

        if not window.is_open:
            window.open(now)
            state.tracker_state = TrackerState.DEGRADED
            logger.warning("Connectivity check failed, failure window opened")
            return self._decision(state, now, should_remediate=False)

        window.consecutive_failures += 1
        elapsed = window.elapsed_seconds(now)

        if elapsed >= self.failure_threshold_seconds:
            state.tracker_state = TrackerState.REMEDIATING
            logger.warning(f"Failures persisted for {elapsed:.0f}s "
                           f"(threshold {self.failure_threshold_seconds}s), remediation due")
            return self._decision(state, now, should_remediate=True)

        state.tracker_state = TrackerState.DEGRADED
        return self._decision(state, now, should_remediate=False)

    def record_remediation(self, state: WatchdogState, success: bool,
                           now: datetime) -> TrackerDecision:
        """Apply the outcome of a remediation attempt."""
        if success:
            # Optimistic: the next tick's probes confirm or reopen the window
            state.failure_window.clear()
            state.tracker_state = TrackerState.HEALTHY
        else:
            state.tracker_state = TrackerState.DEGRADED
        return self._decision(state, now, should_remediate=False)

    def failure_duration(self, state: WatchdogState, now: datetime) -> float:
        return state.failure_window.elapsed_seconds(now)

    def _decision(self, state: WatchdogState, now: datetime,
                  should_remediate: bool) -> TrackerDecision:
        return TrackerDecision(
            state=state.tracker_state,
            should_remediate=should_remediate,
            consecutive_failures=state.failure_window.consecutive_failures,
            failure_duration_seconds=self.failure_duration(state, now)
        )
