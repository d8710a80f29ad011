"""Loop driver that sequences probe, track, remediate and report on each tick."""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional

from .logging_config import get_logger, log_with_context
from .models.config import WatchdogConfig
from .models.probe import ConnectivityReport, ProbeTarget
from .models.state import AdapterHandle, WatchdogState
from .services.connectivity_prober import ConnectivityProber, build_probe_targets
from .services.error_decorators import capture_errors
from .services.error_handler import (
    AdapterNotFoundError, ErrorHandler, ErrorSeverity, ProviderUnavailableError, RemediationError
)
from .services.failure_tracker import FailureTracker, TrackerDecision
from .services.interfaces import (
    AdapterProviderInterface, ConnectivityProberInterface, RemediationActuatorInterface,
    RemediationResult
)
from .services.remediation import RemediationActuator
from .services.statistics_reporter import StatisticsReporter

logger = get_logger("watchdog")


@dataclass
class TickOutcome:
    """What happened during one tick."""
    adapter: Optional[AdapterHandle] = None
    report: Optional[ConnectivityReport] = None
    decision: Optional[TrackerDecision] = None
    remediation: Optional[RemediationResult] = None
    error: Optional[str] = None


class Watchdog:
    """Single-target connectivity watchdog.

    One tick at a time: resolve the adapter, probe, update the failure
    tracker, reset the adapter when the tracker asks for it, then report.
    All mutable state lives in ``self.state`` and is only touched from the
    thread running the loop.
    """

    def __init__(self,
                 config: WatchdogConfig,
                 provider: AdapterProviderInterface,
                 prober: Optional[ConnectivityProberInterface] = None,
                 tracker: Optional[FailureTracker] = None,
                 actuator: Optional[RemediationActuatorInterface] = None,
                 reporter: Optional[StatisticsReporter] = None,
                 error_handler: Optional[ErrorHandler] = None,
                 clock: Callable[[], datetime] = datetime.now):
        self.config = config
        self.provider = provider
        self.prober = prober or ConnectivityProber(max_workers=config.max_parallel_probes)
        self.tracker = tracker or FailureTracker(config.failure_threshold_seconds)
        self.actuator = actuator or RemediationActuator(provider)
        self.reporter = reporter or StatisticsReporter()
        self.error_handler = error_handler or ErrorHandler()
        self.clock = clock

        self.state = WatchdogState()
        self.state.statistics.start_time = clock()
        self.targets: List[ProbeTarget] = []
        self.gateway: Optional[str] = None
        self.initialized = False

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

        for component in ("adapter_selector", "gateway_discovery", "prober", "remediation", "watchdog"):
            self.error_handler.register_component(component)

    def initialize(self) -> None:
        """Resolve the default gateway once and freeze the probe targets."""
        if self.config.include_default_gateway:
            self.gateway = self._resolve_gateway()
            if self.gateway:
                logger.info(f"Default gateway: {self.gateway}")
            else:
                logger.warning("Default gateway unknown, probing fixed targets only")

        self.targets = build_probe_targets(self.config, self.gateway)
        self.initialized = True
        logger.info(f"Monitoring adapters matching '{self.config.adapter_pattern}' with "
                    f"{len(self.targets)} probe targets, threshold "
                    f"{self.config.failure_threshold_seconds}s, interval "
                    f"{self.config.test_interval_seconds}s")

    @capture_errors("gateway_discovery", ErrorSeverity.LOW)
    def _resolve_gateway(self) -> Optional[str]:
        return self.provider.get_default_gateway()

    def run_tick(self, now: Optional[datetime] = None) -> TickOutcome:
        """Run one tick. Only ProviderUnavailableError escapes."""
        if not self.initialized:
            self.initialize()

        try:
            return self._tick(now)
        except ProviderUnavailableError:
            raise
        except Exception as e:
            record = self.error_handler.handle_error("watchdog", e, ErrorSeverity.HIGH)
            self.reporter.record_error(self.state.statistics, record.message, now or self.clock())
            return TickOutcome(adapter=self.state.adapter, error=record.message)

    def _tick(self, now: Optional[datetime]) -> TickOutcome:
        stats = self.state.statistics
        pattern = self.config.adapter_pattern

        adapter = self.provider.find_adapter(pattern)
        self._track_adapter_change(adapter)
        self.state.adapter = adapter

        if adapter is None:
            error = AdapterNotFoundError(pattern)
            self.error_handler.handle_error("adapter_selector", error, ErrorSeverity.LOW)
            self.reporter.record_adapter_missing(stats, pattern, str(error), now or self.clock())
            return TickOutcome(error=str(error))

        self.error_handler.mark_recovered("adapter_selector")
        report = self.prober.probe(adapter, self.targets, self.config.probe_timeout_seconds)
        now = now or self.clock()

        decision = self.tracker.observe(self.state, report, now)
        remediation = None

        if decision.should_remediate:
            log_with_context(logger, logging.WARNING, "Remediation triggered", {
                "adapter": adapter.name,
                "failures": decision.consecutive_failures,
                "failing_seconds": f"{decision.failure_duration_seconds:.0f}"
            })
            remediation = self.actuator.reset(adapter)
            decision = self.tracker.record_remediation(self.state, remediation.success, now)
            if remediation.success:
                self.error_handler.mark_recovered("remediation")
            else:
                self.error_handler.handle_error(
                    "remediation", RemediationError(remediation.error), ErrorSeverity.HIGH)

        self.reporter.record_tick(stats, adapter.name, report, decision, now, remediation)
        return TickOutcome(adapter=adapter, report=report, decision=decision,
                           remediation=remediation)

    def _track_adapter_change(self, adapter: Optional[AdapterHandle]) -> None:
        previous = self.state.adapter
        previous_name = previous.name if previous else None
        current_name = adapter.name if adapter else None

        if previous_name == current_name:
            return
        if current_name is None:
            logger.warning(f"Adapter {previous_name} is no longer available")
        elif previous_name is None:
            logger.info(f"Monitoring adapter {current_name}")
        else:
            logger.info(f"Monitored adapter changed: {previous_name} -> {current_name}")

    def run(self, max_ticks: Optional[int] = None) -> int:
        """Tick until stop() is called (or max_ticks is reached). Returns ticks run."""
        ticks = 0
        logger.info("Watchdog loop started")

        while not self._stop_event.is_set():
            self.run_tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
            if self._stop_event.wait(self.config.test_interval_seconds):
                break

        logger.info(f"Watchdog loop ended after {ticks} tick(s)")
        return ticks

    def start(self) -> None:
        """Run the loop on a background thread."""
        if self.is_running:
            logger.warning("Watchdog is already running")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self.run, name="watchdog", daemon=True)
        self._thread.start()

    def stop(self, timeout: Optional[float] = None) -> None:
        """Signal the loop to stop; the inter-tick sleep ends immediately."""
        self._stop_event.set()
        if self._thread and self._thread.is_alive() and \
                self._thread is not threading.current_thread():
            self._thread.join(timeout=timeout)

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def get_status(self) -> Dict[str, Any]:
        """Get current watchdog status and statistics."""
        status = self.reporter.get_status(self.state.statistics, self.clock())
        status.update({
            "running": self.is_running,
            "tracker_state": self.state.tracker_state.value,
            "adapter_pattern": self.config.adapter_pattern,
            "gateway": self.gateway,
            "targets": [
                {"name": t.name, "kind": t.kind.value, "address": t.address}
                for t in self.targets
            ],
            "errors": self.error_handler.get_error_stats(),
            "recent_errors": self.error_handler.get_error_summary(),
            "prober": self.prober.get_probe_info(),
            "remediation": self.actuator.get_remediation_info()
        })
        return status
