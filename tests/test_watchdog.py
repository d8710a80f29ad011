"""Integration tests for the watchdog loop driver."""

import unittest
import sys
import os
import threading
import time
from datetime import datetime, timedelta
from typing import List, Optional
from unittest.mock import Mock

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from connectivity_watchdog.models.config import WatchdogConfig
from connectivity_watchdog.models.probe import ConnectivityReport, ProbeKind, ProbeResult, ProbeTarget
from connectivity_watchdog.models.state import AdapterHandle, TrackerState
from connectivity_watchdog.services.error_handler import (
    AdapterNotFoundError, ComponentStatus, ProviderUnavailableError, RemediationError
)
from connectivity_watchdog.services.interfaces import (
    AdapterProviderInterface, ConnectivityProberInterface
)
from connectivity_watchdog.services.statistics_reporter import StatisticsReporter
from connectivity_watchdog.watchdog import Watchdog


T0 = datetime(2024, 1, 1, 12, 0, 0)


def at(seconds):
    return T0 + timedelta(seconds=seconds)


class FakeAdapterProvider(AdapterProviderInterface):
    """In-memory adapter provider."""

    def __init__(self, adapters=None, gateway="192.168.1.1"):
        self.adapters = adapters if adapters is not None else [AdapterHandle(name="eth0")]
        self.gateway = gateway
        self.calls: List[str] = []
        self.fail_disable: Optional[Exception] = None

    def list_adapters(self):
        return list(self.adapters)

    def find_adapter(self, pattern):
        for adapter in self.adapters:
            if adapter.is_up:
                return adapter
        return None

    def get_default_gateway(self):
        if isinstance(self.gateway, Exception):
            raise self.gateway
        return self.gateway

    def disable_adapter(self, adapter):
        self.calls.append(f"disable {adapter.name}")
        if self.fail_disable:
            raise self.fail_disable

    def enable_adapter(self, adapter):
        self.calls.append(f"enable {adapter.name}")

    def is_adapter_up(self, name):
        return any(a.name == name and a.is_up for a in self.adapters)

    @property
    def resets(self):
        return self.calls.count("disable eth0")


class ScriptedProber(ConnectivityProberInterface):
    """Prober returning a scripted sequence of overall health values."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = 0

    def probe(self, adapter, targets, timeout):
        healthy = self.outcomes[min(self.calls, len(self.outcomes) - 1)]
        self.calls += 1
        results = [
            ProbeResult(t, healthy, T0, None if healthy else "failed") for t in targets
        ]
        return ConnectivityReport(results=results, observed_at=T0)

    def get_probe_info(self):
        return {"rounds_completed": self.calls}


class TestWatchdog(unittest.TestCase):
    """Test cases for the Watchdog loop driver."""

    def setUp(self):
        """Set up test fixtures."""
        self.config = WatchdogConfig(failure_threshold_seconds=10, test_interval_seconds=5)
        self.provider = FakeAdapterProvider()

    def make_watchdog(self, outcomes, **kwargs):
        self.prober = ScriptedProber(outcomes)
        return Watchdog(self.config, self.provider, prober=self.prober,
                        reporter=StatisticsReporter(emit_status=False),
                        clock=lambda: T0, **kwargs)

    def run_ticks(self, watchdog, count, interval=5):
        return [watchdog.run_tick(at(i * interval)) for i in range(count)]

    def test_initialize_puts_gateway_first(self):
        watchdog = self.make_watchdog([True])
        watchdog.initialize()

        self.assertEqual(watchdog.gateway, "192.168.1.1")
        self.assertEqual(watchdog.targets[0], ProbeTarget("Default Gateway", ProbeKind.PING,
                                                          "192.168.1.1"))

    def test_gateway_failure_uses_fixed_targets(self):
        self.provider.gateway = RuntimeError("no route table")
        watchdog = self.make_watchdog([True])

        watchdog.initialize()

        self.assertIsNone(watchdog.gateway)
        self.assertNotIn("Default Gateway", [t.name for t in watchdog.targets])
        self.assertEqual(watchdog.error_handler.component_error_counts["gateway_discovery"], 1)

    def test_healthy_ticks(self):
        watchdog = self.make_watchdog([True])

        outcomes = self.run_ticks(watchdog, 3)

        self.assertFalse(any(o.remediation is not None for o in outcomes))
        self.assertEqual(watchdog.state.statistics.current_status, "Healthy")
        self.assertEqual(watchdog.state.statistics.healthy_ticks, 3)
        self.assertEqual(self.provider.calls, [])

    def test_threshold_timing_through_driver(self):
        """Test threshold 10s and interval 5s resets on the third failing tick."""
        watchdog = self.make_watchdog([False])

        outcomes = self.run_ticks(watchdog, 3)

        self.assertEqual([o.remediation is not None for o in outcomes], [False, False, True])
        self.assertEqual(self.provider.calls, ["disable eth0", "enable eth0"])
        self.assertEqual(watchdog.state.statistics.total_resets, 1)
        self.assertEqual(watchdog.state.statistics.last_reset_at, at(10))
        self.assertEqual(watchdog.state.tracker_state, TrackerState.HEALTHY)

    def test_recovery_before_threshold(self):
        watchdog = self.make_watchdog([False, False, True, False])

        self.run_ticks(watchdog, 4)

        self.assertEqual(self.provider.calls, [])
        self.assertEqual(watchdog.state.failure_window.started_at, at(15))
        self.assertEqual(watchdog.state.failure_window.consecutive_failures, 1)

    def test_two_resets(self):
        """Test repeated outages each lead to a reset."""
        watchdog = self.make_watchdog([False])

        self.run_ticks(watchdog, 6)

        self.assertEqual(self.provider.resets, 2)
        self.assertEqual(watchdog.state.statistics.total_resets, 2)

    def test_remediation_failure_retried_next_tick(self):
        self.provider.fail_disable = RemediationError("Operation not permitted")
        watchdog = self.make_watchdog([False])

        outcomes = self.run_ticks(watchdog, 4)

        self.assertEqual([o.remediation is not None for o in outcomes], [False, False, True, True])
        stats = watchdog.state.statistics
        self.assertEqual(stats.total_resets, 2)
        self.assertEqual(stats.failed_remediations, 2)
        self.assertIn("Operation not permitted", stats.last_error)
        self.assertEqual(watchdog.state.tracker_state, TrackerState.DEGRADED)
        self.assertEqual(watchdog.error_handler.component_status["remediation"],
                         ComponentStatus.DEGRADED)

    def test_adapter_absent_for_whole_run(self):
        self.provider.adapters = []
        watchdog = self.make_watchdog([False])

        outcomes = self.run_ticks(watchdog, 5)

        self.assertTrue(all(o.error for o in outcomes))
        self.assertEqual(self.prober.calls, 0)
        self.assertEqual(self.provider.calls, [])
        self.assertEqual(watchdog.state.statistics.total_resets, 0)
        self.assertEqual(watchdog.state.statistics.current_status, "Adapter not found (*)")
        self.assertEqual(watchdog.state.statistics.last_error, str(AdapterNotFoundError("*")))
        self.assertEqual(outcomes[0].error, watchdog.state.statistics.last_error)

    def test_adapter_switch_is_followed(self):
        eth0 = AdapterHandle(name="eth0")
        eth1 = AdapterHandle(name="eth1")
        self.provider.adapters = [eth0, eth1]
        watchdog = self.make_watchdog([True])

        first = watchdog.run_tick(at(0))
        eth0.is_up = False
        second = watchdog.run_tick(at(5))

        self.assertEqual(first.adapter.name, "eth0")
        self.assertEqual(second.adapter.name, "eth1")
        self.assertEqual(watchdog.state.statistics.current_adapter, "eth1")

    def test_unexpected_error_is_absorbed(self):
        watchdog = self.make_watchdog([True])
        watchdog.prober = Mock()
        watchdog.prober.probe.side_effect = RuntimeError("boom")

        outcome = watchdog.run_tick(at(0))

        self.assertEqual(outcome.error, "RuntimeError: boom")
        self.assertEqual(watchdog.state.statistics.current_status, "Error during check")

    def test_provider_unavailable_propagates(self):
        watchdog = self.make_watchdog([True])
        self.provider.find_adapter = Mock(side_effect=ProviderUnavailableError("gone"))

        with self.assertRaises(ProviderUnavailableError):
            watchdog.run_tick(at(0))

    def test_run_with_max_ticks(self):
        self.config.test_interval_seconds = 0.01
        watchdog = self.make_watchdog([True])

        ticks = watchdog.run(max_ticks=3)

        self.assertEqual(ticks, 3)
        self.assertEqual(self.prober.calls, 3)

    def test_stop_interrupts_sleep(self):
        """Test stop() ends the inter-tick sleep promptly."""
        self.config.test_interval_seconds = 60
        watchdog = self.make_watchdog([True])
        ticked = threading.Event()
        original = watchdog.run_tick

        def run_tick(now=None):
            outcome = original(now)
            ticked.set()
            return outcome

        watchdog.run_tick = run_tick
        watchdog.start()
        self.assertTrue(ticked.wait(5))

        started = time.monotonic()
        watchdog.stop(timeout=5)

        self.assertLess(time.monotonic() - started, 5)
        self.assertFalse(watchdog.is_running)

    def test_get_status(self):
        watchdog = self.make_watchdog([True])
        watchdog.run_tick(at(0))

        status = watchdog.get_status()

        self.assertEqual(status["tracker_state"], "healthy")
        self.assertEqual(status["current_adapter"], "eth0")
        self.assertEqual(status["gateway"], "192.168.1.1")
        self.assertEqual(status["targets"][0]["kind"], "ping")
        self.assertFalse(status["running"])
        self.assertEqual(status["prober"], {"rounds_completed": 1})
        self.assertEqual(status["remediation"]["attempts_recorded"], 0)
        self.assertEqual(status["recent_errors"]["total_errors"], 0)

    def test_get_status_after_failed_reset(self):
        self.provider.fail_disable = RemediationError("Operation not permitted")
        watchdog = self.make_watchdog([False])
        self.run_ticks(watchdog, 3)

        status = watchdog.get_status()

        self.assertFalse(status["remediation"]["last_success"])
        self.assertIn("Operation not permitted", status["remediation"]["last_error"])
        self.assertEqual(status["recent_errors"]["component_counts"], {"remediation": 1})


if __name__ == '__main__':
    unittest.main()
