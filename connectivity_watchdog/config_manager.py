"""Configuration management with JSON file persistence."""

import json
import os
from dataclasses import asdict, fields
from typing import Optional, Dict, Any, Callable, List

from .models.config import WatchdogConfig
from .config.defaults import DEFAULT_PATHS
from .logging_config import get_logger

logger = get_logger("config_manager")


def _matches_default_type(value: Any, default: Any) -> bool:
    """Check a loaded value against the type of the field's default."""
    if default is None:
        return value is None or isinstance(value, str)
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if isinstance(default, float):
        return isinstance(value, (int, float))
    return isinstance(value, type(default))


class ConfigManager:
    """Manages watchdog configuration with file persistence and change callbacks."""

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path or DEFAULT_PATHS["config_file"]
        self._config: Optional[WatchdogConfig] = None
        self._config_change_callbacks: List[Callable[[WatchdogConfig], None]] = []

        self.load_config()

    def load_config(self) -> WatchdogConfig:
        """Load configuration from file, falling back to defaults."""
        if os.path.exists(self.config_path):
            try:
                with open(self.config_path, 'r') as f:
                    config_dict = json.load(f)
                self._config = self._from_dict(config_dict)
                logger.info(f"Loaded configuration from {self.config_path}")
            except (json.JSONDecodeError, TypeError, ValueError) as e:
                logger.warning(f"Error loading config: {e}. Using defaults.")
                self._config = WatchdogConfig()
        else:
            self._config = WatchdogConfig()

        return self._config

    @staticmethod
    def _from_dict(config_dict: Dict[str, Any]) -> WatchdogConfig:
        """Build a config from a dict, ignoring unknown keys."""
        if not isinstance(config_dict, dict):
            raise TypeError("Configuration file must contain a JSON object")

        defaults = WatchdogConfig()
        known = {f.name for f in fields(WatchdogConfig)}
        ignored = sorted(set(config_dict) - known)
        if ignored:
            logger.warning(f"Ignoring unknown configuration keys: {', '.join(ignored)}")

        accepted = {}
        for key, value in config_dict.items():
            if key not in known:
                continue
            if not _matches_default_type(value, getattr(defaults, key)):
                logger.warning(f"Invalid type for {key}: {value!r}. Using default.")
                continue
            accepted[key] = value

        return WatchdogConfig(**accepted)

    def save_config(self) -> None:
        """Save current configuration to file."""
        if self._config is None:
            return

        with open(self.config_path, 'w') as f:
            json.dump(self.export_config(), f, indent=2)

    def get_config(self) -> WatchdogConfig:
        """Get current configuration."""
        if self._config is None:
            return self.load_config()
        return self._config

    def update_config(self, **kwargs) -> None:
        """Update configuration with new values. None values and unknown keys are skipped."""
        if self._config is None:
            self.load_config()

        changed = False
        for key, value in kwargs.items():
            if value is None:
                continue
            if hasattr(self._config, key):
                setattr(self._config, key, value)
                changed = True
            else:
                logger.debug(f"Ignoring unknown configuration key: {key}")

        if changed:
            self._notify_callbacks()

    def _notify_callbacks(self) -> None:
        for callback in self._config_change_callbacks:
            try:
                callback(self._config)
            except Exception as e:
                logger.error(f"Error in config change callback: {e}")

    def validate_config(self) -> List[str]:
        """Validate current configuration and return a list of problems."""
        config = self.get_config()
        defaults = WatchdogConfig()

        # Values set through update_config() are not type-checked on the way in
        mistyped = [f.name for f in fields(WatchdogConfig)
                    if not _matches_default_type(getattr(config, f.name), getattr(defaults, f.name))]
        if mistyped:
            return [f"{name} has invalid type {type(getattr(config, name)).__name__}"
                    for name in mistyped]

        problems = []

        if not config.adapter_pattern.strip():
            problems.append("adapter_pattern must be a non-empty string")

        if config.failure_threshold_seconds < 0:
            problems.append("failure_threshold_seconds must be >= 0")

        if config.test_interval_seconds <= 0:
            problems.append("test_interval_seconds must be > 0")

        if config.probe_timeout_seconds <= 0:
            problems.append("probe_timeout_seconds must be > 0")

        if config.max_parallel_probes < 1:
            problems.append("max_parallel_probes must be >= 1")

        for target in config.ping_targets:
            if not isinstance(target, dict) or not target.get("address"):
                problems.append(f"ping target missing address: {target!r}")

        for target in config.dns_targets:
            if not isinstance(target, dict) or not target.get("hostname"):
                problems.append(f"dns target missing hostname: {target!r}")

        if not config.ping_targets and not config.include_default_gateway:
            problems.append("at least one ping target or the default gateway is required")

        if not config.dns_targets:
            problems.append("at least one dns target is required")

        if config.test_interval_seconds > config.failure_threshold_seconds:
            # Remediation then happens on the second failing tick
            logger.warning("test_interval_seconds exceeds failure_threshold_seconds")

        return problems

    def register_change_callback(self, callback: Callable[[WatchdogConfig], None]) -> None:
        """Register a callback to be called when config changes."""
        if callback not in self._config_change_callbacks:
            self._config_change_callbacks.append(callback)

    def export_config(self) -> Dict[str, Any]:
        """Export current configuration as a dictionary."""
        if not self._config:
            return {}
        return asdict(self._config)
