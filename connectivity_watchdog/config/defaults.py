"""Default configuration values and constants."""

from typing import Dict, Any, List

# Fixed ping targets (the default gateway is added at startup when known)
DEFAULT_PING_TARGETS: List[Dict[str, str]] = [
    {"name": "Google DNS", "address": "8.8.8.8"},
    {"name": "Cloudflare DNS", "address": "1.1.1.1"},
]

# Well-known hostnames used for name-resolution probes
DEFAULT_DNS_TARGETS: List[Dict[str, str]] = [
    {"name": "Google", "hostname": "google.com"},
    {"name": "Microsoft", "hostname": "microsoft.com"},
    {"name": "Cloudflare", "hostname": "cloudflare.com"},
]

# Default watchdog configuration
DEFAULT_CONFIG: Dict[str, Any] = {
    # Adapter selection
    "adapter_pattern": "*",

    # Timing
    "failure_threshold_seconds": 30,
    "test_interval_seconds": 5,
    "probe_timeout_seconds": 2.0,

    # Probe targets
    "ping_targets": DEFAULT_PING_TARGETS,
    "dns_targets": DEFAULT_DNS_TARGETS,
    "include_default_gateway": True,
    "max_parallel_probes": 8,

    # Logging
    "log_level": "INFO",
    "log_dir": None
}

# System constants
SYSTEM_CONSTANTS = {
    "GATEWAY_TARGET_NAME": "Default Gateway",
    "PING_PROCESS_GRACE_SECONDS": 1.0,  # Added to the ping timeout for the subprocess
    "ADAPTER_COMMAND_TIMEOUT_SECONDS": 15,
    "ADAPTER_SETTLE_SECONDS": 2.0,  # Pause between disable and enable
    "MAX_ERROR_RECORDS": 100,
    "LOG_ROTATION_SIZE_MB": 10,
    "LOG_BACKUP_COUNT": 5
}

# File paths and directories
DEFAULT_PATHS = {
    "config_file": "watchdog_config.json"
}
