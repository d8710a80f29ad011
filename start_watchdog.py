#!/usr/bin/env python3
"""Entry point for the Connectivity Watchdog."""

import argparse
import signal
import sys
from typing import List, Optional

from connectivity_watchdog.config_manager import ConfigManager
from connectivity_watchdog.logging_config import get_logger, parse_log_level, setup_logging
from connectivity_watchdog.services.adapter_provider import create_adapter_provider
from connectivity_watchdog.services.error_handler import ProviderUnavailableError
from connectivity_watchdog.watchdog import Watchdog


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reset a network adapter when connectivity stays down.")
    parser.add_argument("--config", help="Path to a JSON configuration file")
    parser.add_argument("--adapter-pattern", dest="adapter_pattern",
                        help="Glob pattern selecting the monitored adapter (default: *)")
    parser.add_argument("--failure-threshold", dest="failure_threshold_seconds", type=int,
                        help="Seconds of failure before the adapter is reset (default: 30)")
    parser.add_argument("--test-interval", dest="test_interval_seconds", type=int,
                        help="Seconds between connectivity checks (default: 5)")
    parser.add_argument("--probe-timeout", dest="probe_timeout_seconds", type=float,
                        help="Timeout for each probe in seconds (default: 2)")
    parser.add_argument("--log-level", dest="log_level", help="Logging level (default: INFO)")
    parser.add_argument("--log-dir", dest="log_dir", help="Directory for rotating log files")
    parser.add_argument("--write-config", dest="write_config", action="store_true",
                        help="Save the effective configuration to the config file and exit")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the watchdog."""
    args = parse_args(argv)

    config_manager = ConfigManager(args.config)
    file_config = config_manager.get_config()

    logging_manager = setup_logging(args.log_level or file_config.log_level,
                                    args.log_dir or file_config.log_dir)
    logger = get_logger("start_watchdog")
    config_manager.register_change_callback(
        lambda cfg: logging_manager.set_log_level(parse_log_level(cfg.log_level)))

    config_manager.update_config(
        adapter_pattern=args.adapter_pattern,
        failure_threshold_seconds=args.failure_threshold_seconds,
        test_interval_seconds=args.test_interval_seconds,
        probe_timeout_seconds=args.probe_timeout_seconds,
        log_level=args.log_level,
        log_dir=args.log_dir
    )
    config = config_manager.get_config()

    log_stats = logging_manager.get_log_stats()
    logger.info(f"Starting Connectivity Watchdog (log level {log_stats['log_level']}, "
                f"log directory {log_stats['log_directory'] or 'none'})")

    problems = config_manager.validate_config()
    if problems:
        for problem in problems:
            logger.error(f"Invalid configuration: {problem}")
        return 2

    if args.write_config:
        config_manager.save_config()
        logger.info(f"Configuration written to {config_manager.config_path}")
        logging_manager.close()
        return 0

    try:
        provider = create_adapter_provider()
    except ProviderUnavailableError as e:
        logger.critical(f"Cannot initialize adapter provider: {e}")
        return 1

    watchdog = Watchdog(config, provider)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        watchdog.stop()

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        watchdog.run()
    except ProviderUnavailableError as e:
        logger.critical(f"Adapter provider failed: {e}", exc_info=True)
        return 1
    except Exception as e:
        logger.critical(f"Unexpected error: {e}", exc_info=True)
        return 1
    finally:
        logger.info(f"Final status: {watchdog.reporter.last_status_line or 'no ticks completed'}")
        logging_manager.close()

    return 0


if __name__ == "__main__":
    sys.exit(main())
