"""Unit tests for centralized logging."""

import unittest
import logging
import os
import shutil
import sys
import tempfile

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from connectivity_watchdog.logging_config import (
    ContextFilter, StructuredFormatter, get_logger, log_status, log_with_context, parse_log_level,
    setup_logging
)


class TestLoggingConfig(unittest.TestCase):
    """Test cases for the logging setup."""

    def setUp(self):
        """Set up test fixtures."""
        self.test_dir = tempfile.mkdtemp()
        self.manager = setup_logging("DEBUG", self.test_dir)

    def tearDown(self):
        """Clean up test fixtures."""
        self.manager.close()
        shutil.rmtree(self.test_dir, ignore_errors=True)

    def read(self, name):
        for handler in logging.getLogger().handlers + logging.getLogger("watchdog.status").handlers:
            handler.flush()
        with open(os.path.join(self.test_dir, name)) as f:
            return f.read()

    def test_log_files_created(self):
        get_logger("test").info("hello")

        stats = self.manager.get_log_stats()

        self.assertEqual(stats["log_level"], "DEBUG")
        self.assertIn("watchdog.log", stats["log_files"])
        self.assertIn("hello", self.read("watchdog.log"))

    def test_errors_go_to_error_log(self):
        logger = get_logger("test")
        logger.info("routine message")
        logger.error("something broke")

        errors = self.read("errors.log")

        self.assertIn("something broke", errors)
        self.assertNotIn("routine message", errors)

    def test_status_lines_go_to_status_log(self):
        log_status("Adapter: eth0 | Status: Healthy", {"tick": 3})

        self.assertIn("Adapter: eth0 | Status: Healthy | tick=3", self.read("status.log"))

    def test_context_is_formatted(self):
        log_with_context(get_logger("test"), logging.WARNING, "Remediation triggered",
                         {"adapter": "eth0"})

        self.assertIn("Context: adapter=eth0", self.read("watchdog.log"))

    def test_get_logger_adds_filter_once(self):
        logger = get_logger("repeat")
        get_logger("repeat")

        filters = [f for f in logger.filters if isinstance(f, ContextFilter)]
        self.assertEqual(len(filters), 1)
        self.assertEqual(logger.name, "watchdog.repeat")

    def test_set_log_level(self):
        self.manager.set_log_level(logging.WARNING)

        self.assertEqual(logging.getLogger().level, logging.WARNING)
        self.assertEqual(self.manager.get_log_stats()["log_level"], "WARNING")

    def test_parse_log_level(self):
        self.assertEqual(parse_log_level("debug"), logging.DEBUG)
        self.assertEqual(parse_log_level("WARNING"), logging.WARNING)
        self.assertEqual(parse_log_level("verbose"), logging.INFO)

    def test_console_only_without_log_dir(self):
        self.manager.close()
        self.manager = setup_logging("INFO")

        handlers = logging.getLogger().handlers
        self.assertEqual(len(handlers), 1)
        self.assertFalse(isinstance(handlers[0], logging.FileHandler))
        self.assertEqual(self.manager.get_log_stats()["log_files"], {})


class TestStructuredFormatter(unittest.TestCase):
    """Test cases for StructuredFormatter."""

    def test_format_without_context(self):
        record = logging.LogRecord("watchdog.test", logging.INFO, __file__, 1, "message", None, None)

        output = StructuredFormatter(include_context=True).format(record)

        self.assertIn("INFO", output)
        self.assertIn("watchdog.test", output)
        self.assertTrue(output.endswith("message"))


if __name__ == '__main__':
    unittest.main()
