"""Error handling decorators for the connectivity watchdog."""

import functools
import time
import logging
from typing import Optional

from ..logging_config import get_logger
from .error_handler import ErrorSeverity, ProviderUnavailableError


def log_execution_time(logger_name: Optional[str] = None, level: int = logging.DEBUG):
    """Decorator to log function execution time.

    Args:
        logger_name: Optional component logger name to use
        level: Logging level for the message

    Returns:
        Decorated function that logs execution time
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            log = get_logger(logger_name or func.__module__.rsplit(".", 1)[-1])
            start_time = time.monotonic()
            try:
                return func(*args, **kwargs)
            finally:
                execution_time = time.monotonic() - start_time
                log.log(level, f"{func.__name__} took {execution_time:.3f}s")
        return wrapper
    return decorator


def capture_errors(component: str, severity: ErrorSeverity = ErrorSeverity.MEDIUM):
    """Decorator for methods whose failures are recorded, not raised.

    The instance must expose an ``error_handler`` attribute. Recorded errors
    make the method return None.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            try:
                return func(self, *args, **kwargs)
            except ProviderUnavailableError:
                raise
            except Exception as e:
                self.error_handler.handle_error(component, e, severity)
                return None
        return wrapper
    return decorator
