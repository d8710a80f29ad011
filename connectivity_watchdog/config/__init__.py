"""Configuration components for the connectivity watchdog."""

from .defaults import (
    DEFAULT_CONFIG,
    DEFAULT_PING_TARGETS,
    DEFAULT_DNS_TARGETS,
    SYSTEM_CONSTANTS,
    DEFAULT_PATHS
)

__all__ = [
    'DEFAULT_CONFIG',
    'DEFAULT_PING_TARGETS',
    'DEFAULT_DNS_TARGETS',
    'SYSTEM_CONSTANTS',
    'DEFAULT_PATHS'
]
