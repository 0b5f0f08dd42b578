"""
Shared utilities for the tunables package.

Includes:
- logging: Logger setup and the LoggingMixin used across the package
"""

from .logging import LOG_LEVELS, setup_logging, get_logger, resolve_level, LoggingMixin

__all__ = ['LOG_LEVELS', 'setup_logging', 'get_logger', 'resolve_level', 'LoggingMixin']
