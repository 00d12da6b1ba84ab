"""
Logging

Journal JSON des événements d'authentification, secrets masqués.
"""

from .interfaces import (
    IStructuredLogger,
    ISensitiveMasker,
    LogLevel,
    LogEntry,
    LogConfig,
)
from .sensitive_masker import SensitiveMasker, DEFAULT_SENSITIVE_KEYS
from .structured_logger import StructuredLogger, BoundLogger, LoggingError, parse_level

__all__ = [
    # Interfaces
    "IStructuredLogger",
    "ISensitiveMasker",
    # Data classes
    "LogLevel",
    "LogEntry",
    "LogConfig",
    # Implementations
    "SensitiveMasker",
    "DEFAULT_SENSITIVE_KEYS",
    "StructuredLogger",
    "BoundLogger",
    "parse_level",
    # Exceptions
    "LoggingError",
]
