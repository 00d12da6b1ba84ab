"""
SCOLARIS - Core

Horloge, hachage des mots de passe et configuration.
"""

from .interfaces import AuthSettings, ErrorCode, IClock, IConfigLoader, IPasswordHasher, Role
from .clock import SystemClock, FrozenClock
from .config_loader import ConfigLoader, ConfigIntegrityError
from .crypto_provider import PasswordHasher, PasswordHashError

__all__ = [
    # Interfaces
    "IClock",
    "IConfigLoader",
    "IPasswordHasher",
    # Types
    "Role",
    "ErrorCode",
    # Data classes
    "AuthSettings",
    # Implementations
    "SystemClock",
    "FrozenClock",
    "ConfigLoader",
    "PasswordHasher",
    # Exceptions
    "ConfigIntegrityError",
    "PasswordHashError",
]
