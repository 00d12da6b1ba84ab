"""
Registration: inscription des utilisateurs
"""

from .interfaces import EmailAvailability, IRegistrationService, RegistrationResult, RegistrationStep
from .registration_service import RegistrationService

__all__ = [
    # Interfaces
    "IRegistrationService",
    # Data classes
    "RegistrationResult",
    "EmailAvailability",
    "RegistrationStep",
    # Implementations
    "RegistrationService",
]
