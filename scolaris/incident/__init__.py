"""
Incident: verrouillage des comptes

Protection contre la force brute sur le formulaire de connexion.
"""

from .interfaces import AccountLockStatus, IAccountLocker, LoginAttemptRecord
from .account_locker import AccountLocker, AccountLockerError

__all__ = [
    # Interfaces
    "IAccountLocker",
    # Data classes
    "LoginAttemptRecord",
    "AccountLockStatus",
    # Implementations
    "AccountLocker",
    # Exceptions
    "AccountLockerError",
]
