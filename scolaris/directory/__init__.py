"""
Directory: stockage des comptes utilisateurs

Annuaire clé-valeur des comptes (email unique) et des enregistrements
nommés comme la session courante.
"""

from .interfaces import IStorageBackend, IUserDirectory, StoreResult, UserId, UserRecord
from .backends import MemoryBackend, JsonFileBackend, StorageBackendError
from .user_directory import UserDirectory

__all__ = [
    # Interfaces
    "IStorageBackend",
    "IUserDirectory",
    # Data classes
    "StoreResult",
    "UserId",
    "UserRecord",
    # Implementations
    "MemoryBackend",
    "JsonFileBackend",
    "UserDirectory",
    # Exceptions
    "StorageBackendError",
]
