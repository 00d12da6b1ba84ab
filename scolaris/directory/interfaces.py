"""
Directory - Interfaces

Contrats du stockage des comptes utilisateurs et des enregistrements
nommés (session courante).

Toutes les opérations de l'annuaire sont totales : elles ne lèvent pas
d'exception et retournent un résultat étiqueté.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Union

from ..core.interfaces import ErrorCode, Role

UserId = Union[int, str]
UserRecord = Dict[str, Any]


@dataclass
class StoreResult:
    """
    Résultat d'une écriture dans l'annuaire.

    Attributes:
        success: True si l'opération a abouti
        message: Message lisible
        error: Code d'échec (DUPLICATE_USER, USER_NOT_FOUND) ou None
        record: Copie de l'enregistrement écrit, si applicable
    """

    success: bool
    message: str
    error: Optional[ErrorCode] = None
    record: Optional[UserRecord] = None


class IStorageBackend(ABC):
    """Stockage clé-valeur brut (valeurs sérialisables JSON)."""

    @abstractmethod
    def get(self, key: str) -> Optional[Any]:
        """Retourne la valeur ou None."""
        pass

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        """
        Écrit une valeur.

        Raises:
            StorageBackendError: Échec d'écriture
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Supprime une clé. True si elle existait."""
        pass

    @abstractmethod
    def keys(self) -> Iterable[str]:
        """Liste les clés présentes."""
        pass


class IUserDirectory(ABC):
    """
    Annuaire des comptes utilisateurs.

    Source de vérité unique pour l'identité et le profil de rôle.
    """

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Recherche par email (correspondance exacte)."""
        pass

    @abstractmethod
    def find_by_id(self, user_id: UserId) -> Optional[UserRecord]:
        """Recherche par identifiant."""
        pass

    @abstractmethod
    def find_by_role(self, role: Role) -> List[UserRecord]:
        """Liste les comptes d'un rôle."""
        pass

    @abstractmethod
    def list_users(self) -> List[UserRecord]:
        """Liste tous les comptes."""
        pass

    @abstractmethod
    def add(self, record: UserRecord) -> StoreResult:
        """
        Ajoute un compte.

        Returns:
            StoreResult (DUPLICATE_USER si email déjà présent)
        """
        pass

    @abstractmethod
    def update(self, user_id: UserId, changes: UserRecord) -> StoreResult:
        """
        Met à jour partiellement un compte.

        Returns:
            StoreResult (USER_NOT_FOUND si absent)
        """
        pass

    @abstractmethod
    def delete(self, user_id: UserId) -> StoreResult:
        """
        Supprime un compte.

        Returns:
            StoreResult (USER_NOT_FOUND si absent)
        """
        pass

    @abstractmethod
    def save(self, key: str, data: Any) -> StoreResult:
        """Écrit un enregistrement nommé (ex: session courante)."""
        pass

    @abstractmethod
    def load(self, key: str) -> Optional[Any]:
        """Lit un enregistrement nommé, None si absent ou illisible."""
        pass

    @abstractmethod
    def remove(self, key: str) -> StoreResult:
        """Supprime un enregistrement nommé (idempotent)."""
        pass
