"""
Incident - Interfaces

Contrats du verrouillage temporaire des comptes après échecs de connexion.

Règle:
    5 échecs pour un même email dans une fenêtre de 15 minutes
    = connexion refusée jusqu'à expiration de la fenêtre
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class LoginAttemptRecord:
    """
    Compteur d'échecs pour un email.

    Créé au premier échec, supprimé après succès ou à l'expiration de la
    fenêtre de verrouillage (traité alors comme absent).
    """

    count: int = 0
    last_attempt: Optional[datetime] = None


@dataclass
class AccountLockStatus:
    """
    Statut de verrouillage d'un email.

    Attributes:
        email: Email concerné
        locked: True si les connexions sont refusées
        failure_count: Échecs comptabilisés dans la fenêtre
        remaining_attempts: Tentatives restantes avant verrouillage
        remaining_minutes: Minutes avant déverrouillage (arrondi supérieur) si verrouillé
        locked_until: Fin du verrouillage si verrouillé
    """

    email: str
    locked: bool
    failure_count: int
    remaining_attempts: int
    remaining_minutes: Optional[int] = None
    locked_until: Optional[datetime] = None

    @property
    def allowed(self) -> bool:
        return not self.locked


class IAccountLocker(ABC):
    """Interface verrouillage des comptes."""

    @abstractmethod
    def check(self, email: str) -> AccountLockStatus:
        """
        Consulte l'état de verrouillage (purge l'enregistrement expiré).

        Returns:
            Statut courant
        """
        pass

    @abstractmethod
    def record_failure(self, email: str) -> LoginAttemptRecord:
        """
        Enregistre un échec de connexion.

        Returns:
            Enregistrement après incrément
        """
        pass

    @abstractmethod
    def reset(self, email: str) -> None:
        """Supprime l'enregistrement (après connexion réussie)."""
        pass

    @abstractmethod
    def get_record(self, email: str) -> Optional[LoginAttemptRecord]:
        """Enregistrement courant, None si absent ou expiré."""
        pass
