"""
Registration - Interfaces

Contrats de l'inscription de nouveaux comptes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import Any, Dict, List, Optional

from ..core.interfaces import ErrorCode, Role
from ..directory.interfaces import UserId


class RegistrationStep(IntEnum):
    """Étapes du formulaire d'inscription."""

    ACCOUNT_TYPE = 0
    BASIC_INFO = 1
    SCHOOL_CONTACT = 2
    EMAIL = 3
    PASSWORD = 4


@dataclass
class RegistrationResult:
    """
    Résultat d'une inscription.

    Attributes:
        success: True si le compte a été créé
        message: Message lisible
        error: Code d'échec
        reasons: Erreurs de validation
        stage: Étape du traitement ayant échoué
        user_id: Identifiant attribué (succès)
        role: Rôle du compte créé (succès)
        redirect_to: Tableau de bord du rôle (succès)
        record: Enregistrement public, sans empreinte (succès)
    """

    success: bool
    message: str
    error: Optional[ErrorCode] = None
    reasons: List[str] = field(default_factory=list)
    stage: Optional[str] = None
    user_id: Optional[UserId] = None
    role: Optional[Role] = None
    redirect_to: Optional[str] = None
    record: Dict[str, Any] = field(default_factory=dict)
    timestamp: Optional[datetime] = None


@dataclass
class EmailAvailability:
    available: bool
    message: str
    reason: Optional[ErrorCode] = None


class IRegistrationService(ABC):
    """Interface inscription."""

    @abstractmethod
    def register(self, data: Dict[str, Any]) -> RegistrationResult:
        """
        Inscrit un nouvel utilisateur.

        Étapes: validation et échappement → doublon → compte typé →
        hachage → persistance.
        """
        pass

    @abstractmethod
    def check_email_availability(self, email: str) -> EmailAvailability:
        """Vérifie qu'un email est libre et bien formé."""
        pass
