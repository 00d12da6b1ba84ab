"""
Validation - Interfaces

Contrats de validation de format des saisies (email, mot de passe, rôle).
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ValidationOutcome(BaseModel):
    """Résultat de validation d'un champ."""

    accepted: bool
    field: str
    reasons: List[str] = []

    @property
    def message(self) -> str:
        return ", ".join(self.reasons) if self.reasons else f"Valid {self.field}"


class ValidationReport(BaseModel):
    """Résultat agrégé de plusieurs validations (toutes les erreurs, pas fail-fast)."""

    accepted: bool
    reasons: List[str] = []
    outcomes: List[ValidationOutcome] = []

    @classmethod
    def combine(cls, outcomes: List[ValidationOutcome]) -> "ValidationReport":
        reasons = [reason for o in outcomes if not o.accepted for reason in o.reasons]
        return cls(accepted=not reasons, reasons=reasons, outcomes=outcomes)


class SanitizedData(BaseModel):
    """Données validées puis échappées."""

    success: bool
    data: Dict[str, Any] = {}
    reasons: List[str] = []


class ICredentialValidator(ABC):
    """Interface validation des identifiants."""

    @abstractmethod
    def validate_email(self, email: Optional[str]) -> ValidationOutcome:
        """Vérifie la forme d'une adresse email."""
        pass

    @abstractmethod
    def validate_password(self, password: Optional[str]) -> ValidationOutcome:
        """Vérifie la robustesse d'un mot de passe."""
        pass

    @abstractmethod
    def validate_role(self, role: Any) -> ValidationOutcome:
        """Vérifie l'appartenance au rôle."""
        pass

    @abstractmethod
    def validate_login_credentials(
        self, email: Optional[str], password: Optional[str], role: Any
    ) -> ValidationReport:
        """Valide le triplet de connexion (email, mot de passe, rôle)."""
        pass
