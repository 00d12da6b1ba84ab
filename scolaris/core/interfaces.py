"""
SCOLARIS - Core Interfaces
Contrats à implémenter pour le module Core : horloge, hachage, configuration.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ══════════════════════════════════════════════════════════════════════════════
# TYPES
# ══════════════════════════════════════════════════════════════════════════════


LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR", "CRITICAL")


class Role(Enum):
    """Rôles applicatifs (ensemble fermé)."""

    ADMINISTRATOR = "administrator"
    TEACHER = "teacher"
    STUDENT = "student"

    @property
    def title(self) -> str:
        """Libellé affichable ("Administrator", "Teacher", "Student")."""
        return self.value.capitalize()

    @classmethod
    def parse(cls, value: Any) -> Optional["Role"]:
        """
        Convertit une saisie en Role.

        Accepte l'ancienne orthographe "admin". Retourne None si inconnu.
        """
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None
        normalized = value.strip().lower()
        if normalized in ROLE_ALIASES:
            return ROLE_ALIASES[normalized]
        try:
            return cls(normalized)
        except ValueError:
            return None


ROLE_ALIASES = {"admin": Role.ADMINISTRATOR}


class ErrorCode(Enum):
    """Taxonomie des échecs, tous rapportés comme résultats étiquetés."""

    INVALID_FORMAT = "INVALID_FORMAT"
    LOCKED = "LOCKED"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    ROLE_MISMATCH = "ROLE_MISMATCH"
    INVALID_PASSWORD = "INVALID_PASSWORD"
    WEAK_PASSWORD = "WEAK_PASSWORD"
    DUPLICATE_USER = "DUPLICATE_USER"
    NO_SESSION = "NO_SESSION"
    EXPIRED = "EXPIRED"
    VERIFICATION_FAILED = "VERIFICATION_FAILED"
    AUTHORIZATION_DENIED = "AUTHORIZATION_DENIED"


class AuthSettings(BaseModel):
    """Paramètres d'authentification et de session."""

    model_config = ConfigDict(extra="forbid")

    max_login_attempts: int = Field(default=5, ge=1)
    lockout_minutes: int = Field(default=15, ge=1)
    session_timeout_minutes: int = Field(default=60, ge=1)
    password_min_length: int = Field(default=6, ge=1)
    hash_iterations: int = Field(default=600_000, ge=1)
    session_record_key: str = Field(default="current_session", min_length=1)
    storage_prefix: str = "scolaris_"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        normalized = value.upper()
        if normalized not in LOG_LEVELS:
            raise ValueError(f"log_level doit être parmi {', '.join(LOG_LEVELS)}")
        return normalized


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class IClock(ABC):
    """Source de temps murale (UTC) injectée dans les services."""

    @abstractmethod
    def now(self) -> datetime:
        """Retourne l'instant courant, timezone-aware UTC."""
        pass


class IPasswordHasher(ABC):
    """Hachage à sens unique des mots de passe."""

    @abstractmethod
    def hash_password(self, password: str) -> str:
        """
        Calcule l'empreinte salée d'un mot de passe.

        Returns:
            Chaîne encodée auto-descriptive (algorithme, itérations, sel, hash)
        """
        pass

    @abstractmethod
    def verify_password(self, password: str, encoded: str) -> bool:
        """Vérifie un mot de passe contre une empreinte encodée."""
        pass

    @abstractmethod
    def needs_rehash(self, encoded: str) -> bool:
        """True si l'empreinte ne correspond plus aux paramètres courants."""
        pass


class IConfigLoader(ABC):
    """Charge la configuration depuis un fichier YAML."""

    @abstractmethod
    def load(self, path: Optional[Union[str, Path]] = None) -> AuthSettings:
        """
        Charge et valide la configuration.

        Raises:
            ConfigIntegrityError: Fichier absent, YAML invalide ou valeurs hors bornes
        """
        pass
