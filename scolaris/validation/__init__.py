"""
Validation des saisies

Règles de format appliquées avant tout accès à l'annuaire.
"""

from .interfaces import ICredentialValidator, SanitizedData, ValidationOutcome, ValidationReport
from .credential_validator import CredentialValidator

__all__ = [
    "ICredentialValidator",
    "ValidationOutcome",
    "ValidationReport",
    "SanitizedData",
    "CredentialValidator",
]
