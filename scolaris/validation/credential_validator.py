"""
Validation - Credential Validator Implementation

Règles de format des saisies : email, mot de passe, rôle, nom
d'utilisateur, téléphone, date de naissance.
"""

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..core.clock import SystemClock
from ..core.interfaces import IClock, Role
from .interfaces import ICredentialValidator, SanitizedData, ValidationOutcome, ValidationReport


class CredentialValidator(ICredentialValidator):
    """
    Validation des saisies utilisateur.

    Example:
        validator = CredentialValidator()
        report = validator.validate_login_credentials("a@x.com", "secret1", "teacher")
        assert report.accepted
    """

    EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
    USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_]+$")
    PHONE_PATTERN = re.compile(r"^[\d\s\-+()]+$")
    LETTER_PATTERN = re.compile(r"[A-Za-z]")

    USERNAME_MIN_LENGTH: int = 3
    MAX_AGE_YEARS: int = 150

    # Jamais échappés : secrets et clé de connexion restent identiques à la saisie
    UNSANITIZED_FIELDS = ("password", "confirm_password", "email")

    HTML_ESCAPES = {
        "<": "&lt;",
        ">": "&gt;",
        '"': "&quot;",
        "'": "&#x27;",
        "/": "&#x2F;",
    }

    def __init__(self, password_min_length: int = 6, clock: Optional[IClock] = None) -> None:
        """
        Args:
            password_min_length: Longueur minimale du mot de passe
            clock: Source de temps (calcul de l'âge)
        """
        self._password_min_length = password_min_length
        self._clock = clock or SystemClock()

    @property
    def password_min_length(self) -> int:
        return self._password_min_length

    def validate_email(self, email: Optional[str]) -> ValidationOutcome:
        accepted = isinstance(email, str) and bool(self.EMAIL_PATTERN.match(email))
        return ValidationOutcome(
            accepted=accepted,
            field="email",
            reasons=[] if accepted else ["Invalid email format"],
        )

    def validate_password(self, password: Optional[str]) -> ValidationOutcome:
        reasons: List[str] = []

        if not password or len(password) < self._password_min_length:
            reasons.append(f"Password must be at least {self._password_min_length} characters")

        if password and not self.LETTER_PATTERN.search(password):
            reasons.append("Password must contain at least one letter")

        return ValidationOutcome(accepted=not reasons, field="password", reasons=reasons)

    def validate_password_match(self, password: Optional[str], confirm_password: Optional[str]) -> ValidationOutcome:
        accepted = password == confirm_password
        return ValidationOutcome(
            accepted=accepted,
            field="confirm_password",
            reasons=[] if accepted else ["Passwords do not match"],
        )

    def validate_role(self, role: Any) -> ValidationOutcome:
        accepted = Role.parse(role) is not None
        allowed = ", ".join(r.value for r in Role)
        return ValidationOutcome(
            accepted=accepted,
            field="role",
            reasons=[] if accepted else [f"Role must be one of: {allowed}"],
        )

    def validate_username(self, username: Optional[str]) -> ValidationOutcome:
        reasons: List[str] = []

        if not username or not username.strip():
            reasons.append("Username is required")
        else:
            if len(username) < self.USERNAME_MIN_LENGTH:
                reasons.append(f"Username must be at least {self.USERNAME_MIN_LENGTH} characters")
            if not self.USERNAME_PATTERN.match(username):
                reasons.append("Username can only contain letters, numbers, and underscores")

        return ValidationOutcome(accepted=not reasons, field="username", reasons=reasons)

    def validate_phone(self, phone: Optional[str]) -> ValidationOutcome:
        """Téléphone optionnel : vide accepté."""
        accepted = not phone or not phone.strip() or bool(self.PHONE_PATTERN.match(phone))
        return ValidationOutcome(
            accepted=accepted,
            field="phone",
            reasons=[] if accepted else ["Invalid phone number format"],
        )

    def validate_dob(self, dob: Any) -> ValidationOutcome:
        """Date de naissance optionnelle, âge entre 0 et 150 ans."""
        if not dob:
            return ValidationOutcome(accepted=True, field="dob")

        parsed = self._parse_date(dob)
        accepted = False
        if parsed is not None:
            age = self._clock.now().year - parsed.year
            accepted = 0 <= age <= self.MAX_AGE_YEARS

        return ValidationOutcome(
            accepted=accepted,
            field="dob",
            reasons=[] if accepted else ["Invalid date of birth"],
        )

    def validate_login_credentials(
        self, email: Optional[str], password: Optional[str], role: Any
    ) -> ValidationReport:
        return ValidationReport.combine([
            self.validate_email(email),
            self.validate_password(password),
            self.validate_role(role),
        ])

    def validate_registration_data(self, data: Dict[str, Any]) -> ValidationReport:
        outcomes = [
            self.validate_username(data.get("username") or data.get("display_name")),
            self.validate_email(data.get("email")),
            self.validate_password(data.get("password")),
            self.validate_role(data.get("role")),
            self.validate_phone(data.get("phone")),
            self.validate_dob(data.get("dob")),
        ]
        if data.get("confirm_password"):
            outcomes.append(self.validate_password_match(data.get("password"), data.get("confirm_password")))
        return ValidationReport.combine(outcomes)

    def sanitize_input(self, value: Any) -> Any:
        """Échappe les caractères HTML d'une chaîne ; autres types inchangés."""
        if not isinstance(value, str):
            return value
        # & d'abord pour ne pas ré-échapper les entités produites
        escaped = value.replace("&", "&amp;")
        for char, entity in self.HTML_ESCAPES.items():
            escaped = escaped.replace(char, entity)
        return escaped

    def validate_and_sanitize(self, data: Dict[str, Any]) -> SanitizedData:
        report = self.validate_registration_data(data)
        if not report.accepted:
            return SanitizedData(success=False, reasons=report.reasons)

        sanitized = {
            key: value if key in self.UNSANITIZED_FIELDS else self.sanitize_input(value)
            for key, value in data.items()
        }
        return SanitizedData(success=True, data=sanitized)

    @staticmethod
    def _parse_date(value: Any) -> Optional[date]:
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip()[:10])
            except ValueError:
                return None
        return None
