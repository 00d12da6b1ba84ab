"""
Registration - Registration Service Implementation

Création de comptes : validation, échappement, contrôle de doublon,
hachage du mot de passe, persistance dans l'annuaire.
"""

import math
from typing import Any, Dict, Optional

from ..auth.accounts import account_to_record, build_account, public_view
from ..auth.interfaces import InvalidRoleError
from ..auth.permissions import PermissionModel
from ..core.clock import SystemClock
from ..core.crypto_provider import PasswordHasher
from ..core.interfaces import ErrorCode, IClock, IPasswordHasher, Role
from ..directory.interfaces import IUserDirectory
from ..logging import IStructuredLogger
from ..validation import CredentialValidator, ValidationOutcome
from .interfaces import EmailAvailability, IRegistrationService, RegistrationResult, RegistrationStep


# Champs de profil propres à chaque rôle, recopiés depuis le formulaire
ROLE_PROFILE_FIELDS = {
    Role.ADMINISTRATOR: (),
    Role.TEACHER: ("subject", "department"),
    Role.STUDENT: ("student_number", "grade_level", "guardian_info"),
}


class RegistrationService(IRegistrationService):
    """
    Service d'inscription.

    Example:
        service = RegistrationService(directory, hasher=PasswordHasher())
        result = service.register({
            "username": "jdoe", "email": "j@x.com", "password": "secret1",
            "role": "student", "school_name": "Lycée Victor Hugo",
        })
    """

    TOTAL_STEPS: int = len(RegistrationStep)

    def __init__(
        self,
        directory: IUserDirectory,
        validator: Optional[CredentialValidator] = None,
        hasher: Optional[IPasswordHasher] = None,
        permissions: Optional[PermissionModel] = None,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        self._directory = directory
        self._clock = clock or SystemClock()
        self._validator = validator or CredentialValidator(clock=self._clock)
        self._hasher = hasher or PasswordHasher()
        self._permissions = permissions or PermissionModel()
        self._logger = logger

    def register(self, data: Dict[str, Any]) -> RegistrationResult:
        sanitized = self._validator.validate_and_sanitize(data)
        if not sanitized.success:
            return self._failure(
                "Validation failed", ErrorCode.INVALID_FORMAT, "validation", reasons=sanitized.reasons
            )

        clean = sanitized.data
        email = clean["email"]
        if self._directory.find_by_email(email) is not None:
            return self._failure(
                "An account with this email already exists", ErrorCode.DUPLICATE_USER, "duplicate_check"
            )

        role = Role.parse(clean["role"])
        username = clean.get("username") or clean.get("display_name")
        record: Dict[str, Any] = {
            "username": username,
            "display_name": clean.get("display_name") or username,
            "email": email,
            "role": role.value,
            "password_hash": self._hasher.hash_password(data["password"]),
            "created_at": self._clock.now().isoformat(),
            "profile": {
                name: clean[name] for name in ROLE_PROFILE_FIELDS[role] if clean.get(name) is not None
            },
        }
        for name in ("phone", "school_name", "dob", "profile_image"):
            if clean.get(name):
                record[name] = clean[name]

        try:
            account = build_account(record)
        except InvalidRoleError as e:
            return self._failure(str(e), ErrorCode.INVALID_FORMAT, "user_creation")

        stored = self._directory.add(account_to_record(account))
        if not stored.success:
            return self._failure(stored.message, stored.error, "database_insert")

        created = build_account(stored.record)
        if self._logger:
            self._logger.info("User registered", user_id=str(created.user_id), role=role.value)

        return RegistrationResult(
            success=True,
            message=f"{role.value} account created successfully",
            user_id=created.user_id,
            role=role,
            redirect_to=self._permissions.redirect_target(role),
            record=public_view(created),
            timestamp=self._clock.now(),
        )

    def check_email_availability(self, email: str) -> EmailAvailability:
        outcome = self._validator.validate_email(email)
        if not outcome.accepted:
            return EmailAvailability(available=False, message=outcome.message, reason=ErrorCode.INVALID_FORMAT)

        if self._directory.find_by_email(email) is not None:
            return EmailAvailability(
                available=False,
                message="Email is already registered",
                reason=ErrorCode.DUPLICATE_USER,
            )
        return EmailAvailability(available=True, message="Email is available")

    def validate_step(self, step: int, data: Dict[str, Any]) -> ValidationOutcome:
        """Valide les champs d'une étape du formulaire."""
        if step == RegistrationStep.ACCOUNT_TYPE:
            return self._validator.validate_role(data.get("role"))

        if step == RegistrationStep.BASIC_INFO:
            return self._validator.validate_username(data.get("username") or data.get("display_name"))

        if step == RegistrationStep.SCHOOL_CONTACT:
            school = (data.get("school_name") or "").strip()
            if not school:
                return ValidationOutcome(accepted=False, field="school_name", reasons=["School name is required"])
            return self._validator.validate_phone(data.get("phone"))

        if step == RegistrationStep.EMAIL:
            return self._validator.validate_email(data.get("email"))

        if step == RegistrationStep.PASSWORD:
            outcome = self._validator.validate_password(data.get("password"))
            if outcome.accepted and data.get("confirm_password"):
                return self._validator.validate_password_match(data.get("password"), data.get("confirm_password"))
            return outcome

        return ValidationOutcome(accepted=True, field="step")

    def requirements(self) -> Dict[str, Dict[str, Any]]:
        min_length = self._validator.password_min_length
        return {
            "username": {
                "min_length": CredentialValidator.USERNAME_MIN_LENGTH,
                "pattern": "Letters, numbers, and underscores only",
                "required": True,
            },
            "email": {"pattern": "Valid email format (user@example.com)", "required": True},
            "password": {
                "min_length": min_length,
                "requirements": [f"At least {min_length} characters", "At least one letter"],
                "required": True,
            },
            "role": {"options": [r.value for r in Role], "required": True},
            "phone": {"pattern": "Numbers, spaces, dashes, and parentheses", "required": False},
            "school_name": {"required": True},
        }

    def progress(self, current: int, total: Optional[int] = None) -> int:
        """Pourcentage d'avancement, arrondi."""
        steps = total or self.TOTAL_STEPS
        if steps <= 0:
            return 0
        return math.floor(current / steps * 100 + 0.5)

    def _failure(
        self, message: str, error: Optional[ErrorCode], stage: str, reasons: Optional[list] = None
    ) -> RegistrationResult:
        if self._logger:
            self._logger.info("Registration rejected", stage=stage, error=error.value if error else None)
        return RegistrationResult(
            success=False,
            message=message,
            error=error,
            reasons=list(reasons or []),
            stage=stage,
            timestamp=self._clock.now(),
        )
