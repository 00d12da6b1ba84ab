"""
Auth: Authentication Engine

Protocole de connexion par email, mot de passe et rôle revendiqué.

Ordre des contrôles:
    1. Format des saisies (aucun accès à l'annuaire, aucun comptage)
    2. Verrouillage de l'email (annuaire non consulté)
    3. Recherche du compte par email
    4. Rôle stocké == rôle revendiqué
    5. Vérification de l'empreinte du mot de passe

Les étapes 3 à 5 comptabilisent un échec pour l'email.
"""

from typing import Any, Optional

from ..core.clock import SystemClock
from ..core.crypto_provider import PasswordHasher
from ..core.interfaces import ErrorCode, IClock, IPasswordHasher, Role
from ..directory.interfaces import IUserDirectory, UserId, UserRecord
from ..incident import AccountLocker, IAccountLocker, LoginAttemptRecord
from ..logging import IStructuredLogger
from ..validation import CredentialValidator, ICredentialValidator
from .accounts import build_account
from .interfaces import (
    AuthResult,
    IAuthenticationEngine,
    OperationResult,
    Session,
    SessionVerification,
    UserAccount,
)
from .permissions import PermissionModel


class AuthenticationEngine(IAuthenticationEngine):
    """
    Moteur d'authentification.

    Example:
        engine = AuthenticationEngine(directory, clock=FrozenClock())
        result = engine.authenticate("a@x.com", "secret1", "teacher")
        if result.success:
            session_manager.create_session(result.account)
    """

    def __init__(
        self,
        directory: IUserDirectory,
        validator: Optional[ICredentialValidator] = None,
        hasher: Optional[IPasswordHasher] = None,
        locker: Optional[IAccountLocker] = None,
        permissions: Optional[PermissionModel] = None,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        """
        Args:
            directory: Annuaire des comptes
            validator: Validation de format (défaut: CredentialValidator)
            hasher: Hachage des mots de passe (défaut: PasswordHasher)
            locker: Suivi des échecs (défaut: AccountLocker sur la même horloge)
            permissions: Modèle de permissions
            clock: Source de temps
            logger: Logger structuré
        """
        self._clock = clock or SystemClock()
        self._directory = directory
        self._validator = validator or CredentialValidator(clock=self._clock)
        self._hasher = hasher or PasswordHasher()
        self._locker = locker or AccountLocker(clock=self._clock, logger=logger)
        self._permissions = permissions or PermissionModel()
        self._logger = logger

    @property
    def permissions(self) -> PermissionModel:
        return self._permissions

    # ──────────────────────────────────────────────────────────────────────
    # Connexion
    # ──────────────────────────────────────────────────────────────────────

    def authenticate(self, email: str, password: str, claimed_role: Any) -> AuthResult:
        report = self._validator.validate_login_credentials(email, password, claimed_role)
        if not report.accepted:
            return self._failure("Invalid credentials format", ErrorCode.INVALID_FORMAT, reasons=report.reasons)

        status = self._locker.check(email)
        if status.locked:
            if self._logger:
                self._logger.warn("Login refused for locked account", email=email)
            return self._failure(
                f"Too many failed attempts. Try again in {status.remaining_minutes} minutes.",
                ErrorCode.LOCKED,
                remaining_minutes=status.remaining_minutes,
            )

        record = self._directory.find_by_email(email)
        if record is None:
            self._locker.record_failure(email)
            return self._failure("User not found with this email", ErrorCode.USER_NOT_FOUND)

        role = Role.parse(claimed_role)
        if Role.parse(record.get("role")) is not role:
            self._locker.record_failure(email)
            return self._failure(f"Account is not registered as {role.value}", ErrorCode.ROLE_MISMATCH)

        if not self._hasher.verify_password(password, record.get("password_hash") or ""):
            self._locker.record_failure(email)
            return self._failure("Incorrect password", ErrorCode.INVALID_PASSWORD)

        self._locker.reset(email)
        record = self._upgrade_hash(record, password)
        account = build_account(record)

        if self._logger:
            self._logger.info(
                "User authenticated",
                user_id=str(account.user_id),
                role=account.role.value,
            )

        return AuthResult(
            success=True,
            message=f"{account.role.title} {account.username} logged in successfully",
            account=account,
            permissions=self._permissions.permissions_for(account.role),
            redirect_to=self._permissions.redirect_target(account.role),
            timestamp=self._clock.now(),
        )

    def logout(self, account: Optional[UserAccount]) -> OperationResult:
        if account is None:
            return OperationResult(success=False, message="No user to logout", error=ErrorCode.NO_SESSION)

        if self._logger:
            self._logger.info("User logged out", user_id=str(account.user_id), role=account.role.value)
        return OperationResult(success=True, message=f"{account.role.value} logged out successfully")

    # ──────────────────────────────────────────────────────────────────────
    # Session
    # ──────────────────────────────────────────────────────────────────────

    def verify_session(self, session: Optional[Session]) -> SessionVerification:
        """
        Vérifie que le compte de la session existe toujours.

        Un compte dont le rôle stocké n'est plus reconnu est traité comme
        introuvable.
        """
        if session is None:
            return SessionVerification(valid=False, message="No active session")

        record = self._directory.find_by_id(session.user_id)
        if record is None or Role.parse(record.get("role")) is not session.role:
            return SessionVerification(valid=False, message="Session user not found")

        return SessionVerification(valid=True, message="Session is valid", account=build_account(record))

    # ──────────────────────────────────────────────────────────────────────
    # Mot de passe
    # ──────────────────────────────────────────────────────────────────────

    def change_password(self, user_id: UserId, old_password: str, new_password: str) -> OperationResult:
        record = self._directory.find_by_id(user_id)
        if record is None:
            return OperationResult(success=False, message="User not found", error=ErrorCode.USER_NOT_FOUND)

        if not self._hasher.verify_password(old_password or "", record.get("password_hash") or ""):
            if self._logger:
                self._logger.warn("Password change rejected", user_id=str(user_id))
            return OperationResult(
                success=False,
                message="Current password is incorrect",
                error=ErrorCode.INVALID_PASSWORD,
            )

        outcome = self._validator.validate_password(new_password)
        if not outcome.accepted:
            return OperationResult(
                success=False,
                message="New password does not meet requirements",
                error=ErrorCode.WEAK_PASSWORD,
                reasons=outcome.reasons,
            )

        return self._store_password(record, new_password, "Password changed successfully")

    def reset_password(self, email: str, new_password: str) -> OperationResult:
        record = self._directory.find_by_email(email)
        if record is None:
            return OperationResult(success=False, message="User not found", error=ErrorCode.USER_NOT_FOUND)

        outcome = self._validator.validate_password(new_password)
        if not outcome.accepted:
            return OperationResult(
                success=False,
                message="Password does not meet requirements",
                error=ErrorCode.WEAK_PASSWORD,
                reasons=outcome.reasons,
            )

        return self._store_password(record, new_password, "Password reset successfully")

    # ──────────────────────────────────────────────────────────────────────
    # Comptes et verrouillage
    # ──────────────────────────────────────────────────────────────────────

    def build_account(self, record: UserRecord) -> UserAccount:
        """
        Raises:
            InvalidRoleError: Rôle inconnu
        """
        return build_account(record)

    def remaining_attempts(self, email: str) -> int:
        return self._locker.check(email).remaining_attempts

    def attempt_record(self, email: str) -> Optional[LoginAttemptRecord]:
        return self._locker.get_record(email)

    def unlock(self, email: str) -> bool:
        """
        Levée manuelle d'un verrouillage par un administrateur.

        Returns:
            True si l'email était verrouillé
        """
        return self._locker.unlock(email)

    # ──────────────────────────────────────────────────────────────────────
    # Interne
    # ──────────────────────────────────────────────────────────────────────

    def _store_password(self, record: UserRecord, new_password: str, message: str) -> OperationResult:
        user_id = record.get("user_id")
        result = self._directory.update(user_id, {"password_hash": self._hasher.hash_password(new_password)})
        if not result.success:
            return OperationResult(success=False, message=result.message, error=result.error)

        if self._logger:
            self._logger.info("Password updated", user_id=str(user_id))
        return OperationResult(success=True, message=message)

    def _upgrade_hash(self, record: UserRecord, password: str) -> UserRecord:
        """
        Ré-hache avec les paramètres courants après une connexion réussie.

        Un échec d'écriture garde l'ancienne empreinte, toujours valide.
        """
        if not self._hasher.needs_rehash(record.get("password_hash") or ""):
            return record

        user_id = record.get("user_id")
        result = self._directory.update(user_id, {"password_hash": self._hasher.hash_password(password)})
        if not result.success:
            if self._logger:
                self._logger.warn("Password hash upgrade failed", user_id=str(user_id))
            return record

        if self._logger:
            self._logger.info("Password hash upgraded", user_id=str(user_id))
        return result.record

    def _failure(
        self,
        message: str,
        error: ErrorCode,
        reasons: Optional[list] = None,
        remaining_minutes: Optional[int] = None,
    ) -> AuthResult:
        return AuthResult(
            success=False,
            message=message,
            error=error,
            reasons=list(reasons or []),
            remaining_minutes=remaining_minutes,
            timestamp=self._clock.now(),
        )
