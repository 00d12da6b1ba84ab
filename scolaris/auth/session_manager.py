"""
Auth: Session Manager Implementation

Cycle de vie de la session courante : création, validation avec
re-vérification, renouvellement glissant, expiration, destruction.

États:
    ABSENT → ACTIVE (create_session)
    ACTIVE → ACTIVE (validate_session, update_activity)
    ACTIVE → EXPIRED (temps écoulé, détecté à la lecture)
    ACTIVE/EXPIRED → DESTROYED (destroy_session, re-vérification échouée)

Note:
    Une seule session par processus, recopiée dans l'annuaire sous la clé
    de session. Le dernier écrivain l'emporte.
"""

import math
import uuid
from datetime import timedelta
from typing import Any, Dict, Optional

from ..core.clock import SystemClock
from ..core.interfaces import ErrorCode, IClock
from ..directory.interfaces import IUserDirectory
from ..logging import IStructuredLogger
from .interfaces import (
    MUTABLE_PROFILE_FIELDS,
    IAuthenticationEngine,
    ISessionManager,
    OperationResult,
    Session,
    SessionExpiry,
    SessionResult,
    SessionValidation,
    UserAccount,
)


class SessionManagerError(Exception):
    """Erreur de gestion de session."""

    pass


class SessionManager(ISessionManager):
    """
    Gestionnaire de la session courante.

    Example:
        manager = SessionManager(engine, directory, clock=FrozenClock())
        session = manager.create_session(result.account)
        validation = manager.validate_session()
    """

    DEFAULT_TIMEOUT: timedelta = timedelta(hours=1)
    SESSION_KEY: str = "current_session"

    # Attributs de session modifiables via update_session
    DISPLAY_FIELDS = ("username", "display_name")
    IMMUTABLE_FIELDS = ("session_id", "user_id", "role", "email")

    def __init__(
        self,
        engine: IAuthenticationEngine,
        directory: IUserDirectory,
        session_timeout: Optional[timedelta] = None,
        session_key: Optional[str] = None,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        """
        Args:
            engine: Moteur d'authentification (re-vérification)
            directory: Annuaire (persistance de la session)
            session_timeout: Durée de session (défaut: 1h)
            session_key: Clé de stockage de la session
            clock: Source de temps
            logger: Logger structuré
        """
        self._engine = engine
        self._directory = directory
        self._timeout = session_timeout if session_timeout is not None else self.DEFAULT_TIMEOUT
        if self._timeout <= timedelta(0):
            raise SessionManagerError("session_timeout doit être positive")
        self._session_key = session_key or self.SESSION_KEY
        self._clock = clock or SystemClock()
        self._logger = logger
        self._current: Optional[Session] = None

    @property
    def session_duration_minutes(self) -> int:
        return int(self._timeout.total_seconds() // 60)

    # ──────────────────────────────────────────────────────────────────────
    # Cycle de vie
    # ──────────────────────────────────────────────────────────────────────

    def create_session(self, account: UserAccount) -> Session:
        """
        Crée la session d'un compte authentifié.

        Remplace toute session en cache. Un échec de persistance est
        journalisé ; la session reste active en mémoire.
        """
        now = self._clock.now()
        session = Session(
            session_id=self._generate_session_id(),
            user_id=account.user_id,
            role=account.role,
            created_at=now,
            last_activity=now,
            expires_at=now + self._timeout,
            username=account.username,
            email=account.email,
            display_name=account.display_name,
        )

        self._current = session
        self._persist(session)

        if self._logger:
            self._logger.info(
                "Session created",
                user_id=str(account.user_id),
                role=account.role.value,
                expires_at=session.expires_at.isoformat(),
            )
        return session

    def get_current_session(self) -> Optional[Session]:
        now = self._clock.now()

        if self._current is not None and not self._current.is_expired(now):
            return self._current

        stored = self._load_persisted()
        if stored is not None and not stored.is_expired(now):
            self._current = stored
            return stored

        return None

    def validate_session(self) -> SessionValidation:
        session = self._load_raw_session()
        if session is None:
            return SessionValidation(valid=False, message="No active session", reason=ErrorCode.NO_SESSION)

        if session.is_expired(self._clock.now()):
            if self._logger:
                self._logger.info("Session expired", user_id=str(session.user_id))
            self.destroy_session()
            return SessionValidation(valid=False, message="Session has expired", reason=ErrorCode.EXPIRED)

        verification = self._engine.verify_session(session)
        if not verification.valid:
            if self._logger:
                self._logger.warn(
                    "Session verification failed",
                    user_id=str(session.user_id),
                    detail=verification.message,
                )
            self.destroy_session()
            return SessionValidation(
                valid=False,
                message=verification.message,
                reason=ErrorCode.VERIFICATION_FAILED,
            )

        self._touch(session)
        return SessionValidation(valid=True, message="Session is valid", session=session)

    def destroy_session(self) -> OperationResult:
        previous = self._current
        self._current = None
        result = self._directory.remove(self._session_key)

        if not result.success:
            return OperationResult(success=False, message="Failed to destroy session")

        if previous is not None and self._logger:
            self._logger.info("Session destroyed", user_id=str(previous.user_id))
        return OperationResult(success=True, message="Session destroyed successfully")

    def extend_session(self, additional_minutes: int) -> SessionResult:
        """
        Prolonge la session.

        L'expiration est recalculée depuis maintenant (durée de base +
        minutes supplémentaires), pas depuis l'expiration existante.
        """
        session = self.get_current_session()
        if session is None:
            return SessionResult(success=False, message="No active session", error=ErrorCode.NO_SESSION)

        now = self._clock.now()
        session.last_activity = now
        session.expires_at = now + self._timeout + timedelta(minutes=additional_minutes)
        self._persist(session)

        return SessionResult(
            success=True,
            message=f"Session extended by {additional_minutes} minutes",
            session=session,
        )

    # ──────────────────────────────────────────────────────────────────────
    # Activité et profil
    # ──────────────────────────────────────────────────────────────────────

    def update_activity(self) -> SessionResult:
        """Renouvelle l'expiration sans re-vérification."""
        session = self.get_current_session()
        if session is None:
            return SessionResult(success=False, message="No active session", error=ErrorCode.NO_SESSION)

        self._touch(session)
        return SessionResult(success=True, message="Session activity updated", session=session)

    def update_session(self, changes: Dict[str, Any]) -> SessionResult:
        """
        Applique des modifications de profil à la session et à l'annuaire.

        Les champs immuables (session_id, user_id, role, email) sont refusés.
        """
        session = self.get_current_session()
        if session is None:
            return SessionResult(success=False, message="No active session", error=ErrorCode.NO_SESSION)

        rejected = [f for f in self.IMMUTABLE_FIELDS if f in changes]
        if rejected:
            return SessionResult(
                success=False,
                message=f"Cannot modify fields: {', '.join(rejected)}",
                session=session,
            )

        allowed = self.DISPLAY_FIELDS + MUTABLE_PROFILE_FIELDS
        unknown = [k for k in changes if k not in allowed]
        if unknown:
            return SessionResult(
                success=False,
                message=f"Unknown profile fields: {', '.join(unknown)}",
                session=session,
            )

        stored = self._directory.update(session.user_id, dict(changes))
        if not stored.success:
            return SessionResult(success=False, message=stored.message, session=session, error=stored.error)

        for name in self.DISPLAY_FIELDS:
            if name in changes:
                setattr(session, name, changes[name])
        self._touch(session)

        return SessionResult(success=True, message="Session updated successfully", session=session)

    def time_until_expiry(self) -> SessionExpiry:
        session = self._load_raw_session()
        if session is None:
            return SessionExpiry(expired=True, minutes=0, seconds=0, message="No active session")

        remaining = (session.expires_at - self._clock.now()).total_seconds()
        if remaining <= 0:
            return SessionExpiry(expired=True, minutes=0, seconds=0, message="Session has expired")

        whole = math.floor(remaining)
        return SessionExpiry(
            expired=False,
            minutes=whole // 60,
            seconds=whole % 60,
            message="Session is active",
        )

    def is_session_valid(self, session: Optional[Session]) -> bool:
        if session is None:
            return False
        return not session.is_expired(self._clock.now())

    # ──────────────────────────────────────────────────────────────────────
    # Interne
    # ──────────────────────────────────────────────────────────────────────

    def _touch(self, session: Session) -> None:
        now = self._clock.now()
        session.last_activity = now
        session.expires_at = now + self._timeout
        self._current = session
        self._persist(session)

    def _persist(self, session: Session) -> None:
        result = self._directory.save(self._session_key, session.to_record())
        if not result.success and self._logger:
            self._logger.error("Failed to save session", user_id=str(session.user_id))

    def _load_raw_session(self) -> Optional[Session]:
        """Session en cache ou persistée, expirée ou non."""
        if self._current is not None:
            return self._current
        return self._load_persisted()

    def _load_persisted(self) -> Optional[Session]:
        raw = self._directory.load(self._session_key)
        if raw is None:
            return None
        try:
            return Session.from_record(raw)
        except ValueError as e:
            if self._logger:
                self._logger.warn("Discarding unreadable session record", error=str(e))
            return None

    @staticmethod
    def _generate_session_id() -> str:
        return f"session_{uuid.uuid4().hex}"
