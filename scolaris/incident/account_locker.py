"""
Incident: Gestion du verrouillage de comptes

Verrouillage temporaire après plusieurs échecs d'authentification pour un
même email.

Règle:
    5 échecs dans la fenêtre de 15 minutes = connexion refusée ;
    la fenêtre court depuis le dernier échec.

Note:
    Table en mémoire, durée de vie du processus, non persistée.
    Lecture-modification-écriture sans verrou : des connexions concurrentes
    peuvent sous-compter les échecs.
"""

import math
from datetime import timedelta
from typing import Dict, List, Optional

from ..core.clock import SystemClock
from ..core.interfaces import IClock
from ..logging import IStructuredLogger
from .interfaces import AccountLockStatus, IAccountLocker, LoginAttemptRecord


class AccountLockerError(Exception):
    """Erreur du gestionnaire de verrouillage."""

    pass


class AccountLocker(IAccountLocker):
    """
    Gestion du verrouillage de comptes après échecs d'authentification.

    Protège contre les attaques par force brute : au-delà de
    MAX_ATTEMPTS échecs, toute tentative est refusée tant que la fenêtre
    n'a pas expiré depuis le dernier échec.

    Example:
        locker = AccountLocker(clock=FrozenClock())
        locker.record_failure("a@x.com")
        status = locker.check("a@x.com")
    """

    MAX_ATTEMPTS: int = 5
    LOCKOUT_WINDOW: timedelta = timedelta(minutes=15)

    def __init__(
        self,
        max_attempts: Optional[int] = None,
        lockout_window: Optional[timedelta] = None,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        """
        Args:
            max_attempts: Nombre d'échecs déclenchant le verrouillage (défaut: 5)
            lockout_window: Durée du verrouillage (défaut: 15 min)
            clock: Source de temps
            logger: Logger structuré
        """
        self._max_attempts = max_attempts if max_attempts is not None else self.MAX_ATTEMPTS
        self._lockout_window = lockout_window if lockout_window is not None else self.LOCKOUT_WINDOW

        if self._max_attempts < 1:
            raise AccountLockerError("max_attempts doit être >= 1")
        if self._lockout_window <= timedelta(0):
            raise AccountLockerError("lockout_window doit être positive")

        self._clock = clock or SystemClock()
        self._logger = logger
        self._records: Dict[str, LoginAttemptRecord] = {}

    @property
    def max_attempts(self) -> int:
        return self._max_attempts

    @property
    def lockout_window(self) -> timedelta:
        return self._lockout_window

    def check(self, email: str) -> AccountLockStatus:
        """
        Consulte l'état de verrouillage.

        Un enregistrement dont la fenêtre est écoulée est supprimé et
        l'email est considéré sans échec.
        """
        record = self.get_record(email)
        if record is None:
            return AccountLockStatus(
                email=email,
                locked=False,
                failure_count=0,
                remaining_attempts=self._max_attempts,
            )

        if record.count >= self._max_attempts:
            locked_until = record.last_attempt + self._lockout_window
            remaining = locked_until - self._clock.now()
            return AccountLockStatus(
                email=email,
                locked=True,
                failure_count=record.count,
                remaining_attempts=0,
                remaining_minutes=math.ceil(remaining.total_seconds() / 60),
                locked_until=locked_until,
            )

        return AccountLockStatus(
            email=email,
            locked=False,
            failure_count=record.count,
            remaining_attempts=self._max_attempts - record.count,
        )

    def record_failure(self, email: str) -> LoginAttemptRecord:
        """
        Enregistre un échec et retourne le compteur mis à jour.
        """
        # get_record purge un enregistrement périmé mais retourne une copie
        self.get_record(email)
        record = self._records.get(email)
        if record is None:
            record = LoginAttemptRecord()
            self._records[email] = record

        record.count += 1
        record.last_attempt = self._clock.now()

        if self._logger:
            if record.count == self._max_attempts:
                self._logger.warn(
                    "Account locked after repeated failures",
                    email=email,
                    failure_count=record.count,
                    lockout_minutes=int(self._lockout_window.total_seconds() // 60),
                )
            else:
                self._logger.info("Failed login attempt recorded", email=email, failure_count=record.count)

        return LoginAttemptRecord(count=record.count, last_attempt=record.last_attempt)

    def reset(self, email: str) -> None:
        """Réinitialise le compteur (après authentification réussie)."""
        self._records.pop(email, None)

    def get_record(self, email: str) -> Optional[LoginAttemptRecord]:
        """
        Enregistrement courant.

        Returns:
            Copie de l'enregistrement, None si absent ou fenêtre écoulée
        """
        record = self._records.get(email)
        if record is None:
            return None

        if self._is_stale(record):
            del self._records[email]
            return None

        return LoginAttemptRecord(count=record.count, last_attempt=record.last_attempt)

    def is_locked(self, email: str) -> bool:
        return self.check(email).locked

    def remaining_attempts(self, email: str) -> int:
        """Tentatives restantes avant verrouillage."""
        return self.check(email).remaining_attempts

    def unlock(self, email: str) -> bool:
        """
        Déverrouille manuellement un email (action admin).

        Returns:
            True si l'email était verrouillé
        """
        was_locked = self.is_locked(email)
        self.reset(email)
        if was_locked and self._logger:
            self._logger.info("Account manually unlocked", email=email)
        return was_locked

    def get_all_locked(self) -> List[AccountLockStatus]:
        """Statuts de tous les emails actuellement verrouillés."""
        statuses = [self.check(email) for email in list(self._records.keys())]
        return [s for s in statuses if s.locked]

    def clear_all(self) -> None:
        """Efface tous les compteurs (pour tests)."""
        self._records.clear()

    def _is_stale(self, record: LoginAttemptRecord) -> bool:
        if record.last_attempt is None:
            return True
        return self._clock.now() - record.last_attempt >= self._lockout_window
