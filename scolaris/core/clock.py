"""
SCOLARIS - Clock
Sources de temps : horloge système et horloge figée pour les tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

from .interfaces import IClock


class SystemClock(IClock):
    """Horloge murale UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class FrozenClock(IClock):
    """
    Horloge manuelle, avancée explicitement.

    Example:
        clock = FrozenClock()
        clock.advance(minutes=15)
    """

    def __init__(self, start: Optional[datetime] = None) -> None:
        current = start or datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)
        if current.tzinfo is None:
            raise ValueError("start doit être timezone-aware")
        self._current = current

    def now(self) -> datetime:
        return self._current

    def advance(self, delta: Optional[timedelta] = None, **kwargs: float) -> datetime:
        """
        Avance l'horloge.

        Args:
            delta: Durée à ajouter
            **kwargs: Arguments timedelta (minutes=..., seconds=...)

        Returns:
            Nouvel instant courant
        """
        step = delta if delta is not None else timedelta(**kwargs)
        if step < timedelta(0):
            raise ValueError("L'horloge ne recule pas")
        self._current = self._current + step
        return self._current

    def set(self, moment: datetime) -> None:
        """Positionne l'horloge sur un instant précis."""
        if moment.tzinfo is None:
            raise ValueError("moment doit être timezone-aware")
        self._current = moment
