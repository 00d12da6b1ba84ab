"""
Logging - Structured Logger

Journal JSON des événements d'authentification. L'horodatage vient de
l'horloge injectée ; les données supplémentaires sont masquées avant
capture et émission.
"""

import uuid
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional

from ..core.clock import SystemClock
from ..core.interfaces import IClock
from .interfaces import ISensitiveMasker, IStructuredLogger, LogConfig, LogEntry, LogLevel
from .sensitive_masker import SensitiveMasker


class LoggingError(Exception):
    """Appel de journalisation invalide."""

    pass


def parse_level(name: Any) -> LogLevel:
    """
    Raises:
        LoggingError: Nom de niveau inconnu
    """
    level = LogLevel.parse(name)
    if level is None:
        raise LoggingError(f"Invalid log level: {name}")
    return level


class StructuredLogger(IStructuredLogger):
    """
    Journal structuré.

    Sans correlation_id explicite ni corrélation courante, chaque ligne
    reçoit un identifiant neuf.

    Example:
        logger = StructuredLogger("scolaris.auth", output_handler=print)
        logger.info("User authenticated", user_id="7", role="teacher")
        attempt = logger.bind(email="a@x.com")
        attempt.warn("Login refused for locked account")
    """

    def __init__(
        self,
        name: str,
        config: Optional[LogConfig] = None,
        masker: Optional[ISensitiveMasker] = None,
        output_handler: Optional[Callable[[str], None]] = None,
        clock: Optional[IClock] = None,
    ) -> None:
        """
        Args:
            name: Nom du journal (module émetteur)
            config: Niveau minimal, masquage, capture
            masker: Masquage des données supplémentaires
            output_handler: Reçoit chaque ligne JSON
            clock: Source des horodatages

        Raises:
            LoggingError: Nom vide
        """
        if not name or not name.strip():
            raise LoggingError("Logger name cannot be empty")

        self._name = name.strip()
        self._config = config or LogConfig()
        self._masker = masker or SensitiveMasker()
        self._output_handler = output_handler
        self._clock = clock or SystemClock()
        self._entries: Deque[LogEntry] = deque(maxlen=self._config.capture_limit)
        self._correlation_id: Optional[str] = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def config(self) -> LogConfig:
        return self._config

    def set_correlation(self, correlation_id: Optional[str]) -> None:
        """Corrélation des lignes suivantes ; None rétablit un id par ligne."""
        self._correlation_id = correlation_id

    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        """
        Raises:
            LoggingError: Niveau invalide ou message vide
        """
        if not isinstance(level, LogLevel):
            raise LoggingError(f"Invalid log level: {level}")
        if not level.at_least(self._config.min_level):
            return None
        if not message:
            raise LoggingError("Log message is required")

        entry = LogEntry(
            timestamp=self._clock.now(),
            level=level,
            message=message,
            correlation_id=correlation_id or self._correlation_id or uuid.uuid4().hex,
            logger_name=self._name,
            extra=self._prepare_extra(extra),
        )
        self._entries.append(entry)

        if self._output_handler is not None:
            self._output_handler(entry.to_json())
        return entry

    def bind(self, correlation_id: Optional[str] = None, **context: Any) -> "BoundLogger":
        """Journal lié à une corrélation et à un contexte fixes."""
        return BoundLogger(self, correlation_id or uuid.uuid4().hex, context)

    def get_entries(
        self, level: Optional[LogLevel] = None, correlation_id: Optional[str] = None
    ) -> List[LogEntry]:
        return [
            e for e in self._entries
            if (level is None or e.level is level)
            and (correlation_id is None or e.correlation_id == correlation_id)
        ]

    def get_entries_by_level(self, level: LogLevel) -> List[LogEntry]:
        return self.get_entries(level=level)

    def clear_entries(self) -> None:
        self._entries.clear()

    def _prepare_extra(self, extra: Dict[str, Any]) -> Dict[str, Any]:
        if not extra or not self._config.include_extra:
            return {}
        if self._config.mask_sensitive:
            return self._masker.mask(extra)
        return dict(extra)


class BoundLogger(IStructuredLogger):
    """
    Vue d'un StructuredLogger pour une opération (une tentative de
    connexion, une inscription) : même correlation_id, contexte ajouté à
    chaque ligne.
    """

    def __init__(self, parent: StructuredLogger, correlation_id: str, context: Dict[str, Any]) -> None:
        self._parent = parent
        self._correlation_id = correlation_id
        self._context = dict(context)

    @property
    def correlation_id(self) -> str:
        return self._correlation_id

    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        merged = dict(self._context)
        merged.update(extra)
        return self._parent.log(level, message, correlation_id=correlation_id or self._correlation_id, **merged)

    def get_entries(self) -> List[LogEntry]:
        return self._parent.get_entries(correlation_id=self._correlation_id)
