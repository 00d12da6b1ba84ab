"""
Logging - Interfaces

Événements d'authentification journalisés en lignes JSON.

Une ligne porte toujours un horodatage UTC, un niveau, un correlation_id
et un message. Mots de passe, empreintes et identifiants de session n'y
figurent jamais.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class LogLevel(Enum):
    """Niveaux, du moins au plus sévère (ordre de déclaration)."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    @property
    def rank(self) -> int:
        return list(LogLevel).index(self)

    def at_least(self, other: "LogLevel") -> bool:
        return self.rank >= other.rank

    @classmethod
    def parse(cls, value: Any) -> Optional["LogLevel"]:
        """Niveau depuis son nom ("info", "WARNING"...), None si inconnu."""
        if isinstance(value, cls):
            return value
        name = str(value).strip().upper()
        if name == "WARNING":
            name = "WARN"
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class LogEntry:
    """Ligne de journal émise."""

    timestamp: datetime
    level: LogLevel
    message: str
    correlation_id: str
    logger_name: str
    extra: Dict[str, Any] = field(default_factory=dict)

    @property
    def stamp(self) -> str:
        """ISO 8601 UTC avec millisecondes, ex: 2024-01-01T08:00:00.000Z"""
        utc = self.timestamp.astimezone(timezone.utc)
        return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "timestamp": self.stamp,
            "level": self.level.value,
            "logger": self.logger_name,
            "correlation_id": self.correlation_id,
            "message": self.message,
        }
        if self.extra:
            payload["extra"] = self.extra
        return payload

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


@dataclass
class LogConfig:
    """
    Configuration du journal.

    capture_limit borne les entrées gardées en mémoire (None: sans limite).
    """

    min_level: LogLevel = LogLevel.INFO
    include_extra: bool = True
    mask_sensitive: bool = True
    capture_limit: Optional[int] = 1000


class IStructuredLogger(ABC):
    """
    Interface du journal structuré.

    Seul `log` est à implémenter ; les raccourcis par niveau en dérivent.
    """

    @abstractmethod
    def log(
        self,
        level: LogLevel,
        message: str,
        correlation_id: Optional[str] = None,
        **extra: Any,
    ) -> Optional[LogEntry]:
        """
        Émet une ligne.

        Returns:
            LogEntry émise, None si filtrée par niveau
        """
        pass

    @abstractmethod
    def get_entries(self) -> List[LogEntry]:
        """Entrées capturées (inspection en test)."""
        pass

    def debug(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.DEBUG, message, **extra)

    def info(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.INFO, message, **extra)

    def warn(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.WARN, message, **extra)

    def error(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.ERROR, message, **extra)

    def critical(self, message: str, **extra: Any) -> Optional[LogEntry]:
        return self.log(LogLevel.CRITICAL, message, **extra)


class ISensitiveMasker(ABC):
    """Interface de masquage avant journalisation."""

    MASK_VALUE: str = "***MASKED***"

    @abstractmethod
    def mask(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Copie de data, secrets remplacés par MASK_VALUE."""
        pass

    @abstractmethod
    def is_sensitive_key(self, key: str) -> bool:
        pass
