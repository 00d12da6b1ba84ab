"""
Logging - Sensitive Masker

Retire des données journalisées ce qui permettrait d'usurper un compte:
mots de passe, empreintes, identifiants de session.
"""

from typing import Any, Dict, FrozenSet, Iterable, Optional

from .interfaces import ISensitiveMasker

# Fragments de clés dont la valeur n'est jamais écrite
DEFAULT_SENSITIVE_KEYS = (
    "password",
    "passwd",
    "pwd",
    "secret",
    "token",
    "credential",
    "hash",
    "salt",
    "session_id",
    "cookie",
    "pin",
)

# Empreintes reconnues quelle que soit la clé qui les porte
HASH_PREFIXES = ("pbkdf2_sha256$",)


class SensitiveMasker(ISensitiveMasker):
    """
    Masque les clés sensibles (insensible à la casse, par sous-chaîne) et
    toute valeur ressemblant à une empreinte de mot de passe.

    Example:
        SensitiveMasker().mask({"new_password": "abc123", "user_id": 7})
        # {"new_password": "***MASKED***", "user_id": 7}
    """

    def __init__(self, additional_patterns: Optional[Iterable[str]] = None) -> None:
        self._patterns = set(DEFAULT_SENSITIVE_KEYS)
        for pattern in additional_patterns or ():
            self.add_pattern(pattern)

    @property
    def patterns(self) -> FrozenSet[str]:
        return frozenset(self._patterns)

    def add_pattern(self, pattern: str) -> None:
        """
        Raises:
            ValueError: Pattern vide
        """
        cleaned = (pattern or "").strip().lower()
        if not cleaned:
            raise ValueError("Pattern cannot be empty")
        self._patterns.add(cleaned)

    def remove_pattern(self, pattern: str) -> bool:
        cleaned = (pattern or "").strip().lower()
        if cleaned not in self._patterns:
            return False
        self._patterns.discard(cleaned)
        return True

    def is_sensitive_key(self, key: str) -> bool:
        lowered = str(key).lower() if key else ""
        return bool(lowered) and any(p in lowered for p in self._patterns)

    def mask(self, data: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(data, dict):
            return data
        return {
            key: self.MASK_VALUE if self.is_sensitive_key(key) else self._mask_value(value)
            for key, value in data.items()
        }

    def _mask_value(self, value: Any) -> Any:
        if isinstance(value, dict):
            return self.mask(value)
        if isinstance(value, (list, tuple)):
            return [self._mask_value(item) for item in value]
        if isinstance(value, str) and value.startswith(HASH_PREFIXES):
            return self.MASK_VALUE
        return value
