"""
SCOLARIS - Crypto Provider Implementation
Hachage salé PBKDF2-HMAC-SHA256 des mots de passe.
"""

import base64
import os
from typing import Optional, Tuple

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .interfaces import IPasswordHasher


class PasswordHashError(Exception):
    """Empreinte de mot de passe illisible ou mal formée."""

    pass


class PasswordHasher(IPasswordHasher):
    """
    Hachage des mots de passe avec PBKDF2-HMAC-SHA256.

    Format encodé:
        pbkdf2_sha256$<iterations>$<sel base64>$<hash base64>

    Example:
        hasher = PasswordHasher()
        encoded = hasher.hash_password("secret1")
        assert hasher.verify_password("secret1", encoded)
    """

    ALGORITHM: str = "pbkdf2_sha256"
    SALT_BYTES: int = 16
    KEY_LENGTH: int = 32
    DEFAULT_ITERATIONS: int = 600_000

    def __init__(self, iterations: Optional[int] = None) -> None:
        """
        Args:
            iterations: Nombre d'itérations PBKDF2 (défaut: 600 000)
        """
        self._iterations = iterations if iterations is not None else self.DEFAULT_ITERATIONS
        if self._iterations < 1:
            raise ValueError("iterations doit être >= 1")

    @property
    def iterations(self) -> int:
        return self._iterations

    def hash_password(self, password: str) -> str:
        """
        Calcule l'empreinte salée d'un mot de passe.

        Args:
            password: Mot de passe en clair

        Returns:
            Empreinte encodée
        """
        if password is None:
            raise PasswordHashError("Mot de passe absent")

        salt = os.urandom(self.SALT_BYTES)
        digest = self._kdf(salt, self._iterations).derive(password.encode("utf-8"))
        return "$".join([
            self.ALGORITHM,
            str(self._iterations),
            base64.b64encode(salt).decode("ascii"),
            base64.b64encode(digest).decode("ascii"),
        ])

    def verify_password(self, password: str, encoded: str) -> bool:
        """
        Vérifie un mot de passe contre une empreinte.

        Une empreinte mal formée ne vérifie jamais.
        """
        if password is None or not encoded:
            return False

        try:
            iterations, salt, expected = self._decode(encoded)
        except PasswordHashError:
            return False

        try:
            self._kdf(salt, iterations).verify(password.encode("utf-8"), expected)
            return True
        except InvalidKey:
            return False

    def needs_rehash(self, encoded: str) -> bool:
        """True si l'empreinte utilise un autre nombre d'itérations."""
        try:
            iterations, _, _ = self._decode(encoded)
        except PasswordHashError:
            return True
        return iterations != self._iterations

    def _kdf(self, salt: bytes, iterations: int) -> PBKDF2HMAC:
        return PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=self.KEY_LENGTH,
            salt=salt,
            iterations=iterations,
        )

    def _decode(self, encoded: str) -> Tuple[int, bytes, bytes]:
        """
        Décode une empreinte.

        Raises:
            PasswordHashError: Format invalide
        """
        parts = encoded.split("$")
        if len(parts) != 4 or parts[0] != self.ALGORITHM:
            raise PasswordHashError("Format d'empreinte inconnu")

        try:
            iterations = int(parts[1])
            salt = base64.b64decode(parts[2], validate=True)
            digest = base64.b64decode(parts[3], validate=True)
        except ValueError as e:
            raise PasswordHashError(f"Empreinte illisible: {e}")

        if iterations < 1 or not salt or len(digest) != self.KEY_LENGTH:
            raise PasswordHashError("Empreinte incohérente")

        return iterations, salt, digest
