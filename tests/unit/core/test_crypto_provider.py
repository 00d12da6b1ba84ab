"""
Tests unitaires pour PasswordHasher (PBKDF2-HMAC-SHA256).
"""

import pytest

from scolaris.core import PasswordHasher, PasswordHashError


class TestHashPassword:
    """Tests du hachage."""

    def test_format(self, hasher: PasswordHasher) -> None:
        encoded = hasher.hash_password("secret1")
        algorithm, iterations, salt, digest = encoded.split("$")

        assert algorithm == "pbkdf2_sha256"
        assert iterations == str(hasher.iterations)
        assert salt and digest
        assert "secret1" not in encoded

    def test_salted(self, hasher: PasswordHasher) -> None:
        """Deux empreintes du même mot de passe diffèrent."""
        assert hasher.hash_password("secret1") != hasher.hash_password("secret1")

    def test_none_rejected(self, hasher: PasswordHasher) -> None:
        with pytest.raises(PasswordHashError):
            hasher.hash_password(None)

    def test_invalid_iterations(self) -> None:
        with pytest.raises(ValueError):
            PasswordHasher(iterations=0)

    def test_default_iterations(self) -> None:
        assert PasswordHasher().iterations == PasswordHasher.DEFAULT_ITERATIONS


class TestVerifyPassword:
    """Tests de la vérification."""

    def test_correct(self, hasher: PasswordHasher) -> None:
        assert hasher.verify_password("secret1", hasher.hash_password("secret1")) is True

    def test_wrong(self, hasher: PasswordHasher) -> None:
        assert hasher.verify_password("secret2", hasher.hash_password("secret1")) is False

    def test_unicode(self, hasher: PasswordHasher) -> None:
        encoded = hasher.hash_password("élève2024")
        assert hasher.verify_password("élève2024", encoded) is True

    @pytest.mark.parametrize(
        "encoded",
        ["", "secret1", "md5$1$abc$def", "pbkdf2_sha256$x$abc$def", "pbkdf2_sha256$1000$!!$!!"],
    )
    def test_malformed_never_verifies(self, hasher: PasswordHasher, encoded: str) -> None:
        assert hasher.verify_password("secret1", encoded) is False

    def test_other_iteration_count_verifies(self, hasher: PasswordHasher) -> None:
        """Les itérations sont lues dans l'empreinte."""
        encoded = PasswordHasher(iterations=500).hash_password("secret1")
        assert hasher.verify_password("secret1", encoded) is True

    def test_needs_rehash(self, hasher: PasswordHasher) -> None:
        assert hasher.needs_rehash(hasher.hash_password("secret1")) is False
        assert hasher.needs_rehash(PasswordHasher(iterations=500).hash_password("secret1")) is True
        assert hasher.needs_rehash("garbage") is True
