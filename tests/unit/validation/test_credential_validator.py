"""
Tests unitaires pour CredentialValidator.
"""

from datetime import datetime, timezone

import pytest

from scolaris.core import FrozenClock, Role
from scolaris.validation import CredentialValidator, ValidationReport


@pytest.fixture
def validator(clock: FrozenClock) -> CredentialValidator:
    return CredentialValidator(clock=clock)


class TestEmail:
    @pytest.mark.parametrize("email", ["a@x.com", "first.last@school.edu.fr", "x+tag@d.io"])
    def test_valid(self, validator: CredentialValidator, email: str) -> None:
        assert validator.validate_email(email).accepted is True

    @pytest.mark.parametrize("email", ["", None, "no-at.com", "a@nodot", "a b@x.com", "@x.com"])
    def test_invalid(self, validator: CredentialValidator, email) -> None:
        outcome = validator.validate_email(email)

        assert outcome.accepted is False
        assert outcome.reasons == ["Invalid email format"]
        assert outcome.message == "Invalid email format"


class TestPassword:
    """Tests des règles de mot de passe."""

    def test_six_chars_with_letter(self, validator: CredentialValidator) -> None:
        assert validator.validate_password("abc123").accepted is True

    def test_too_short(self, validator: CredentialValidator) -> None:
        outcome = validator.validate_password("ab12")
        assert outcome.reasons == ["Password must be at least 6 characters"]

    def test_no_letter(self, validator: CredentialValidator) -> None:
        outcome = validator.validate_password("123456")
        assert outcome.reasons == ["Password must contain at least one letter"]

    def test_empty(self, validator: CredentialValidator) -> None:
        assert validator.validate_password("").accepted is False
        assert validator.validate_password(None).accepted is False

    def test_custom_min_length(self, clock: FrozenClock) -> None:
        strict = CredentialValidator(password_min_length=10, clock=clock)
        assert strict.validate_password("abc1234").reasons == ["Password must be at least 10 characters"]

    def test_password_match(self, validator: CredentialValidator) -> None:
        assert validator.validate_password_match("abc123", "abc123").accepted is True
        assert validator.validate_password_match("abc123", "abc124").reasons == ["Passwords do not match"]


class TestRole:
    @pytest.mark.parametrize("role", ["administrator", "admin", "Teacher", "student", Role.STUDENT])
    def test_valid(self, validator: CredentialValidator, role) -> None:
        assert validator.validate_role(role).accepted is True

    @pytest.mark.parametrize("role", ["", None, "principal", 3])
    def test_invalid(self, validator: CredentialValidator, role) -> None:
        outcome = validator.validate_role(role)
        assert outcome.reasons == ["Role must be one of: administrator, teacher, student"]


class TestProfileFields:
    """Tests des champs d'inscription."""

    def test_username(self, validator: CredentialValidator) -> None:
        assert validator.validate_username("jean_d").accepted is True
        assert validator.validate_username("jd").reasons == ["Username must be at least 3 characters"]
        assert validator.validate_username("jean d").reasons == [
            "Username can only contain letters, numbers, and underscores"
        ]
        assert validator.validate_username("  ").reasons == ["Username is required"]

    def test_phone(self, validator: CredentialValidator) -> None:
        assert validator.validate_phone("+33 (0)1 23-45-67-89").accepted is True
        assert validator.validate_phone("").accepted is True
        assert validator.validate_phone("call me").reasons == ["Invalid phone number format"]

    def test_dob(self, validator: CredentialValidator) -> None:
        assert validator.validate_dob("2008-05-14").accepted is True
        assert validator.validate_dob(None).accepted is True
        assert validator.validate_dob("14/05/2008").accepted is False
        assert validator.validate_dob("2030-01-01").accepted is False
        assert validator.validate_dob("1850-01-01").accepted is False

    def test_dob_datetime(self, validator: CredentialValidator) -> None:
        assert validator.validate_dob(datetime(2000, 1, 1, tzinfo=timezone.utc)).accepted is True


class TestCombined:
    """Tests des validations agrégées."""

    def test_login_collects_all_errors(self, validator: CredentialValidator) -> None:
        report = validator.validate_login_credentials("bad", "1", "ghost")

        assert isinstance(report, ValidationReport)
        assert report.accepted is False
        assert len(report.reasons) == 4
        assert len(report.outcomes) == 3

    def test_login_ok(self, validator: CredentialValidator) -> None:
        assert validator.validate_login_credentials("a@x.com", "secret1", "teacher").accepted is True

    def test_registration_password_mismatch(self, validator: CredentialValidator) -> None:
        report = validator.validate_registration_data({
            "username": "alice",
            "email": "a@x.com",
            "password": "secret1",
            "confirm_password": "secret2",
            "role": "teacher",
        })
        assert report.reasons == ["Passwords do not match"]


class TestSanitize:
    """Tests de l'échappement HTML."""

    def test_escapes(self, validator: CredentialValidator) -> None:
        assert validator.sanitize_input('<b>"Tom" & \'Jerry\'</b>') == (
            "&lt;b&gt;&quot;Tom&quot; &amp; &#x27;Jerry&#x27;&lt;&#x2F;b&gt;"
        )

    def test_non_string_untouched(self, validator: CredentialValidator) -> None:
        assert validator.sanitize_input(42) == 42

    def test_validate_and_sanitize_keeps_password(self, validator: CredentialValidator) -> None:
        result = validator.validate_and_sanitize({
            "username": "alice",
            "email": "a@x.com",
            "password": "p<ss>word1",
            "role": "teacher",
            "school_name": "Lycée <Hugo>",
        })

        assert result.success is True
        assert result.data["password"] == "p<ss>word1"
        assert result.data["school_name"] == "Lycée &lt;Hugo&gt;"

    def test_validate_and_sanitize_keeps_email(self, validator: CredentialValidator) -> None:
        result = validator.validate_and_sanitize({
            "username": "obrien",
            "email": "o'brien/r&d@x.com",
            "password": "secret1",
            "role": "student",
        })

        assert result.success is True
        assert result.data["email"] == "o'brien/r&d@x.com"

    def test_validate_and_sanitize_rejects(self, validator: CredentialValidator) -> None:
        result = validator.validate_and_sanitize({"email": "bad"})

        assert result.success is False
        assert "Invalid email format" in result.reasons
