"""
Tests unitaires pour SessionManager.

Vérifie le cycle de vie ABSENT → ACTIVE → EXPIRED → DESTROYED et le
renouvellement glissant de l'expiration.
"""

from datetime import timedelta
from unittest.mock import Mock

import pytest

from scolaris.auth import (
    AuthenticationEngine,
    SessionManager,
    SessionManagerError,
    SessionVerification,
    UserAccount,
)
from scolaris.core import ErrorCode, FrozenClock, Role
from scolaris.directory import MemoryBackend, UserDirectory
from scolaris.logging import StructuredLogger


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def teacher(engine: AuthenticationEngine) -> UserAccount:
    return engine.authenticate("a@x.com", "secret1", "teacher").account


@pytest.fixture
def student(engine: AuthenticationEngine) -> UserAccount:
    return engine.authenticate("bob@x.com", "lesson9", "student").account


# =============================================================================
# CRÉATION ET LECTURE
# =============================================================================


class TestCreateSession:
    """Tests de create_session."""

    def test_fields(self, session_manager: SessionManager, teacher: UserAccount, clock: FrozenClock) -> None:
        session = session_manager.create_session(teacher)

        assert session.user_id == 7
        assert session.role is Role.TEACHER
        assert session.created_at == clock.now()
        assert session.last_activity == session.created_at
        assert session.expires_at == clock.now() + timedelta(hours=1)
        assert session.username == "alice"
        assert session.email == "a@x.com"
        assert session.display_name == "Alice Martin"

    def test_unique_ids(self, session_manager: SessionManager, teacher: UserAccount) -> None:
        first = session_manager.create_session(teacher)
        second = session_manager.create_session(teacher)
        assert first.session_id != second.session_id

    def test_overwrites_previous(
        self, session_manager: SessionManager, teacher: UserAccount, student: UserAccount
    ) -> None:
        session_manager.create_session(teacher)
        session_manager.create_session(student)

        assert session_manager.get_current_session().role is Role.STUDENT

    def test_persisted(
        self, session_manager: SessionManager, teacher: UserAccount, populated_directory: UserDirectory
    ) -> None:
        session = session_manager.create_session(teacher)

        stored = populated_directory.load("current_session")
        assert stored["session_id"] == session.session_id
        assert stored["role"] == "teacher"

    def test_session_id_not_logged(
        self, session_manager: SessionManager, teacher: UserAccount, logger: StructuredLogger
    ) -> None:
        session = session_manager.create_session(teacher)

        for entry in logger.get_entries():
            assert session.session_id not in entry.to_json()

    def test_invalid_timeout(self, engine: AuthenticationEngine, populated_directory: UserDirectory) -> None:
        with pytest.raises(SessionManagerError):
            SessionManager(engine, populated_directory, session_timeout=timedelta(0))


class TestGetCurrentSession:
    """Tests de get_current_session."""

    def test_absent(self, session_manager: SessionManager) -> None:
        assert session_manager.get_current_session() is None

    def test_expired_is_absent(
        self, session_manager: SessionManager, teacher: UserAccount, clock: FrozenClock
    ) -> None:
        session_manager.create_session(teacher)
        clock.advance(hours=1)

        assert session_manager.get_current_session() is None

    def test_never_deletes(
        self,
        session_manager: SessionManager,
        teacher: UserAccount,
        clock: FrozenClock,
        populated_directory: UserDirectory,
    ) -> None:
        session_manager.create_session(teacher)
        clock.advance(hours=2)

        session_manager.get_current_session()

        assert populated_directory.load("current_session") is not None

    def test_restored_from_store(
        self,
        session_manager: SessionManager,
        teacher: UserAccount,
        engine: AuthenticationEngine,
        populated_directory: UserDirectory,
        clock: FrozenClock,
    ) -> None:
        """Un nouveau gestionnaire relit la session persistée."""
        session = session_manager.create_session(teacher)
        fresh = SessionManager(engine, populated_directory, clock=clock)

        restored = fresh.get_current_session()

        assert restored is not None
        assert restored.session_id == session.session_id
        assert restored.expires_at == session.expires_at

    def test_unreadable_record_ignored(
        self, engine: AuthenticationEngine, populated_directory: UserDirectory, clock: FrozenClock
    ) -> None:
        populated_directory.save("current_session", {"role": "teacher"})
        manager = SessionManager(engine, populated_directory, clock=clock)

        assert manager.get_current_session() is None


# =============================================================================
# VALIDATION
# =============================================================================


class TestValidateSession:
    """Tests de validate_session."""

    def test_valid_after_create(
        self, session_manager: SessionManager, teacher: UserAccount, clock: FrozenClock
    ) -> None:
        created = session_manager.create_session(teacher)
        clock.advance(minutes=5)

        result = session_manager.validate_session()

        assert result.valid is True
        assert result.reason is None
        assert result.session.user_id == created.user_id
        assert result.session.role is created.role
        assert result.session.last_activity >= result.session.created_at

    def test_slides_expiry(
        self, session_manager: SessionManager, teacher: UserAccount, clock: FrozenClock
    ) -> None:
        session_manager.create_session(teacher)
        clock.advance(minutes=50)

        result = session_manager.validate_session()

        assert result.session.expires_at == clock.now() + timedelta(hours=1)
        clock.advance(minutes=50)
        assert session_manager.validate_session().valid is True

    def test_no_session(self, session_manager: SessionManager) -> None:
        result = session_manager.validate_session()

        assert result.valid is False
        assert result.reason is ErrorCode.NO_SESSION

    def test_expired_destroys(
        self,
        session_manager: SessionManager,
        teacher: UserAccount,
        clock: FrozenClock,
        populated_directory: UserDirectory,
    ) -> None:
        """Session expirée → EXPIRED, puis absente."""
        session_manager.create_session(teacher)
        clock.advance(hours=1, seconds=1)

        result = session_manager.validate_session()

        assert result.reason is ErrorCode.EXPIRED
        assert session_manager.get_current_session() is None
        assert populated_directory.load("current_session") is None

    def test_deleted_user_fails_verification(
        self,
        session_manager: SessionManager,
        teacher: UserAccount,
        populated_directory: UserDirectory,
    ) -> None:
        session_manager.create_session(teacher)
        populated_directory.delete(7)

        result = session_manager.validate_session()

        assert result.valid is False
        assert result.reason is ErrorCode.VERIFICATION_FAILED
        assert result.message == "Session user not found"
        assert session_manager.get_current_session() is None


# =============================================================================
# DESTRUCTION ET PROLONGATION
# =============================================================================


class TestDestroySession:
    """Tests de destroy_session."""

    def test_destroy_then_absent(self, session_manager: SessionManager, teacher: UserAccount) -> None:
        session_manager.create_session(teacher)

        result = session_manager.destroy_session()

        assert result.success is True
        assert session_manager.get_current_session() is None

    def test_idempotent(self, session_manager: SessionManager) -> None:
        assert session_manager.destroy_session().success is True
        assert session_manager.destroy_session().success is True
        assert session_manager.get_current_session() is None


class TestExtendSession:
    """Tests de extend_session."""

    def test_from_now_not_from_expiry(
        self, session_manager: SessionManager, teacher: UserAccount, clock: FrozenClock
    ) -> None:
        """Expiration = maintenant + base + supplément."""
        session_manager.create_session(teacher)
        clock.advance(minutes=30)

        result = session_manager.extend_session(15)

        assert result.success is True
        assert result.session.expires_at == clock.now() + timedelta(minutes=75)
        assert result.message == "Session extended by 15 minutes"

    def test_no_session(self, session_manager: SessionManager) -> None:
        assert session_manager.extend_session(10).error is ErrorCode.NO_SESSION


# =============================================================================
# ACTIVITÉ, PROFIL, EXPIRATION
# =============================================================================


class TestActivityAndProfile:
    """Tests de update_activity et update_session."""

    def test_update_activity(
        self, session_manager: SessionManager, teacher: UserAccount, clock: FrozenClock
    ) -> None:
        session_manager.create_session(teacher)
        clock.advance(minutes=20)

        result = session_manager.update_activity()

        assert result.success is True
        assert result.session.last_activity == clock.now()

    def test_update_activity_absent(self, session_manager: SessionManager) -> None:
        assert session_manager.update_activity().error is ErrorCode.NO_SESSION

    def test_update_session_profile(
        self,
        session_manager: SessionManager,
        teacher: UserAccount,
        populated_directory: UserDirectory,
    ) -> None:
        session_manager.create_session(teacher)

        result = session_manager.update_session({"display_name": "Mme Martin", "phone": "+33 1 23 45 67 89"})

        assert result.success is True
        assert result.session.display_name == "Mme Martin"
        stored = populated_directory.find_by_id(7)
        assert stored["display_name"] == "Mme Martin"
        assert stored["phone"] == "+33 1 23 45 67 89"

    @pytest.mark.parametrize("field_name", ["user_id", "role", "email"])
    def test_immutable_rejected(
        self, session_manager: SessionManager, teacher: UserAccount, field_name: str
    ) -> None:
        session_manager.create_session(teacher)

        result = session_manager.update_session({field_name: "changed"})

        assert result.success is False
        assert session_manager.get_current_session().email == "a@x.com"

    def test_unknown_field_rejected(self, session_manager: SessionManager, teacher: UserAccount) -> None:
        session_manager.create_session(teacher)
        assert session_manager.update_session({"password_hash": "x"}).success is False


class TestExpiryInfo:
    """Tests de time_until_expiry et is_session_valid."""

    def test_time_until_expiry(
        self, session_manager: SessionManager, teacher: UserAccount, clock: FrozenClock
    ) -> None:
        session_manager.create_session(teacher)
        clock.advance(minutes=15, seconds=30)

        info = session_manager.time_until_expiry()

        assert info.expired is False
        assert info.minutes == 44
        assert info.seconds == 30

    def test_time_until_expiry_expired(
        self, session_manager: SessionManager, teacher: UserAccount, clock: FrozenClock
    ) -> None:
        session_manager.create_session(teacher)
        clock.advance(hours=2)

        info = session_manager.time_until_expiry()

        assert info.expired is True
        assert info.message == "Session has expired"

    def test_time_until_expiry_absent(self, session_manager: SessionManager) -> None:
        assert session_manager.time_until_expiry().message == "No active session"

    def test_is_session_valid(
        self, session_manager: SessionManager, teacher: UserAccount, clock: FrozenClock
    ) -> None:
        session = session_manager.create_session(teacher)
        assert session_manager.is_session_valid(session) is True

        clock.advance(hours=1)
        assert session_manager.is_session_valid(session) is False
        assert session_manager.is_session_valid(None) is False

    def test_duration_minutes(self, session_manager: SessionManager) -> None:
        assert session_manager.session_duration_minutes == 60


class TestSeparateStore:
    """Session persistée dans un annuaire séparé."""

    def test_fresh_directory(self, engine: AuthenticationEngine, teacher: UserAccount, clock: FrozenClock) -> None:
        store = UserDirectory(MemoryBackend(), clock=clock)
        manager = SessionManager(engine, store, clock=clock)

        manager.create_session(teacher)

        assert store.load("current_session")["user_id"] == 7


class TestEngineDelegation:
    """La vérification du compte est déléguée au moteur injecté."""

    def test_verification_failure_destroys(
        self, populated_directory: UserDirectory, teacher: UserAccount, clock: FrozenClock
    ) -> None:
        engine = Mock()
        engine.verify_session.return_value = SessionVerification(valid=False, message="Session user not found")
        manager = SessionManager(engine, populated_directory, clock=clock)
        session = manager.create_session(teacher)

        result = manager.validate_session()

        engine.verify_session.assert_called_once()
        assert engine.verify_session.call_args[0][0].session_id == session.session_id
        assert result.reason is ErrorCode.VERIFICATION_FAILED
        assert populated_directory.load("current_session") is None

    def test_expired_session_not_verified(
        self, populated_directory: UserDirectory, teacher: UserAccount, clock: FrozenClock
    ) -> None:
        engine = Mock()
        manager = SessionManager(engine, populated_directory, clock=clock)
        manager.create_session(teacher)
        clock.advance(hours=2)

        assert manager.validate_session().reason is ErrorCode.EXPIRED
        engine.verify_session.assert_not_called()
