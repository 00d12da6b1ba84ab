"""
SCOLARIS - Pytest Configuration
Fixtures partagées pour tous les tests.
"""

from datetime import timedelta

import pytest

from scolaris.auth import AuthenticationEngine, SessionManager
from scolaris.core import FrozenClock, PasswordHasher
from scolaris.directory import MemoryBackend, UserDirectory
from scolaris.incident import AccountLocker
from scolaris.logging import LogConfig, LogLevel, StructuredLogger
from scolaris.validation import CredentialValidator

# Itérations réduites pour la vitesse des tests
TEST_HASH_ITERATIONS = 1000


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture
def logger(clock: FrozenClock) -> StructuredLogger:
    """Logger capturant toutes les entrées, y compris DEBUG."""
    return StructuredLogger("scolaris.tests", config=LogConfig(min_level=LogLevel.DEBUG), clock=clock)


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(iterations=TEST_HASH_ITERATIONS)


@pytest.fixture
def backend() -> MemoryBackend:
    return MemoryBackend()


@pytest.fixture
def directory(backend: MemoryBackend, clock: FrozenClock, logger: StructuredLogger) -> UserDirectory:
    return UserDirectory(backend, clock=clock, logger=logger)


@pytest.fixture
def teacher_record(hasher: PasswordHasher) -> dict:
    """Enseignant de référence : id 7, a@x.com / secret1."""
    return {
        "user_id": 7,
        "username": "alice",
        "email": "a@x.com",
        "role": "teacher",
        "password_hash": hasher.hash_password("secret1"),
        "display_name": "Alice Martin",
        "profile": {"subject": "Mathématiques", "department": "Sciences"},
    }


@pytest.fixture
def student_record(hasher: PasswordHasher) -> dict:
    return {
        "user_id": "stu-1",
        "username": "bob",
        "email": "bob@x.com",
        "role": "student",
        "password_hash": hasher.hash_password("lesson9"),
        "profile": {"student_number": "S-001", "grade_level": "Terminale"},
    }


@pytest.fixture
def admin_record(hasher: PasswordHasher) -> dict:
    return {
        "user_id": "adm-1",
        "username": "root",
        "email": "admin@x.com",
        "role": "administrator",
        "password_hash": hasher.hash_password("letmein1"),
    }


@pytest.fixture
def populated_directory(
    directory: UserDirectory, teacher_record: dict, student_record: dict, admin_record: dict
) -> UserDirectory:
    for record in (teacher_record, student_record, admin_record):
        assert directory.add(record).success
    return directory


@pytest.fixture
def locker(clock: FrozenClock, logger: StructuredLogger) -> AccountLocker:
    return AccountLocker(clock=clock, logger=logger)


@pytest.fixture
def engine(
    populated_directory: UserDirectory,
    hasher: PasswordHasher,
    locker: AccountLocker,
    clock: FrozenClock,
    logger: StructuredLogger,
) -> AuthenticationEngine:
    return AuthenticationEngine(
        populated_directory,
        validator=CredentialValidator(clock=clock),
        hasher=hasher,
        locker=locker,
        clock=clock,
        logger=logger,
    )


@pytest.fixture
def session_manager(
    engine: AuthenticationEngine,
    populated_directory: UserDirectory,
    clock: FrozenClock,
    logger: StructuredLogger,
) -> SessionManager:
    return SessionManager(
        engine,
        populated_directory,
        session_timeout=timedelta(hours=1),
        clock=clock,
        logger=logger,
    )
