"""
SCOLARIS - Bootstrap

Assemblage explicite des services à partir de la configuration.

Ordre de construction:
    horloge → logger → annuaire → validation → hachage → verrouillage
    → moteur d'authentification → gestionnaire de session → inscription
"""

from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Callable, Optional, Union

from .auth import AuthenticationEngine, PermissionModel, RoleActions, SessionManager
from .core import AuthSettings, ConfigLoader, IClock, PasswordHasher, SystemClock
from .directory import IStorageBackend, MemoryBackend, UserDirectory
from .incident import AccountLocker
from .logging import LogConfig, StructuredLogger, parse_level
from .registration import RegistrationService
from .validation import CredentialValidator


@dataclass
class Services:
    """Services assemblés, partageant horloge, annuaire et logger."""

    settings: AuthSettings
    clock: IClock
    logger: StructuredLogger
    directory: UserDirectory
    validator: CredentialValidator
    hasher: PasswordHasher
    locker: AccountLocker
    permissions: PermissionModel
    engine: AuthenticationEngine
    sessions: SessionManager
    registration: RegistrationService
    actions: RoleActions


def build_services(
    config_path: Optional[Union[str, Path]] = None,
    settings: Optional[AuthSettings] = None,
    backend: Optional[IStorageBackend] = None,
    clock: Optional[IClock] = None,
    output_handler: Optional[Callable[[str], None]] = None,
) -> Services:
    """
    Construit l'ensemble des services.

    Args:
        config_path: Fichier YAML (ignoré si settings est fourni)
        settings: Paramètres déjà chargés
        backend: Stockage (défaut: mémoire)
        clock: Source de temps (défaut: horloge système)
        output_handler: Sortie des lignes de log JSON

    Raises:
        ConfigIntegrityError: Configuration absente ou invalide
    """
    if settings is None:
        settings = ConfigLoader(config_path).load() if config_path is not None else AuthSettings()

    clock = clock or SystemClock()
    logger = StructuredLogger(
        "scolaris",
        config=LogConfig(min_level=parse_level(settings.log_level)),
        output_handler=output_handler,
        clock=clock,
    )

    directory = UserDirectory(
        backend if backend is not None else MemoryBackend(),
        prefix=settings.storage_prefix,
        clock=clock,
        logger=logger,
    )
    validator = CredentialValidator(password_min_length=settings.password_min_length, clock=clock)
    hasher = PasswordHasher(iterations=settings.hash_iterations)
    locker = AccountLocker(
        max_attempts=settings.max_login_attempts,
        lockout_window=timedelta(minutes=settings.lockout_minutes),
        clock=clock,
        logger=logger,
    )
    permissions = PermissionModel()

    engine = AuthenticationEngine(
        directory,
        validator=validator,
        hasher=hasher,
        locker=locker,
        permissions=permissions,
        clock=clock,
        logger=logger,
    )
    sessions = SessionManager(
        engine,
        directory,
        session_timeout=timedelta(minutes=settings.session_timeout_minutes),
        session_key=settings.session_record_key,
        clock=clock,
        logger=logger,
    )
    registration = RegistrationService(
        directory,
        validator=validator,
        hasher=hasher,
        permissions=permissions,
        clock=clock,
        logger=logger,
    )

    return Services(
        settings=settings,
        clock=clock,
        logger=logger,
        directory=directory,
        validator=validator,
        hasher=hasher,
        locker=locker,
        permissions=permissions,
        engine=engine,
        sessions=sessions,
        registration=registration,
        actions=RoleActions(permissions, clock=clock, logger=logger),
    )
