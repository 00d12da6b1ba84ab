"""
Auth: Interfaces

Définit le modèle utilisateur (identité + profil de rôle), la session et
les contrats d'authentification et de gestion de session.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Dict, FrozenSet, List, Optional, Union

from ..core.interfaces import ErrorCode, Role
from ..directory.interfaces import UserId


class InvalidRoleError(Exception):
    """Rôle inconnu à la construction d'un compte (contrat appelant rompu)."""

    def __init__(self, role: Any) -> None:
        self.role = role
        super().__init__(f"Invalid user role: {role}")


# ══════════════════════════════════════════════════════════════════════════════
# MODÈLE UTILISATEUR
# ══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Identity:
    """
    Noyau invariant d'un utilisateur.

    Attributes:
        user_id: Identifiant unique
        username: Nom de connexion
        email: Email (unique, figé)
        role: Rôle (figé)
        password_hash: Empreinte salée du mot de passe (opaque)
        display_name: Nom affiché
        created_at: Horodatage de création
    """

    user_id: UserId
    username: str
    email: str
    role: Role
    password_hash: str = field(repr=False)
    display_name: str = ""
    created_at: Optional[datetime] = None


@dataclass
class ProfileDetails:
    """Attributs de profil modifiables."""

    phone: str = ""
    school_name: str = ""
    dob: Optional[str] = None
    profile_image: Optional[str] = None


MUTABLE_PROFILE_FIELDS = ("phone", "school_name", "dob", "profile_image")


@dataclass
class AdminProfile:
    """Extension administrateur."""

    role: ClassVar[Role] = Role.ADMINISTRATOR

    managed_users: List[UserId] = field(default_factory=list)
    system_config: Dict[str, Any] = field(default_factory=dict)


@dataclass
class TeacherProfile:
    """Extension enseignant."""

    role: ClassVar[Role] = Role.TEACHER

    assigned_classes: List[Dict[str, Any]] = field(default_factory=list)
    assignments: List[Dict[str, Any]] = field(default_factory=list)
    subject: str = ""
    department: str = ""


@dataclass
class StudentProfile:
    """Extension élève."""

    role: ClassVar[Role] = Role.STUDENT

    enrolled_classes: List[Dict[str, Any]] = field(default_factory=list)
    submissions: List[Dict[str, Any]] = field(default_factory=list)
    grades: Dict[str, float] = field(default_factory=dict)
    guardian_info: Dict[str, Any] = field(default_factory=dict)
    student_number: str = ""
    grade_level: str = ""


RoleProfile = Union[AdminProfile, TeacherProfile, StudentProfile]

PROFILE_TYPES: Dict[Role, type] = {
    Role.ADMINISTRATOR: AdminProfile,
    Role.TEACHER: TeacherProfile,
    Role.STUDENT: StudentProfile,
}


@dataclass
class UserAccount:
    """
    Compte typé par rôle : identité + détails + profil de rôle.

    Le variant de profil correspond toujours au rôle de l'identité ;
    il est choisi à la construction et ne change plus.

    Raises:
        InvalidRoleError: Rôle inconnu ou profil ne correspondant pas au rôle
    """

    identity: Identity
    profile: RoleProfile
    details: ProfileDetails = field(default_factory=ProfileDetails)

    def __post_init__(self) -> None:
        expected = PROFILE_TYPES.get(self.identity.role)
        if expected is None:
            raise InvalidRoleError(self.identity.role)
        if type(self.profile) is not expected:
            raise InvalidRoleError(
                f"{self.identity.role.value} (profil {type(self.profile).__name__})"
            )

    @property
    def user_id(self) -> UserId:
        return self.identity.user_id

    @property
    def role(self) -> Role:
        return self.identity.role

    @property
    def email(self) -> str:
        return self.identity.email

    @property
    def username(self) -> str:
        return self.identity.username

    @property
    def display_name(self) -> str:
        return self.identity.display_name or self.identity.username


# ══════════════════════════════════════════════════════════════════════════════
# SESSION
# ══════════════════════════════════════════════════════════════════════════════


@dataclass
class Session:
    """
    Session utilisateur.

    Invariant:
        expires_at = last_activity + durée de session après tout
        renouvellement ; expires_at <= now signifie session absente.
    """

    session_id: str
    user_id: UserId
    role: Role
    created_at: datetime
    last_activity: datetime
    expires_at: datetime
    username: str = ""
    email: str = ""
    display_name: str = ""

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at <= now

    def to_record(self) -> Dict[str, Any]:
        """Sérialise pour le stockage (dates ISO 8601)."""
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "role": self.role.value,
            "created_at": self.created_at.isoformat(),
            "last_activity": self.last_activity.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "username": self.username,
            "email": self.email,
            "display_name": self.display_name,
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "Session":
        """
        Reconstruit une session stockée.

        Raises:
            ValueError: Enregistrement incomplet ou illisible
        """
        if not isinstance(record, dict):
            raise ValueError("Session record must be a mapping")

        role = Role.parse(record.get("role"))
        if role is None:
            raise ValueError(f"Unknown session role: {record.get('role')}")

        try:
            return cls(
                session_id=str(record["session_id"]),
                user_id=record["user_id"],
                role=role,
                created_at=datetime.fromisoformat(record["created_at"]),
                last_activity=datetime.fromisoformat(record["last_activity"]),
                expires_at=datetime.fromisoformat(record["expires_at"]),
                username=record.get("username", ""),
                email=record.get("email", ""),
                display_name=record.get("display_name", ""),
            )
        except (KeyError, TypeError) as e:
            raise ValueError(f"Malformed session record: {e}")


# ══════════════════════════════════════════════════════════════════════════════
# RÉSULTATS
# ══════════════════════════════════════════════════════════════════════════════


@dataclass
class AuthResult:
    """
    Résultat d'une tentative de connexion.

    Attributes:
        success: True si authentifié
        message: Message lisible
        error: Code d'échec
        reasons: Détails (erreurs de format)
        account: Compte typé (succès)
        permissions: Capacités du rôle (succès)
        redirect_to: Tableau de bord du rôle (succès)
        remaining_minutes: Minutes de verrouillage restantes (LOCKED)
        timestamp: Instant du résultat
    """

    success: bool
    message: str
    error: Optional[ErrorCode] = None
    reasons: List[str] = field(default_factory=list)
    account: Optional[UserAccount] = None
    permissions: FrozenSet[str] = frozenset()
    redirect_to: Optional[str] = None
    remaining_minutes: Optional[int] = None
    timestamp: Optional[datetime] = None

    @property
    def locked(self) -> bool:
        return self.error is ErrorCode.LOCKED


@dataclass
class OperationResult:
    """Résultat générique (mot de passe, déconnexion, destruction de session)."""

    success: bool
    message: str
    error: Optional[ErrorCode] = None
    reasons: List[str] = field(default_factory=list)


@dataclass
class SessionVerification:
    """Re-vérification d'une session auprès de l'annuaire."""

    valid: bool
    message: str
    account: Optional[UserAccount] = None


@dataclass
class SessionValidation:
    """Résultat de validate_session."""

    valid: bool
    message: str
    reason: Optional[ErrorCode] = None
    session: Optional[Session] = None


@dataclass
class SessionResult:
    """Résultat d'une modification de session (activité, prolongation, profil)."""

    success: bool
    message: str
    session: Optional[Session] = None
    error: Optional[ErrorCode] = None


@dataclass
class SessionExpiry:
    """Temps restant avant expiration."""

    expired: bool
    minutes: int
    seconds: int
    message: str


@dataclass(frozen=True)
class AuthorizationResult:
    """Contrôle d'une capacité pour un rôle."""

    allowed: bool
    role: Optional[Role]
    capability: str
    reason: str

    @property
    def error(self) -> Optional[ErrorCode]:
        return None if self.allowed else ErrorCode.AUTHORIZATION_DENIED


@dataclass
class ActionResult:
    """Résultat d'une action métier liée au rôle."""

    success: bool
    action: str
    message: str
    error: Optional[ErrorCode] = None
    data: Dict[str, Any] = field(default_factory=dict)
    performed_by: Optional[UserId] = None
    timestamp: Optional[datetime] = None


# ══════════════════════════════════════════════════════════════════════════════
# INTERFACES
# ══════════════════════════════════════════════════════════════════════════════


class IAuthenticationEngine(ABC):
    """Interface authentification."""

    @abstractmethod
    def authenticate(self, email: str, password: str, claimed_role: Any) -> AuthResult:
        """
        Vérifie des identifiants.

        Ordre: format → verrouillage → annuaire → rôle → mot de passe.
        """
        pass

    @abstractmethod
    def verify_session(self, session: Optional[Session]) -> SessionVerification:
        """Vérifie que l'utilisateur de la session existe toujours."""
        pass

    @abstractmethod
    def change_password(self, user_id: UserId, old_password: str, new_password: str) -> OperationResult:
        """Change le mot de passe après vérification de l'ancien."""
        pass

    @abstractmethod
    def reset_password(self, email: str, new_password: str) -> OperationResult:
        """Réinitialise le mot de passe (action administrateur)."""
        pass


class ISessionManager(ABC):
    """
    Interface gestion de la session courante.

    États: ABSENT, ACTIVE, EXPIRED, DESTROYED (DESTROYED ≡ ABSENT).
    """

    @abstractmethod
    def create_session(self, account: UserAccount) -> Session:
        """Crée, persiste et met en cache une nouvelle session."""
        pass

    @abstractmethod
    def get_current_session(self) -> Optional[Session]:
        """Session courante non expirée, sinon None."""
        pass

    @abstractmethod
    def validate_session(self) -> SessionValidation:
        """Valide, re-vérifie et renouvelle la session courante."""
        pass

    @abstractmethod
    def destroy_session(self) -> OperationResult:
        """Supprime la session (idempotent)."""
        pass

    @abstractmethod
    def extend_session(self, additional_minutes: int) -> SessionResult:
        """Recalcule l'expiration à now + durée de base + minutes."""
        pass
