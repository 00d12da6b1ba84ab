"""
Auth: authentification, permissions et sessions

Modèle utilisateur typé par rôle, protocole de connexion avec
verrouillage, cycle de vie de la session.
"""

from .interfaces import (
    PROFILE_TYPES,
    ActionResult,
    AdminProfile,
    AuthorizationResult,
    AuthResult,
    IAuthenticationEngine,
    Identity,
    InvalidRoleError,
    ISessionManager,
    OperationResult,
    ProfileDetails,
    RoleProfile,
    Session,
    SessionExpiry,
    SessionResult,
    SessionValidation,
    SessionVerification,
    StudentProfile,
    TeacherProfile,
    UserAccount,
)
from .accounts import account_to_record, build_account, public_view
from .permissions import PermissionModel, permissions_for, redirect_target
from .role_actions import (
    RoleActionError,
    RoleActions,
    academic_status,
    add_grade,
    assign_class,
    enroll_in_class,
)
from .authentication_engine import AuthenticationEngine
from .session_manager import SessionManager, SessionManagerError

__all__ = [
    # Interfaces
    "IAuthenticationEngine",
    "ISessionManager",
    # Data classes
    "Identity",
    "ProfileDetails",
    "AdminProfile",
    "TeacherProfile",
    "StudentProfile",
    "RoleProfile",
    "PROFILE_TYPES",
    "UserAccount",
    "Session",
    "AuthResult",
    "OperationResult",
    "SessionVerification",
    "SessionValidation",
    "SessionResult",
    "SessionExpiry",
    "AuthorizationResult",
    "ActionResult",
    # Implementations
    "PermissionModel",
    "permissions_for",
    "redirect_target",
    "build_account",
    "account_to_record",
    "public_view",
    "RoleActions",
    "assign_class",
    "enroll_in_class",
    "add_grade",
    "academic_status",
    "AuthenticationEngine",
    "SessionManager",
    # Exceptions
    "InvalidRoleError",
    "RoleActionError",
    "SessionManagerError",
]
