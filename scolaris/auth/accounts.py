"""
Auth: construction des comptes

Conversion entre enregistrements d'annuaire (dictionnaires JSON) et
comptes typés par rôle. Le variant de profil est choisi par table.
"""

from dataclasses import asdict, fields
from datetime import datetime
from typing import Any, Dict

from ..core.interfaces import Role
from ..directory.interfaces import UserRecord
from .interfaces import (
    MUTABLE_PROFILE_FIELDS,
    PROFILE_TYPES,
    Identity,
    InvalidRoleError,
    ProfileDetails,
    UserAccount,
)


def build_account(record: UserRecord) -> UserAccount:
    """
    Construit un compte typé depuis un enregistrement.

    Args:
        record: Enregistrement d'annuaire

    Returns:
        UserAccount avec le profil correspondant au rôle

    Raises:
        InvalidRoleError: Rôle absent ou inconnu
    """
    role = Role.parse(record.get("role"))
    if role is None:
        raise InvalidRoleError(record.get("role"))

    username = record.get("username") or ""
    identity = Identity(
        user_id=record.get("user_id"),
        username=username,
        email=record.get("email") or "",
        role=role,
        password_hash=record.get("password_hash") or "",
        display_name=record.get("display_name") or username,
        created_at=_parse_timestamp(record.get("created_at")),
    )

    details = ProfileDetails(**{
        name: record[name] for name in MUTABLE_PROFILE_FIELDS if record.get(name) is not None
    })

    profile_type = PROFILE_TYPES[role]
    profile_data = record.get("profile") or {}
    known = {f.name for f in fields(profile_type)}
    profile = profile_type(**{k: v for k, v in profile_data.items() if k in known})

    return UserAccount(identity=identity, profile=profile, details=details)


def account_to_record(account: UserAccount) -> UserRecord:
    """Sérialise un compte pour l'annuaire (inverse de build_account)."""
    identity = account.identity
    record: Dict[str, Any] = {
        "user_id": identity.user_id,
        "username": identity.username,
        "email": identity.email,
        "role": identity.role.value,
        "password_hash": identity.password_hash,
        "display_name": identity.display_name,
    }
    if identity.created_at is not None:
        record["created_at"] = identity.created_at.isoformat()

    record.update(asdict(account.details))
    record["profile"] = asdict(account.profile)
    return record


def public_view(account: UserAccount) -> Dict[str, Any]:
    """Vue publique du compte, sans empreinte de mot de passe."""
    record = account_to_record(account)
    record.pop("password_hash", None)
    return record


def _parse_timestamp(value: Any) -> Any:
    if isinstance(value, datetime) or value is None:
        return value
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None
