"""
Directory - User Directory Implementation

Annuaire des comptes au-dessus d'un stockage clé-valeur. Les comptes sont
conservés dans une table unique ; la session courante et autres
enregistrements nommés vivent sous leur propre clé.
"""

import uuid
from typing import Any, List, Optional

from ..core.clock import SystemClock
from ..core.interfaces import ErrorCode, IClock, Role
from ..logging import IStructuredLogger
from .backends import MemoryBackend, StorageBackendError
from .interfaces import IStorageBackend, IUserDirectory, StoreResult, UserId, UserRecord


class UserDirectory(IUserDirectory):
    """
    Annuaire utilisateurs.

    Invariants:
        - email unique
        - user_id, role, email et created_at figés après création

    Example:
        directory = UserDirectory(MemoryBackend())
        directory.add({"email": "a@x.com", "role": "teacher", ...})
        record = directory.find_by_email("a@x.com")
    """

    USERS_TABLE: str = "all_users"
    IMMUTABLE_FIELDS = ("user_id", "role", "email", "created_at")

    def __init__(
        self,
        backend: Optional[IStorageBackend] = None,
        prefix: str = "scolaris_",
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        """
        Args:
            backend: Stockage clé-valeur (défaut: mémoire)
            prefix: Préfixe des clés de stockage
            clock: Source de temps pour created_at
            logger: Logger structuré
        """
        self._backend = backend if backend is not None else MemoryBackend()
        self._prefix = prefix
        self._clock = clock or SystemClock()
        self._logger = logger

    def key_for(self, table: str) -> str:
        """Clé de stockage préfixée."""
        return f"{self._prefix}{table}"

    # ──────────────────────────────────────────────────────────────────────
    # Lecture
    # ──────────────────────────────────────────────────────────────────────

    def list_users(self) -> List[UserRecord]:
        return self._load_users()

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        if not email:
            return None
        for record in self._load_users():
            if record.get("email") == email:
                return record
        return None

    def find_by_id(self, user_id: UserId) -> Optional[UserRecord]:
        if user_id is None or user_id == "":
            return None
        for record in self._load_users():
            if self._same_id(record.get("user_id"), user_id):
                return record
        return None

    def find_by_role(self, role: Role) -> List[UserRecord]:
        parsed = Role.parse(role)
        if parsed is None:
            return []
        return [r for r in self._load_users() if Role.parse(r.get("role")) is parsed]

    # ──────────────────────────────────────────────────────────────────────
    # Écriture
    # ──────────────────────────────────────────────────────────────────────

    def add(self, record: UserRecord) -> StoreResult:
        users = self._load_users()
        email = record.get("email")

        if any(u.get("email") == email for u in users):
            return StoreResult(
                success=False,
                message="User with this email already exists",
                error=ErrorCode.DUPLICATE_USER,
            )

        new_record = dict(record)
        if not new_record.get("user_id"):
            new_record["user_id"] = self._generate_user_id()
        elif any(self._same_id(u.get("user_id"), new_record["user_id"]) for u in users):
            return StoreResult(
                success=False,
                message="User with this id already exists",
                error=ErrorCode.DUPLICATE_USER,
            )
        if not new_record.get("created_at"):
            new_record["created_at"] = self._clock.now().isoformat()

        users.append(new_record)
        if not self._save_users(users):
            return StoreResult(success=False, message="Failed to add user")

        return StoreResult(success=True, message="User added successfully", record=dict(new_record))

    def update(self, user_id: UserId, changes: UserRecord) -> StoreResult:
        users = self._load_users()
        index = self._index_of(users, user_id)

        if index is None:
            return StoreResult(success=False, message="User not found", error=ErrorCode.USER_NOT_FOUND)

        current = users[index]
        frozen = [
            f for f in self.IMMUTABLE_FIELDS
            if f in changes and changes[f] != current.get(f)
        ]
        if frozen and self._logger:
            self._logger.warn("Immutable fields ignored on update", user_id=str(user_id), fields=frozen)

        merged = dict(current)
        merged.update({k: v for k, v in changes.items() if k not in self.IMMUTABLE_FIELDS})
        users[index] = merged

        if not self._save_users(users):
            return StoreResult(success=False, message="Failed to update user")

        return StoreResult(success=True, message="User updated successfully", record=dict(merged))

    def delete(self, user_id: UserId) -> StoreResult:
        users = self._load_users()
        index = self._index_of(users, user_id)

        if index is None:
            return StoreResult(success=False, message="User not found", error=ErrorCode.USER_NOT_FOUND)

        del users[index]
        if not self._save_users(users):
            return StoreResult(success=False, message="Failed to delete user")

        return StoreResult(success=True, message="User deleted successfully")

    # ──────────────────────────────────────────────────────────────────────
    # Enregistrements nommés
    # ──────────────────────────────────────────────────────────────────────

    def save(self, key: str, data: Any) -> StoreResult:
        try:
            self._backend.put(self.key_for(key), data)
        except StorageBackendError as e:
            self._log_storage_error("save", key, e)
            return StoreResult(success=False, message="Failed to save data")
        return StoreResult(success=True, message="Data saved successfully")

    def load(self, key: str) -> Optional[Any]:
        try:
            return self._backend.get(self.key_for(key))
        except StorageBackendError as e:
            self._log_storage_error("load", key, e)
            return None

    def remove(self, key: str) -> StoreResult:
        try:
            self._backend.delete(self.key_for(key))
        except StorageBackendError as e:
            self._log_storage_error("remove", key, e)
            return StoreResult(success=False, message="Failed to delete data")
        return StoreResult(success=True, message="Data deleted successfully")

    # ──────────────────────────────────────────────────────────────────────
    # Interne
    # ──────────────────────────────────────────────────────────────────────

    def _load_users(self) -> List[UserRecord]:
        raw = self.load(self.USERS_TABLE)
        if not isinstance(raw, list):
            return []
        return [dict(r) for r in raw if isinstance(r, dict)]

    def _save_users(self, users: List[UserRecord]) -> bool:
        return self.save(self.USERS_TABLE, users).success

    def _index_of(self, users: List[UserRecord], user_id: UserId) -> Optional[int]:
        for i, record in enumerate(users):
            if self._same_id(record.get("user_id"), user_id):
                return i
        return None

    @staticmethod
    def _same_id(left: Any, right: Any) -> bool:
        # 7 et "7" désignent le même compte (identifiants JSON)
        if left is None or right is None:
            return False
        return str(left) == str(right)

    @staticmethod
    def _generate_user_id() -> str:
        return f"user_{uuid.uuid4().hex[:12]}"

    def _log_storage_error(self, operation: str, key: str, error: Exception) -> None:
        if self._logger:
            self._logger.error("Storage operation failed", operation=operation, key=key, error=str(error))
