"""
Auth: Role Actions

Cas d'usage métier propres à chaque rôle, répartis par table sur le rôle
du compte. Chaque action vérifie sa capacité avant toute modification.

Actions:
    administrator: manage_users, manage_data, configure_system,
                   view_reports, manage_class_members
    teacher:       view_data, update_data, submit_data,
                   manage_assignments, view_reports
    student:       view_profile, submit_form, view_status, view_classes
"""

import inspect
import uuid
from typing import Any, Callable, Dict, Iterable, Optional

from ..core.clock import SystemClock
from ..core.interfaces import ErrorCode, IClock, Role
from ..logging import IStructuredLogger
from .accounts import public_view
from .interfaces import (
    ActionResult,
    StudentProfile,
    TeacherProfile,
    UserAccount,
)
from .permissions import PermissionModel


class RoleActionError(Exception):
    """Profil incompatible avec l'opération demandée."""

    pass


CLASS_MEMBER_ACTIONS = ("add_teacher", "remove_teacher", "add_student", "remove_student")

GOOD_STANDING_THRESHOLD = 70


class RoleActions:
    """
    Répartiteur des actions par rôle.

    Example:
        actions = RoleActions(clock=FrozenClock())
        result = actions.perform(teacher, "submit_data",
                                 submission_type="grades", submission_data={...})
    """

    def __init__(
        self,
        permissions: Optional[PermissionModel] = None,
        clock: Optional[IClock] = None,
        logger: Optional[IStructuredLogger] = None,
    ) -> None:
        self._permissions = permissions or PermissionModel()
        self._clock = clock or SystemClock()
        self._logger = logger

        self._table: Dict[Role, Dict[str, Callable[..., ActionResult]]] = {
            Role.ADMINISTRATOR: {
                "manage_users": self._admin_manage_users,
                "manage_data": self._admin_manage_data,
                "configure_system": self._admin_configure_system,
                "view_reports": self._view_reports,
                "manage_class_members": self._admin_manage_class_members,
            },
            Role.TEACHER: {
                "view_data": self._teacher_view_data,
                "update_data": self._teacher_update_data,
                "submit_data": self._teacher_submit_data,
                "manage_assignments": self._teacher_manage_assignments,
                "view_reports": self._view_reports,
            },
            Role.STUDENT: {
                "view_profile": self._student_view_profile,
                "submit_form": self._student_submit_form,
                "view_status": self._student_view_status,
                "view_classes": self._student_view_classes,
            },
        }

    def available_actions(self, role: Any) -> Iterable[str]:
        parsed = Role.parse(role)
        if parsed is None:
            return ()
        return tuple(self._table[parsed].keys())

    def perform(self, account: UserAccount, name: str, **params: Any) -> ActionResult:
        """
        Exécute une action pour le compte.

        Returns:
            ActionResult ; AUTHORIZATION_DENIED si l'action n'existe pas
            pour ce rôle ou si la capacité manque, INVALID_FORMAT si les
            paramètres ne correspondent pas à l'action
        """
        handler = self._table[account.role].get(name)
        if handler is None:
            return self._denied(
                account, name, f"{account.role.title} cannot perform action {name}"
            )
        try:
            inspect.signature(handler).bind(account, **params)
        except TypeError as e:
            return self._invalid(account, name, str(e))
        return handler(account, **params)

    # ──────────────────────────────────────────────────────────────────────
    # Administrateur
    # ──────────────────────────────────────────────────────────────────────

    def _admin_manage_users(
        self, account: UserAccount, action: str = "view", user_data: Optional[Dict[str, Any]] = None
    ) -> ActionResult:
        denied = self._require(account, "manage_users", "manage_users")
        if denied:
            return denied
        return self._ok(account, "manage_users", f"User action {action} accepted", {
            "user_action": action,
            "user_data": user_data,
        })

    def _admin_manage_data(
        self,
        account: UserAccount,
        data_type: str = "",
        operation: str = "read",
        data: Any = None,
    ) -> ActionResult:
        denied = self._require(account, "manage_data", "manage_data")
        if denied:
            return denied
        return self._ok(account, "manage_data", f"{operation} on {data_type} accepted", {
            "data_type": data_type,
            "operation": operation,
            "data": data,
        })

    def _admin_configure_system(self, account: UserAccount, key: str = "", value: Any = None) -> ActionResult:
        denied = self._require(account, "configure_system", "configure_system")
        if denied:
            return denied

        account.profile.system_config[key] = value
        if self._logger:
            self._logger.info("System configuration changed", user_id=str(account.user_id), config_key=key)

        return self._ok(account, "configure_system", f"Configuration {key} updated", {
            "config_key": key,
            "config_value": value,
        })

    def _admin_manage_class_members(
        self,
        account: UserAccount,
        class_id: Any = None,
        action: str = "",
        user_id: Any = None,
    ) -> ActionResult:
        denied = self._require(
            account, "manage_classes", "manage_class_members",
            "Insufficient permissions to manage class members",
        )
        if denied:
            return denied

        if action not in CLASS_MEMBER_ACTIONS:
            return ActionResult(
                success=False,
                action="manage_class_members",
                message="Invalid action specified",
                performed_by=account.user_id,
                timestamp=self._clock.now(),
            )

        return self._ok(
            account,
            "manage_class_members",
            f"Successfully performed {action} for user {user_id} in class {class_id}",
            {"class_id": class_id, "member_action": action, "user_id": user_id},
        )

    # ──────────────────────────────────────────────────────────────────────
    # Enseignant
    # ──────────────────────────────────────────────────────────────────────

    def _teacher_view_data(self, account: UserAccount, data_type: str = "classes") -> ActionResult:
        denied = self._require_any(account, ("view_assigned_classes", "view_students"), "view_data")
        if denied:
            return denied
        return self._ok(account, "view_data", f"Viewing {data_type}", {
            "data_type": data_type,
            "assigned_classes": list(account.profile.assigned_classes),
        })

    def _teacher_update_data(
        self, account: UserAccount, record_type: str = "", record_data: Any = None
    ) -> ActionResult:
        denied = self._require(account, "update_records", "update_data")
        if denied:
            return denied
        return self._ok(account, "update_data", f"{record_type} record updated", {
            "record_type": record_type,
            "record_data": record_data,
        })

    def _teacher_submit_data(
        self, account: UserAccount, submission_type: str = "", submission_data: Any = None
    ) -> ActionResult:
        required = {"assignment": "create_assignment", "grades": "submit_grades"}.get(submission_type)
        if required:
            denied = self._require(account, required, "submit_data")
            if denied:
                return denied
        return self._ok(account, "submit_data", f"{submission_type} submitted", {
            "submission_type": submission_type,
            "submission_data": submission_data,
        })

    def _teacher_manage_assignments(
        self, account: UserAccount, action: str = "create", assignment_data: Optional[Dict[str, Any]] = None
    ) -> ActionResult:
        denied = self._require_any(account, (f"{action}_assignment", "manage_assignments"), "manage_assignments")
        if denied:
            return denied

        if action == "create":
            account.profile.assignments.append(dict(assignment_data or {}))

        return self._ok(account, "manage_assignments", f"Assignment {action} accepted", {
            "assignment_action": action,
            "assignment_data": assignment_data,
            "assignments_count": len(account.profile.assignments),
        })

    # ──────────────────────────────────────────────────────────────────────
    # Élève
    # ──────────────────────────────────────────────────────────────────────

    def _student_view_profile(self, account: UserAccount) -> ActionResult:
        denied = self._require(account, "view_profile", "view_profile")
        if denied:
            return denied
        profile = public_view(account)
        profile["academic_status"] = academic_status(account.profile)
        return self._ok(account, "view_profile", "Profile loaded", {"profile": profile})

    def _student_submit_form(
        self, account: UserAccount, submission_type: str = "assignment", data: Any = None
    ) -> ActionResult:
        denied = self._require(account, "submit_assignments", "submit_form")
        if denied:
            return denied

        submission = {
            "id": uuid.uuid4().hex,
            "type": submission_type,
            "data": data,
            "student_id": account.user_id,
            "submitted_at": self._clock.now().isoformat(),
            "status": "submitted",
        }
        account.profile.submissions.append(submission)

        return self._ok(account, "submit_form", "Submission successful", {"submission": submission})

    def _student_view_status(self, account: UserAccount, status_type: str = "summary") -> ActionResult:
        denied = self._require_any(account, ("view_status", "view_grades"), "view_status")
        if denied:
            return denied

        profile: StudentProfile = account.profile
        if status_type == "grades":
            status_data: Any = dict(profile.grades)
        elif status_type == "submissions":
            status_data = list(profile.submissions)
        elif status_type == "enrollment":
            status_data = {
                "enrolled_classes": list(profile.enrolled_classes),
                "total_classes": len(profile.enrolled_classes),
            }
        else:
            status_data = {
                "grades": dict(profile.grades),
                "submissions": len(profile.submissions),
                "enrolled_classes": len(profile.enrolled_classes),
            }

        return self._ok(account, "view_status", f"Status {status_type}", {
            "status_type": status_type,
            "status_data": status_data,
        })

    def _student_view_classes(self, account: UserAccount) -> ActionResult:
        denied = self._require(account, "view_enrolled_classes", "view_classes")
        if denied:
            return denied
        classes = list(account.profile.enrolled_classes)
        return self._ok(account, "view_classes", "Enrolled classes", {
            "classes": classes,
            "total_classes": len(classes),
        })

    # ──────────────────────────────────────────────────────────────────────
    # Partagé
    # ──────────────────────────────────────────────────────────────────────

    def _view_reports(self, account: UserAccount, report_type: str = "summary") -> ActionResult:
        denied = self._require(account, "view_reports", "view_reports")
        if denied:
            return denied
        return self._ok(account, "view_reports", f"Report {report_type}", {"report_type": report_type})

    def _require(
        self, account: UserAccount, capability: str, action: str, message: Optional[str] = None
    ) -> Optional[ActionResult]:
        result = self._permissions.authorize(account.role, capability)
        if result.allowed:
            return None
        return self._denied(account, action, message or result.reason)

    def _require_any(self, account: UserAccount, capabilities: Iterable[str], action: str) -> Optional[ActionResult]:
        result = self._permissions.authorize_any(account.role, capabilities)
        if result.allowed:
            return None
        return self._denied(account, action, result.reason)

    def _denied(self, account: UserAccount, action: str, reason: str) -> ActionResult:
        if self._logger:
            self._logger.warn(
                "Action denied",
                user_id=str(account.user_id),
                role=account.role.value,
                action=action,
            )
        return ActionResult(
            success=False,
            action=action,
            message=reason,
            error=ErrorCode.AUTHORIZATION_DENIED,
            performed_by=account.user_id,
            timestamp=self._clock.now(),
        )

    def _invalid(self, account: UserAccount, action: str, detail: str) -> ActionResult:
        if self._logger:
            self._logger.warn("Action rejected", user_id=str(account.user_id), action=action, detail=detail)
        return ActionResult(
            success=False,
            action=action,
            message=f"Invalid parameters for action {action}",
            error=ErrorCode.INVALID_FORMAT,
            performed_by=account.user_id,
            timestamp=self._clock.now(),
        )

    def _ok(self, account: UserAccount, action: str, message: str, data: Dict[str, Any]) -> ActionResult:
        return ActionResult(
            success=True,
            action=action,
            message=message,
            data=data,
            performed_by=account.user_id,
            timestamp=self._clock.now(),
        )


# ══════════════════════════════════════════════════════════════════════════════
# AIDES DE PROFIL
# ══════════════════════════════════════════════════════════════════════════════


def assign_class(profile: TeacherProfile, class_data: Dict[str, Any]) -> None:
    """Ajoute une classe aux classes de l'enseignant."""
    if not isinstance(profile, TeacherProfile):
        raise RoleActionError("assign_class requires a teacher profile")
    profile.assigned_classes.append(dict(class_data))


def enroll_in_class(profile: StudentProfile, class_data: Dict[str, Any]) -> bool:
    """
    Inscrit l'élève à une classe (idempotent par identifiant de classe).

    Returns:
        True si l'inscription est nouvelle
    """
    if not isinstance(profile, StudentProfile):
        raise RoleActionError("enroll_in_class requires a student profile")
    class_id = class_data.get("id")
    if any(c.get("id") == class_id for c in profile.enrolled_classes):
        return False
    profile.enrolled_classes.append(dict(class_data))
    return True


def add_grade(profile: StudentProfile, subject: str, grade: float) -> None:
    if not isinstance(profile, StudentProfile):
        raise RoleActionError("add_grade requires a student profile")
    profile.grades[subject] = grade


def academic_status(profile: StudentProfile) -> Dict[str, Any]:
    """Synthèse : moyenne, nombre de matières, statut."""
    if not isinstance(profile, StudentProfile):
        raise RoleActionError("academic_status requires a student profile")

    values = list(profile.grades.values())
    average = sum(values) / len(values) if values else 0

    return {
        "average_grade": average,
        "total_subjects": len(profile.grades),
        "enrolled_classes": len(profile.enrolled_classes),
        "total_submissions": len(profile.submissions),
        "status": "Good Standing" if average >= GOOD_STANDING_THRESHOLD else "Needs Attention",
    }
