"""
Tests unitaires pour PermissionModel.

Vérifie:
    - Table de capacités fixe par rôle
    - Refus = résultat AUTHORIZATION_DENIED, jamais une exception
    - Redirection vers le tableau de bord du rôle
"""

import pytest

from scolaris.auth import PermissionModel, permissions_for, redirect_target
from scolaris.core import ErrorCode, Role


@pytest.fixture
def model() -> PermissionModel:
    return PermissionModel()


class TestPermissionsFor:
    """Tests de la table des capacités."""

    def test_teacher_can_submit_grades(self, model: PermissionModel) -> None:
        """Enseignant: submit_grades présent."""
        assert "submit_grades" in model.permissions_for(Role.TEACHER)

    def test_administrator_has_full_access(self, model: PermissionModel) -> None:
        perms = model.permissions_for(Role.ADMINISTRATOR)
        assert "full_access" in perms
        assert len(perms) == 12

    def test_student_permissions(self, model: PermissionModel) -> None:
        perms = model.permissions_for(Role.STUDENT)
        assert perms == frozenset({
            "view_profile",
            "view_enrolled_classes",
            "submit_assignments",
            "view_grades",
            "view_status",
            "view_announcements",
            "update_profile",
            "view_schedule",
        })

    def test_deterministic(self, model: PermissionModel) -> None:
        """Même rôle, même ensemble."""
        assert model.permissions_for(Role.TEACHER) == model.permissions_for(Role.TEACHER)
        assert model.permissions_for("teacher") == PermissionModel().permissions_for(Role.TEACHER)

    def test_result_is_frozen(self, model: PermissionModel) -> None:
        assert isinstance(model.permissions_for(Role.STUDENT), frozenset)

    def test_admin_alias_accepted(self, model: PermissionModel) -> None:
        assert model.permissions_for("admin") == model.permissions_for(Role.ADMINISTRATOR)

    def test_unknown_role_has_no_permissions(self, model: PermissionModel) -> None:
        assert model.permissions_for("janitor") == frozenset()

    def test_only_intentional_sharing(self, model: PermissionModel) -> None:
        """Seules view_reports et manage_assignments sont partagées."""
        assert model.shared_capabilities() == frozenset({"view_reports", "manage_assignments"})

    def test_student_shares_nothing(self, model: PermissionModel) -> None:
        student = model.permissions_for(Role.STUDENT)
        others = model.permissions_for(Role.TEACHER) | model.permissions_for(Role.ADMINISTRATOR)
        assert student.isdisjoint(others)

    def test_module_shortcut(self) -> None:
        assert "manage_users" in permissions_for(Role.ADMINISTRATOR)


class TestAuthorize:
    """Tests du contrôle d'autorisation."""

    def test_allowed(self, model: PermissionModel) -> None:
        result = model.authorize(Role.TEACHER, "submit_grades")
        assert result.allowed is True
        assert result.error is None

    def test_denied_carries_reason(self, model: PermissionModel) -> None:
        """Refus avec raison lisible."""
        result = model.authorize(Role.STUDENT, "manage_users")

        assert result.allowed is False
        assert result.error is ErrorCode.AUTHORIZATION_DENIED
        assert "Student" in result.reason
        assert "manage users" in result.reason

    def test_unknown_role_denied(self, model: PermissionModel) -> None:
        result = model.authorize("ghost", "view_profile")
        assert result.allowed is False
        assert result.role is None

    def test_authorize_any(self, model: PermissionModel) -> None:
        result = model.authorize_any(Role.TEACHER, ["view_assigned_classes", "view_students"])
        assert result.allowed is True
        assert result.capability == "view_assigned_classes"

    def test_authorize_any_denied(self, model: PermissionModel) -> None:
        result = model.authorize_any(Role.STUDENT, ["manage_users", "full_access"])
        assert result.allowed is False
        assert result.error is ErrorCode.AUTHORIZATION_DENIED


class TestRedirectTarget:
    """Tests des routes de tableau de bord."""

    @pytest.mark.parametrize(
        "role,expected",
        [
            (Role.ADMINISTRATOR, "/admin"),
            (Role.TEACHER, "/teacher"),
            (Role.STUDENT, "/student"),
            ("admin", "/admin"),
            ("unknown", "/"),
            (None, "/"),
        ],
    )
    def test_routes(self, model: PermissionModel, role, expected: str) -> None:
        assert model.redirect_target(role) == expected

    def test_module_shortcut(self) -> None:
        assert redirect_target("teacher") == "/teacher"

    def test_role_for_route(self, model: PermissionModel) -> None:
        assert model.role_for_route("/student") is Role.STUDENT
        assert model.role_for_route("/nowhere") is None
