"""
Auth: Permission Model

Table fixe des capacités par rôle et contrôle d'autorisation.

Règles:
    - Toute action liée à un rôle vérifie l'appartenance de la capacité
    - Un refus est un résultat AUTHORIZATION_DENIED, jamais une exception
"""

from collections import Counter
from typing import Any, Dict, FrozenSet, Iterable, Optional

from ..core.interfaces import Role
from .interfaces import AuthorizationResult


class PermissionModel:
    """
    Modèle de permissions par rôle.

    Fonction pure : même rôle, même ensemble de capacités.

    Example:
        model = PermissionModel()
        assert "submit_grades" in model.permissions_for(Role.TEACHER)
        result = model.authorize(Role.STUDENT, "manage_users")
    """

    ROLE_PERMISSIONS: Dict[Role, FrozenSet[str]] = {
        Role.ADMINISTRATOR: frozenset({
            "manage_users",
            "create_user",
            "update_user",
            "delete_user",
            "manage_data",
            "view_all_data",
            "configure_system",
            "view_reports",
            "manage_schools",
            "manage_classes",
            "manage_assignments",
            "full_access",
        }),
        Role.TEACHER: frozenset({
            "view_assigned_classes",
            "manage_assignments",
            "create_assignment",
            "update_assignment",
            "delete_assignment",
            "view_students",
            "submit_grades",
            "update_records",
            "view_reports",
            "manage_class_content",
        }),
        Role.STUDENT: frozenset({
            "view_profile",
            "view_enrolled_classes",
            "submit_assignments",
            "view_grades",
            "view_status",
            "view_announcements",
            "update_profile",
            "view_schedule",
        }),
    }

    DASHBOARD_ROUTES: Dict[Role, str] = {
        Role.ADMINISTRATOR: "/admin",
        Role.TEACHER: "/teacher",
        Role.STUDENT: "/student",
    }

    DEFAULT_ROUTE: str = "/"

    def permissions_for(self, role: Any) -> FrozenSet[str]:
        """
        Capacités d'un rôle.

        Returns:
            Ensemble figé, vide pour un rôle inconnu
        """
        parsed = Role.parse(role)
        if parsed is None:
            return frozenset()
        return self.ROLE_PERMISSIONS[parsed]

    def has_permission(self, role: Any, capability: str) -> bool:
        return capability in self.permissions_for(role)

    def authorize(self, role: Any, capability: str) -> AuthorizationResult:
        """
        Contrôle une capacité.

        Args:
            role: Rôle de l'acteur
            capability: Capacité demandée (ex: "submit_grades")

        Returns:
            AuthorizationResult avec raison lisible
        """
        parsed = Role.parse(role)
        if parsed is None:
            return AuthorizationResult(
                allowed=False,
                role=None,
                capability=capability,
                reason=f"Unknown role: {role}",
            )

        if capability in self.ROLE_PERMISSIONS[parsed]:
            return AuthorizationResult(
                allowed=True,
                role=parsed,
                capability=capability,
                reason=f"{parsed.title} has permission {capability}",
            )

        return AuthorizationResult(
            allowed=False,
            role=parsed,
            capability=capability,
            reason=f"{parsed.title} does not have permission to {capability.replace('_', ' ')}",
        )

    def authorize_any(self, role: Any, capabilities: Iterable[str]) -> AuthorizationResult:
        """Autorise si au moins une des capacités est accordée."""
        wanted = list(capabilities)
        for capability in wanted:
            result = self.authorize(role, capability)
            if result.allowed:
                return result

        parsed = Role.parse(role)
        label = parsed.title if parsed else f"Unknown role {role}"
        return AuthorizationResult(
            allowed=False,
            role=parsed,
            capability=" | ".join(wanted),
            reason=f"{label} has none of the permissions: {', '.join(wanted)}",
        )

    def redirect_target(self, role: Any) -> str:
        """Tableau de bord du rôle, "/" si inconnu."""
        parsed = Role.parse(role)
        if parsed is None:
            return self.DEFAULT_ROUTE
        return self.DASHBOARD_ROUTES[parsed]

    def shared_capabilities(self) -> FrozenSet[str]:
        """Capacités présentes dans plusieurs rôles."""
        counts = Counter(
            capability
            for permissions in self.ROLE_PERMISSIONS.values()
            for capability in permissions
        )
        return frozenset(c for c, n in counts.items() if n > 1)

    def role_for_route(self, route: str) -> Optional[Role]:
        for role, target in self.DASHBOARD_ROUTES.items():
            if target == route:
                return role
        return None


# Instance partagée, sans état
DEFAULT_PERMISSION_MODEL = PermissionModel()


def permissions_for(role: Any) -> FrozenSet[str]:
    """Raccourci sur le modèle par défaut."""
    return DEFAULT_PERMISSION_MODEL.permissions_for(role)


def redirect_target(role: Any) -> str:
    return DEFAULT_PERMISSION_MODEL.redirect_target(role)
