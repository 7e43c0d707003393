# users/permissions.py

from rest_framework.permissions import BasePermission

ADMIN_ROLES = {"admin"}
ACCOUNTING_ROLES = {"admin", "accountant"}
STORE_ROLES = {"admin", "storekeeper"}


def has_any_role(user, roles) -> bool:
    """Superusers always pass."""
    if not (user and user.is_authenticated):
        return False
    if getattr(user, "is_superuser", False):
        return True
    return getattr(user, "role", None) in roles


# ---------------- BASE ROLE PERMISSION ----------------
class HasRole(BasePermission):
    allowed_roles = set()

    def has_permission(self, request, view):
        return has_any_role(request.user, self.allowed_roles)


# ---------------- ROLE PERMISSIONS ----------------
class IsAdmin(HasRole):
    allowed_roles = ADMIN_ROLES


class IsAccountantOrAdmin(HasRole):
    allowed_roles = ACCOUNTING_ROLES


class IsStorekeeperOrAdmin(HasRole):
    allowed_roles = STORE_ROLES


def capabilities_for(user) -> dict:
    """Role-derived flags the UI uses to show or hide destructive actions."""
    return {
        "run_repair": has_any_role(user, ADMIN_ROLES),
        "delete_invoices": has_any_role(user, ACCOUNTING_ROLES),
        "delete_payments": has_any_role(user, ACCOUNTING_ROLES),
        "delete_production": has_any_role(user, STORE_ROLES),
        "delete_stock_documents": has_any_role(user, STORE_ROLES),
    }
