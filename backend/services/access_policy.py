"""
Role hierarchy and action permissions.

These are visibility hints for the admin UI. The remote API re-checks every
action and stays the authority.
"""
from typing import Any, Dict, Iterable, List, Optional

from clients.restaurant_api import RestaurantApiClient
from config.logging import get_logger
from core.exceptions import ExternalServiceError, UpstreamRequestError
from core.security import SessionContext

logger = get_logger(__name__)

SUPERADMIN = "superadmin"
ADMIN = "admin"
MANAGER = "manager"
USER = "user"

ROLE_RANKS = {SUPERADMIN: 4, ADMIN: 3, MANAGER: 2, USER: 1}

SYSTEM_ASSIGNABLE_ROLES: Dict[str, List[str]] = {
    SUPERADMIN: [SUPERADMIN, ADMIN, MANAGER, USER],
    ADMIN: [ADMIN, MANAGER, USER],
    MANAGER: [MANAGER, USER],
}


def normalize_role(role: Optional[str]) -> str:
    return (role or "").strip().lower()


def role_rank(role: Optional[str]) -> int:
    """Custom branch roles rank alongside 'user'."""
    return ROLE_RANKS.get(normalize_role(role), ROLE_RANKS[USER])


def can_manage_user(actor_id: str, actor_role: str, target_id: str, target_role: str) -> bool:
    """Whether the actor may edit or delete the target account."""
    if not actor_id or actor_id == target_id:
        return False

    actor_role, target_role = normalize_role(actor_role), normalize_role(target_role)
    if actor_role == SUPERADMIN:
        return True
    if actor_role == ADMIN:
        return target_role != SUPERADMIN
    if actor_role == MANAGER:
        return target_role not in (SUPERADMIN, ADMIN)
    return False


def can_manage(ctx: SessionContext, target: Dict[str, Any]) -> bool:
    return can_manage_user(ctx.user_id, ctx.role, str(target.get("_id") or target.get("id") or ""),
                           target.get("role") or "")


def assignable_roles(actor_role: str, available: Optional[Iterable[str]] = None) -> List[str]:
    """Roles the actor may give to an account.

    Without a branch role list the fixed system hierarchy applies; with one,
    admins and superadmins may assign any listed role and managers any listed
    role below admin.
    """
    actor_role = normalize_role(actor_role)
    if available is None:
        return list(SYSTEM_ASSIGNABLE_ROLES.get(actor_role, []))

    roles = [role for role in available if role]
    if actor_role in (SUPERADMIN, ADMIN):
        return roles
    if actor_role == MANAGER:
        return [role for role in roles if normalize_role(role) not in (SUPERADMIN, ADMIN)]
    return []


class ActionPermissions:
    """Per-feature action flags for the caller's role in their branch."""

    def __init__(self, role: str, permissions: Optional[Dict[str, Dict[str, bool]]] = None):
        self.role = normalize_role(role)
        self.permissions = permissions or {}

    @classmethod
    def load(cls, api: RestaurantApiClient, ctx: SessionContext) -> "ActionPermissions":
        """A role without a permission record has no permissions."""
        try:
            body = api.get("/role-permissions", ctx.token, params={"role": ctx.role, "branch": ctx.branch})
        except UpstreamRequestError as e:
            if e.status_code == 404:
                logger.info(f"No action permissions recorded for role {ctx.role} in {ctx.branch}")
            else:
                logger.warning(f"Action permission lookup failed for role {ctx.role}: {e.detail}")
            return cls(ctx.role)
        except ExternalServiceError as e:
            logger.warning(f"Action permission lookup failed for role {ctx.role}: {e.detail}")
            return cls(ctx.role)

        permissions = {}
        if isinstance(body, dict) and isinstance(body.get("data"), dict):
            permissions = body["data"].get("permissions") or {}
        return cls(ctx.role, permissions if isinstance(permissions, dict) else {})

    def can_perform(self, feature: str, action: str) -> bool:
        if self.role == ADMIN:
            return True
        actions = self.permissions.get(feature) or {}
        return bool(actions.get(action)) if isinstance(actions, dict) else False

    def to_dict(self) -> Dict[str, Any]:
        return {"role": self.role, "bypass": self.role == ADMIN, "permissions": self.permissions}
