"""
User management over the remote /user endpoints.

Listed users carry a can_manage hint. Updates and deletes are checked against
the access policy before the remote call; the remote API checks again.
"""
from typing import Any, Dict, List, Optional

from clients.restaurant_api import RestaurantApiClient
from config.logging import get_logger, log_security_event
from core.exceptions import ForbiddenError, NotFoundError
from core.security import SecurityEvent, SessionContext
from schemas.user import Pagination, UserCreate, UserList, UserPage, UserUpdate
from services.access_policy import (
    SUPERADMIN, SYSTEM_ASSIGNABLE_ROLES, assignable_roles, can_manage, normalize_role
)

logger = get_logger(__name__)

SENSITIVE_FIELDS = ("password",)


def _public(user: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in user.items() if key not in SENSITIVE_FIELDS}


def _user_id(user: Dict[str, Any]) -> str:
    return str(user.get("_id") or user.get("id") or "")


def matches_search(user: Dict[str, Any], search: Optional[str]) -> bool:
    """Case-insensitive match on name or email."""
    if not search:
        return True
    term = search.lower()
    return term in str(user.get("name") or "").lower() or term in str(user.get("email") or "").lower()


class UserService:
    def __init__(self, api: RestaurantApiClient):
        self.api = api

    def annotate(self, ctx: SessionContext, users: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [{**_public(user), "can_manage": can_manage(ctx, user)} for user in users]

    def list_all(
        self,
        ctx: SessionContext,
        page: int = 1,
        limit: int = 10,
        branch: Optional[str] = None,
        role: Optional[str] = None,
        status: Optional[str] = None,
        search: Optional[str] = None
    ) -> UserPage:
        """Paginated list across branches."""
        body = self.api.get("/user/superadmin/all", ctx.token, params={
            "page": page, "limit": limit, "branch": branch, "role": role, "status": status, "search": search
        })
        if not isinstance(body, dict):
            body = {}
        pagination = body.get("pagination") or {}
        return UserPage(
            data=self.annotate(ctx, body.get("data") or []),
            pagination=Pagination(
                current_page=pagination.get("currentPage", page),
                total_pages=pagination.get("totalPages", 1),
                total_documents=pagination.get("totalDocuments", 0),
            ),
        )

    def branch_users(self, ctx: SessionContext) -> List[Dict[str, Any]]:
        users = self.api.get(f"/user/{ctx.branch}/get-all/", ctx.token)
        return users if isinstance(users, list) else []

    def list_branch(self, ctx: SessionContext, search: Optional[str] = None) -> UserList:
        users = [user for user in self.branch_users(ctx) if matches_search(user, search)]
        return UserList(data=self.annotate(ctx, users), total=len(users))

    def branch_roles(self, ctx: SessionContext) -> List[str]:
        roles = self.api.get(f"/userrole/branch/{ctx.branch}", ctx.token)
        if not isinstance(roles, list):
            return []
        return [str(role.get("userrole")) for role in roles if isinstance(role, dict) and role.get("userrole")]

    def assignable_roles(self, ctx: SessionContext, scope: str = "branch") -> List[str]:
        if scope == "system":
            return assignable_roles(ctx.role)
        return assignable_roles(ctx.role, self.branch_roles(ctx))

    def _check_role_grant(self, ctx: SessionContext, role: str) -> None:
        """System roles above the actor's reach are refused; custom roles are left to the remote API."""
        role = normalize_role(role)
        if role in SYSTEM_ASSIGNABLE_ROLES[SUPERADMIN] and role not in assignable_roles(ctx.role):
            log_security_event(SecurityEvent.FORBIDDEN_ACTION, user_id=ctx.user_id, details=f"assign role {role}")
            raise ForbiddenError(f"You cannot assign the '{role}' role")

    def _check_manageable(self, ctx: SessionContext, user_id: str, action: str) -> None:
        if user_id == ctx.user_id:
            log_security_event(SecurityEvent.FORBIDDEN_ACTION, user_id=ctx.user_id, details=f"{action} own account")
            raise ForbiddenError(f"You cannot {action} your own account")
        if normalize_role(ctx.role) == SUPERADMIN:
            return

        target = next((user for user in self.branch_users(ctx) if _user_id(user) == user_id), None)
        if target is None:
            raise NotFoundError("User", user_id)
        if not can_manage(ctx, target):
            log_security_event(SecurityEvent.FORBIDDEN_ACTION, user_id=ctx.user_id, details=f"{action} user {user_id}")
            raise ForbiddenError(f"You cannot {action} this user")

    def create(self, ctx: SessionContext, data: UserCreate) -> Any:
        self._check_role_grant(ctx, data.role)
        payload = data.model_dump(mode="json", exclude_none=True)
        payload.setdefault("branch", ctx.branch)
        result = self.api.post("/user/post", ctx.token, json=payload)
        logger.info(f"User {ctx.user_id} created account {data.email} with role {data.role}")
        return result

    def update(self, ctx: SessionContext, user_id: str, data: UserUpdate) -> Any:
        self._check_manageable(ctx, user_id, "update")
        if data.role:
            self._check_role_grant(ctx, data.role)
        payload = data.model_dump(mode="json", exclude_none=True)
        result = self.api.put(f"/user/update/{user_id}", ctx.token, json=payload)
        logger.info(f"User {ctx.user_id} updated account {user_id}")
        return result

    def delete(self, ctx: SessionContext, user_id: str) -> Any:
        self._check_manageable(ctx, user_id, "delete")
        result = self.api.delete(f"/user/delete/{user_id}", ctx.token)
        logger.info(f"User {ctx.user_id} deleted account {user_id}")
        return result
