from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.dependencies import PaginationParams, get_session_context, get_user_service
from core.security import SessionContext
from schemas.user import AssignableRoles, UserCreate, UserList, UserPage, UserStatus, UserUpdate
from services.user_service import UserService

router = APIRouter()


@router.get("/", response_model=UserList)
def get_branch_users(
    search: Optional[str] = Query(None, description="Match on name or email"),
    ctx: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service)
):
    """Users of the caller's branch"""
    return service.list_branch(ctx, search=search)


@router.get("/all", response_model=UserPage)
def get_all_users(
    pagination: PaginationParams = Depends(),
    branch: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    status: Optional[UserStatus] = Query(None),
    search: Optional[str] = Query(None),
    ctx: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service)
):
    """Users across all branches, paginated by the remote API"""
    return service.list_all(
        ctx,
        page=pagination.page,
        limit=pagination.limit,
        branch=branch,
        role=role,
        status=status.value if status else None,
        search=search
    )


@router.get("/assignable-roles", response_model=AssignableRoles)
def get_assignable_roles(
    scope: str = Query("branch", pattern="^(branch|system)$"),
    ctx: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service)
):
    """Roles the caller may grant"""
    return AssignableRoles(role=ctx.normalized_role, roles=service.assignable_roles(ctx, scope))


@router.post("/", status_code=201)
def create_user(
    user: UserCreate,
    ctx: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service)
):
    """Create a user"""
    return service.create(ctx, user)


@router.put("/{user_id}")
def update_user(
    user_id: str,
    user: UserUpdate,
    ctx: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service)
):
    """Update a user the caller may manage"""
    return service.update(ctx, user_id, user)


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    ctx: SessionContext = Depends(get_session_context),
    service: UserService = Depends(get_user_service)
):
    """Delete a user the caller may manage"""
    return service.delete(ctx, user_id)
