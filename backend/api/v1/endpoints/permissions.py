from fastapi import APIRouter, Depends, Query

from core.dependencies import get_action_permissions
from schemas.user import PermissionsResponse
from services.access_policy import ActionPermissions

router = APIRouter()


@router.get("/me", response_model=PermissionsResponse)
def get_my_permissions(permissions: ActionPermissions = Depends(get_action_permissions)):
    """Per-feature action grants for the caller's role and branch"""
    return permissions.to_dict()


@router.get("/check")
def check_permission(
    feature: str = Query(..., min_length=1),
    action: str = Query(..., min_length=1),
    permissions: ActionPermissions = Depends(get_action_permissions)
):
    """Whether the caller may perform one action on one feature"""
    return {"feature": feature, "action": action, "allowed": permissions.can_perform(feature, action)}
