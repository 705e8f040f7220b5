from typing import Annotated

from fastapi import APIRouter, Depends, status

from backoffice.application.services.user_role_service import UserRoleService
from backoffice.presentation.api.dependencies import get_user_role_service, require_permission
from backoffice.presentation.api.v1.schemas.role import (
    AssignmentResult,
    UserRoleAssign,
    UserRoleResponse,
)
from backoffice.presentation.api.v1.schemas.token import CurrentUser

router = APIRouter()


@router.post("/users/{user_id}/roles", response_model=AssignmentResult)
async def assign_roles_to_user(
    user_id: str,
    data: UserRoleAssign,
    service: Annotated[UserRoleService, Depends(get_user_role_service)],
    _: Annotated[CurrentUser, Depends(require_permission("userRole.assign"))],
):
    """Assign roles to a user (requires 'userRole.assign'); held roles are skipped"""
    added = await service.assign_roles(user_id, data.role_ids)
    return AssignmentResult(requested=len(set(data.role_ids)), added=added)


@router.delete("/users/{user_id}/roles/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_role_from_user(
    user_id: str,
    role_id: str,
    service: Annotated[UserRoleService, Depends(get_user_role_service)],
    _: Annotated[CurrentUser, Depends(require_permission("userRole.assign"))],
):
    await service.remove_role(user_id, role_id)


@router.get("/users/{user_id}/roles", response_model=list[UserRoleResponse])
async def get_user_roles(
    user_id: str,
    service: Annotated[UserRoleService, Depends(get_user_role_service)],
    _: Annotated[CurrentUser, Depends(require_permission("userRole.read"))],
):
    return [
        UserRoleResponse(
            role_id=role.id,
            role_name=role.role_name,
            assigned_by=user_role.assigned_by,
            assigned_at=user_role.assigned_at,
        )
        for user_role, role in await service.list_user_roles(user_id)
    ]
