from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from backoffice.application.services.role_service import RoleService
from backoffice.presentation.api.dependencies import get_role_service, require_permission
from backoffice.presentation.api.v1.schemas.permission import PermissionResponse
from backoffice.presentation.api.v1.schemas.role import (
    AssignmentResult,
    RoleCreate,
    RolePermissionAssign,
    RoleResponse,
    RoleUpdate,
    RoleWithPermissions,
)
from backoffice.presentation.api.v1.schemas.token import CurrentUser

router = APIRouter()


@router.post("", response_model=RoleResponse, status_code=status.HTTP_201_CREATED)
async def create_role(
    data: RoleCreate,
    service: Annotated[RoleService, Depends(get_role_service)],
    _: Annotated[CurrentUser, Depends(require_permission("role.create"))],
):
    """Create a role (requires 'role.create')"""
    return await service.create_role(data.role_name, data.description)


@router.get("", response_model=list[RoleResponse])
async def list_roles(
    service: Annotated[RoleService, Depends(get_role_service)],
    _: Annotated[CurrentUser, Depends(require_permission("role.read"))],
):
    return await service.list_roles()


@router.get("/{role_id}", response_model=RoleWithPermissions)
async def get_role(
    role_id: str,
    service: Annotated[RoleService, Depends(get_role_service)],
    _: Annotated[CurrentUser, Depends(require_permission("role.read"))],
):
    """Role detail with its granted permissions"""
    role, permissions = await service.get_role_detail(role_id)
    response = RoleWithPermissions.model_validate(role)
    response.permissions = [PermissionResponse.model_validate(p) for p in permissions]
    return response


@router.put("/{role_id}", response_model=RoleResponse)
async def update_role(
    role_id: str,
    data: RoleUpdate,
    service: Annotated[RoleService, Depends(get_role_service)],
    _: Annotated[CurrentUser, Depends(require_permission("role.update"))],
):
    return await service.update_role(role_id, data.version, data.role_name, data.description)


@router.delete("/{role_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_role(
    role_id: str,
    service: Annotated[RoleService, Depends(get_role_service)],
    _: Annotated[CurrentUser, Depends(require_permission("role.delete"))],
    version: int = Query(..., ge=1, description="Version the client last read"),
):
    """Delete a role (requires 'role.delete'); fails while users still hold it"""
    await service.delete_role(role_id, version)


@router.post("/{role_id}/permissions", response_model=AssignmentResult)
async def assign_permissions(
    role_id: str,
    data: RolePermissionAssign,
    service: Annotated[RoleService, Depends(get_role_service)],
    _: Annotated[CurrentUser, Depends(require_permission("role.assignPermission"))],
):
    """Grant permissions to a role; already granted ones are skipped"""
    added = await service.assign_permissions(role_id, data.permission_ids)
    return AssignmentResult(requested=len(set(data.permission_ids)), added=added)


@router.delete("/{role_id}/permissions/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_permission(
    role_id: str,
    permission_id: str,
    service: Annotated[RoleService, Depends(get_role_service)],
    _: Annotated[CurrentUser, Depends(require_permission("role.assignPermission"))],
):
    await service.remove_permission(role_id, permission_id)
