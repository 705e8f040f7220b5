from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from backoffice.application.services.authorization_service import AuthorizationService
from backoffice.application.services.permission_service import PermissionService
from backoffice.domain.enums import PermissionType
from backoffice.presentation.api.dependencies import (
    get_authz_service,
    get_current_user,
    get_permission_service,
    require_permission,
)
from backoffice.presentation.api.v1.schemas.permission import (
    PermissionCheckRequest,
    PermissionCheckResponse,
    PermissionCreate,
    PermissionResponse,
    PermissionUpdate,
)
from backoffice.presentation.api.v1.schemas.token import CurrentUser

router = APIRouter()


@router.post("", response_model=PermissionResponse, status_code=status.HTTP_201_CREATED)
async def create_permission(
    data: PermissionCreate,
    service: Annotated[PermissionService, Depends(get_permission_service)],
    _: Annotated[CurrentUser, Depends(require_permission("permission.create"))],
):
    return await service.create_permission(
        data.permission_code,
        data.name,
        data.permission_type.value,
        data.route_path,
        data.description,
    )


@router.get("", response_model=list[PermissionResponse])
async def list_permissions(
    service: Annotated[PermissionService, Depends(get_permission_service)],
    _: Annotated[CurrentUser, Depends(require_permission("permission.read"))],
    keyword: str | None = None,
    permission_type: PermissionType | None = None,
):
    return await service.list_permissions(
        keyword, permission_type.value if permission_type else None
    )


@router.post("/check", response_model=PermissionCheckResponse)
async def check_permissions(
    data: PermissionCheckRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    authz: Annotated[AuthorizationService, Depends(get_authz_service)],
):
    """Check which of the given codes the caller holds (no denial is recorded)"""
    results = await authz.check_permissions(current_user.id, data.permission_codes)
    return PermissionCheckResponse(user_id=current_user.id, results=results)


@router.get("/{permission_id}", response_model=PermissionResponse)
async def get_permission(
    permission_id: str,
    service: Annotated[PermissionService, Depends(get_permission_service)],
    _: Annotated[CurrentUser, Depends(require_permission("permission.read"))],
):
    return await service.get_permission(permission_id)


@router.put("/{permission_id}", response_model=PermissionResponse)
async def update_permission(
    permission_id: str,
    data: PermissionUpdate,
    service: Annotated[PermissionService, Depends(get_permission_service)],
    _: Annotated[CurrentUser, Depends(require_permission("permission.update"))],
):
    return await service.update_permission(
        permission_id, data.version, data.name, data.description, data.route_path
    )


@router.delete("/{permission_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_permission(
    permission_id: str,
    service: Annotated[PermissionService, Depends(get_permission_service)],
    _: Annotated[CurrentUser, Depends(require_permission("permission.delete"))],
    version: int = Query(..., ge=1, description="Version the client last read"),
):
    """Delete a permission (requires 'permission.delete'); fails while a role holds it"""
    await service.delete_permission(permission_id, version)
