from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from backoffice.application.services.account_service import AccountService
from backoffice.presentation.api.dependencies import (
    get_account_service,
    get_current_user,
    require_permission,
)
from backoffice.presentation.api.v1.schemas.account import (
    AccountCreate,
    AccountProfileResponse,
    AccountResponse,
    AccountRoleSummary,
    AccountUpdate,
    PasswordChange,
)
from backoffice.presentation.api.v1.schemas.common import Page
from backoffice.presentation.api.v1.schemas.token import CurrentUser

router = APIRouter()


@router.post("", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def create_account(
    data: AccountCreate,
    service: Annotated[AccountService, Depends(get_account_service)],
    _: Annotated[CurrentUser, Depends(require_permission("account.create"))],
):
    """Create a back-office account (requires 'account.create')"""
    return await service.create_account(data.account, data.display_name, data.password)


@router.get("", response_model=Page[AccountResponse])
async def list_accounts(
    service: Annotated[AccountService, Depends(get_account_service)],
    _: Annotated[CurrentUser, Depends(require_permission("account.read"))],
    keyword: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    items, total = await service.search_accounts(keyword, page, page_size)
    return Page[AccountResponse](
        items=[AccountResponse.model_validate(user) for user in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/me", response_model=AccountProfileResponse)
async def get_my_profile(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
):
    """The caller's account, roles and effective permission codes"""
    profile = await service.get_profile(current_user.id)
    return AccountProfileResponse(
        account=AccountResponse.model_validate(profile.user),
        roles=[AccountRoleSummary.model_validate(role) for role in profile.roles],
        permission_codes=profile.permission_codes,
    )


@router.put("/me/password", response_model=AccountResponse)
async def change_my_password(
    data: PasswordChange,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[AccountService, Depends(get_account_service)],
):
    return await service.change_password(
        current_user.id, data.version, data.old_password, data.new_password
    )


@router.get("/{user_id}", response_model=AccountResponse)
async def get_account(
    user_id: str,
    service: Annotated[AccountService, Depends(get_account_service)],
    _: Annotated[CurrentUser, Depends(require_permission("account.read"))],
):
    return await service.get_account(user_id)


@router.put("/{user_id}", response_model=AccountResponse)
async def update_account(
    user_id: str,
    data: AccountUpdate,
    service: Annotated[AccountService, Depends(get_account_service)],
    _: Annotated[CurrentUser, Depends(require_permission("account.update"))],
):
    return await service.update_account(user_id, data.version, data.display_name)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    user_id: str,
    service: Annotated[AccountService, Depends(get_account_service)],
    _: Annotated[CurrentUser, Depends(require_permission("account.delete"))],
    version: int = Query(..., ge=1, description="Version the client last read"),
):
    """Delete an account (requires 'account.delete'); never yourself or the last one"""
    await service.delete_account(user_id, version)
