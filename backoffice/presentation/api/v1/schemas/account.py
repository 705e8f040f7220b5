from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from backoffice.presentation.api.v1.schemas.common import VersionedUpdate


class AccountCreate(BaseModel):
    account: str = Field(..., min_length=1, max_length=50, description="Login identifier")
    display_name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=6, max_length=128)


class AccountUpdate(VersionedUpdate):
    display_name: str = Field(..., min_length=1, max_length=100)


class PasswordChange(VersionedUpdate):
    old_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)


class AccountResponse(BaseModel):
    id: str
    account: str
    display_name: str
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountRoleSummary(BaseModel):
    id: str
    role_name: str

    model_config = ConfigDict(from_attributes=True)


class AccountProfileResponse(BaseModel):
    """The caller with its roles and effective permission codes"""

    account: AccountResponse
    roles: list[AccountRoleSummary]
    permission_codes: list[str]
