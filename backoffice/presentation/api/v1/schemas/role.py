from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from backoffice.presentation.api.v1.schemas.common import VersionedUpdate
from backoffice.presentation.api.v1.schemas.permission import PermissionResponse


class RoleCreate(BaseModel):
    role_name: str = Field(..., min_length=1, max_length=50)
    description: str | None = Field(None, max_length=255)


class RoleUpdate(VersionedUpdate):
    role_name: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = Field(None, max_length=255)


class RoleResponse(BaseModel):
    id: str
    role_name: str
    description: str | None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RoleWithPermissions(RoleResponse):
    """Role response with its granted permissions"""

    permissions: list[PermissionResponse] = []


class RolePermissionAssign(BaseModel):
    permission_ids: list[str] = Field(..., min_length=1)


class AssignmentResult(BaseModel):
    """Outcome of an idempotent assignment: only new pairs are counted"""

    requested: int
    added: int


class UserRoleAssign(BaseModel):
    role_ids: list[str] = Field(..., min_length=1)


class UserRoleResponse(BaseModel):
    role_id: str
    role_name: str
    assigned_by: str | None
    assigned_at: datetime
