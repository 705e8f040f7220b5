from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from backoffice.domain.enums import PermissionType
from backoffice.presentation.api.v1.schemas.common import VersionedUpdate


class PermissionCreate(BaseModel):
    permission_code: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Dotted permission code (e.g., 'serviceOrder.buyback.read')",
    )
    name: str = Field(..., min_length=1, max_length=100)
    permission_type: PermissionType = PermissionType.FUNCTION
    route_path: str | None = Field(None, max_length=255)
    description: str | None = Field(None, max_length=255)


class PermissionUpdate(VersionedUpdate):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=255)
    route_path: str | None = Field(None, max_length=255)


class PermissionResponse(BaseModel):
    id: str
    permission_code: str
    name: str
    permission_type: str
    route_path: str | None
    description: str | None
    version: int

    model_config = ConfigDict(from_attributes=True)


class PermissionCheckRequest(BaseModel):
    """Codes to check for the caller; wildcards ('customer.*') are allowed"""

    permission_codes: list[str] = Field(..., min_length=1)


class PermissionCheckResponse(BaseModel):
    user_id: str
    results: dict[str, bool]
