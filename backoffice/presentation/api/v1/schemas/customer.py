from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from backoffice.presentation.api.v1.schemas.common import VersionedUpdate


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    id_number: str = Field(..., min_length=1, max_length=30)
    phone_number: str | None = Field(None, max_length=20)
    email: EmailStr | None = None


class CustomerUpdate(VersionedUpdate):
    name: str | None = Field(None, min_length=1, max_length=100)
    id_number: str | None = Field(None, min_length=1, max_length=30)
    phone_number: str | None = Field(None, max_length=20)
    email: EmailStr | None = None


class CustomerResponse(BaseModel):
    id: str
    name: str
    id_number: str
    phone_number: str | None
    email: str | None
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
