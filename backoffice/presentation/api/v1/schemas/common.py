from typing import Generic, TypeVar

from pydantic import BaseModel, Field

ItemType = TypeVar("ItemType")


class Page(BaseModel, Generic[ItemType]):
    """Paged list response"""

    items: list[ItemType]
    total: int
    page: int
    page_size: int


class VersionedUpdate(BaseModel):
    """Every mutation names the version the client last read"""

    version: int = Field(..., ge=1, description="Version the client last read")
