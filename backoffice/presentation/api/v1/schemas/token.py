from pydantic import BaseModel, ConfigDict, Field


class TokenPayload(BaseModel):
    """JWT token payload issued by the identity service"""

    sub: str = Field(..., description="User ID (subject)")
    name: str | None = Field(None, description="Display name of the user")
    exp: int = Field(..., description="Token expiration timestamp")

    model_config = ConfigDict(
        json_schema_extra={"example": {"sub": "user_123", "name": "Alice", "exp": 1234567890}}
    )


class CurrentUser(BaseModel):
    """The authenticated principal of a request"""

    id: str
    account: str
    display_name: str

    model_config = ConfigDict(from_attributes=True)
