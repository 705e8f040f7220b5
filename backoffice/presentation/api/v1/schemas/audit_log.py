from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict


class AuditLogResponse(BaseModel):
    id: str
    operator_id: str | None
    operator_name: str
    operation_time: datetime
    operation_type: str
    target_type: str
    target_id: str | None
    before_state: dict[str, Any] | None
    after_state: dict[str, Any] | None
    ip_address: str | None
    user_agent: str | None
    trace_id: str | None
    additional_info: dict[str, Any] | None

    model_config = ConfigDict(from_attributes=True)


class PermissionFailureResponse(BaseModel):
    id: str
    user_id: str | None
    username: str | None
    attempted_resource: str
    failure_reason: str
    attempted_at: datetime
    ip_address: str | None
    user_agent: str | None
    trace_id: str | None

    model_config = ConfigDict(from_attributes=True)
