from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from backoffice.application.services.access_denial_service import AccessDenialService
from backoffice.application.services.audit_service import AuditService
from backoffice.domain.exceptions import NotFoundError
from backoffice.infrastructure.persistence.repositories.audit_log_repo import AuditLogFilter
from backoffice.presentation.api.dependencies import (
    get_access_denial_service,
    get_audit_service,
    require_permission,
)
from backoffice.presentation.api.v1.schemas.audit_log import (
    AuditLogResponse,
    PermissionFailureResponse,
)
from backoffice.presentation.api.v1.schemas.common import Page
from backoffice.presentation.api.v1.schemas.token import CurrentUser
from backoffice.shared.enums import OperationType, TargetType

router = APIRouter()


@router.get("/audit-logs", response_model=Page[AuditLogResponse])
async def list_audit_logs(
    service: Annotated[AuditService, Depends(get_audit_service)],
    _: Annotated[CurrentUser, Depends(require_permission("auditLog.read"))],
    operator_id: str | None = None,
    operation_type: OperationType | None = None,
    target_type: TargetType | None = None,
    target_id: str | None = None,
    start_time: datetime | None = None,
    end_time: datetime | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    filters = AuditLogFilter(
        operator_id=operator_id,
        operation_type=operation_type.value if operation_type else None,
        target_type=target_type.value if target_type else None,
        target_id=target_id,
        start_time=start_time,
        end_time=end_time,
    )
    items, total = await service.list_logs(filters, page, page_size)
    return Page[AuditLogResponse](
        items=[AuditLogResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/audit-logs/trace/{trace_id}", response_model=list[AuditLogResponse])
async def get_audit_logs_by_trace(
    trace_id: str,
    service: Annotated[AuditService, Depends(get_audit_service)],
    _: Annotated[CurrentUser, Depends(require_permission("auditLog.read"))],
):
    """Every audit entry written while serving one request"""
    return await service.get_by_trace_id(trace_id)


@router.get("/audit-logs/{log_id}", response_model=AuditLogResponse)
async def get_audit_log(
    log_id: str,
    service: Annotated[AuditService, Depends(get_audit_service)],
    _: Annotated[CurrentUser, Depends(require_permission("auditLog.read"))],
):
    entry = await service.get_by_id(log_id)
    if entry is None:
        raise NotFoundError("AuditLog", log_id)
    return entry


@router.get("/permission-failures", response_model=Page[PermissionFailureResponse])
async def list_permission_failures(
    service: Annotated[AccessDenialService, Depends(get_access_denial_service)],
    _: Annotated[CurrentUser, Depends(require_permission("auditLog.read"))],
    user_id: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    """Denied access attempts, newest first"""
    items, total = await service.list_failures(user_id, page, page_size)
    return Page[PermissionFailureResponse](
        items=[PermissionFailureResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
    )
