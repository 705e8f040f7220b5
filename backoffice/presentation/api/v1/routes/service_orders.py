"""
Service order routes.

Permissions are per order type: 'serviceOrder.buyback.create',
'serviceOrder.consignment.read', ... Routes that do not know the type up
front require the wildcard form, which any one type grant satisfies.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from backoffice.application.services.authorization_service import AuthorizationService
from backoffice.application.services.service_order_service import ServiceOrderService
from backoffice.domain.enums import OrderStatus, OrderType
from backoffice.infrastructure.persistence.database import get_db
from backoffice.presentation.api.dependencies import (
    enforce_permission,
    get_authz_service,
    get_current_user,
    get_service_order_service,
    require_permission,
)
from backoffice.presentation.api.v1.schemas.service_order import (
    ServiceOrderCreate,
    ServiceOrderResponse,
    ServiceOrderStatusUpdate,
    ServiceOrderUpdate,
)
from backoffice.presentation.api.v1.schemas.token import CurrentUser

router = APIRouter()


def order_permission(order_type: OrderType | str, action: str) -> str:
    return f"serviceOrder.{OrderType(order_type).value.lower()}.{action}"


@router.post("", response_model=ServiceOrderResponse, status_code=status.HTTP_201_CREATED)
async def create_service_order(
    request: Request,
    data: ServiceOrderCreate,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    authz: Annotated[AuthorizationService, Depends(get_authz_service)],
    db: Annotated[AsyncSession, Depends(get_db)],
    service: Annotated[ServiceOrderService, Depends(get_service_order_service)],
):
    """Create an order (requires 'serviceOrder.<type>.create')"""
    await enforce_permission(
        request, current_user, order_permission(data.order_type, "create"), authz, db
    )
    return await service.create_order(
        data.order_type.value,
        data.customer_id,
        data.total_amount,
        data.order_source.value,
        data.consignment_start_date,
        data.consignment_end_date,
        data.renewal_option,
    )


@router.get("", response_model=list[ServiceOrderResponse])
async def list_service_orders(
    service: Annotated[ServiceOrderService, Depends(get_service_order_service)],
    _: Annotated[CurrentUser, Depends(require_permission("serviceOrder.*.read"))],
    order_type: OrderType | None = None,
    order_status: OrderStatus | None = Query(None, alias="status"),
    customer_id: str | None = None,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return await service.list_orders(
        order_type.value if order_type else None,
        order_status.value if order_status else None,
        customer_id,
        page,
        page_size,
    )


@router.get("/{order_id}", response_model=ServiceOrderResponse)
async def get_service_order(
    order_id: str,
    service: Annotated[ServiceOrderService, Depends(get_service_order_service)],
    _: Annotated[CurrentUser, Depends(require_permission("serviceOrder.*.read"))],
):
    return await service.get_order(order_id)


@router.put("/{order_id}", response_model=ServiceOrderResponse)
async def update_service_order(
    order_id: str,
    data: ServiceOrderUpdate,
    service: Annotated[ServiceOrderService, Depends(get_service_order_service)],
    _: Annotated[CurrentUser, Depends(require_permission("serviceOrder.*.update"))],
):
    return await service.update_order(
        order_id,
        data.version,
        data.total_amount,
        data.consignment_start_date,
        data.consignment_end_date,
        data.renewal_option,
    )


@router.patch("/{order_id}/status", response_model=ServiceOrderResponse)
async def update_service_order_status(
    order_id: str,
    data: ServiceOrderStatusUpdate,
    service: Annotated[ServiceOrderService, Depends(get_service_order_service)],
    _: Annotated[CurrentUser, Depends(require_permission("serviceOrder.*.update"))],
):
    """Complete or terminate a pending order"""
    return await service.update_status(order_id, data.version, data.status.value)


@router.delete("/{order_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service_order(
    order_id: str,
    service: Annotated[ServiceOrderService, Depends(get_service_order_service)],
    _: Annotated[CurrentUser, Depends(require_permission("serviceOrder.*.delete"))],
    version: int = Query(..., ge=1, description="Version the client last read"),
):
    await service.delete_order(order_id, version)
