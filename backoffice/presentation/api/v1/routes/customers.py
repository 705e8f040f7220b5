from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from backoffice.application.services.customer_service import CustomerService
from backoffice.presentation.api.dependencies import get_customer_service, require_permission
from backoffice.presentation.api.v1.schemas.customer import (
    CustomerCreate,
    CustomerResponse,
    CustomerUpdate,
)
from backoffice.presentation.api.v1.schemas.token import CurrentUser

router = APIRouter()


@router.post("", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def create_customer(
    data: CustomerCreate,
    service: Annotated[CustomerService, Depends(get_customer_service)],
    _: Annotated[CurrentUser, Depends(require_permission("customer.create"))],
):
    return await service.create_customer(
        data.name, data.id_number, data.phone_number, str(data.email) if data.email else None
    )


@router.get("", response_model=list[CustomerResponse])
async def list_customers(
    service: Annotated[CustomerService, Depends(get_customer_service)],
    _: Annotated[CurrentUser, Depends(require_permission("customer.read"))],
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return await service.list_customers(page, page_size)


@router.get("/{customer_id}", response_model=CustomerResponse)
async def get_customer(
    customer_id: str,
    service: Annotated[CustomerService, Depends(get_customer_service)],
    _: Annotated[CurrentUser, Depends(require_permission("customer.read"))],
):
    return await service.get_customer(customer_id)


@router.put("/{customer_id}", response_model=CustomerResponse)
async def update_customer(
    customer_id: str,
    data: CustomerUpdate,
    service: Annotated[CustomerService, Depends(get_customer_service)],
    _: Annotated[CurrentUser, Depends(require_permission("customer.update"))],
):
    changes = data.model_dump(exclude={"version"}, exclude_none=True)
    if "email" in changes:
        changes["email"] = str(changes["email"])
    return await service.update_customer(customer_id, data.version, **changes)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: str,
    service: Annotated[CustomerService, Depends(get_customer_service)],
    _: Annotated[CurrentUser, Depends(require_permission("customer.delete"))],
    version: int = Query(..., ge=1, description="Version the client last read"),
):
    await service.delete_customer(customer_id, version)
