from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backoffice.domain.enums import OrderSource, OrderStatus, OrderType
from backoffice.presentation.api.v1.schemas.common import VersionedUpdate


class ServiceOrderCreate(BaseModel):
    order_type: OrderType
    order_source: OrderSource = OrderSource.OFFLINE
    customer_id: str
    total_amount: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    consignment_start_date: date | None = None
    consignment_end_date: date | None = None
    renewal_option: bool = False

    @model_validator(mode="after")
    def validate_consignment_dates(self) -> "ServiceOrderCreate":
        """Consignment orders carry a consignment period"""
        if self.order_type == OrderType.CONSIGNMENT and not self.consignment_start_date:
            raise ValueError("consignment_start_date is required for consignment orders")
        return self


class ServiceOrderUpdate(VersionedUpdate):
    total_amount: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    consignment_start_date: date | None = None
    consignment_end_date: date | None = None
    renewal_option: bool | None = None


class ServiceOrderStatusUpdate(VersionedUpdate):
    status: OrderStatus


class ServiceOrderResponse(BaseModel):
    id: str
    order_number: str
    order_type: str
    order_source: str
    customer_id: str
    total_amount: Decimal
    status: str
    consignment_start_date: date | None
    consignment_end_date: date | None
    renewal_option: bool
    version: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
