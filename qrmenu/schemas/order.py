"""Order API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from qrmenu.schemas.cart import SelectedOption

OrderStatus = Literal["received", "preparing", "ready", "served", "paid"]


class OrderItemRead(BaseModel):
    """Serialized order line."""

    id: int
    dish_id: int | None = None
    dish_name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal
    comment: str | None = None
    options_selected: list[SelectedOption] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class OrderAction(BaseModel):
    """The single status action staff can take on an order."""

    target_status: OrderStatus
    label: str


class OrderRead(BaseModel):
    """Serialized order with its lines."""

    id: int
    table_id: int
    table_number: int
    total: Decimal
    status: OrderStatus
    created_at: datetime
    status_updated_at: datetime | None = None
    items: list[OrderItemRead]
    next_action: OrderAction | None = None


class OrderAdvanceRequest(BaseModel):
    """Advance an order one step from the status the staff member saw."""

    expected_status: OrderStatus


class OrderChangeEvent(BaseModel):
    """Notification pushed to subscribers when an order changes."""

    type: Literal["order_created", "order_status_changed", "ping"]
    order_id: int | None = None
    status: OrderStatus | None = None
    table_number: int | None = None
