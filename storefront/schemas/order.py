# storefront/schemas/order.py
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

# Owned by the backend; reported here, never driven.
OrderStatus = Literal[
    "pending",
    "confirmed",
    "preparing",
    "out_for_delivery",
    "delivered",
    "cancelled",
]
CookStatus = Literal["pending", "cooking", "ready"]
DeliveryStatus = Literal["pending", "picked_up", "delivered"]


class PaymentSummary(SQLModel):
    """
    Checkout totals for the current cart.

      grand_total = subtotal + delivery_fee + gst
    """

    total_items: int
    subtotal: Decimal
    delivery_fee: Decimal
    gst: Decimal
    grand_total: Decimal


class CheckoutRequest(SQLModel):
    """
    Payload for placing an order from the current cart.

    address_id is optional: when omitted the customer's default address
    (or most recent one) is used.
    """

    model_config = ConfigDict(extra="forbid")

    address_id: uuid.UUID | None = None


class OrderPlaced(SQLModel):
    """
    Result of a successful checkout.
    """

    order_id: uuid.UUID
    address_id: uuid.UUID
    status: OrderStatus
    summary: PaymentSummary


class OrderItemRead(SQLModel):
    """
    Representation of a single order line item.
    """

    id: uuid.UUID
    order_id: uuid.UUID
    food_item_id: str
    quantity: int
    unit_price: Decimal
    cook_status: CookStatus = "pending"
    delivery_status: DeliveryStatus = "pending"


class OrderRead(SQLModel):
    """
    Full order view including items (confirmation page).
    """

    id: uuid.UUID
    customer_id: uuid.UUID
    delivery_address_id: uuid.UUID
    status: OrderStatus
    total_amount: Decimal
    created_at: datetime
    items: list[OrderItemRead] = []
