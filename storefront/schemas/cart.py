# storefront/schemas/cart.py
from decimal import Decimal

from pydantic import TypeAdapter, field_validator
from sqlmodel import SQLModel, Field

PLACEHOLDER_IMAGE = "/placeholder.svg"


class ProductPayload(SQLModel):
    """
    Product data supplied when adding to cart.

    Comes straight from the catalog card / detail page; the cart keeps
    whatever was recorded on the first add.
    """

    product_id: str = Field(min_length=1)
    name: str
    unit_price: Decimal
    image_ref: str | None = None

    @field_validator("unit_price")
    @classmethod
    def clamp_negative_price(cls, v: Decimal) -> Decimal:
        # A negative price would corrupt total_amount
        return v if v >= 0 else Decimal("0")


class CartLine(SQLModel):
    """
    One entry per distinct product in the cart.
    """

    product_id: str
    name: str
    unit_price: Decimal = Field(ge=0)
    image_ref: str = PLACEHOLDER_IMAGE
    quantity: int = Field(ge=1)

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


class QuantityUpdate(SQLModel):
    """
    Payload for setting the quantity of a cart line.

    Zero or negative removes the line.
    """

    quantity: int


class CartLineRead(SQLModel):
    """
    Read model for a single cart line, including line_total.
    """

    product_id: str
    name: str
    unit_price: Decimal
    image_ref: str
    quantity: int
    line_total: Decimal


class CartSummary(SQLModel):
    """
    Full cart response model with totals.

    Served to every surface (header badge, floating bar, cart page,
    checkout page) so they all render the same state.
    """

    items: list[CartLineRead]
    total_items: int
    total_amount: Decimal


# Serializer for the persistence slot. Decimals are written as strings
# so prices survive the round trip exactly.
cart_lines_adapter = TypeAdapter(list[CartLine])
