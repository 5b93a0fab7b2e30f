# storefront/repositories/order_repo.py
import logging
import uuid
from decimal import Decimal
from typing import Any, Protocol

from postgrest.exceptions import APIError
from supabase import Client

from storefront.schemas.cart import CartLine

logger = logging.getLogger(__name__)


class OrderBackendError(Exception):
    """
    The order backend failed or rejected a request.
    """


class OrderSubmissionError(OrderBackendError):
    """
    The order backend did not accept the order.
    """


class OrderBackend(Protocol):
    def submit_order(
        self,
        *,
        customer_id: uuid.UUID,
        address_id: uuid.UUID,
        lines: list[CartLine],
        total_amount: Decimal,
    ) -> uuid.UUID: ...

    def get_order(
        self,
        order_id: uuid.UUID,
        customer_id: uuid.UUID,
    ) -> dict[str, Any] | None: ...


class SupabaseOrderBackend:
    """
    Writes orders into the hosted Postgres through the Supabase client.

    Tables:
      - orders      : customer_id, delivery_address_id, total_amount, status
      - order_items : order_id, food_item_id, quantity, unit_price

    NOTE:
      - Two separate inserts; if the items insert fails the order row is
        deleted again before the failure is reported.
    """

    def __init__(self, client: Client):
        self.client = client

    def submit_order(
        self,
        *,
        customer_id: uuid.UUID,
        address_id: uuid.UUID,
        lines: list[CartLine],
        total_amount: Decimal,
    ) -> uuid.UUID:
        """
        Insert the order and its items, returning the new order id.

        Raises:
            OrderSubmissionError: on any backend rejection.
        """
        try:
            res = (
                self.client.table("orders")
                .insert(
                    {
                        "customer_id": str(customer_id),
                        "delivery_address_id": str(address_id),
                        "total_amount": str(total_amount),
                        "status": "pending",
                    }
                )
                .execute()
            )
        except APIError as e:
            raise OrderSubmissionError(e.message or "Failed to create order") from e

        if not res.data:
            raise OrderSubmissionError("Order insert returned no row")
        order_id = uuid.UUID(str(res.data[0]["id"]))

        order_items = [
            {
                "order_id": str(order_id),
                "food_item_id": line.product_id,
                "quantity": line.quantity,
                "unit_price": str(line.unit_price),
            }
            for line in lines
        ]

        try:
            self.client.table("order_items").insert(order_items).execute()
        except APIError as e:
            self._discard_order(order_id)
            raise OrderSubmissionError(e.message or "Failed to create order items") from e

        return order_id

    def _discard_order(self, order_id: uuid.UUID) -> None:
        try:
            self.client.table("orders").delete().eq("id", str(order_id)).execute()
        except APIError as e:
            logger.error("Could not discard partial order %s: %s", order_id, e.message)

    def get_order(
        self,
        order_id: uuid.UUID,
        customer_id: uuid.UUID,
    ) -> dict[str, Any] | None:
        """
        Fetch one order with its items, scoped to the customer.

        Raises:
            OrderBackendError: when the backend query fails.
        """
        try:
            res = (
                self.client.table("orders")
                .select("*, items:order_items(*)")
                .eq("id", str(order_id))
                .eq("customer_id", str(customer_id))
                .limit(1)
                .execute()
            )
        except APIError as e:
            raise OrderBackendError(e.message or "Failed to load order") from e
        return res.data[0] if res.data else None
