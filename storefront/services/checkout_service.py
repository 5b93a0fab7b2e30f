# storefront/services/checkout_service.py
import logging
import uuid
from decimal import Decimal, ROUND_HALF_UP

from fastapi import HTTPException, status

from storefront.repositories.address_repo import (
    AddressBackendError,
    AddressRepository,
)
from storefront.repositories.order_repo import (
    OrderBackend,
    OrderBackendError,
    OrderSubmissionError,
)
from storefront.schemas.address import Address
from storefront.schemas.order import (
    OrderPlaced,
    OrderRead,
    PaymentSummary,
)
from storefront.schemas.cart import CartLine
from storefront.schemas.user import Customer
from storefront.services.cart_store import CartStore

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def compute_payment_summary(
    lines: list[CartLine],
    delivery_fee: Decimal,
    gst_rate: Decimal,
) -> PaymentSummary:
    """
    grand_total = subtotal + delivery_fee + subtotal * gst_rate

    Takes a line snapshot so the totals always describe exactly the
    lines they were computed from.
    """
    subtotal = sum((line.line_total for line in lines), Decimal("0"))
    gst = subtotal * gst_rate
    return PaymentSummary(
        total_items=sum(line.quantity for line in lines),
        subtotal=_money(subtotal),
        delivery_fee=_money(delivery_fee),
        gst=_money(gst),
        grand_total=_money(subtotal + delivery_fee + gst),
    )


class CheckoutService:
    """
    Turns a session cart into a backend order.

    Responsibilities:
      - compute the payment summary (subtotal, delivery fee, GST)
      - pick the delivery address
      - submit the order exactly once per call
      - take the ordered units out of the cart only after the backend
        reported success
    """

    def __init__(
        self,
        order_backend: OrderBackend,
        address_repo: AddressRepository,
        delivery_fee: Decimal = Decimal("40"),
        gst_rate: Decimal = Decimal("0.05"),
    ):
        self.order_backend = order_backend
        self.address_repo = address_repo
        self.delivery_fee = delivery_fee
        self.gst_rate = gst_rate

    # ---- internal helpers ----

    def _resolve_address(
        self,
        customer: Customer,
        address_id: uuid.UUID | None,
    ) -> Address:
        """
        Explicit address if it belongs to the customer, else the default
        one, else the most recent one.
        """
        try:
            addresses = self.address_repo.list_for_customer(customer.id)
        except AddressBackendError as e:
            logger.warning("Address lookup failed for %s: %s", customer.id, e)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=str(e) or "Failed to load addresses",
            )

        if address_id is not None:
            for address in addresses:
                if address.id == address_id:
                    return address
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unknown delivery address",
            )

        if not addresses:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please select a delivery address",
            )
        return addresses[0]

    # ---- public operations ----

    def payment_summary(self, store: CartStore) -> PaymentSummary:
        return compute_payment_summary(store.lines(), self.delivery_fee, self.gst_rate)

    def place_order(
        self,
        store: CartStore,
        customer: Customer,
        address_id: uuid.UUID | None = None,
    ) -> OrderPlaced:
        """
        Submit the cart as an order.

        Steps:
          1. Reject an empty cart.
          2. Resolve the delivery address.
          3. Compute totals from the same line snapshot that is submitted.
          4. Submit to the backend.
          5. On success remove the ordered units from the cart; lines added
             meanwhile stay. On failure leave the cart intact.
        """
        lines = store.lines()
        if not lines:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        address = self._resolve_address(customer, address_id)
        summary = compute_payment_summary(lines, self.delivery_fee, self.gst_rate)

        try:
            order_id = self.order_backend.submit_order(
                customer_id=customer.id,
                address_id=address.id,
                lines=lines,
                total_amount=summary.grand_total,
            )
        except OrderSubmissionError as e:
            logger.warning("Order submission failed for %s: %s", customer.id, e)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=str(e) or "Failed to place order",
            )

        store.remove_ordered(lines)
        logger.info("Order %s placed for %s", order_id, customer.id)

        return OrderPlaced(
            order_id=order_id,
            address_id=address.id,
            status="pending",
            summary=summary,
        )

    def get_order(self, customer: Customer, order_id: uuid.UUID) -> OrderRead:
        try:
            row = self.order_backend.get_order(order_id, customer.id)
        except OrderBackendError as e:
            logger.warning("Order lookup %s failed: %s", order_id, e)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=str(e) or "Failed to load order",
            )
        if row is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return OrderRead.model_validate(row)
