# storefront/routers/orders.py
import uuid

from fastapi import APIRouter, Depends

from storefront.core.auth import require_customer
from storefront.core.cart_session import get_cart_store, get_cart_view
from storefront.core.config import get_settings
from storefront.core.supabase_client import supabase_admin
from storefront.repositories.address_repo import AddressRepository
from storefront.repositories.order_repo import SupabaseOrderBackend
from storefront.schemas.order import (
    CheckoutRequest,
    OrderPlaced,
    OrderRead,
    PaymentSummary,
)
from storefront.schemas.user import Customer
from storefront.services.cart_store import CartStore
from storefront.services.checkout_service import (
    CheckoutService,
    compute_payment_summary,
)

router = APIRouter(prefix="/orders", tags=["Orders"])

settings = get_settings()


def get_checkout_service() -> CheckoutService:
    """
    Checkout service wired to the Supabase backend.

    The client is built lazily so the app starts without Supabase creds.
    """
    client = supabase_admin()
    return CheckoutService(
        SupabaseOrderBackend(client),
        AddressRepository(client),
        delivery_fee=settings.DELIVERY_FEE,
        gst_rate=settings.GST_RATE,
    )


@router.get("/summary", response_model=PaymentSummary)
def payment_summary(store: CartStore = Depends(get_cart_view)):
    """
    Subtotal, delivery fee, GST and grand total for the current cart.

    Public: the cart page shows it before login.
    """
    return compute_payment_summary(store.lines(), settings.DELIVERY_FEE, settings.GST_RATE)


@router.post("/checkout", response_model=OrderPlaced)
def checkout(
    payload: CheckoutRequest,
    store: CartStore = Depends(get_cart_store),
    current_customer: Customer = Depends(require_customer),
    service: CheckoutService = Depends(get_checkout_service),
):
    """
    Create an order from the current session's cart.

    The ordered units leave the cart only once the backend accepted the
    order; a failed submission returns 502 and keeps the cart for a retry.
    """
    return service.place_order(store, current_customer, payload.address_id)


@router.get("/{order_id}", response_model=OrderRead)
def get_my_order(
    order_id: uuid.UUID,
    current_customer: Customer = Depends(require_customer),
    service: CheckoutService = Depends(get_checkout_service),
):
    """
    Order confirmation: a single order (with items) of the current customer.
    """
    return service.get_order(current_customer, order_id)
