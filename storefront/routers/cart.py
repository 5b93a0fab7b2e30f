# storefront/routers/cart.py
from fastapi import APIRouter, Depends, Query

from storefront.core.cart_session import get_cart_store, get_cart_view
from storefront.schemas.cart import CartSummary, ProductPayload, QuantityUpdate
from storefront.services.cart_store import CartStore

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartSummary)
def get_my_cart(store: CartStore = Depends(get_cart_view)):
    """
    Get the current session's cart summary.

    Public: guests have carts too.
    """
    return store.summary()


@router.post("/items", response_model=CartSummary)
def add_to_cart(
    payload: ProductPayload,
    quantity: int = Query(default=1, ge=1, le=99),
    store: CartStore = Depends(get_cart_store),
):
    """
    Add a product to the cart.

    `quantity=3` from the detail page is three single-unit adds applied
    as one change, exactly like three taps on a catalog card.

    Returns the updated cart summary.
    """
    store.add_units(payload, quantity)
    return store.summary()


@router.patch("/items/{product_id}", response_model=CartSummary)
def update_cart_item(
    product_id: str,
    payload: QuantityUpdate,
    store: CartStore = Depends(get_cart_store),
):
    """
    Set the quantity of a product in the cart.

    Zero or negative removes the line; unknown products are ignored.
    """
    store.update_quantity(product_id, payload.quantity)
    return store.summary()


@router.delete("/items/{product_id}", response_model=CartSummary)
def remove_cart_item(
    product_id: str,
    store: CartStore = Depends(get_cart_store),
):
    """
    Remove a product from the cart.

    Returns the updated cart summary.
    """
    store.remove_item(product_id)
    return store.summary()


@router.delete("", response_model=CartSummary)
def clear_cart(store: CartStore = Depends(get_cart_store)):
    """
    Clear the entire cart.

    Returns an empty cart summary.
    """
    store.clear()
    return store.summary()
