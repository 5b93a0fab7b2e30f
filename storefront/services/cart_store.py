# storefront/services/cart_store.py
import logging
import threading
from decimal import Decimal
from typing import Callable

from pydantic import ValidationError

from storefront.repositories.cart_repo import CartSlot
from storefront.schemas.cart import (
    PLACEHOLDER_IMAGE,
    CartLine,
    CartLineRead,
    CartSummary,
    ProductPayload,
    cart_lines_adapter,
)

logger = logging.getLogger(__name__)

Observer = Callable[[], None]


class CartStore:
    """
    Single source of truth for one browser session's cart.

    Invariants:
      - at most one line per product_id, kept in insertion order
      - every stored quantity is >= 1
      - total_items / total_amount are derived from the lines on read

    Every mutation builds the next line map, writes it to the slot,
    swaps it in and notifies observers, all under one lock. If the slot
    write fails the cart keeps its previous state.

    Usage:
        store = CartStore(slot, "cart:<session id>")
        unsubscribe = store.subscribe(refresh_badge)
        store.add_item(ProductPayload(product_id="p1", name="Dosa", unit_price=100))
        store.total_items()   # 1
        unsubscribe()
    """

    def __init__(self, slot: CartSlot, slot_key: str):
        self.slot = slot
        self.slot_key = slot_key
        self._lock = threading.RLock()
        self._observers: list[Observer] = []
        self._lines: dict[str, CartLine] = self._restore()

    # ---- internal helpers ----

    def _restore(self) -> dict[str, CartLine]:
        """
        Load the persisted snapshot, or start empty.

        Missing, unreadable or malformed snapshots never reach the caller.
        """
        try:
            raw = self.slot.read(self.slot_key)
        except Exception:
            logger.exception("Cart slot %s unreadable, starting empty", self.slot_key)
            return {}

        if not raw:
            return {}

        try:
            lines = cart_lines_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("Corrupted cart snapshot %s: %s", self.slot_key, e)
            return {}

        restored: dict[str, CartLine] = {}
        for line in lines:
            if line.product_id in restored:
                logger.warning(
                    "Duplicate product %s in cart snapshot %s, discarding snapshot",
                    line.product_id,
                    self.slot_key,
                )
                return {}
            restored[line.product_id] = line
        return restored

    def _commit(self, lines: dict[str, CartLine]) -> None:
        """
        Persist, swap in and notify. Caller holds the lock.
        """
        payload = cart_lines_adapter.dump_json(list(lines.values()))
        self.slot.write(self.slot_key, payload.decode())
        self._lines = lines
        for observer in list(self._observers):
            # State is already committed; every observer still runs
            try:
                observer()
            except Exception:
                logger.exception("Cart observer %r failed on %s", observer, self.slot_key)

    def _copy_lines(self) -> dict[str, CartLine]:
        return {pid: line.model_copy() for pid, line in self._lines.items()}

    # ---- subscriptions ----

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """
        Register a no-argument callback fired after every mutation.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._observers.append(observer)
        return lambda: self.unsubscribe(observer)

    def unsubscribe(self, observer: Observer) -> None:
        with self._lock:
            if observer in self._observers:
                self._observers.remove(observer)

    def close(self) -> None:
        """
        End of session: drop observers. The persisted snapshot stays.
        """
        with self._lock:
            self._observers.clear()

    # ---- read accessors ----

    def lines(self) -> list[CartLine]:
        with self._lock:
            return [line.model_copy() for line in self._lines.values()]

    def total_items(self) -> int:
        with self._lock:
            return sum(line.quantity for line in self._lines.values())

    def total_amount(self) -> Decimal:
        with self._lock:
            return sum(
                (line.line_total for line in self._lines.values()),
                Decimal("0"),
            )

    def summary(self) -> CartSummary:
        """
        Lines and both aggregates read under one lock.
        """
        with self._lock:
            items = [
                CartLineRead(
                    product_id=line.product_id,
                    name=line.name,
                    unit_price=line.unit_price,
                    image_ref=line.image_ref,
                    quantity=line.quantity,
                    line_total=line.line_total,
                )
                for line in self._lines.values()
            ]
            return CartSummary(
                items=items,
                total_items=self.total_items(),
                total_amount=self.total_amount(),
            )

    # ---- mutations ----

    @staticmethod
    def _add_one(lines: dict[str, CartLine], product: ProductPayload) -> None:
        existing = lines.get(product.product_id)
        if existing is not None:
            existing.quantity += 1
        else:
            lines[product.product_id] = CartLine(
                product_id=product.product_id,
                name=product.name,
                unit_price=max(product.unit_price, Decimal("0")),
                image_ref=product.image_ref or PLACEHOLDER_IMAGE,
                quantity=1,
            )

    def add_item(self, product: ProductPayload) -> None:
        """
        Add one unit of a product.

        A new product gets a line with quantity 1 at the end; a known
        product has its quantity bumped by 1 and keeps the name, price
        and image recorded on the first add.
        """
        self.add_units(product, 1)

    def add_units(self, product: ProductPayload, count: int) -> None:
        """
        Apply `count` single-unit adds as one commit.

        Either all units land (one persist, one notification) or none do.
        count <= 0 is a no-op.
        """
        if count <= 0:
            return
        with self._lock:
            lines = self._copy_lines()
            for _ in range(count):
                self._add_one(lines, product)
            self._commit(lines)

    def update_quantity(self, product_id: str, new_quantity: int) -> None:
        """
        Set a line's quantity (absolute, not a delta).

        Unknown product_id is a no-op; new_quantity <= 0 removes the line.
        """
        with self._lock:
            if product_id not in self._lines:
                return
            lines = self._copy_lines()
            if new_quantity <= 0:
                del lines[product_id]
            else:
                lines[product_id].quantity = new_quantity
            self._commit(lines)

    def remove_item(self, product_id: str) -> None:
        with self._lock:
            if product_id not in self._lines:
                return
            lines = self._copy_lines()
            del lines[product_id]
            self._commit(lines)

    def clear(self) -> None:
        with self._lock:
            self._commit({})

    def remove_ordered(self, ordered: list[CartLine]) -> None:
        """
        Take the units of a placed order out of the cart.

        Each ordered line's quantity is subtracted from the current line;
        anything added after the order snapshot was taken stays. When the
        cart still matches the snapshot this empties it, like clear().
        """
        with self._lock:
            lines = self._copy_lines()
            changed = False
            for line in ordered:
                current = lines.get(line.product_id)
                if current is None:
                    continue
                remaining = current.quantity - line.quantity
                if remaining <= 0:
                    del lines[line.product_id]
                else:
                    current.quantity = remaining
                changed = True
            if changed:
                self._commit(lines)
