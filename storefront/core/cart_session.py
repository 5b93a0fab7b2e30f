# storefront/core/cart_session.py
import logging
import threading
import time
import uuid
from collections import OrderedDict
from typing import Callable

from fastapi import Depends, Request, Response

from storefront.core.config import get_settings
from storefront.repositories.cart_repo import CartSlot
from storefront.services.cart_store import CartStore

logger = logging.getLogger(__name__)

settings = get_settings()


class CartSessions:
    """
    Owns the CartStore of every live browser session.

    Lifecycle:
      - open(session_id): build the store (restoring its snapshot) on first use
      - view(session_id): the live store if there is one, else a throwaway
        store over the snapshot that is never registered
      - close(session_id): tear the store down; the snapshot survives so a
        later open restores the cart
      - close_all(): called on application shutdown

    Stores idle for longer than `idle_seconds` are closed on the next open,
    and the least recently used ones go once more than `max_sessions` are
    live. Closing never touches the snapshot.
    """

    def __init__(
        self,
        slot: CartSlot,
        prefix: str = "cart",
        idle_seconds: float = 1800,
        max_sessions: int = 10000,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.slot = slot
        self.prefix = prefix
        self.idle_seconds = idle_seconds
        self.max_sessions = max_sessions
        self.clock = clock
        # session_id -> (store, last used), least recently used first
        self._stores: OrderedDict[str, tuple[CartStore, float]] = OrderedDict()
        self._lock = threading.Lock()

    def slot_key(self, session_id: str) -> str:
        return f"{self.prefix}:{session_id}"

    def _evict(self, now: float) -> list[CartStore]:
        """
        Unregister idle and overflow stores. Caller holds the lock.
        """
        evicted: list[CartStore] = []
        while self._stores:
            session_id, (store, last_used) = next(iter(self._stores.items()))
            if now - last_used < self.idle_seconds and len(self._stores) <= self.max_sessions:
                break
            del self._stores[session_id]
            evicted.append(store)
        return evicted

    def open(self, session_id: str) -> CartStore:
        with self._lock:
            now = self.clock()
            entry = self._stores.pop(session_id, None)
            store = entry[0] if entry is not None else CartStore(
                self.slot, self.slot_key(session_id)
            )
            self._stores[session_id] = (store, now)
            evicted = self._evict(now)
        if evicted:
            logger.info("Closing %d idle cart sessions", len(evicted))
        for old in evicted:
            old.close()
        return store

    def view(self, session_id: str) -> CartStore:
        with self._lock:
            entry = self._stores.get(session_id)
        if entry is not None:
            return entry[0]
        return CartStore(self.slot, self.slot_key(session_id))

    def close(self, session_id: str) -> None:
        with self._lock:
            entry = self._stores.pop(session_id, None)
        if entry is not None:
            entry[0].close()

    def close_all(self) -> None:
        with self._lock:
            stores = [store for store, _ in self._stores.values()]
            self._stores.clear()
        for store in stores:
            store.close()

    def __len__(self) -> int:
        return len(self._stores)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._stores


def get_cart_session_id(request: Request, response: Response) -> str:
    """
    Resolve the browser session from its cookie, issuing one if absent.
    """
    cookie_name = settings.CART_SESSION_COOKIE
    session_id = request.cookies.get(cookie_name)
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(cookie_name, session_id, httponly=True, samesite="lax")
    return session_id


def get_cart_sessions(request: Request) -> CartSessions:
    return request.app.state.cart_sessions


def get_cart_store(
    session_id: str = Depends(get_cart_session_id),
    sessions: CartSessions = Depends(get_cart_sessions),
) -> CartStore:
    """
    The CartStore of the caller's browser session, for mutations.
    """
    return sessions.open(session_id)


def get_cart_view(
    session_id: str = Depends(get_cart_session_id),
    sessions: CartSessions = Depends(get_cart_sessions),
) -> CartStore:
    """
    Read-only access to the caller's cart; does not register a session.
    """
    return sessions.view(session_id)
