# storefront/repositories/cart_repo.py
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy.engine import Engine
from sqlmodel import Session

from storefront.models.cart import CartSnapshot


class CartSlot(Protocol):
    """
    Durable key-value slot a cart persists itself into.
    """

    def read(self, key: str) -> str | None: ...

    def write(self, key: str, payload: str) -> None: ...


class SqlCartSlot:
    """
    Cart slot backed by the `cart_snapshots` table.

    - One row per key, payload overwritten on every write.
    - Each call opens and commits its own session; cart writes are
      independent of any request transaction.
    """

    def __init__(self, engine: Engine):
        self.engine = engine

    def read(self, key: str) -> str | None:
        with Session(self.engine) as session:
            row = session.get(CartSnapshot, key)
            return row.payload if row else None

    def write(self, key: str, payload: str) -> None:
        with Session(self.engine) as session:
            row = session.get(CartSnapshot, key)
            if row is None:
                row = CartSnapshot(slot_key=key, payload=payload)
            else:
                row.payload = payload
                row.updated_at = datetime.now(timezone.utc)
            session.add(row)
            session.commit()


class MemoryCartSlot:
    """
    In-process slot. Used by tests and when no database is wired.
    """

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self.data.get(key)

    def write(self, key: str, payload: str) -> None:
        self.data[key] = payload
