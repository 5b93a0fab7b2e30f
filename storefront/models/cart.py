# storefront/models/cart.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class CartSnapshot(SQLModel, table=True):
    """
    Persisted cart of one browser session.

    A plain key-value slot: the key names the session's cart and the
    payload is the JSON-encoded line sequence. Writes overwrite the
    whole payload (last write wins).
    """

    __tablename__ = "cart_snapshots"

    slot_key: str = Field(
        primary_key=True,
        max_length=255,
        description="Slot name, e.g. 'cart:<session id>'",
    )

    payload: str = Field(
        description="JSON array of cart lines",
    )

    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Last write timestamp (UTC)",
    )
