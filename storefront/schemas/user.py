# storefront/schemas/user.py
import uuid

from sqlmodel import SQLModel


class Customer(SQLModel):
    """
    Authenticated shopper, taken from the Supabase access token.

    Identity lives in Supabase Auth; nothing is mirrored locally.
    """

    id: uuid.UUID
    email: str | None = None
