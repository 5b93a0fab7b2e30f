# storefront/schemas/address.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class Address(SQLModel):
    """
    Saved delivery address (customer_addresses row).
    """

    id: uuid.UUID
    customer_id: uuid.UUID
    address_line_1: str
    address_line_2: str | None = None
    city: str
    state: str
    postal_code: str
    contact_number: str
    is_default: bool | None = False
    created_at: datetime | None = None


def _strip_optional(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


class AddressCreate(SQLModel):
    """
    Payload for a new delivery address.

    Validation rules (after trimming whitespace):
      - address_line_1: 5..200 chars
      - address_line_2: optional, up to 200 chars; blank becomes NULL
      - city / state: 2..100 chars
      - postal_code: 4..20 chars
      - contact_number: 10..15 chars

    customer_id and is_default are never taken from the client.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    address_line_1: str = Field(min_length=5, max_length=200)
    address_line_2: str | None = Field(default=None, max_length=200)
    city: str = Field(min_length=2, max_length=100)
    state: str = Field(min_length=2, max_length=100)
    postal_code: str = Field(min_length=4, max_length=20)
    contact_number: str = Field(min_length=10, max_length=15)

    @field_validator("address_line_2")
    @classmethod
    def blank_line_2_is_none(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class AddressUpdate(SQLModel):
    """
    Partial update; only the provided fields change.

    Same limits as AddressCreate. The default flag has its own endpoint.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    address_line_1: str | None = Field(default=None, min_length=5, max_length=200)
    address_line_2: str | None = Field(default=None, max_length=200)
    city: str | None = Field(default=None, min_length=2, max_length=100)
    state: str | None = Field(default=None, min_length=2, max_length=100)
    postal_code: str | None = Field(default=None, min_length=4, max_length=20)
    contact_number: str | None = Field(default=None, min_length=10, max_length=15)

    @field_validator("address_line_2")
    @classmethod
    def blank_line_2_is_none(cls, v: str | None) -> str | None:
        return _strip_optional(v)
