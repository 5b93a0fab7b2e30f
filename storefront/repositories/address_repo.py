# storefront/repositories/address_repo.py
import uuid

from postgrest.exceptions import APIError
from supabase import Client

from storefront.schemas.address import Address, AddressCreate, AddressUpdate

# Postgres foreign_key_violation
FK_VIOLATION = "23503"


class AddressBackendError(Exception):
    """
    The address table could not be read or written.
    """


class AddressInUseError(AddressBackendError):
    """
    The address is still referenced (e.g. by an order) and cannot be deleted.
    """


class AddressRepository:
    """
    Data access for customer_addresses.

    Responsibilities:
      - CRUD scoped to one customer: every query filters on customer_id, so
        a customer never reads or changes someone else's address
      - translate postgrest errors into AddressBackendError
      - no FastAPI, no HTTP
    """

    TABLE = "customer_addresses"

    def __init__(self, client: Client):
        self.client = client

    def _run(self, query, failure: str):
        try:
            return query.execute()
        except APIError as e:
            if e.code == FK_VIOLATION:
                raise AddressInUseError(e.message or failure) from e
            raise AddressBackendError(e.message or failure) from e

    # ----- Reads -----

    def list_for_customer(self, customer_id: uuid.UUID) -> list[Address]:
        """
        Addresses of a customer, default first, then newest first.
        """
        res = self._run(
            self.client.table(self.TABLE)
            .select("*")
            .eq("customer_id", str(customer_id))
            .order("created_at", desc=True),
            "Failed to load addresses",
        )
        addresses = [Address.model_validate(row) for row in res.data or []]
        # is_default may be NULL; sort here instead of relying on NULLS ordering
        return sorted(addresses, key=lambda a: not a.is_default)

    def get(self, customer_id: uuid.UUID, address_id: uuid.UUID) -> Address | None:
        """Return one of the customer's addresses, or None."""
        res = self._run(
            self.client.table(self.TABLE)
            .select("*")
            .eq("id", str(address_id))
            .eq("customer_id", str(customer_id))
            .limit(1),
            "Failed to load address",
        )
        return Address.model_validate(res.data[0]) if res.data else None

    # ----- Writes -----

    def create(self, customer_id: uuid.UUID, payload: AddressCreate) -> Address:
        """Insert a new address for the customer and return the stored row."""
        row = payload.model_dump()
        row["customer_id"] = str(customer_id)
        res = self._run(
            self.client.table(self.TABLE).insert(row),
            "Failed to save address",
        )
        if not res.data:
            raise AddressBackendError("Address insert returned no row")
        return Address.model_validate(res.data[0])

    def update(
        self,
        customer_id: uuid.UUID,
        address_id: uuid.UUID,
        payload: AddressUpdate,
    ) -> Address | None:
        """
        Apply the provided fields. Returns None when the customer has no
        such address.
        """
        fields = payload.model_dump(exclude_unset=True)
        if not fields:
            return self.get(customer_id, address_id)
        res = self._run(
            self.client.table(self.TABLE)
            .update(fields)
            .eq("id", str(address_id))
            .eq("customer_id", str(customer_id)),
            "Failed to update address",
        )
        return Address.model_validate(res.data[0]) if res.data else None

    def delete(self, customer_id: uuid.UUID, address_id: uuid.UUID) -> bool:
        """Delete the address; False when the customer has no such address."""
        res = self._run(
            self.client.table(self.TABLE)
            .delete()
            .eq("id", str(address_id))
            .eq("customer_id", str(customer_id)),
            "Failed to delete address",
        )
        return bool(res.data)

    def set_default(
        self,
        customer_id: uuid.UUID,
        address_id: uuid.UUID,
    ) -> Address | None:
        """
        Make one address the customer's only default.

        Steps:
          1. Check the address belongs to the customer (else None, nothing
             changes).
          2. Unset is_default on all of the customer's addresses.
          3. Set it on the chosen one.
        """
        target = self.get(customer_id, address_id)
        if target is None:
            return None

        self._run(
            self.client.table(self.TABLE)
            .update({"is_default": False})
            .eq("customer_id", str(customer_id)),
            "Failed to update default address",
        )
        res = self._run(
            self.client.table(self.TABLE)
            .update({"is_default": True})
            .eq("id", str(address_id))
            .eq("customer_id", str(customer_id)),
            "Failed to update default address",
        )
        if res.data:
            return Address.model_validate(res.data[0])
        return target.model_copy(update={"is_default": True})
