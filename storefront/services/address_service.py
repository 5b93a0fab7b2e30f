# storefront/services/address_service.py
import logging
import uuid

from fastapi import HTTPException, status

from storefront.repositories.address_repo import (
    AddressBackendError,
    AddressInUseError,
    AddressRepository,
)
from storefront.schemas.address import Address, AddressCreate, AddressUpdate
from storefront.schemas.user import Customer

logger = logging.getLogger(__name__)


def _backend_failure(e: AddressBackendError) -> HTTPException:
    logger.warning("Address backend failed: %s", e)
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=str(e) or "Address backend unavailable",
    )


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Address not found",
    )


class AddressService:
    """
    Saved delivery addresses of the logged-in customer.

    Maps repository results to HTTP errors:
      - unknown or foreign address -> 404
      - address still used by an order -> 409
      - backend failure -> 502
    """

    def __init__(self, repo: AddressRepository):
        self.repo = repo

    def list_addresses(self, customer: Customer) -> list[Address]:
        try:
            return self.repo.list_for_customer(customer.id)
        except AddressBackendError as e:
            raise _backend_failure(e)

    def create_address(self, customer: Customer, payload: AddressCreate) -> Address:
        try:
            address = self.repo.create(customer.id, payload)
        except AddressBackendError as e:
            raise _backend_failure(e)
        logger.info("Address %s added for %s", address.id, customer.id)
        return address

    def update_address(
        self,
        customer: Customer,
        address_id: uuid.UUID,
        payload: AddressUpdate,
    ) -> Address:
        try:
            address = self.repo.update(customer.id, address_id, payload)
        except AddressBackendError as e:
            raise _backend_failure(e)
        if address is None:
            raise _not_found()
        return address

    def delete_address(self, customer: Customer, address_id: uuid.UUID) -> None:
        try:
            deleted = self.repo.delete(customer.id, address_id)
        except AddressInUseError:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Address is used by an order",
            )
        except AddressBackendError as e:
            raise _backend_failure(e)
        if not deleted:
            raise _not_found()

    def set_default(self, customer: Customer, address_id: uuid.UUID) -> Address:
        try:
            address = self.repo.set_default(customer.id, address_id)
        except AddressBackendError as e:
            raise _backend_failure(e)
        if address is None:
            raise _not_found()
        logger.info("Default address of %s is now %s", customer.id, address_id)
        return address
