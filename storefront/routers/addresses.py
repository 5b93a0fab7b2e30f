# storefront/routers/addresses.py
import uuid

from fastapi import APIRouter, Depends, Response, status

from storefront.core.auth import require_customer
from storefront.core.supabase_client import supabase_admin
from storefront.repositories.address_repo import AddressRepository
from storefront.schemas.address import Address, AddressCreate, AddressUpdate
from storefront.schemas.user import Customer
from storefront.services.address_service import AddressService

router = APIRouter(prefix="/addresses", tags=["Addresses"])


def get_address_service() -> AddressService:
    return AddressService(AddressRepository(supabase_admin()))


@router.get("", response_model=list[Address])
def list_my_addresses(
    current_customer: Customer = Depends(require_customer),
    service: AddressService = Depends(get_address_service),
):
    """
    Saved addresses of the customer, default first.
    """
    return service.list_addresses(current_customer)


@router.post("", response_model=Address, status_code=status.HTTP_201_CREATED)
def add_address(
    payload: AddressCreate,
    current_customer: Customer = Depends(require_customer),
    service: AddressService = Depends(get_address_service),
):
    return service.create_address(current_customer, payload)


@router.patch("/{address_id}", response_model=Address)
def edit_address(
    address_id: uuid.UUID,
    payload: AddressUpdate,
    current_customer: Customer = Depends(require_customer),
    service: AddressService = Depends(get_address_service),
):
    """
    Partial update of one of the customer's addresses.
    """
    return service.update_address(current_customer, address_id, payload)


@router.delete("/{address_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_address(
    address_id: uuid.UUID,
    current_customer: Customer = Depends(require_customer),
    service: AddressService = Depends(get_address_service),
):
    service.delete_address(current_customer, address_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{address_id}/default", response_model=Address)
def make_default_address(
    address_id: uuid.UUID,
    current_customer: Customer = Depends(require_customer),
    service: AddressService = Depends(get_address_service),
):
    """
    Mark this address as the default; every other one is unset first.
    """
    return service.set_default(current_customer, address_id)
