"""Pytest configuration and fixtures"""
import os
import uuid
from decimal import Decimal
from unittest.mock import Mock

import pytest

# Set test environment variables before any storefront import
os.environ.setdefault("SUPABASE_URL", "https://test.supabase.co")
os.environ.setdefault("SUPABASE_KEY", "test_anon_key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test_jwt_secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from storefront.repositories.cart_repo import MemoryCartSlot  # noqa: E402
from storefront.schemas.cart import ProductPayload  # noqa: E402
from storefront.schemas.address import Address  # noqa: E402
from storefront.schemas.user import Customer  # noqa: E402
from storefront.services.cart_store import CartStore  # noqa: E402

SLOT_KEY = "cart:test-session"


@pytest.fixture
def memory_slot():
    """Empty in-memory persistence slot"""
    return MemoryCartSlot()


@pytest.fixture
def store(memory_slot):
    """Fresh cart store on the in-memory slot"""
    return CartStore(memory_slot, SLOT_KEY)


@pytest.fixture
def product_a():
    return ProductPayload(
        product_id="food-a",
        name="Masala Dosa",
        unit_price=Decimal("100"),
        image_ref="https://cdn.test/dosa.png",
    )


@pytest.fixture
def product_b():
    return ProductPayload(
        product_id="food-b",
        name="Filter Coffee",
        unit_price=Decimal("50"),
    )


@pytest.fixture
def customer():
    return Customer(id=uuid.UUID("11111111-1111-1111-1111-111111111111"), email="eater@test.io")


@pytest.fixture
def default_address(customer):
    return Address(
        id=uuid.UUID("22222222-2222-2222-2222-222222222222"),
        customer_id=customer.id,
        address_line_1="12 MG Road",
        city="Bengaluru",
        state="KA",
        postal_code="560001",
        contact_number="9999999999",
        is_default=True,
    )


@pytest.fixture
def other_address(customer):
    return Address(
        id=uuid.UUID("33333333-3333-3333-3333-333333333333"),
        customer_id=customer.id,
        address_line_1="4 Church Street",
        city="Bengaluru",
        state="KA",
        postal_code="560002",
        contact_number="8888888888",
        is_default=False,
    )


@pytest.fixture
def mock_order_backend():
    """Order backend that accepts every order"""
    backend = Mock()
    backend.submit_order.return_value = uuid.UUID("44444444-4444-4444-4444-444444444444")
    backend.get_order.return_value = None
    return backend


@pytest.fixture
def mock_address_repo(default_address, other_address):
    repo = Mock()
    repo.list_for_customer.return_value = [default_address, other_address]
    return repo


@pytest.fixture
def mock_supabase_client():
    """Mock Supabase client"""
    client = Mock()

    table_mock = Mock()
    table_mock.select.return_value = table_mock
    table_mock.insert.return_value = table_mock
    table_mock.update.return_value = table_mock
    table_mock.delete.return_value = table_mock
    table_mock.eq.return_value = table_mock
    table_mock.order.return_value = table_mock
    table_mock.limit.return_value = table_mock

    client.table.return_value = table_mock
    return client
