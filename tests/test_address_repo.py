"""
Tests for the Supabase address repository
"""

import uuid
from unittest.mock import Mock, call

import pytest
from postgrest.exceptions import APIError

from storefront.repositories.address_repo import (
    AddressBackendError,
    AddressInUseError,
    AddressRepository,
)
from storefront.schemas.address import AddressCreate, AddressUpdate

CUSTOMER_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")
ADDRESS_ID = uuid.UUID("33333333-3333-3333-3333-333333333333")


def address_row(address_id=ADDRESS_ID, is_default=False, **overrides):
    row = {
        "id": str(address_id),
        "customer_id": str(CUSTOMER_ID),
        "address_line_1": "4 Church Street",
        "address_line_2": None,
        "city": "Bengaluru",
        "state": "KA",
        "postal_code": "560002",
        "contact_number": "8888888888",
        "is_default": is_default,
        "created_at": "2026-01-01T10:00:00+00:00",
    }
    row.update(overrides)
    return row


class TestListAddresses:
    def test_default_first(self, mock_supabase_client):
        table = mock_supabase_client.table.return_value
        newer = uuid.uuid4()
        table.execute.return_value = Mock(
            data=[address_row(newer), address_row(is_default=None), address_row(uuid.uuid4(), True)]
        )

        addresses = AddressRepository(mock_supabase_client).list_for_customer(CUSTOMER_ID)

        assert addresses[0].is_default is True
        assert addresses[1].id == newer
        mock_supabase_client.table.assert_called_with("customer_addresses")
        table.eq.assert_called_with("customer_id", str(CUSTOMER_ID))

    def test_backend_error(self, mock_supabase_client):
        mock_supabase_client.table.return_value.execute.side_effect = APIError(
            {"message": "timeout", "code": "57014"}
        )

        with pytest.raises(AddressBackendError, match="timeout"):
            AddressRepository(mock_supabase_client).list_for_customer(CUSTOMER_ID)


class TestWriteAddresses:
    """Insert, update and delete, always scoped to the customer."""

    def test_create_sets_owner(self, mock_supabase_client):
        table = mock_supabase_client.table.return_value
        table.execute.return_value = Mock(data=[address_row()])
        payload = AddressCreate(
            address_line_1="4 Church Street",
            address_line_2="   ",
            city="Bengaluru",
            state="KA",
            postal_code="560002",
            contact_number="8888888888",
        )

        address = AddressRepository(mock_supabase_client).create(CUSTOMER_ID, payload)

        assert address.id == ADDRESS_ID
        row = table.insert.call_args.args[0]
        assert row["customer_id"] == str(CUSTOMER_ID)
        assert row["address_line_2"] is None
        assert "is_default" not in row

    def test_create_without_returned_row(self, mock_supabase_client):
        mock_supabase_client.table.return_value.execute.return_value = Mock(data=[])
        payload = AddressCreate(
            address_line_1="4 Church Street",
            city="Bengaluru",
            state="KA",
            postal_code="560002",
            contact_number="8888888888",
        )

        with pytest.raises(AddressBackendError):
            AddressRepository(mock_supabase_client).create(CUSTOMER_ID, payload)

    def test_update_sends_only_given_fields(self, mock_supabase_client):
        table = mock_supabase_client.table.return_value
        table.execute.return_value = Mock(data=[address_row(city="Mysuru")])

        address = AddressRepository(mock_supabase_client).update(
            CUSTOMER_ID, ADDRESS_ID, AddressUpdate(city=" Mysuru ")
        )

        assert address.city == "Mysuru"
        table.update.assert_called_once_with({"city": "Mysuru"})
        table.eq.assert_any_call("id", str(ADDRESS_ID))
        table.eq.assert_any_call("customer_id", str(CUSTOMER_ID))

    def test_update_foreign_address(self, mock_supabase_client):
        mock_supabase_client.table.return_value.execute.return_value = Mock(data=[])

        assert (
            AddressRepository(mock_supabase_client).update(
                CUSTOMER_ID, ADDRESS_ID, AddressUpdate(city="Mysuru")
            )
            is None
        )

    def test_empty_update_reads_back(self, mock_supabase_client):
        table = mock_supabase_client.table.return_value
        table.execute.return_value = Mock(data=[address_row()])

        address = AddressRepository(mock_supabase_client).update(
            CUSTOMER_ID, ADDRESS_ID, AddressUpdate()
        )

        assert address.id == ADDRESS_ID
        table.update.assert_not_called()

    def test_delete(self, mock_supabase_client):
        table = mock_supabase_client.table.return_value
        table.execute.return_value = Mock(data=[address_row()])

        assert AddressRepository(mock_supabase_client).delete(CUSTOMER_ID, ADDRESS_ID) is True
        table.delete.assert_called_once()
        table.eq.assert_any_call("customer_id", str(CUSTOMER_ID))

    def test_delete_missing(self, mock_supabase_client):
        mock_supabase_client.table.return_value.execute.return_value = Mock(data=[])

        assert AddressRepository(mock_supabase_client).delete(CUSTOMER_ID, ADDRESS_ID) is False

    def test_delete_referenced_by_order(self, mock_supabase_client):
        mock_supabase_client.table.return_value.execute.side_effect = APIError(
            {"message": "violates foreign key constraint", "code": "23503"}
        )

        with pytest.raises(AddressInUseError):
            AddressRepository(mock_supabase_client).delete(CUSTOMER_ID, ADDRESS_ID)


class TestSetDefault:
    def test_unsets_all_then_sets_one(self, mock_supabase_client):
        table = mock_supabase_client.table.return_value
        table.execute.side_effect = [
            Mock(data=[address_row()]),
            Mock(data=[address_row(uuid.uuid4())]),
            Mock(data=[address_row(is_default=True)]),
        ]

        address = AddressRepository(mock_supabase_client).set_default(CUSTOMER_ID, ADDRESS_ID)

        assert address.is_default is True
        assert table.update.call_args_list == [
            call({"is_default": False}),
            call({"is_default": True}),
        ]

    def test_foreign_address_changes_nothing(self, mock_supabase_client):
        table = mock_supabase_client.table.return_value
        table.execute.return_value = Mock(data=[])

        assert (
            AddressRepository(mock_supabase_client).set_default(CUSTOMER_ID, ADDRESS_ID)
            is None
        )
        table.update.assert_not_called()
