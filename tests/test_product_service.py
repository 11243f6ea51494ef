"""Tests for the product action layer."""
from unittest.mock import patch

import pytest

from app.repositories.product_repository import ProductRepository, PersistenceError
from app.services.product_service import ProductService, FetchError


@pytest.fixture
def service(db_session):
    return ProductService(db_session)


def test_create_then_list(service, widget):
    """Test a created product is listed with normalized fields."""
    result = service.create_product(widget)

    assert result.success is True
    assert result.error is None

    products = service.list_products()
    assert len(products) == 1
    listed = products[0]
    assert listed.name == "Widget"
    assert listed.description == "A widget"
    assert listed.price == 9.99
    assert isinstance(listed.price, float)
    assert listed.stock == 10
    assert listed.id is not None
    assert listed.created_at is not None


def test_list_newest_first(service):
    """Test the listing is ordered by creation, newest first."""
    for name in ("First", "Second", "Third"):
        service.create_product({"name": name, "price": 1, "stock": 1})

    names = [p.name for p in service.list_products()]
    assert names == ["Third", "Second", "First"]


def test_create_invalid_does_not_insert(service, cache_client):
    """Test invalid input returns a validation error and writes nothing."""
    result = service.create_product({"name": "", "price": 5, "stock": 1})

    assert result.error == "Invalid data"
    assert result.field_errors == {"name": "Name is required"}
    assert result.success is None
    assert service.list_products() == []
    cache_client.delete.assert_not_called()


def test_create_zero_price_rejected(service):
    """Test a price of 0 fails validation."""
    result = service.create_product({"name": "X", "price": 0, "stock": 1})

    assert result.error == "Invalid data"
    assert "price" in result.field_errors


def test_create_invalidates_listing(service, widget, cache_client):
    """Test a successful create marks the admin listing as stale."""
    service.create_product(widget)

    cache_client.delete.assert_called_once_with("page:/admin")


def test_create_store_failure(service, widget, cache_client):
    """Test a store failure is returned as a generic error."""
    with patch.object(ProductRepository, "create", side_effect=PersistenceError("disk full")):
        result = service.create_product(widget)

    assert result.error == "Failed to create product"
    assert result.field_errors is None
    assert not result.is_validation_error
    cache_client.delete.assert_not_called()


def test_update_replaces_fields(service, widget, cache_client):
    """Test update replaces every editable field and leaves id and created_at alone."""
    service.create_product(widget)
    original = service.list_products()[0]
    cache_client.delete.reset_mock()

    result = service.update_product(
        original.id,
        {"name": "Gadget", "price": 19.5, "stock": 0, "id": 999, "created_at": "2000-01-01"},
    )

    assert result.success is True
    updated = service.list_products()[0]
    assert updated.id == original.id
    assert updated.created_at == original.created_at
    assert updated.name == "Gadget"
    assert updated.description is None
    assert updated.price == 19.5
    assert updated.stock == 0
    cache_client.delete.assert_called_once_with("page:/admin")


def test_update_invalid(service, widget):
    """Test update validates with the same rules as create."""
    service.create_product(widget)
    product_id = service.list_products()[0].id

    result = service.update_product(product_id, {**widget, "stock": -1})

    assert result.error == "Invalid data"
    assert service.list_products()[0].stock == 10


def test_update_missing_product(service, widget, cache_client):
    """Test updating an unknown id takes the generic failure path."""
    result = service.update_product(9999, widget)

    assert result.error == "Failed to update product"
    cache_client.delete.assert_not_called()


def test_delete_removes_one(service, widget):
    """Test delete removes exactly the requested product."""
    service.create_product(widget)
    service.create_product({**widget, "name": "Other"})
    target = service.list_products()[0]

    result = service.delete_product(target.id)

    assert result.success is True
    remaining = service.list_products()
    assert len(remaining) == 1
    assert target.id not in [p.id for p in remaining]


def test_delete_twice(service, widget, cache_client):
    """Test the second delete of the same id is a plain store failure."""
    service.create_product(widget)
    product_id = service.list_products()[0].id

    assert service.delete_product(product_id).success is True
    cache_client.delete.reset_mock()

    result = service.delete_product(product_id)
    assert result.error == "Failed to delete product"
    cache_client.delete.assert_not_called()


def test_list_failure_raises_fetch_error(service, widget):
    """Test a store failure while listing raises instead of returning rows."""
    service.create_product(widget)

    with patch.object(ProductRepository, "list", side_effect=PersistenceError("connection lost")):
        with pytest.raises(FetchError, match="Failed to fetch products"):
            service.list_products()


def test_create_oversized_stock_is_invalid(service, cache_client):
    """Test a stock wider than the column is rejected before reaching the store."""
    result = service.create_product({"name": "X", "price": 1, "stock": 10**20})

    assert result.error == "Invalid data"
    assert result.field_errors == {"stock": "Stock is too large"}
    assert service.list_products() == []
    cache_client.delete.assert_not_called()


def test_create_boolean_numbers_are_invalid(service):
    """Test booleans are not stored as price or stock."""
    result = service.create_product({"name": "X", "price": True, "stock": True})

    assert result.error == "Invalid data"
    assert service.list_products() == []


def test_repository_overflow_is_a_store_failure(db_session):
    """Test a value too wide for the driver surfaces as PersistenceError."""
    repository = ProductRepository(db_session)

    with pytest.raises(PersistenceError):
        repository.create({"name": "X", "price": 1, "stock": 10**20})

    assert repository.list() == []


def test_update_oversized_id(service, widget):
    """Test an id too wide for the database takes the generic failure path."""
    result = service.update_product(10**20, widget)

    assert result.error == "Failed to update product"


def test_delete_oversized_id(service, widget):
    """Test deleting an id too wide for the database returns a result."""
    service.create_product(widget)

    result = service.delete_product(10**20)

    assert result.error == "Failed to delete product"
    assert len(service.list_products()) == 1
