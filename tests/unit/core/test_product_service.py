"""Tests for ProductService write and read handlers."""

import pytest
from sqlalchemy.exc import OperationalError

from src.catalog.core.errors import PersistenceError, ProductNotFoundError
from src.catalog.core.services import ProductService
from src.catalog.runtime.config.config_data import ConfigData
from src.catalog.runtime.context import with_context


class TestCreate:
    """Creating products."""

    def test_create_persists_and_reports_flash(self, product_service: ProductService):
        result = product_service.create(
            {"name": "Widget", "price": "12.50", "description": ""}
        )

        assert result.ok
        assert result.errors == {}
        assert result.flash == "Product created successfully"
        assert result.product.id == 1
        assert result.product.price == 12.5

        stored = product_service.list_products()
        assert [(p.id, p.name, p.price, p.description) for p in stored] == [
            (1, "Widget", 12.5, "")
        ]

    def test_invalid_create_writes_nothing(self, product_service: ProductService):
        result = product_service.create({"name": "", "price": "abc"})

        assert not result.ok
        assert result.errors == {"name": "required", "price": "numeric"}
        assert result.flash is None
        assert result.product is None
        assert product_service.list_products() == []

    def test_extra_fields_are_ignored(self, product_service: ProductService):
        result = product_service.create({"name": "Widget", "price": 1, "id": 500})

        assert result.product.id == 1

    def test_configured_flash_text(self, product_service: ProductService):
        override = ConfigData()
        override.catalog.created_message = "Saved"

        with with_context(override):
            result = product_service.create({"name": "Widget", "price": 1})

        assert result.flash == "Saved"

    def test_storage_failure_raises_persistence_error(
        self, product_service: ProductService, session, monkeypatch
    ):
        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("disk full"))

        monkeypatch.setattr(session, "commit", failing_commit)

        with pytest.raises(PersistenceError):
            product_service.create({"name": "Widget", "price": 1})

        monkeypatch.undo()
        assert product_service.list_products() == []


class TestUpdate:
    """Updating products."""

    def test_update_without_description_keeps_it(self, product_service: ProductService):
        created = product_service.create(
            {"name": "A", "price": 1, "description": "keep me"}
        ).product

        result = product_service.update(created.id, {"name": "X", "price": 9.99})

        assert result.ok
        assert result.flash == "Product updated successfully"
        stored = product_service.get_product(created.id)
        assert (stored.name, stored.price, stored.description) == ("X", 9.99, "keep me")

    def test_update_with_description_overwrites_it(
        self, product_service: ProductService
    ):
        created = product_service.create(
            {"name": "A", "price": 1, "description": "old"}
        ).product

        product_service.update(
            created.id, {"name": "A", "price": 1, "description": ""}
        )

        assert product_service.get_product(created.id).description == ""

    def test_invalid_update_leaves_product_unchanged(
        self, product_service: ProductService
    ):
        created = product_service.create({"name": "A", "price": 1}).product

        result = product_service.update(created.id, {"name": "", "price": "abc"})

        assert result.errors == {"name": "required", "price": "numeric"}
        assert product_service.get_product(created.id) == created

    def test_update_missing_product(self, product_service: ProductService):
        with pytest.raises(ProductNotFoundError) as exc_info:
            product_service.update(42, {"name": "X", "price": 1})
        assert exc_info.value.product_id == 42

    def test_missing_product_checked_before_validation(
        self, product_service: ProductService
    ):
        with pytest.raises(ProductNotFoundError):
            product_service.update(42, {"name": "", "price": "abc"})


class TestDelete:
    """Deleting and reading products."""

    def test_delete_removes_product(self, product_service: ProductService):
        first = product_service.create({"name": "A", "price": 1}).product
        second = product_service.create({"name": "B", "price": 2}).product

        result = product_service.delete(first.id)

        assert result.flash == "Product deleted successfully"
        assert [p.id for p in product_service.list_products()] == [second.id]

    def test_delete_missing_product(self, product_service: ProductService):
        with pytest.raises(ProductNotFoundError):
            product_service.delete(7)

    def test_deleted_id_is_gone(self, product_service: ProductService):
        created = product_service.create({"name": "A", "price": 1}).product
        product_service.delete(created.id)

        with pytest.raises(ProductNotFoundError):
            product_service.get_product(created.id)

    def test_list_in_insertion_order(self, product_service: ProductService):
        for name in ("first", "second", "third"):
            product_service.create({"name": name, "price": 1})

        assert [p.name for p in product_service.list_products()] == [
            "first",
            "second",
            "third",
        ]
