"""Tests for the product repository."""

import pytest
from sqlmodel import Session

from src.catalog.entities.product import Product, ProductRepository


@pytest.fixture
def repository(session: Session) -> ProductRepository:
    return ProductRepository(session)


class TestProductRepository:
    """Data access against an in-memory SQLite store."""

    def test_create_assigns_id_and_timestamps(self, repository):
        created = repository.create(Product(name="Widget", price=12.5))

        assert created.id == 1
        assert created.name == "Widget"
        assert created.price == 12.5
        assert created.description is None
        assert created.created_at is not None

    def test_ids_are_unique_and_increasing(self, repository):
        first = repository.create(Product(name="A", price=1))
        second = repository.create(Product(name="B", price=2))

        assert second.id > first.id

    def test_get_missing_returns_none(self, repository):
        assert repository.get(42) is None

    def test_list_all_in_storage_order(self, repository):
        for name in ("C", "A", "B"):
            repository.create(Product(name=name, price=1))

        assert [p.name for p in repository.list_all()] == ["C", "A", "B"]

    def test_list_all_empty(self, repository):
        assert repository.list_all() == []

    def test_update_overwrites_fields(self, repository):
        created = repository.create(Product(name="Old", price=1, description="d"))

        updated = repository.update(
            created.model_copy(update={"name": "New", "price": 2.0})
        )

        assert updated.id == created.id
        assert updated.name == "New"
        assert updated.price == 2.0
        assert updated.description == "d"
        assert repository.get(created.id) == updated

    def test_update_missing_raises(self, repository):
        with pytest.raises(ValueError):
            repository.update(Product(id=99, name="Ghost", price=1))

    def test_delete(self, repository):
        created = repository.create(Product(name="Gone", price=1))

        assert repository.delete(created.id) is True
        assert repository.get(created.id) is None
        assert repository.delete(created.id) is False

    def test_count(self, repository):
        assert repository.count() == 0
        repository.create(Product(name="A", price=1))
        repository.create(Product(name="B", price=2))
        assert repository.count() == 2

    def test_equality_ignores_timestamps(self, repository):
        created = repository.create(Product(name="Same", price=3))
        copy = Product(id=created.id, name="Same", price=3)

        assert created == copy
        assert hash(created) == hash(copy)
        assert created.to_props() == {
            "id": created.id,
            "name": "Same",
            "price": 3.0,
            "description": None,
        }
