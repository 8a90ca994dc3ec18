"""Error taxonomy for the catalog application."""

from __future__ import annotations


class CatalogError(Exception):
    """Base class for errors surfaced to the catalog user."""


class ValidationFailed(CatalogError):
    """Submitted product fields broke one or more field rules.

    ``errors`` maps each failing field to its rule key (``required``,
    ``string``, ``numeric`` or ``max``).
    """

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        fields = ", ".join(sorted(self.errors))
        super().__init__(f"Invalid product fields: {fields}")


class ProductNotFoundError(CatalogError):
    """The referenced product id does not exist."""

    def __init__(self, product_id: int) -> None:
        self.product_id = product_id
        super().__init__(f"Product {product_id} not found")


class PersistenceError(CatalogError):
    """The store rejected or could not complete a write."""
