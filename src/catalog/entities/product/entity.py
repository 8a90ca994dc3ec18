"""Entity: Product."""

from typing import Any

from pydantic import Field

from src.catalog.entities._base import Entity


class Product(Entity):
    """Product entity representing an item of the catalog.

    Instances read from the store always satisfy the product field rules;
    writes go through the validated input models in
    ``src.catalog.core.validation``.
    """

    name: str = Field(description="Product name")
    price: float = Field(description="Product price")
    description: str | None = Field(default=None, description="Free-text description")

    def to_props(self) -> dict[str, Any]:
        """Serialise the product for page props."""
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "description": self.description,
        }

    def __eq__(self, other: Any) -> bool:
        """Compare products by business attributes, ignoring timestamps."""
        if not isinstance(other, Product):
            return False

        return (
            self.id == other.id
            and self.name == other.name
            and self.price == other.price
            and self.description == other.description
        )

    def __hash__(self) -> int:
        """Hash based on business attributes, ignoring timestamps."""
        return hash((
            self.id,
            self.name,
            self.price,
            self.description,
        ))
