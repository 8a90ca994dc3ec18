"""Product database table model."""

from sqlmodel import Field

from src.catalog.entities._base import EntityTable

NAME_MAX_LENGTH = 255


class ProductTable(EntityTable, table=True):
    """Database persistence model for products.

    This represents how the Product entity is stored in the database.
    It's separate from the domain entity to maintain clean architecture
    while keeping related code together.
    """

    __tablename__ = "product"

    name: str = Field(max_length=NAME_MAX_LENGTH, nullable=False)
    price: float = Field(nullable=False)
    description: str | None = Field(default=None)
