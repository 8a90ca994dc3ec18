"""Product repository for data access operations."""

from datetime import UTC, datetime

from sqlmodel import Session, select

from .entity import Product
from .table import ProductTable


class ProductRepository:
    """Data-access layer for products.

    The repository flushes but never commits; the caller owns the transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def get(self, product_id: int) -> Product | None:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return None
        return Product.model_validate(row, from_attributes=True)

    def list_all(self) -> list[Product]:
        """Return every product in storage (id) order."""
        statement = select(ProductTable).order_by(ProductTable.id)
        rows = self._session.exec(statement).all()
        return [Product.model_validate(row, from_attributes=True) for row in rows]

    def create(self, product: Product) -> Product:
        """Insert a product; the store assigns its id."""
        row = ProductTable(
            name=product.name,
            price=product.price,
            description=product.description,
        )
        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Product.model_validate(row, from_attributes=True)

    def update(self, product: Product) -> Product:
        """Overwrite the stored row identified by ``product.id``."""
        row = self._session.get(ProductTable, product.id)
        if row is None:
            raise ValueError(f"Product with id {product.id} not found")

        row.name = product.name
        row.price = product.price
        row.description = product.description
        row.updated_at = datetime.now(UTC)

        self._session.add(row)
        self._session.flush()
        self._session.refresh(row)
        return Product.model_validate(row, from_attributes=True)

    def delete(self, product_id: int) -> bool:
        row = self._session.get(ProductTable, product_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    def count(self) -> int:
        return len(self._session.exec(select(ProductTable.id)).all())
