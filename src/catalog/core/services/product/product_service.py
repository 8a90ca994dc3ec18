"""Product write and read handlers.

Writes run validate, persist, then report a flash message on the returned
``WriteResult``. Storing that message in the browser session is the caller's
job; nothing here touches session state.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from src.catalog.core.errors import (
    PersistenceError,
    ProductNotFoundError,
    ValidationFailed,
)
from src.catalog.core.validation import (
    validate_product_create,
    validate_product_update,
)
from src.catalog.entities.product import Product, ProductRepository
from src.catalog.runtime.context import get_config


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a product write.

    Either ``errors`` is non-empty and nothing was written, or ``errors`` is
    empty and ``flash`` holds the success text for the next rendered page.
    """

    product: Product | None = None
    errors: dict[str, str] = field(default_factory=dict)
    flash: str | None = None

    @property
    def ok(self) -> bool:
        return not self.errors


class ProductService:
    """Create, update, delete and list products inside one database session."""

    def __init__(self, db_session: Session) -> None:
        self._session = db_session
        self._repository = ProductRepository(db_session)

    def _commit(self) -> None:
        try:
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            raise PersistenceError("Could not save product changes") from e

    def _require(self, product_id: int) -> Product:
        product = self._repository.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def list_products(self) -> list[Product]:
        """Return every stored product in insertion order."""
        return self._repository.list_all()

    def get_product(self, product_id: int) -> Product:
        """Return one product.

        Raises:
            ProductNotFoundError: if ``product_id`` does not exist.
        """
        return self._require(product_id)

    def create(self, raw: Mapping[str, Any]) -> WriteResult:
        """Validate ``raw`` and insert a new product.

        Args:
            raw: Submitted fields; anything besides name, price and
                description is ignored.

        Returns:
            WriteResult with the created product and the created flash, or
            with field errors and no write.
        """
        catalog_config = get_config().catalog
        try:
            data = validate_product_create(
                raw, name_max_length=catalog_config.name_max_length
            )
        except ValidationFailed as e:
            logger.bind(fields=sorted(e.errors)).info("product.validation_failed")
            return WriteResult(errors=e.errors)

        try:
            created = self._repository.create(Product(**data.model_dump()))
        except SQLAlchemyError as e:
            self._session.rollback()
            raise PersistenceError("Could not create product") from e
        self._commit()

        logger.bind(product_id=created.id).info("product.created")
        return WriteResult(product=created, flash=catalog_config.created_message)

    def update(self, product_id: int, raw: Mapping[str, Any]) -> WriteResult:
        """Validate ``raw`` and overwrite the product ``product_id``.

        The stored description is kept when ``raw`` carries none.

        Raises:
            ProductNotFoundError: if ``product_id`` does not exist.
        """
        catalog_config = get_config().catalog
        current = self._require(product_id)
        try:
            data = validate_product_update(
                raw, name_max_length=catalog_config.name_max_length
            )
        except ValidationFailed as e:
            logger.bind(product_id=product_id, fields=sorted(e.errors)).info(
                "product.validation_failed"
            )
            return WriteResult(errors=e.errors)

        changes = {"name": data.name, "price": data.price}
        if data.description_submitted:
            changes["description"] = data.description

        try:
            updated = self._repository.update(current.model_copy(update=changes))
        except ValueError as e:
            raise ProductNotFoundError(product_id) from e
        except SQLAlchemyError as e:
            self._session.rollback()
            raise PersistenceError("Could not update product") from e
        self._commit()

        logger.bind(product_id=product_id).info("product.updated")
        return WriteResult(product=updated, flash=catalog_config.updated_message)

    def delete(self, product_id: int) -> WriteResult:
        """Remove the product ``product_id`` immediately.

        Raises:
            ProductNotFoundError: if ``product_id`` does not exist.
        """
        try:
            deleted = self._repository.delete(product_id)
        except SQLAlchemyError as e:
            self._session.rollback()
            raise PersistenceError("Could not delete product") from e
        if not deleted:
            raise ProductNotFoundError(product_id)
        self._commit()

        logger.bind(product_id=product_id).info("product.deleted")
        return WriteResult(flash=get_config().catalog.deleted_message)
