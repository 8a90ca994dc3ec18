from __future__ import annotations

from collections.abc import Callable, Generator

import pytest
from sqlalchemy import StaticPool
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine
from starlette.requests import Request

from src.catalog.core.services import FlashService, ProductService, WebSessionService
from src.catalog.core.storage.session_storage import InMemorySessionStorage

__all__ = [
    "engine",
    "session",
    "product_service",
    "session_storage",
    "flash_service",
    "web_session_service",
    "request_factory",
]


@pytest.fixture
def engine() -> Generator[Engine]:
    """Fresh in-memory database with the product table created."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Import models to register them with the metadata
    from src.catalog.entities.product import ProductTable  # noqa: F401

    SQLModel.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session(engine: Engine) -> Generator[Session]:
    """Create a fresh database session for testing."""
    with Session(engine, expire_on_commit=False) as session:
        try:
            yield session
        finally:
            session.rollback()
            session.close()


@pytest.fixture
def product_service(session: Session) -> ProductService:
    return ProductService(session)


@pytest.fixture
def session_storage() -> InMemorySessionStorage:
    return InMemorySessionStorage()


@pytest.fixture
def flash_service(session_storage: InMemorySessionStorage) -> FlashService:
    return FlashService(session_storage)


@pytest.fixture
def web_session_service(session_storage: InMemorySessionStorage) -> WebSessionService:
    return WebSessionService(session_storage)


@pytest.fixture
def request_factory() -> Callable[..., Request]:
    def _make_request(
        path: str = "/", headers: dict[str, str] | None = None, method: str = "GET"
    ) -> Request:
        path, _, query = path.partition("?")
        scope = {
            "type": "http",
            "headers": [
                (name.lower().encode("ascii"), value.encode("latin-1"))
                for name, value in (headers or {}).items()
            ],
            "method": method,
            "path": path,
            "query_string": query.encode("ascii"),
            "scheme": "http",
            "server": ("testserver", 80),
        }
        return Request(scope)

    return _make_request
