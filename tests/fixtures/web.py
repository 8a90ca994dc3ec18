from __future__ import annotations

import html
import json
import re
from collections.abc import Generator
from typing import Any

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from src.catalog.api.http.app import create_app
from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.api.http.pages import PageRenderer
from src.catalog.core.services import DbSessionService, FlashService, WebSessionService
from src.catalog.core.storage.session_storage import InMemorySessionStorage

__all__ = ["INERTIA", "app_dependencies", "application", "client", "page_from_html"]

INERTIA = {"X-Inertia": "true"}

_DATA_PAGE = re.compile(r'data-page="([^"]*)"')


def page_from_html(body: str) -> dict[str, Any]:
    """Extract the page object embedded in the HTML shell."""
    match = _DATA_PAGE.search(body)
    assert match is not None, "HTML shell has no data-page attribute"
    return json.loads(html.unescape(match.group(1)))


@pytest.fixture
def app_dependencies(
    engine: Engine, session_storage: InMemorySessionStorage
) -> ApplicationDependencies:
    return ApplicationDependencies(
        database_service=DbSessionService(engine=engine),
        session_storage=session_storage,
        web_session_service=WebSessionService(session_storage),
        flash_service=FlashService(session_storage),
        pages=PageRenderer(),
    )


@pytest.fixture
def application(app_dependencies: ApplicationDependencies):
    app = create_app()
    app.state.app_dependencies = app_dependencies
    return app


@pytest.fixture
def client(application) -> Generator[TestClient]:
    """Test client with startup/shutdown run and a cookie jar per test."""
    with TestClient(application) as client:
        yield client
