"""FastAPI dependency implementations."""

from __future__ import annotations

import json
from collections.abc import Iterator
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from sqlmodel import Session

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.api.http.pages import PageRenderer
from src.catalog.core.services import FlashService, ProductService

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")

# Form plumbing fields that are never part of submitted product data
RESERVED_FIELDS = ("_method", "_token")


def _app_deps(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_db_session(request: Request) -> Iterator[Session]:
    """Yield a database session closed after the response is sent."""
    db = _app_deps(request).database_service.get_session()
    try:
        yield db
    finally:
        db.close()


def get_product_service(db: Session = Depends(get_db_session)) -> ProductService:
    """Get a product service bound to the request's database session."""
    return ProductService(db)


def get_flash_service(request: Request) -> FlashService:
    """Get the Flash service instance."""
    return _app_deps(request).flash_service


def get_pages(request: Request) -> PageRenderer:
    """Get the page renderer instance."""
    return _app_deps(request).pages


def get_browser_session_id(request: Request) -> str:
    """Get the browser session id resolved by the session middleware."""
    session_id = getattr(request.state, "session_id", None)
    if not session_id:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Browser session unavailable",
        )
    return session_id


async def get_submitted_fields(request: Request) -> dict[str, Any]:
    """Read submitted fields from a JSON, URL-encoded or multipart body."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip()

    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        fields: dict[str, Any] = {key: value for key, value in form.items()}
    else:
        body = await request.body()
        if not body:
            return {}
        try:
            fields = json.loads(body)
        except json.JSONDecodeError as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Request body is not valid JSON",
            ) from e
        if not isinstance(fields, dict):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Request body must be a JSON object",
            )

    for reserved in RESERVED_FIELDS:
        fields.pop(reserved, None)
    return fields


async def get_method_override(request: Request) -> str | None:
    """HTTP method tunnelled through a POST by an HTML form's ``_method`` field."""
    content_type = request.headers.get("content-type", "").split(";")[0].strip()
    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        value = form.get("_method")
    else:
        value = request.headers.get("X-HTTP-Method-Override")
    if isinstance(value, str) and value.strip():
        return value.strip().upper()
    return None
