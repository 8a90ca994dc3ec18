"""Product pages and form submissions.

Writes answer with a redirect: to the list on success (flash message stored
in the browser session), or back to the form on validation failure (field
errors and submitted input stored in the browser session).
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import RedirectResponse, Response

from src.catalog.api.http.deps import (
    get_browser_session_id,
    get_flash_service,
    get_method_override,
    get_pages,
    get_product_service,
    get_submitted_fields,
)
from src.catalog.api.http.pages import PageRenderer
from src.catalog.core.services import FlashService, ProductService, WriteResult
from src.catalog.core.validation import old_input

router = APIRouter(prefix="/products", tags=["products"])

LIST_URL = "/products"


def _redirect(url: str, method: str) -> RedirectResponse:
    # 303 makes clients follow PUT/PATCH/DELETE redirects with a GET
    code = status.HTTP_302_FOUND if method == "POST" else status.HTTP_303_SEE_OTHER
    return RedirectResponse(url=url, status_code=code)


async def _shared_props(flash: FlashService, session_id: str) -> dict[str, Any]:
    """Props every page receives; reading them consumes the pending values."""
    message = await flash.take_flash(session_id)
    form_state = await flash.take_form_state(session_id)
    return {
        "flash": {"message": message},
        "errors": form_state.errors,
        "old": form_state.old,
    }


async def _finish_write(
    result: WriteResult,
    fields: dict[str, Any],
    *,
    method: str,
    form_url: str,
    flash: FlashService,
    session_id: str,
) -> RedirectResponse:
    if result.ok:
        if result.flash:
            await flash.set_flash(session_id, result.flash)
        return _redirect(LIST_URL, method)

    await flash.set_form_state(session_id, result.errors, old_input(fields))
    return _redirect(form_url, method)


@router.get("", name="products.index")
async def list_products(
    request: Request,
    products: ProductService = Depends(get_product_service),
    flash: FlashService = Depends(get_flash_service),
    pages: PageRenderer = Depends(get_pages),
    session_id: str = Depends(get_browser_session_id),
) -> Response:
    """Render the product table with any pending flash message."""
    props = await _shared_props(flash, session_id)
    props["products"] = [product.to_props() for product in products.list_products()]
    return pages.render(request, "Products/Index", props)


@router.get("/create", name="products.create")
async def create_form(
    request: Request,
    flash: FlashService = Depends(get_flash_service),
    pages: PageRenderer = Depends(get_pages),
    session_id: str = Depends(get_browser_session_id),
) -> Response:
    """Render the empty create form, or the rejected input with its errors."""
    props = await _shared_props(flash, session_id)
    return pages.render(request, "Products/Create", props)


@router.post("", name="products.store")
async def store_product(
    fields: dict[str, Any] = Depends(get_submitted_fields),
    products: ProductService = Depends(get_product_service),
    flash: FlashService = Depends(get_flash_service),
    session_id: str = Depends(get_browser_session_id),
) -> RedirectResponse:
    """Create a product from the submitted form."""
    result = products.create(fields)
    return await _finish_write(
        result,
        fields,
        method="POST",
        form_url=f"{LIST_URL}/create",
        flash=flash,
        session_id=session_id,
    )


@router.get("/{product_id}/edit", name="products.edit")
async def edit_form(
    request: Request,
    product_id: int,
    products: ProductService = Depends(get_product_service),
    flash: FlashService = Depends(get_flash_service),
    pages: PageRenderer = Depends(get_pages),
    session_id: str = Depends(get_browser_session_id),
) -> Response:
    """Render the edit form pre-filled with the stored product."""
    product = products.get_product(product_id)
    props = await _shared_props(flash, session_id)
    props["product"] = product.to_props()
    return pages.render(request, "Products/Edit", props)


@router.api_route("/{product_id}", methods=["PUT", "PATCH"], name="products.update")
async def update_product(
    request: Request,
    product_id: int,
    fields: dict[str, Any] = Depends(get_submitted_fields),
    products: ProductService = Depends(get_product_service),
    flash: FlashService = Depends(get_flash_service),
    session_id: str = Depends(get_browser_session_id),
) -> RedirectResponse:
    """Overwrite a product from the submitted form."""
    result = products.update(product_id, fields)
    return await _finish_write(
        result,
        fields,
        method=request.method,
        form_url=f"{LIST_URL}/{product_id}/edit",
        flash=flash,
        session_id=session_id,
    )


@router.delete("/{product_id}", name="products.destroy")
async def delete_product(
    product_id: int,
    products: ProductService = Depends(get_product_service),
    flash: FlashService = Depends(get_flash_service),
    session_id: str = Depends(get_browser_session_id),
) -> RedirectResponse:
    """Delete a product immediately; confirmation is left to the frontend."""
    result = products.delete(product_id)
    if result.flash:
        await flash.set_flash(session_id, result.flash)
    return _redirect(LIST_URL, "DELETE")


@router.post("/{product_id}", name="products.method_override")
async def spoofed_product_write(
    product_id: int,
    method: str | None = Depends(get_method_override),
    fields: dict[str, Any] = Depends(get_submitted_fields),
    products: ProductService = Depends(get_product_service),
    flash: FlashService = Depends(get_flash_service),
    session_id: str = Depends(get_browser_session_id),
) -> RedirectResponse:
    """Accept PUT/PATCH/DELETE tunnelled through POST by plain HTML forms."""
    if method in ("PUT", "PATCH"):
        result = products.update(product_id, fields)
        return await _finish_write(
            result,
            fields,
            method=method,
            form_url=f"{LIST_URL}/{product_id}/edit",
            flash=flash,
            session_id=session_id,
        )
    if method == "DELETE":
        result = products.delete(product_id)
        if result.flash:
            await flash.set_flash(session_id, result.flash)
        return _redirect(LIST_URL, method)

    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail="Method Not Allowed",
    )
