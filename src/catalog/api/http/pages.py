"""Page-props rendering for the single-page frontend.

Every page is described by a page object::

    {"component": "Products/Index", "props": {...}, "url": "/products", "version": "1"}

Full browser loads receive the HTML shell with the page object embedded in
``data-page``; client-side navigations (``X-Inertia: true``) receive the page
object itself as JSON.
"""

import json
from pathlib import Path
from typing import Any

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from src.catalog.runtime.context import get_config

TEMPLATE_DIR = Path(__file__).parent / "templates"

INERTIA_HEADER = "X-Inertia"
VERSION_HEADER = "X-Inertia-Version"
LOCATION_HEADER = "X-Inertia-Location"


def is_page_request(request: Request) -> bool:
    """True for client-side navigations that expect a JSON page object."""
    return request.headers.get(INERTIA_HEADER, "").lower() == "true"


class PageRenderer:
    """Builds page objects and wraps them in the right response type."""

    def __init__(self, template_dir: Path = TEMPLATE_DIR) -> None:
        self._templates = Jinja2Templates(directory=str(template_dir))

    @staticmethod
    def page_url(request: Request) -> str:
        url = request.url.path
        if request.url.query:
            url = f"{url}?{request.url.query}"
        return url

    def page_object(
        self, request: Request, component: str, props: dict[str, Any]
    ) -> dict[str, Any]:
        return {
            "component": component,
            "props": props,
            "url": self.page_url(request),
            "version": get_config().catalog.asset_version,
        }

    def render(
        self, request: Request, component: str, props: dict[str, Any]
    ) -> Response:
        page = self.page_object(request, component, props)

        if is_page_request(request):
            return JSONResponse(
                page, headers={INERTIA_HEADER: "true", "Vary": INERTIA_HEADER}
            )

        catalog_config = get_config().catalog
        return self._templates.TemplateResponse(
            request,
            "app.html",
            {
                "title": catalog_config.title,
                "entry_script": catalog_config.entry_script,
                "page_json": json.dumps(page),
            },
            headers={"Vary": INERTIA_HEADER},
        )

    def version_conflict(self, request: Request) -> Response | None:
        """Force a full reload when a client navigates with stale assets."""
        if request.method != "GET" or not is_page_request(request):
            return None
        client_version = request.headers.get(VERSION_HEADER)
        if client_version is None or client_version == get_config().catalog.asset_version:
            return None
        return Response(
            status_code=status.HTTP_409_CONFLICT,
            headers={LOCATION_HEADER: str(request.url)},
        )
