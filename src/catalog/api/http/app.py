"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import HTTPException, RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.catalog.api.http.app_data import ApplicationDependencies
from src.catalog.api.http.middleware.session import BrowserSessionMiddleware
from src.catalog.api.http.pages import PageRenderer
from src.catalog.api.http.routers.health import router as health_router
from src.catalog.api.http.routers.products import router as products_router
from src.catalog.api.utils.app_startup import configure_logging
from src.catalog.core.errors import PersistenceError, ProductNotFoundError
from src.catalog.core.services import (
    DbSessionService,
    FlashService,
    WebSessionService,
)
from src.catalog.core.storage.session_storage import (
    RedisSessionStorage,
    get_session_storage,
)
from src.catalog.runtime.context import get_config
from src.catalog.runtime.init_db import init_db


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        # HSTS only in prod
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains; preload",
            )
        return response


# --- Request logging middleware ---
async def log_requests(request: Request, call_next):
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except HTTPException as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=exc.status_code,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": exc.detail, "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        except RequestValidationError as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=422,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.validation_error")
            return JSONResponse(
                status_code=422,
                content={"detail": exc.errors(), "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error", "request_id": request_id},
                headers={"X-Request-ID": request_id},
            )


# --- Error taxonomy handlers ---
async def product_not_found_handler(
    request: Request, exc: ProductNotFoundError
) -> JSONResponse:
    logger.bind(product_id=exc.product_id).warning("product.not_found")
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": "Product not found"},
    )


async def persistence_error_handler(
    request: Request, exc: PersistenceError
) -> JSONResponse:
    logger.opt(exception=exc).error("product.persistence_failed")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "The product could not be saved. Please try again."},
    )


# --- Lifecycle hooks ---
async def build_dependencies() -> ApplicationDependencies:
    """Create application-wide services from the current configuration."""
    session_storage = await get_session_storage()
    return ApplicationDependencies(
        database_service=DbSessionService(),
        session_storage=session_storage,
        web_session_service=WebSessionService(session_storage),
        flash_service=FlashService(session_storage),
        pages=PageRenderer(),
    )


async def startup(app: FastAPI) -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    # Tests may install their own dependencies before startup
    if getattr(app.state, "app_dependencies", None) is None:
        app.state.app_dependencies = await build_dependencies()

    deps: ApplicationDependencies = app.state.app_dependencies
    if config.database.auto_create:
        init_db(deps.database_service)


async def shutdown(app: FastAPI) -> None:
    logger.info("Shutting down application")
    deps: ApplicationDependencies | None = getattr(app.state, "app_dependencies", None)
    if deps is None:
        return
    purged = await deps.web_session_service.purge_expired()
    logger.bind(purged=purged).debug("Purged expired session entries")
    if isinstance(deps.session_storage, RedisSessionStorage):
        await deps.session_storage.close()
    deps.database_service.dispose()


def create_app() -> FastAPI:
    """Build the FastAPI application with middleware, handlers and routers."""
    configure_logging()
    config = get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await startup(app)
        try:
            yield
        finally:
            await shutdown(app)

    app = FastAPI(
        title="Product Catalog",
        lifespan=lifespan,
        docs_url=None if config.app.environment == "production" else "/docs",
        redoc_url=None if config.app.environment == "production" else "/redoc",
    )

    # --- CORS configuration ---
    if config.app.environment == "production" and "*" in config.app.cors.origins:
        raise RuntimeError(
            "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
        )

    # The last middleware added runs outermost: request logging wraps
    # everything and the session cookie is resolved just before routing.
    app.add_middleware(BrowserSessionMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.app.cors.origins,
        allow_credentials=config.app.cors.allow_credentials,
        allow_methods=config.app.cors.allow_methods,
        allow_headers=config.app.cors.allow_headers,
    )

    @app.middleware("http")
    async def asset_version_check(request: Request, call_next):
        deps: ApplicationDependencies | None = getattr(
            request.app.state, "app_dependencies", None
        )
        if deps is not None:
            conflict = deps.pages.version_conflict(request)
            if conflict is not None:
                return conflict
        return await call_next(request)

    app.middleware("http")(log_requests)

    app.add_exception_handler(ProductNotFoundError, product_not_found_handler)
    app.add_exception_handler(PersistenceError, persistence_error_handler)

    app.include_router(health_router)
    app.include_router(products_router)

    @app.get("/", include_in_schema=False)
    async def root() -> RedirectResponse:
        return RedirectResponse(url="/products", status_code=status.HTTP_302_FOUND)

    return app


app = create_app()

__all__ = ["app", "create_app", "startup", "shutdown"]


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
