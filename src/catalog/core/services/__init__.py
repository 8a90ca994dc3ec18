"""Core services exports."""

# Database Service
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# Product Services
from .product.product_service import ProductService, WriteResult

# Session Services
from .session.flash import FlashService
from .session.web_session import WebSessionService

__all__ = [
    # Database Service
    "DbManageService",
    "DbSessionService",
    # Product Services
    "ProductService",
    "WriteResult",
    # Session Services
    "FlashService",
    "WebSessionService",
]
