from .product_service import ProductService, WriteResult

__all__ = ["ProductService", "WriteResult"]
