from .product_rules import (
    PRODUCT_FIELDS,
    FieldRule,
    ProductCreate,
    ProductUpdate,
    old_input,
    parse_price,
    validate_product_create,
    validate_product_update,
)

__all__ = [
    "PRODUCT_FIELDS",
    "FieldRule",
    "ProductCreate",
    "ProductUpdate",
    "old_input",
    "parse_price",
    "validate_product_create",
    "validate_product_update",
]
