"""Field rules for submitted product data.

Every field is checked on its own and all failures are reported together.
Validation is pure: the same input always yields the same result and nothing
outside the returned value is touched.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.catalog.core.errors import ValidationFailed
from src.catalog.entities.product.table import NAME_MAX_LENGTH

PRODUCT_FIELDS = ("name", "price", "description")

_NUMERIC = re.compile(r"[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


class FieldRule(StrEnum):
    """Rule keys reported for failing fields."""

    REQUIRED = "required"
    STRING = "string"
    NUMERIC = "numeric"
    MAX = "max"


class ProductCreate(BaseModel):
    """Validated input for creating a product."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1)
    price: float
    description: str | None = None


class ProductUpdate(BaseModel):
    """Validated input for updating a product.

    ``description`` is only overwritten when it was submitted; check
    ``description_submitted`` rather than comparing against ``None``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = Field(min_length=1)
    price: float
    description: str | None = None

    @property
    def description_submitted(self) -> bool:
        return "description" in self.model_fields_set


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _check_name(raw: Mapping[str, Any], max_length: int) -> tuple[str | None, FieldRule | None]:
    value = raw.get("name")
    if _is_blank(value):
        return None, FieldRule.REQUIRED
    if not isinstance(value, str):
        return None, FieldRule.STRING
    value = value.strip()
    if len(value) > max_length:
        return None, FieldRule.MAX
    return value, None


def parse_price(value: Any) -> float | None:
    """Return ``value`` as a finite float, or None when it is not numeric."""
    if isinstance(value, bool):
        return None
    if isinstance(value, str) and _NUMERIC.fullmatch(value.strip()):
        value = value.strip()
    elif not isinstance(value, int | float):
        return None
    try:
        number = float(value)
    except OverflowError:
        return None
    return number if math.isfinite(number) else None


def _check_price(raw: Mapping[str, Any]) -> tuple[float | None, FieldRule | None]:
    value = raw.get("price")
    if _is_blank(value):
        return None, FieldRule.REQUIRED
    number = parse_price(value)
    if number is None:
        return None, FieldRule.NUMERIC
    return number, None


def _check_description(raw: Mapping[str, Any]) -> tuple[str | None, FieldRule | None]:
    value = raw.get("description")
    if value is None:
        return None, None
    if not isinstance(value, str):
        return None, FieldRule.STRING
    return value.strip(), None


def _validate_fields(
    raw: Mapping[str, Any], name_max_length: int
) -> dict[str, Any]:
    checks = {
        "name": _check_name(raw, name_max_length),
        "price": _check_price(raw),
        "description": _check_description(raw),
    }
    errors = {field: str(rule) for field, (_, rule) in checks.items() if rule is not None}
    if errors:
        raise ValidationFailed(errors)
    return {field: value for field, (value, _) in checks.items()}


def validate_product_create(
    raw: Mapping[str, Any], *, name_max_length: int = NAME_MAX_LENGTH
) -> ProductCreate:
    """Validate a create submission.

    Raises:
        ValidationFailed: with every failing field mapped to its rule key.
    """
    values = _validate_fields(raw, name_max_length)
    return ProductCreate(**values)


def validate_product_update(
    raw: Mapping[str, Any], *, name_max_length: int = NAME_MAX_LENGTH
) -> ProductUpdate:
    """Validate an update submission, remembering whether description was sent."""
    values = _validate_fields(raw, name_max_length)
    if raw.get("description") is None:
        values.pop("description")
    return ProductUpdate(**values)


def old_input(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Allow-listed, JSON-safe copy of submitted fields for redisplaying a form."""
    kept = {}
    for field in PRODUCT_FIELDS:
        if field not in raw:
            continue
        value = raw[field]
        if value is None or isinstance(value, str | bool):
            kept[field] = value
        elif isinstance(value, int | float):
            # Out-of-range numbers are echoed back as text
            kept[field] = value if parse_price(value) is not None else str(value)
    return kept
