from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any

from inventorypro.records import SaleItem
from inventorypro.time_utils import parse_iso_datetime, to_utc_z


# Maximum price: 9,999,999.99
# This prevents nonsensical prices from being stored
MAX_PRICE = 9_999_999.99


class ValidationError(ValueError):
    """400-level input problem."""


@dataclass(frozen=True)
class FieldSpec:
    """Wire name, record attribute and type rules for one writable field."""
    key: str
    attr: str
    kind: str  # "string" | "int" | "number" | "datetime"
    nullable: bool = False
    minimum: float | None = None
    exclusive_minimum: bool = False
    max_length: int | None = None


@dataclass(frozen=True)
class ValidationPolicy:
    """
    - writable_fields: what clients are allowed to set
    - required_on_create: fields required when partial=False
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()


ITEM_FIELDS: dict[str, FieldSpec] = {
    f.key: f
    for f in (
        FieldSpec("name", "name", "string", max_length=255),
        FieldSpec("category", "category", "string", max_length=120),
        FieldSpec("price", "price", "number", minimum=0, exclusive_minimum=True),
        FieldSpec("costPrice", "cost_price", "number", minimum=0),
        FieldSpec("stockLevel", "stock_level", "int", minimum=0),
        FieldSpec("lowStockThreshold", "low_stock_threshold", "int", minimum=0),
        FieldSpec("lastSoldDate", "last_sold_date", "datetime", nullable=True),
    )
}

_ITEM_CORE = frozenset({"name", "category", "price", "costPrice", "stockLevel", "lowStockThreshold"})

ITEM_CREATE_POLICY = ValidationPolicy(writable_fields=_ITEM_CORE, required_on_create=_ITEM_CORE)
ITEM_UPDATE_POLICY = ValidationPolicy(writable_fields=_ITEM_CORE | {"lastSoldDate"})


def coerce_number(value: Any, *, key: str = "value") -> int | float:
    """
    Coerce a JSON or database value to int/float.

    Integral values come back as int so that totals stay exact for whole prices.
    Numeric strings are accepted ("12.50" -> 12.5); booleans are not.
    """
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be a number")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"{key} must be a finite number")
        return int(value) if value.is_integer() else value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, str):
        stripped = value.strip()
        try:
            parsed = Decimal(stripped)
        except InvalidOperation:
            raise ValidationError(f"{key} must be a number")
        if not parsed.is_finite():
            raise ValidationError(f"{key} must be a finite number")
        return int(parsed) if parsed == parsed.to_integral_value() else float(parsed)
    raise ValidationError(f"{key} must be a number")


def coerce_int(value: Any, *, key: str = "value") -> int:
    # Strict: reject floats with a fractional part, scientific notation and booleans
    if isinstance(value, bool):
        raise ValidationError(f"{key} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value.is_integer():
            return int(value)
        raise ValidationError(f"{key} must be an integer, not a decimal")
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{key} must be an integer")
        if "e" in stripped.lower():
            raise ValidationError(f"{key} must be a plain integer (scientific notation not allowed)")
        if "." in stripped:
            raise ValidationError(f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise ValidationError(f"{key} must be an integer")
    raise ValidationError(f"{key} must be an integer")


def _coerce_value(spec: FieldSpec, value: Any):
    if spec.kind == "string":
        if not isinstance(value, (str, int, float)) or isinstance(value, bool):
            raise ValidationError(f"{spec.key} must be a string")
        text = str(value).strip()
        if not text:
            raise ValidationError(f"{spec.key} cannot be blank")
        if spec.max_length and len(text) > spec.max_length:
            raise ValidationError(f"{spec.key} exceeds max length {spec.max_length}")
        return text

    if spec.kind == "datetime":
        if not isinstance(value, str):
            raise ValidationError(f"{spec.key} must be an ISO-8601 datetime")
        try:
            dt = parse_iso_datetime(value)
        except ValueError:
            raise ValidationError(f"{spec.key} must be an ISO-8601 datetime")
        if dt is None:
            raise ValidationError(f"{spec.key} must be an ISO-8601 datetime")
        return to_utc_z(dt)

    number = coerce_int(value, key=spec.key) if spec.kind == "int" else coerce_number(value, key=spec.key)
    if spec.minimum is not None:
        if spec.exclusive_minimum and number <= spec.minimum:
            raise ValidationError(f"{spec.key} must be > {spec.minimum}")
        if not spec.exclusive_minimum and number < spec.minimum:
            raise ValidationError(f"{spec.key} must be >= {spec.minimum}")
    if spec.kind == "number" and number > MAX_PRICE:
        raise ValidationError(f"{spec.key} cannot exceed {MAX_PRICE:,.2f}")
    return number


def validate_payload(
    *,
    payload: Any,
    policy: ValidationPolicy,
    partial: bool,
    fields: dict[str, FieldSpec] = ITEM_FIELDS,
) -> dict:
    """
    Validates + normalizes incoming camelCase JSON.

    Returns a patch keyed by record attribute (snake_case) holding only
    writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    if not partial:
        missing = sorted(f for f in policy.required_on_create if f not in payload)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    for k in payload.keys():
        if k not in fields:
            raise ValidationError(f"Unknown field: {k}")
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")

    patch: dict = {}
    for k, raw in payload.items():
        spec = fields[k]
        if raw is None:
            if not spec.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[spec.attr] = None
            continue
        patch[spec.attr] = _coerce_value(spec, raw)

    return patch


def validate_cart(payload: Any) -> list[SaleItem]:
    """
    Shape-check a cart. Quantity positivity and stock are checked by the
    sale engine so that failures are reported in line order.
    """
    if not isinstance(payload, list):
        raise ValidationError("cart must be a list of lines")
    if not payload:
        raise ValidationError("cart is empty")

    lines: list[SaleItem] = []
    for index, raw in enumerate(payload):
        if not isinstance(raw, dict):
            raise ValidationError(f"cart[{index}] must be an object")
        missing = [k for k in ("itemId", "quantity", "price") if k not in raw]
        if missing:
            raise ValidationError(f"cart[{index}] missing fields: {', '.join(missing)}")
        item_id = raw["itemId"]
        if not isinstance(item_id, str) or not item_id.strip():
            raise ValidationError(f"cart[{index}].itemId must be a non-empty string")
        quantity = coerce_int(raw["quantity"], key=f"cart[{index}].quantity")
        price = coerce_number(raw["price"], key=f"cart[{index}].price")
        if price < 0:
            raise ValidationError(f"cart[{index}].price must be >= 0")
        lines.append(SaleItem(item_id=item_id, quantity=quantity, price=price))
    return lines
