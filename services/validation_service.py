"""
Submission validation.

Turns a raw JSON payload from the storefront into a validated Order or Lead.
Rules are checked in a fixed order and the first violated rule is reported;
errors are never aggregated.

Payload shape (camelCase, as sent by the frontend):
    {
      "kind": "order",
      "customer": {"firstName": "...", "lastName": "...", "phone": "..."},
      "delivery": {"city": "...", "address": "..."},
      "items": [{"title": "...", "label": "...", "qty": 1, "price": 100}],
      "total": 100,
      "sourceUrl": "https://..."
    }
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, Optional, Union

from domain.submission import (
    Customer,
    Delivery,
    Lead,
    Order,
    OrderItem,
    Submission,
    SubmissionKind,
)
from services.errors import ClientInputError

# Optional "+", a digit, then at least eight digits, spaces or hyphens.
PHONE_PATTERN = re.compile(r"\+?\d[\d\s-]{8,}")
# Plain decimal or exponent notation; no underscores, no "inf"/"nan" spellings.
NUMBER_PATTERN = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?")

Number = Union[int, float]


def is_non_empty(value: Any) -> bool:
    """True for a string with non-whitespace content."""
    return isinstance(value, str) and value.strip() != ""


def is_phone(value: Any) -> bool:
    """True when the value looks like a (loosely formatted) international phone number."""
    if value is None or isinstance(value, bool):
        return False
    return PHONE_PATTERN.fullmatch(str(value)) is not None


def _to_number(value: Any) -> Optional[Number]:
    """
    Coerce a JSON number or numeric string into a finite int/float.

    Returns None when the value is missing, boolean, unparseable or not finite.
    Integral floats are returned as int so that 2.0 and 2 are the same value.
    """

    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number: Number = value
    elif isinstance(value, str) and NUMBER_PATTERN.fullmatch(value.strip()):
        number = float(value.strip())
    else:
        return None

    try:
        if not math.isfinite(number):
            return None
    except OverflowError:
        # ints too large to convert to float
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def _section(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key)
    return value if isinstance(value, Mapping) else {}


def _optional_text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, bool):
        return None
    text = str(value).strip()
    return text or None


def _validate_item(index: int, raw: Any) -> OrderItem:
    item = raw if isinstance(raw, Mapping) else {}

    if not is_non_empty(item.get("title")):
        raise ClientInputError(f"items[{index}].title required")

    qty = _to_number(item.get("qty"))
    if qty is None or qty <= 0:
        raise ClientInputError(f"items[{index}].qty invalid")

    price = _to_number(item.get("price"))
    if price is None:
        raise ClientInputError(f"items[{index}].price invalid")

    return OrderItem(
        title=item["title"].strip(),
        qty=qty,
        price=price,
        label=_optional_text(item.get("label")),
    )


def validate_order(payload: Mapping[str, Any]) -> Order:
    """
    Validate an order payload.

    Rules (first failure wins):
    1. customer.firstName non-empty       -> "firstName required"
    2. customer.lastName non-empty        -> "lastName required"
    3. customer.phone matches the pattern -> "phone invalid"
    4. delivery.city non-empty            -> "city required"
    5. delivery.address non-empty         -> "address required"
    6. items is a non-empty list          -> "items required"
    7. total is a finite number           -> "total required"
    8. every item has a title, a positive qty and a finite price

    Raises:
        ClientInputError: naming the first violated rule
    """

    customer = _section(payload, "customer")
    delivery = _section(payload, "delivery")
    items = payload.get("items")

    if not is_non_empty(customer.get("firstName")):
        raise ClientInputError("firstName required")
    if not is_non_empty(customer.get("lastName")):
        raise ClientInputError("lastName required")
    if not is_phone(customer.get("phone")):
        raise ClientInputError("phone invalid")
    if not is_non_empty(delivery.get("city")):
        raise ClientInputError("city required")
    if not is_non_empty(delivery.get("address")):
        raise ClientInputError("address required")
    if not isinstance(items, list) or len(items) < 1:
        raise ClientInputError("items required")

    total = _to_number(payload.get("total"))
    if total is None:
        raise ClientInputError("total required")

    return Order(
        customer=Customer(
            first_name=customer["firstName"].strip(),
            last_name=customer["lastName"].strip(),
            phone=str(customer["phone"]).strip(),
        ),
        delivery=Delivery(
            city=delivery["city"].strip(),
            address=delivery["address"].strip(),
        ),
        items=tuple(_validate_item(i, raw) for i, raw in enumerate(items)),
        total=total,
        source_url=_optional_text(payload.get("sourceUrl")),
    )


def validate_lead(payload: Mapping[str, Any]) -> Lead:
    """
    Validate a lead (callback request) payload.

    Only customer.firstName, customer.phone and sourceUrl are read; anything
    else in the payload (lastName, items, total, delivery) is ignored.
    """

    customer = _section(payload, "customer")

    if not is_non_empty(customer.get("firstName")):
        raise ClientInputError("firstName required")
    if not is_phone(customer.get("phone")):
        raise ClientInputError("phone invalid")

    return Lead(
        customer=Customer(
            first_name=customer["firstName"].strip(),
            last_name="",
            phone=str(customer["phone"]).strip(),
        ),
        source_url=_optional_text(payload.get("sourceUrl")),
    )


def validate_submission(kind: SubmissionKind, payload: Mapping[str, Any]) -> Submission:
    """Validate a payload as the given kind; the payload's own "kind" field is not trusted."""

    if kind is SubmissionKind.ORDER:
        return validate_order(payload)
    return validate_lead(payload)


__all__ = [
    "PHONE_PATTERN",
    "is_non_empty",
    "is_phone",
    "validate_lead",
    "validate_order",
    "validate_submission",
]
