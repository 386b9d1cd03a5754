"""
Domain: Submission entities.

A Submission is one web-form record flowing through the intake pipeline. It is
either an Order (a storefront checkout) or a Lead (a callback request).

Invariants implemented here:
- Submissions are immutable once constructed.
- An Order always carries a delivery destination and at least one item.
- A Lead never carries delivery, items, a last name or a total.

This module contains only pure domain entities: no I/O, no frameworks.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union


def _require_finite(name: str, value: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name} must be a number")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite")


def _require_text(name: str, value: str) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"{name} must be a non-empty string")


class SubmissionKind(str, Enum):
    ORDER = "order"
    LEAD = "lead"


@dataclass(frozen=True, slots=True)
class Customer:
    first_name: str
    last_name: str
    phone: str

    def __post_init__(self) -> None:
        _require_text("first_name", self.first_name)
        _require_text("phone", self.phone)

    @property
    def display_name(self) -> str:
        """Name in "last first" order, as printed on the order slip."""
        return f"{self.last_name} {self.first_name}".strip()


@dataclass(frozen=True, slots=True)
class Delivery:
    city: str
    address: str


@dataclass(frozen=True, slots=True)
class OrderItem:
    title: str
    qty: float
    price: float
    label: Optional[str] = None

    def __post_init__(self) -> None:
        _require_text("title", self.title)
        _require_finite("qty", self.qty)
        _require_finite("price", self.price)
        if self.qty <= 0:
            raise ValueError("qty must be positive")


@dataclass(frozen=True, slots=True)
class Order:
    """
    A purchase order submitted from the storefront checkout.

    The total is the figure shown to the customer at checkout. It is relayed as
    is and never recomputed from the items.
    """

    customer: Customer
    delivery: Delivery
    items: Tuple[OrderItem, ...]
    total: float
    source_url: Optional[str] = None

    def __post_init__(self) -> None:
        _require_text("last_name", self.customer.last_name)
        _require_text("city", self.delivery.city)
        _require_text("address", self.delivery.address)
        if not isinstance(self.items, tuple) or not self.items:
            raise ValueError("items must be a non-empty tuple")
        _require_finite("total", self.total)

    @property
    def kind(self) -> SubmissionKind:
        return SubmissionKind.ORDER


@dataclass(frozen=True, slots=True)
class Lead:
    """
    A callback request: only a name and a phone number.

    Leads have no delivery, items or total. `items` and `total` exist so that
    code handling either kind can read them uniformly.
    """

    customer: Customer
    source_url: Optional[str] = None

    def __post_init__(self) -> None:
        if self.customer.last_name:
            raise ValueError("a Lead has no last_name")

    @property
    def kind(self) -> SubmissionKind:
        return SubmissionKind.LEAD

    @property
    def items(self) -> Tuple[OrderItem, ...]:
        return ()

    @property
    def total(self) -> int:
        return 0


Submission = Union[Order, Lead]


__all__ = [
    "Customer",
    "Delivery",
    "Lead",
    "Order",
    "OrderItem",
    "Submission",
    "SubmissionKind",
]
