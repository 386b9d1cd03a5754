"""
Pytest configuration and shared payload fixtures.

This file adds the project root to the Python path so that tests
can import from the api, domain and services packages.
"""

import sys
from pathlib import Path

import pytest

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def order_payload() -> dict:
    """A valid order, as posted by the storefront checkout."""
    return {
        "kind": "order",
        "customer": {"firstName": "Olena", "lastName": "Ivanenko", "phone": "+380501234567"},
        "delivery": {"city": "Kyiv", "address": "Nova Poshta #5"},
        "items": [{"title": "Widget", "qty": 2, "price": 150}],
        "total": 300,
        "company": "",
        "email2": "",
    }


@pytest.fixture
def lead_payload() -> dict:
    """A valid callback request."""
    return {
        "kind": "lead",
        "customer": {"firstName": "Taras", "phone": "+380 67 765 43 21"},
        "sourceUrl": "https://shop.example/product/widget",
    }
