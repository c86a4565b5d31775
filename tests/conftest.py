"""Pytest configuration and shared fixtures."""
import pytest
from dataclasses import dataclass, field
from typing import List, Optional

from objectbuilder import reflect_field, reset_builder_config


@dataclass(frozen=True)
class Address:
    """Innermost nested record."""
    street: str
    city: str
    postcode: Optional[str] = None


@dataclass(frozen=True)
class Customer:
    """Record nesting a required Address."""
    name: str
    address: Address
    email: Optional[str] = None


@dataclass(frozen=True)
class Order:
    """Target type with leaf, optional, defaulted and nested fields."""
    order_id: str
    quantity: int
    customer: Customer
    note: Optional[str]
    priority: int = 3
    gift_address: Optional[Address] = None

    @property
    def label(self) -> str:
        return f"{self.order_id} x{self.quantity}"


@dataclass
class Basket:
    """Target type with a sequence field (unsupported by the decoder)."""
    owner: str
    items: List[str] = field(default_factory=list)


@pytest.fixture(autouse=True)
def reset_config():
    """Restore the default builder configuration around each test."""
    reset_builder_config()
    yield
    reset_builder_config()


@pytest.fixture
def counting_reflection():
    """Reflection provider that records every (type, path) it resolves."""
    calls = []

    def provider(root_type, path):
        calls.append((root_type, path.dotted))
        return reflect_field(root_type, path)

    provider.calls = calls
    return provider


@pytest.fixture
def sample_order():
    """A fully populated Order."""
    return Order(
        order_id="A-100",
        quantity=2,
        customer=Customer(
            name="Ada",
            address=Address(street="1 Analytical Way", city="London", postcode="N1"),
            email="ada@example.org",
        ),
        note="leave at door",
        priority=1,
        gift_address=Address(street="2 Difference Rd", city="Leeds"),
    )
