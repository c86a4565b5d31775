"""Tests for the decode bridge and the dataclass construction contract."""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pytest

from conftest import Address, Basket, Customer, Order
from objectbuilder import (
    Builder, BuilderDecoder, BuilderStore, DecodeFailure, FieldPath, FieldUnset, MissingPath, TypeMismatch,
    UnsupportedConstruct, decode_dataclass,
)


@pytest.fixture
def store():
    store = BuilderStore(Order)
    store.set_present("order_id", "A-1")
    store.set_present("customer.name", "Ada")
    store.set_present("customer.address.city", "Oslo")
    store.set_null("note")
    return store


class TestPrimitives:

    def test_field_exists(self, store):
        decoder = BuilderDecoder(store)
        assert decoder.field_exists("order_id")
        assert decoder.field_exists("customer")
        assert not decoder.field_exists("note")
        assert not decoder.field_exists("quantity")

    def test_field_is_null(self, store):
        decoder = BuilderDecoder(store)
        assert decoder.field_is_null("note")
        assert not decoder.field_is_null("order_id")

    def test_field_is_null_on_unknown_field_fails(self, store):
        """Unlike field_exists, a null probe of an unknown field is an error."""
        decoder = BuilderDecoder(store)
        with pytest.raises(DecodeFailure, match="No value associated with field 'quantity'") as exc_info:
            decoder.field_is_null("quantity")
        assert exc_info.value.path == "quantity"

    def test_decode_leaf(self, store):
        decoder = BuilderDecoder(store)
        assert decoder.decode_field("order_id", str) == "A-1"

    def test_decode_optional_leaf(self, store):
        decoder = BuilderDecoder(store)
        assert decoder.decode_field("note", Optional[str]) is None
        assert decoder.decode_field("order_id", Optional[str]) == "A-1"

    def test_decode_missing_leaf(self, store):
        decoder = BuilderDecoder(store)
        with pytest.raises(DecodeFailure) as exc_info:
            decoder.decode_field("quantity", int)
        assert isinstance(exc_info.value.__cause__, MissingPath)
        assert exc_info.value.path == "quantity"

    def test_decode_mistyped_leaf(self, store):
        decoder = BuilderDecoder(store)
        with pytest.raises(DecodeFailure) as exc_info:
            decoder.decode_field("order_id", int)
        assert isinstance(exc_info.value.__cause__, TypeMismatch)

    def test_single_value_at_cursor(self, store):
        """single_value reads the current path without pushing."""
        decoder = BuilderDecoder(store)
        with decoder._field_scope("customer"):
            with decoder._field_scope("name"):
                assert decoder.coding_path == FieldPath.parse("customer.name")
                assert decoder.single_value(str) == "Ada"

    def test_single_value_at_root_fails(self, store):
        decoder = BuilderDecoder(store)
        with pytest.raises(DecodeFailure, match="<root>"):
            decoder.single_value(str)


class TestCursorDiscipline:
    """Every push is popped, on success and on failure."""

    def test_cursor_empty_after_success(self, store):
        decoder = BuilderDecoder(store)
        decoder.field_exists("order_id")
        decoder.field_is_null("note")
        decoder.decode_field("order_id", str)
        assert decoder.coding_path == FieldPath()

    def test_cursor_empty_after_nested_failure(self, store):
        """A failure deep inside a nested decode leaves no stale segments."""
        decoder = BuilderDecoder(store)
        with pytest.raises(DecodeFailure) as exc_info:
            decoder.decode_field("customer", Customer)
        assert exc_info.value.path == "customer.address.street"
        assert decoder.coding_path == FieldPath()

        # Sibling lookups still resolve against the root
        assert decoder.decode_field("order_id", str) == "A-1"

    def test_cursor_empty_after_fatal(self):
        store = BuilderStore(Basket)
        store.set_present("owner", "me")
        decoder = BuilderDecoder(store)
        with pytest.raises(UnsupportedConstruct):
            decoder.decode_field("items", List[str])
        assert decoder.coding_path == FieldPath()


class TestDataclassContract:

    def test_nested_decode(self, store):
        store.set_present("customer.address.street", "Main")
        customer = BuilderDecoder(store).decode_field("customer", Customer)
        assert customer == Customer(name="Ada", address=Address(street="Main", city="Oslo"))

    def test_defaults_apply_to_absent_fields(self):
        @dataclass
        class Settings:
            name: str
            retries: int = 3
            tags: Optional[str] = "default"

        store = BuilderStore(Settings)
        store.set_present("name", "svc")
        assert decode_dataclass(Settings, BuilderDecoder(store)) == Settings("svc", 3, "default")

    def test_nulled_optional_overrides_default(self):
        """An explicit null beats a non-None default for Optional fields."""
        @dataclass
        class Settings:
            name: str
            tags: Optional[str] = "default"

        store = BuilderStore(Settings)
        store.set_present("name", "svc")
        store.set_null("tags")
        assert decode_dataclass(Settings, BuilderDecoder(store)).tags is None

    def test_unset_required_field(self):
        @dataclass
        class Point:
            x: int
            y: int

        store = BuilderStore(Point)
        store.set_present("x", 1)
        store.clear("y")
        with pytest.raises(DecodeFailure) as exc_info:
            decode_dataclass(Point, BuilderDecoder(store))
        assert isinstance(exc_info.value.__cause__, FieldUnset)

    def test_post_init_validation_runs(self):
        """Validation in __post_init__ becomes a DecodeFailure at the current path."""
        @dataclass(frozen=True)
        class Range:
            low: int
            high: int

            def __post_init__(self):
                if self.low > self.high:
                    raise ValueError("low must not exceed high")

        @dataclass(frozen=True)
        class Window:
            span: Range

        store = BuilderStore(Window)
        store.set_present("span.low", 5)
        store.set_present("span.high", 1)
        with pytest.raises(DecodeFailure, match="low must not exceed high") as exc_info:
            BuilderDecoder(store).decode(Window)
        assert exc_info.value.path == "span"
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_init_false_fields_skipped(self):
        @dataclass
        class Tally:
            count: int
            doubled: int = field(init=False)

            def __post_init__(self):
                self.doubled = self.count * 2

        store = BuilderStore(Tally)
        store.set_present("count", 4)
        assert decode_dataclass(Tally, BuilderDecoder(store)).doubled == 8


class TestCustomContracts:
    """Types may supply their own __decode__ contract."""

    def test_custom_dataclass_contract(self):
        @dataclass(frozen=True)
        class Money:
            amount: int
            currency: str

            @classmethod
            def __decode__(cls, decoder):
                currency = decoder.decode_field("currency", str)
                if decoder.field_exists("amount"):
                    amount = decoder.decode_field("amount", int)
                else:
                    amount = 0
                return cls(amount, currency.upper())

        @dataclass(frozen=True)
        class Invoice:
            total: Money

        builder = Builder(Invoice)
        builder.fields.total.currency = "eur"
        assert builder.build() == Invoice(Money(0, "EUR"))

    def test_custom_leaf_contract_uses_single_value(self):
        class Sku(str):
            @classmethod
            def __decode__(cls, decoder):
                return cls(decoder.single_value(str).upper())

        @dataclass
        class Item:
            sku: Sku

        builder = Builder(Item)
        builder.fields.sku = "ab-1"
        item = builder.build()
        assert item.sku == "AB-1"
        assert isinstance(item.sku, Sku)


class TestUnsupportedConstructs:
    """Sequence and mapping fields fail fast and fatally."""

    def test_sequence_field_is_fatal_even_when_unset(self):
        builder = Builder(Basket)
        builder.fields.owner = "me"
        with pytest.raises(UnsupportedConstruct) as exc_info:
            builder.build()
        assert exc_info.value.path == "items"

    def test_sequence_field_is_fatal_when_set(self):
        builder = Builder(Basket)
        builder.fields.owner = "me"
        builder.fields.items = ["a", "b"]
        with pytest.raises(UnsupportedConstruct):
            builder.build()

    def test_mapping_field_is_fatal(self):
        @dataclass
        class Labels:
            values: Dict[str, str]

        with pytest.raises(UnsupportedConstruct):
            Builder(Labels).build()

    def test_not_a_builder_error(self):
        """UnsupportedConstruct escapes `except BuilderError` handlers."""
        from objectbuilder import BuilderError
        assert not issubclass(UnsupportedConstruct, BuilderError)
        assert issubclass(UnsupportedConstruct, NotImplementedError)
