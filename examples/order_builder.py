"""
Order form example.

An order is filled in over several steps (customer details first, shipping
later, a gift address only sometimes). Each step writes into the same
Builder; the Order is only constructed once everything required is there.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from objectbuilder import Builder, DecodeFailure, builder_config, field_ref

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Address:
    """Postal address."""
    street: str
    city: str
    postcode: Optional[str] = None

    def __post_init__(self):
        if not self.street.strip():
            raise ValueError("street must not be blank")


@dataclass(frozen=True)
class Customer:
    name: str
    address: Address
    email: Optional[str] = None


@dataclass(frozen=True)
class Money:
    """Amount in minor units. Currency codes are normalized on construction."""
    amount: int
    currency: str

    @classmethod
    def __decode__(cls, decoder):
        currency = decoder.decode_field('currency', str)
        return cls(decoder.decode_field('amount', int), currency.upper())


@dataclass(frozen=True)
class Order:
    order_id: str
    customer: Customer
    total: Money
    note: Optional[str]
    gift_address: Optional[Address] = None


def customer_step(builder: Builder) -> None:
    builder.fields.customer.name = "Ada Lovelace"
    builder.fields.customer.email = "ada@example.org"


def shipping_step(builder: Builder) -> None:
    shipping = builder.lens('customer.address')
    shipping.street = "12 St James's Square"
    shipping.city = "London"


def pricing_step(builder: Builder) -> None:
    total = field_ref(Order).total
    builder.set(total.amount, 4200)
    builder.set(total.currency, "gbp")


def main():
    logging.basicConfig(level=logging.INFO)

    builder = Builder(Order)
    builder.set('order_id', "A-1001")
    builder.set('note', None)
    customer_step(builder)

    try:
        builder.build()
    except DecodeFailure as e:
        logger.info(f"Not ready yet: {e} (missing at '{e.path}')")

    shipping_step(builder)
    pricing_step(builder)
    order = builder.build()
    logger.info(f"Built {order}")

    # Gift address is optional as a whole but complete once touched
    builder.fields.gift_address.city = "Leeds"
    try:
        builder.build()
    except DecodeFailure as e:
        logger.info(f"Gift address incomplete: {e}")
    builder.fields.gift_address.street = "2 Difference Rd"
    logger.info(f"Built {builder.build()}")

    # Whole-object assignment through the lens is ignored; use set() instead
    with builder_config(warn_on_structured_assignment=True):
        builder.fields.gift_address = None
    builder.set('gift_address', None)
    logger.info(f"Built {builder.build()}")


if __name__ == '__main__':
    main()
