"""
Providers — pluggable sources of methods, tax, discount and products.

Rate and tax algorithms live behind these protocols. The defaults here are
static tables suitable for development and tests.
"""

from __future__ import annotations

from collections.abc import Sequence
from decimal import Decimal
from typing import Protocol
from uuid import UUID

from kungfu import Result, Ok

from storefront._types import ZERO, StoreError
from storefront.checkout._types import (
    Address,
    CartLine,
    PaymentMethod,
    Product,
    ShippingMethod,
)


# ═══════════════════════════════════════════════════════════════════════════════
# Protocols
# ═══════════════════════════════════════════════════════════════════════════════


class ShippingMethodProvider(Protocol):
    async def available(
        self, destination: Address | None, lines: Sequence[CartLine]
    ) -> Sequence[ShippingMethod]: ...


class PaymentMethodProvider(Protocol):
    async def available(
        self, owner_id: UUID, lines: Sequence[CartLine]
    ) -> Sequence[PaymentMethod]: ...


class TaxProvider(Protocol):
    async def tax(
        self,
        lines: Sequence[CartLine],
        destination: Address | None,
        shipping: ShippingMethod | None,
    ) -> Decimal: ...


class DiscountProvider(Protocol):
    async def discount(self, owner_id: UUID, lines: Sequence[CartLine]) -> Decimal: ...


class Catalog(Protocol):
    async def get_product(self, product_id: str) -> Result[Product | None, StoreError]: ...


# ═══════════════════════════════════════════════════════════════════════════════
# Defaults
# ═══════════════════════════════════════════════════════════════════════════════

DEFAULT_SHIPPING_METHODS: tuple[ShippingMethod, ...] = (
    ShippingMethod(
        id="standard",
        name="Standard Shipping",
        description="5-7 business days",
        cost=Decimal("9.99"),
        delivery_time="5-7 business days",
    ),
    ShippingMethod(
        id="express",
        name="Express Shipping",
        description="2-3 business days",
        cost=Decimal("19.99"),
        delivery_time="2-3 business days",
    ),
)

DEFAULT_PAYMENT_METHODS: tuple[PaymentMethod, ...] = (
    PaymentMethod(
        id="creditcard",
        name="Credit Card",
        description="Pay with credit or debit card",
        fee=Decimal("0.00"),
        requires_additional_info=True,
    ),
    PaymentMethod(
        id="paypal",
        name="PayPal",
        description="Pay with your PayPal account",
        fee=Decimal("0.00"),
    ),
    PaymentMethod(
        id="cashondelivery",
        name="Cash on Delivery",
        description="Pay when you receive your order",
        fee=Decimal("5.00"),
    ),
)


class StaticShippingMethods:
    def __init__(self, methods: Sequence[ShippingMethod] = DEFAULT_SHIPPING_METHODS) -> None:
        self._methods = tuple(methods)

    async def available(
        self, destination: Address | None, lines: Sequence[CartLine]
    ) -> Sequence[ShippingMethod]:
        return self._methods


class StaticPaymentMethods:
    def __init__(self, methods: Sequence[PaymentMethod] = DEFAULT_PAYMENT_METHODS) -> None:
        self._methods = tuple(methods)

    async def available(
        self, owner_id: UUID, lines: Sequence[CartLine]
    ) -> Sequence[PaymentMethod]:
        return self._methods


class NoTax:
    async def tax(
        self,
        lines: Sequence[CartLine],
        destination: Address | None,
        shipping: ShippingMethod | None,
    ) -> Decimal:
        return ZERO


class NoDiscount:
    async def discount(self, owner_id: UUID, lines: Sequence[CartLine]) -> Decimal:
        return ZERO


class MemoryCatalog:
    """In-memory product catalog keyed by product id."""

    def __init__(self, products: Sequence[Product] = ()) -> None:
        self._products = {p.id: p for p in products}

    def add(self, product: Product) -> None:
        self._products[product.id] = product

    async def get_product(self, product_id: str) -> Result[Product | None, StoreError]:
        return Ok(self._products.get(product_id))


__all__ = (
    "ShippingMethodProvider",
    "PaymentMethodProvider",
    "TaxProvider",
    "DiscountProvider",
    "Catalog",
    "DEFAULT_SHIPPING_METHODS",
    "DEFAULT_PAYMENT_METHODS",
    "StaticShippingMethods",
    "StaticPaymentMethods",
    "NoTax",
    "NoDiscount",
    "MemoryCatalog",
)
