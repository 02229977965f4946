"""
Checkout types — cart lines, totals, and the checkout session.

All values are frozen. Every transition rebuilds the session with
dataclasses.replace; nothing is mutated in place.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import IntEnum
from uuid import UUID

from storefront._types import ZERO


# ═══════════════════════════════════════════════════════════════════════════════
# Catalog & Cart
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Product:
    id: str
    name: str
    price: Decimal
    sku: str = ""
    published: bool = True
    stock_quantity: int | None = None  # None: stock not tracked
    customer_enters_price: bool = False
    min_entered_price: Decimal = ZERO
    max_entered_price: Decimal | None = None


@dataclass(frozen=True, slots=True)
class CartItem:
    """Stored cart row. Prices are resolved against the catalog on read."""

    id: str
    product_id: str
    quantity: int
    entered_price: Decimal | None = None


@dataclass(frozen=True, slots=True)
class CartLine:
    """Priced cart line."""

    id: str
    product_id: str
    name: str
    quantity: int
    catalog_price: Decimal
    entered_price: Decimal | None = None
    sku: str = ""

    @property
    def unit_price(self) -> Decimal:
        """Customer-entered price wins when positive."""
        if self.entered_price is not None and self.entered_price > 0:
            return self.entered_price
        return self.catalog_price

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


# ═══════════════════════════════════════════════════════════════════════════════
# Totals
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Totals:
    """
    Note: total = subtotal - discount_amount + shipping_cost + tax_amount
    + payment_fee, always re-derived from the cart.
    """

    subtotal: Decimal = ZERO
    discount_amount: Decimal = ZERO
    shipping_cost: Decimal = ZERO
    tax_amount: Decimal = ZERO
    payment_fee: Decimal = ZERO
    total: Decimal = ZERO
    currency: str = "USD"


# ═══════════════════════════════════════════════════════════════════════════════
# Addresses & Methods
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Address:
    first_name: str
    last_name: str
    email: str
    address1: str
    city: str
    zip_postal_code: str
    country_id: str
    phone_number: str = ""
    company: str = ""
    address2: str = ""
    state_province_id: str = ""
    state_province_name: str = ""
    country_name: str = ""


@dataclass(frozen=True, slots=True)
class ShippingMethod:
    id: str
    name: str
    cost: Decimal
    description: str = ""
    delivery_time: str = ""
    is_selected: bool = False


@dataclass(frozen=True, slots=True)
class PaymentMethod:
    id: str
    name: str
    fee: Decimal = ZERO
    description: str = ""
    requires_additional_info: bool = False
    is_selected: bool = False


# ═══════════════════════════════════════════════════════════════════════════════
# Session
# ═══════════════════════════════════════════════════════════════════════════════


class CheckoutStage(IntEnum):
    """Ordered; a session records the furthest stage it reached."""

    STARTED = 1
    BILLING_SET = 2
    SHIPPING_ADDRESS_SET = 3
    SHIPPING_METHOD_SELECTED = 4
    PAYMENT_METHOD_SELECTED = 5
    PLACED = 6


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    owner_id: UUID
    stage: CheckoutStage
    is_guest_checkout: bool
    cart: tuple[CartLine, ...]
    totals: Totals
    customer_email: str | None = None
    billing_address: Address | None = None
    shipping_address: Address | None = None
    shipping_same_as_billing: bool = True
    available_shipping_methods: tuple[ShippingMethod, ...] = ()
    selected_shipping_method: ShippingMethod | None = None
    available_payment_methods: tuple[PaymentMethod, ...] = ()
    selected_payment_method: PaymentMethod | None = None
    order_notes: str | None = None

    @property
    def destination(self) -> Address | None:
        if self.shipping_same_as_billing:
            return self.billing_address
        return self.shipping_address


# ═══════════════════════════════════════════════════════════════════════════════
# Results
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CartView:
    lines: tuple[CartLine, ...]
    totals: Totals

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def is_empty(self) -> bool:
        return not self.lines


@dataclass(frozen=True, slots=True)
class Order:
    """Persisted order snapshot."""

    id: UUID
    number: str
    owner_id: UUID
    lines: tuple[CartLine, ...]
    totals: Totals
    billing_address: Address | None
    shipping_address: Address | None
    shipping_method: ShippingMethod | None
    payment_method: PaymentMethod | None
    created_at: datetime
    notes: str | None = None
    status: str = "Pending"
    payment_status: str = "Pending"


@dataclass(frozen=True, slots=True)
class OrderConfirmation:
    order_id: UUID
    order_number: str
    order_total: Decimal
    currency: str
    order_status: str
    payment_status: str
    order_date: datetime
    estimated_delivery_date: datetime
    requires_payment: bool
    message: str
    totals: Totals = field(default_factory=Totals)


__all__ = (
    "Product",
    "CartItem",
    "CartLine",
    "Totals",
    "Address",
    "ShippingMethod",
    "PaymentMethod",
    "CheckoutStage",
    "CheckoutSession",
    "CartView",
    "Order",
    "OrderConfirmation",
)
