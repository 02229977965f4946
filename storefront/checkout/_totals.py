"""
Totals — pure computation over cart lines and selections.

    totals = compute_totals(lines, currency="USD", shipping=method, payment=pay)
"""

from __future__ import annotations

from collections.abc import Iterable
from decimal import Decimal

from storefront._types import ZERO, money
from storefront.checkout._types import CartLine, PaymentMethod, ShippingMethod, Totals


def subtotal_of(lines: Iterable[CartLine]) -> Decimal:
    return money(sum((line.line_total for line in lines), ZERO))


def compute_totals(
    lines: Iterable[CartLine],
    *,
    currency: str,
    shipping: ShippingMethod | None = None,
    payment: PaymentMethod | None = None,
    discount: Decimal = ZERO,
    tax: Decimal = ZERO,
) -> Totals:
    subtotal = subtotal_of(lines)
    discount_amount = money(min(discount, subtotal))
    shipping_cost = money(shipping.cost) if shipping else ZERO
    tax_amount = money(tax)
    payment_fee = money(payment.fee) if payment else ZERO

    return Totals(
        subtotal=subtotal,
        discount_amount=discount_amount,
        shipping_cost=shipping_cost,
        tax_amount=tax_amount,
        payment_fee=payment_fee,
        total=money(subtotal - discount_amount + shipping_cost + tax_amount + payment_fee),
        currency=currency,
    )


class CartTotalsCalculator:
    """compute_totals bound to the provider-supplied discount and tax."""

    def __init__(self, currency: str) -> None:
        self.currency = currency

    def __call__(
        self,
        lines: Iterable[CartLine],
        shipping: ShippingMethod | None = None,
        payment: PaymentMethod | None = None,
        discount: Decimal = ZERO,
        tax: Decimal = ZERO,
    ) -> Totals:
        return compute_totals(
            lines,
            currency=self.currency,
            shipping=shipping,
            payment=payment,
            discount=discount,
            tax=tax,
        )


__all__ = (
    "subtotal_of",
    "compute_totals",
    "CartTotalsCalculator",
)
