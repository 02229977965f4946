"""Totals are pure and always re-derivable from lines and selections."""

from decimal import Decimal

from storefront import money
from storefront.checkout import (
    CartLine,
    CartTotalsCalculator,
    PaymentMethod,
    ShippingMethod,
    compute_totals,
    subtotal_of,
)


def line(price: str, quantity: int = 1, entered: str | None = None, id: str = "l1") -> CartLine:
    return CartLine(
        id=id,
        product_id=f"p-{id}",
        name="Thing",
        quantity=quantity,
        catalog_price=Decimal(price),
        entered_price=Decimal(entered) if entered is not None else None,
    )


class TestSubtotal:
    def test_quantity_times_price(self):
        assert subtotal_of([line("10.00", quantity=2)]) == Decimal("20.00")

    def test_sums_lines(self):
        lines = [line("10.00", 2, id="a"), line("2.50", 3, id="b")]

        assert subtotal_of(lines) == Decimal("27.50")

    def test_empty(self):
        assert subtotal_of([]) == Decimal("0.00")

    def test_positive_entered_price_wins(self):
        assert subtotal_of([line("10.00", 2, entered="7.00")]) == Decimal("14.00")

    def test_zero_entered_price_falls_back_to_catalog(self):
        assert subtotal_of([line("10.00", 2, entered="0")]) == Decimal("20.00")


class TestComputeTotals:
    def test_no_selections(self):
        totals = compute_totals([line("10.00", 2)], currency="USD")

        assert totals.subtotal == totals.total == Decimal("20.00")
        assert totals.shipping_cost == totals.payment_fee == totals.tax_amount == Decimal("0.00")
        assert totals.currency == "USD"

    def test_every_component(self):
        shipping = ShippingMethod(id="standard", name="Standard", cost=Decimal("9.99"))
        payment = PaymentMethod(id="cod", name="Cash", fee=Decimal("5.00"))

        totals = compute_totals(
            [line("10.00", 2)],
            currency="EUR",
            shipping=shipping,
            payment=payment,
            discount=Decimal("3.00"),
            tax=Decimal("1.60"),
        )

        assert totals.subtotal == Decimal("20.00")
        assert totals.discount_amount == Decimal("3.00")
        assert totals.total == Decimal("33.59")
        assert totals.total == (
            totals.subtotal
            - totals.discount_amount
            + totals.shipping_cost
            + totals.tax_amount
            + totals.payment_fee
        )

    def test_discount_never_exceeds_subtotal(self):
        totals = compute_totals([line("4.00")], currency="USD", discount=Decimal("10.00"))

        assert totals.discount_amount == Decimal("4.00")
        assert totals.total == Decimal("0.00")

    def test_rounds_half_up_to_cents(self):
        totals = compute_totals([line("0.125")], currency="USD", tax=Decimal("1.005"))

        assert totals.subtotal == Decimal("0.13")
        assert totals.tax_amount == Decimal("1.01")
        assert totals.total == Decimal("1.14")

    def test_same_inputs_same_totals(self):
        lines = [line("3.33", 3)]

        assert compute_totals(lines, currency="USD") == compute_totals(lines, currency="USD")


class TestCalculator:
    def test_binds_currency(self):
        calculator = CartTotalsCalculator("GBP")

        totals = calculator([line("1.00")])

        assert totals.currency == "GBP"
        assert totals.total == money(Decimal("1"))
