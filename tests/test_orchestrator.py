"""CheckoutOrchestrator: stage progression, method selection and totals."""

import dataclasses
import uuid
from decimal import Decimal

import pytest
import pytest_asyncio

from storefront import ErrorKind
from storefront.checkout import (
    CART_EMPTY,
    NOT_STARTED,
    CartService,
    CartTotalsCalculator,
    CheckoutOrchestrator,
    CheckoutStage,
    MemoryOrderStore,
    OrderPlacement,
    PaymentMethod,
    ShippingMethod,
)
from storefront.identity import SessionIdentity

from tests.conftest import err, ok


@pytest.fixture
def guest() -> SessionIdentity:
    return SessionIdentity.guest(uuid.uuid4())


@pytest_asyncio.fixture
async def started(cart, checkout, guest):
    ok(await cart.add_item(guest, "p-book", 2))
    return ok(await checkout.start(guest))


def assert_totals_consistent(session):
    totals = session.totals
    assert totals.total == (
        totals.subtotal
        - totals.discount_amount
        + totals.shipping_cost
        + totals.tax_amount
        + totals.payment_fee
    )


def selected(methods):
    return [m.id for m in methods if m.is_selected]


class TestStart:
    @pytest.mark.asyncio
    async def test_start_snapshots_cart(self, started, guest):
        assert started.stage is CheckoutStage.STARTED
        assert started.is_guest_checkout is True
        assert started.owner_id == guest.subject_id
        assert started.totals.subtotal == Decimal("20.00")

    @pytest.mark.asyncio
    async def test_registered_identity_carries_email(self, cart, checkout):
        identity = SessionIdentity.registered(uuid.uuid4(), "ann@example.com")
        ok(await cart.add_item(identity, "p-pen", 1))

        session = ok(await checkout.start(identity))

        assert session.is_guest_checkout is False
        assert session.customer_email == "ann@example.com"

    @pytest.mark.asyncio
    async def test_empty_cart_cannot_start(self, checkout, guest):
        error = err(await checkout.start(guest))

        assert error.kind is ErrorKind.INVALID_STATE
        assert error.kind.status == 400
        assert error.message == CART_EMPTY == "Cart is empty"

    @pytest.mark.asyncio
    async def test_restart_resets_stage(self, started, checkout, guest, address):
        ok(await checkout.set_billing_address(guest, address))

        session = ok(await checkout.start(guest))

        assert session.stage is CheckoutStage.STARTED
        assert session.billing_address is None


class TestStages:
    @pytest.mark.asyncio
    async def test_operations_require_started_session(self, checkout, guest, address):
        error = err(await checkout.set_billing_address(guest, address))

        assert error.kind is ErrorKind.INVALID_STATE
        assert error.message == NOT_STARTED

    @pytest.mark.asyncio
    async def test_full_progression(self, started, checkout, guest, address):
        billing = ok(await checkout.set_billing_address(guest, address))
        assert billing.stage is CheckoutStage.BILLING_SET

        shipping = ok(await checkout.set_shipping_address(guest, None, same_as_billing=True))
        assert shipping.stage is CheckoutStage.SHIPPING_ADDRESS_SET
        assert shipping.destination == address
        assert [m.id for m in shipping.available_shipping_methods] == ["standard", "express"]

        method = ok(await checkout.select_shipping_method(guest, "express"))
        assert method.stage is CheckoutStage.SHIPPING_METHOD_SELECTED
        assert method.totals.shipping_cost == Decimal("19.99")

        payment = ok(await checkout.select_payment_method(guest, "cashondelivery"))
        assert payment.stage is CheckoutStage.PAYMENT_METHOD_SELECTED
        assert payment.totals.payment_fee == Decimal("5.00")
        assert payment.totals.total == Decimal("44.99")
        assert_totals_consistent(payment)

    @pytest.mark.asyncio
    async def test_stage_never_goes_backwards(self, started, checkout, guest, address):
        ok(await checkout.set_billing_address(guest, address))
        ok(await checkout.select_shipping_method(guest, "standard"))

        session = ok(await checkout.set_billing_address(guest, dataclasses.replace(address, city="Shelbyville")))

        assert session.stage is CheckoutStage.SHIPPING_METHOD_SELECTED
        assert session.billing_address.city == "Shelbyville"

    @pytest.mark.asyncio
    async def test_separate_shipping_address(self, started, checkout, guest, address):
        ok(await checkout.set_billing_address(guest, address))
        other = dataclasses.replace(address, address1="9 Elm St")

        session = ok(await checkout.set_shipping_address(guest, other, same_as_billing=False))

        assert session.shipping_same_as_billing is False
        assert session.destination == other

    @pytest.mark.asyncio
    async def test_separate_shipping_address_is_required(self, started, checkout, guest):
        error = err(await checkout.set_shipping_address(guest, None, same_as_billing=False))

        assert error.kind is ErrorKind.VALIDATION
        assert error.message == "Shipping address is required"


class TestMethodSelection:
    @pytest.mark.asyncio
    async def test_exactly_one_method_selected(self, started, checkout, guest):
        ok(await checkout.select_shipping_method(guest, "standard"))
        session = ok(await checkout.select_shipping_method(guest, "express"))

        assert selected(session.available_shipping_methods) == ["express"]
        assert session.selected_shipping_method.id == "express"
        assert session.selected_shipping_method.is_selected

    @pytest.mark.asyncio
    async def test_unknown_method_is_a_no_op(self, started, checkout, guest):
        before = ok(await checkout.select_shipping_method(guest, "standard"))

        after = ok(await checkout.select_shipping_method(guest, "teleport"))

        assert after.selected_shipping_method == before.selected_shipping_method
        assert after.stage is before.stage
        assert after.totals == before.totals

    @pytest.mark.asyncio
    async def test_unknown_payment_method_is_a_no_op(self, started, checkout, guest):
        session = ok(await checkout.select_payment_method(guest, "bitcoin"))

        assert session.selected_payment_method is None
        assert session.stage is CheckoutStage.STARTED

    @pytest.mark.asyncio
    async def test_listing_methods(self, started, checkout, guest):
        shipping = ok(await checkout.shipping_methods(guest))
        payment = ok(await checkout.payment_methods(guest))

        assert {m.id for m in shipping} == {"standard", "express"}
        assert {m.id for m in payment} == {"creditcard", "paypal", "cashondelivery"}
        assert not selected(shipping) and not selected(payment)

    @pytest.mark.asyncio
    async def test_selection_survives_reload(self, started, checkout, guest):
        ok(await checkout.select_payment_method(guest, "paypal"))

        payment = ok(await checkout.payment_methods(guest))

        assert selected(payment) == ["paypal"]

    @pytest.mark.asyncio
    async def test_selection_dropped_when_no_longer_offered(self, cart, carts, sessions, clock, guest):
        class Shrinking:
            def __init__(self):
                self.methods = (
                    ShippingMethod(id="standard", name="Standard", cost=Decimal("5.00")),
                    ShippingMethod(id="express", name="Express", cost=Decimal("15.00")),
                )

            async def available(self, destination, lines):
                return self.methods

        provider = Shrinking()
        checkout = CheckoutOrchestrator(
            cart,
            sessions,
            OrderPlacement(MemoryOrderStore(), carts, sessions, clock=clock),
            CartTotalsCalculator("USD"),
            shipping=provider,
        )
        ok(await cart.add_item(guest, "p-pen", 1))
        ok(await checkout.start(guest))
        ok(await checkout.select_shipping_method(guest, "express"))

        provider.methods = provider.methods[:1]
        session = ok(await checkout.set_shipping_address(guest, None))

        assert session.selected_shipping_method is None
        assert session.totals.shipping_cost == Decimal("0.00")


class TestCartChanges:
    @pytest.mark.asyncio
    async def test_totals_follow_the_cart(self, started, cart, checkout, guest):
        ok(await cart.add_item(guest, "p-pen", 2))

        session = ok(await checkout.select_shipping_method(guest, "standard"))

        assert session.totals.subtotal == Decimal("25.00")
        assert session.totals.total == Decimal("34.99")
        assert_totals_consistent(session)

    @pytest.mark.asyncio
    async def test_emptied_cart_discards_session(self, started, cart, checkout, sessions, guest, address):
        ok(await cart.clear(guest))

        error = err(await checkout.set_billing_address(guest, address))

        assert error.kind is ErrorKind.INVALID_STATE
        assert error.message == CART_EMPTY
        assert ok(await sessions.get(guest.subject_id)) is None


class TestProviders:
    @pytest.mark.asyncio
    async def test_tax_and_discount_flow_into_totals(self, carts, catalog, sessions, orders, clock, guest, address):
        class FlatTax:
            async def tax(self, lines, destination, shipping):
                return Decimal("2.00") if destination is not None else Decimal("0")

        class OneOff:
            async def discount(self, owner_id, lines):
                return Decimal("1.00")

        calculator = CartTotalsCalculator("USD")
        cart = CartService(carts, catalog, calculator)
        checkout = CheckoutOrchestrator(
            cart,
            sessions,
            OrderPlacement(orders, carts, sessions, clock=clock),
            calculator,
            taxes=FlatTax(),
            discounts=OneOff(),
        )
        ok(await cart.add_item(guest, "p-book", 1))
        ok(await checkout.start(guest))

        session = ok(await checkout.set_billing_address(guest, address))

        assert session.totals.tax_amount == Decimal("2.00")
        assert session.totals.discount_amount == Decimal("1.00")
        assert session.totals.total == Decimal("11.00")

    @pytest.mark.asyncio
    async def test_failing_provider_is_internal(self, carts, catalog, sessions, orders, clock, guest):
        class Down:
            async def available(self, owner_id, lines):
                raise TimeoutError("gateway timeout")

        calculator = CartTotalsCalculator("USD")
        cart = CartService(carts, catalog, calculator)
        checkout = CheckoutOrchestrator(
            cart,
            sessions,
            OrderPlacement(orders, carts, sessions, clock=clock),
            calculator,
            payment=Down(),
        )
        ok(await cart.add_item(guest, "p-book", 1))
        ok(await checkout.start(guest))

        error = err(await checkout.payment_methods(guest))

        assert error.kind is ErrorKind.INTERNAL
        assert error.message == "Payment methods failed: gateway timeout"

    def test_method_types_are_frozen(self):
        method = PaymentMethod(id="x", name="X")

        with pytest.raises(dataclasses.FrozenInstanceError):
            method.is_selected = True
