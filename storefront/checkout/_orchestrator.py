"""
CheckoutOrchestrator — the checkout state machine.

    STARTED → BILLING_SET → SHIPPING_ADDRESS_SET → SHIPPING_METHOD_SELECTED
            → PAYMENT_METHOD_SELECTED → PLACED

Steps may be repeated in any order once started; the session records the
furthest stage reached. Every operation:

    1. takes the identity's session lock
    2. re-reads the cart (an emptied cart discards the session)
    3. rebuilds the session and recomputes Totals from scratch
    4. saves it

Note: unknown shipping/payment method ids are a silent no-op.
"""

from __future__ import annotations

import dataclasses
from collections.abc import Awaitable, Callable, Sequence

import structlog
from kungfu import Result, Ok, Error

from storefront._types import AppError, Errors
from storefront.checkout._cart import CartService
from storefront.checkout._placement import OrderPlacement
from storefront.checkout._providers import (
    DiscountProvider,
    NoDiscount,
    NoTax,
    PaymentMethodProvider,
    ShippingMethodProvider,
    StaticPaymentMethods,
    StaticShippingMethods,
    TaxProvider,
)
from storefront.checkout._store import CheckoutSessionStore
from storefront.checkout._totals import CartTotalsCalculator
from storefront.checkout._types import (
    Address,
    CartLine,
    CheckoutSession,
    CheckoutStage,
    OrderConfirmation,
    PaymentMethod,
    ShippingMethod,
    Totals,
)
from storefront.identity import SessionIdentity
from storefront.lift import catching, guarded


logger = structlog.get_logger(__name__)

CART_EMPTY = "Cart is empty"
NOT_STARTED = "Checkout has not been started"
TERMS_NOT_ACCEPTED = "You must accept the terms and conditions"

type Transition = Callable[[CheckoutSession], Awaitable[Result[CheckoutSession, AppError]]]


class CheckoutOrchestrator:
    def __init__(
        self,
        cart: CartService,
        sessions: CheckoutSessionStore,
        placement: OrderPlacement,
        calculator: CartTotalsCalculator,
        *,
        shipping: ShippingMethodProvider | None = None,
        payment: PaymentMethodProvider | None = None,
        taxes: TaxProvider | None = None,
        discounts: DiscountProvider | None = None,
    ) -> None:
        self._cart = cart
        self._sessions = sessions
        self._placement = placement
        self._calculator = calculator
        self._shipping = shipping or StaticShippingMethods()
        self._payment = payment or StaticPaymentMethods()
        self._taxes = taxes or NoTax()
        self._discounts = discounts or NoDiscount()

    # ═══════════════════════════════════════════════════════════════════════════
    # Operations
    # ═══════════════════════════════════════════════════════════════════════════

    async def start(self, identity: SessionIdentity) -> Result[CheckoutSession, AppError]:
        owner = identity.subject_id

        async with self._sessions.lock(owner):
            match await self._cart.lines(identity):
                case Ok(lines) if lines:
                    pass
                case Ok(_):
                    await guarded("Checkout", lambda: self._sessions.discard(owner))
                    return Error(Errors.invalid_state(CART_EMPTY))
                case Error(e):
                    return Error(e)

            session = CheckoutSession(
                owner_id=owner,
                stage=CheckoutStage.STARTED,
                is_guest_checkout=identity.is_guest,
                customer_email=identity.email,
                cart=lines,
                totals=Totals(currency=self._calculator.currency),
            )
            logger.info("checkout_started", guest=identity.is_guest, lines=len(lines))
            return await self._commit(session)

    async def set_billing_address(
        self, identity: SessionIdentity, address: Address
    ) -> Result[CheckoutSession, AppError]:
        async def change(session: CheckoutSession) -> Result[CheckoutSession, AppError]:
            return Ok(dataclasses.replace(
                session,
                billing_address=address,
                stage=max(session.stage, CheckoutStage.BILLING_SET),
            ))

        return await self._transition(identity, change)

    async def set_shipping_address(
        self,
        identity: SessionIdentity,
        address: Address | None,
        same_as_billing: bool = True,
    ) -> Result[CheckoutSession, AppError]:
        if not same_as_billing and address is None:
            return Error(Errors.validation("Shipping address is required"))

        async def change(session: CheckoutSession) -> Result[CheckoutSession, AppError]:
            updated = dataclasses.replace(
                session,
                shipping_address=None if same_as_billing else address,
                shipping_same_as_billing=same_as_billing,
                stage=max(session.stage, CheckoutStage.SHIPPING_ADDRESS_SET),
            )
            return await self._reload_shipping(updated)

        return await self._transition(identity, change)

    async def shipping_methods(
        self, identity: SessionIdentity
    ) -> Result[tuple[ShippingMethod, ...], AppError]:
        match await self._transition(identity, self._reload_shipping):
            case Ok(session):
                return Ok(session.available_shipping_methods)
            case Error(e):
                return Error(e)

    async def select_shipping_method(
        self, identity: SessionIdentity, method_id: str
    ) -> Result[CheckoutSession, AppError]:
        async def change(session: CheckoutSession) -> Result[CheckoutSession, AppError]:
            if not session.available_shipping_methods:
                match await self._reload_shipping(session):
                    case Ok(session):
                        pass
                    case Error(e):
                        return Error(e)

            chosen = _find(session.available_shipping_methods, method_id)
            if chosen is None:
                logger.info("shipping_method_unknown", method_id=method_id)
                return Ok(session)

            selected = dataclasses.replace(
                session,
                available_shipping_methods=_mark(session.available_shipping_methods, chosen.id),
                selected_shipping_method=dataclasses.replace(chosen, is_selected=True),
                stage=max(session.stage, CheckoutStage.SHIPPING_METHOD_SELECTED),
            )
            return await self._reload_payment(selected)

        return await self._transition(identity, change)

    async def payment_methods(
        self, identity: SessionIdentity
    ) -> Result[tuple[PaymentMethod, ...], AppError]:
        match await self._transition(identity, self._reload_payment):
            case Ok(session):
                return Ok(session.available_payment_methods)
            case Error(e):
                return Error(e)

    async def select_payment_method(
        self, identity: SessionIdentity, method_id: str
    ) -> Result[CheckoutSession, AppError]:
        async def change(session: CheckoutSession) -> Result[CheckoutSession, AppError]:
            if not session.available_payment_methods:
                match await self._reload_payment(session):
                    case Ok(session):
                        pass
                    case Error(e):
                        return Error(e)

            chosen = _find(session.available_payment_methods, method_id)
            if chosen is None:
                logger.info("payment_method_unknown", method_id=method_id)
                return Ok(session)

            return Ok(dataclasses.replace(
                session,
                available_payment_methods=_mark(session.available_payment_methods, chosen.id),
                selected_payment_method=dataclasses.replace(chosen, is_selected=True),
                stage=max(session.stage, CheckoutStage.PAYMENT_METHOD_SELECTED),
            ))

        return await self._transition(identity, change)

    async def place_order(
        self,
        identity: SessionIdentity,
        accepted_terms: bool,
        order_notes: str | None = None,
    ) -> Result[OrderConfirmation, AppError]:
        if not accepted_terms:
            return Error(Errors.validation(TERMS_NOT_ACCEPTED))

        owner = identity.subject_id

        async with self._sessions.lock(owner):
            match await guarded("Checkout", lambda: self._sessions.get(owner)):
                case Ok(None):
                    return Error(Errors.invalid_state(NOT_STARTED))
                case Ok(session):
                    pass
                case Error(e):
                    return Error(e)

            match await self._cart.lines(identity):
                case Ok(lines) if lines:
                    pass
                case Ok(_):
                    return Error(Errors.validation(CART_EMPTY))
                case Error(e):
                    return Error(e)

            priced = dataclasses.replace(session, cart=lines, order_notes=order_notes)
            match await self._price(priced):
                case Ok(priced):
                    pass
                case Error(e):
                    return Error(e)

            return await self._placement.place(priced, order_notes)

    # ═══════════════════════════════════════════════════════════════════════════
    # Transition machinery
    # ═══════════════════════════════════════════════════════════════════════════

    async def _transition(
        self, identity: SessionIdentity, change: Transition
    ) -> Result[CheckoutSession, AppError]:
        owner = identity.subject_id

        async with self._sessions.lock(owner):
            match await guarded("Checkout", lambda: self._sessions.get(owner)):
                case Ok(None):
                    return Error(Errors.invalid_state(NOT_STARTED))
                case Ok(session):
                    pass
                case Error(e):
                    return Error(e)

            match await self._cart.lines(identity):
                case Ok(lines) if lines:
                    pass
                case Ok(_):
                    await guarded("Checkout", lambda: self._sessions.discard(owner))
                    logger.info("checkout_discarded", reason="cart_empty")
                    return Error(Errors.invalid_state(CART_EMPTY))
                case Error(e):
                    return Error(e)

            match await change(dataclasses.replace(session, cart=lines)):
                case Ok(updated):
                    return await self._commit(updated)
                case Error(e):
                    return Error(e)

    async def _commit(self, session: CheckoutSession) -> Result[CheckoutSession, AppError]:
        match await self._price(session):
            case Ok(priced):
                pass
            case Error(e):
                return Error(e)

        match await guarded("Checkout", lambda: self._sessions.save(priced)):
            case Ok(_):
                return Ok(priced)
            case Error(e):
                return Error(e)

    async def _price(self, session: CheckoutSession) -> Result[CheckoutSession, AppError]:
        """Recompute Totals from the session's cart and selections."""
        lines: Sequence[CartLine] = session.cart
        shipping = session.selected_shipping_method

        match await catching(
            "Checkout totals", lambda: self._discounts.discount(session.owner_id, lines)
        ):
            case Ok(discount):
                pass
            case Error(e):
                return Error(e)

        match await catching(
            "Checkout totals", lambda: self._taxes.tax(lines, session.destination, shipping)
        ):
            case Ok(tax):
                pass
            case Error(e):
                return Error(e)

        totals = self._calculator(
            lines,
            shipping=shipping,
            payment=session.selected_payment_method,
            discount=discount,
            tax=tax,
        )
        return Ok(dataclasses.replace(session, totals=totals))

    async def _reload_shipping(
        self, session: CheckoutSession
    ) -> Result[CheckoutSession, AppError]:
        """Reload shipping methods. A selection survives if still offered."""
        match await catching(
            "Shipping methods",
            lambda: self._shipping.available(session.destination, session.cart),
        ):
            case Ok(methods):
                pass
            case Error(e):
                return Error(e)

        previous = session.selected_shipping_method
        kept = _find(methods, previous.id) if previous else None
        return Ok(dataclasses.replace(
            session,
            available_shipping_methods=_mark(methods, kept.id if kept else None),
            selected_shipping_method=dataclasses.replace(kept, is_selected=True) if kept else None,
        ))

    async def _reload_payment(
        self, session: CheckoutSession
    ) -> Result[CheckoutSession, AppError]:
        """Reload payment methods. A selection survives if still offered."""
        match await catching(
            "Payment methods",
            lambda: self._payment.available(session.owner_id, session.cart),
        ):
            case Ok(methods):
                pass
            case Error(e):
                return Error(e)

        previous = session.selected_payment_method
        kept = _find(methods, previous.id) if previous else None
        return Ok(dataclasses.replace(
            session,
            available_payment_methods=_mark(methods, kept.id if kept else None),
            selected_payment_method=dataclasses.replace(kept, is_selected=True) if kept else None,
        ))


# ═══════════════════════════════════════════════════════════════════════════════
# Helpers
# ═══════════════════════════════════════════════════════════════════════════════


def _find[M: (ShippingMethod, PaymentMethod)](
    methods: Sequence[M], method_id: str
) -> M | None:
    return next((m for m in methods if m.id == method_id), None)


def _mark[M: (ShippingMethod, PaymentMethod)](
    methods: Sequence[M], selected_id: str | None
) -> tuple[M, ...]:
    """Exactly the method with selected_id is flagged; every other is cleared."""
    return tuple(dataclasses.replace(m, is_selected=m.id == selected_id) for m in methods)


__all__ = (
    "CART_EMPTY",
    "NOT_STARTED",
    "TERMS_NOT_ACCEPTED",
    "CheckoutOrchestrator",
)
