"""
Order placement — persist, clear cart, close session, with rollback.

Each step may record a compensator. When a later step fails, recorded
compensators run in reverse and the first error is returned.
"""

from __future__ import annotations

import random
import uuid
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any

import structlog
from kungfu import Result, Ok, Error

from storefront._types import AppError, Clock, StoreError, utc_now
from storefront.checkout._store import CartStore, CheckoutSessionStore, OrderStore
from storefront.checkout._types import (
    CartItem,
    CheckoutSession,
    Order,
    OrderConfirmation,
)
from storefront.lift import guarded


logger = structlog.get_logger(__name__)


ORDER_STATUS_PENDING = "Pending"
PAYMENT_STATUS_PENDING = "Pending"
ESTIMATED_DELIVERY = timedelta(days=5)
PLACED_MESSAGE = (
    "Your order has been placed successfully! "
    "You will receive an email confirmation shortly."
)


def order_number(now: datetime, rng: random.Random) -> str:
    return f"ORD-{now:%Y%m%d}-{rng.randint(1000, 9999)}"


# ═══════════════════════════════════════════════════════════════════════════════
# Steps
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class PlacementStep:
    name: str
    action: Callable[[], Awaitable[Result[Any, StoreError]]]
    compensate: Callable[[Any], Awaitable[object]] | None = None


type RecordedCompensator = tuple[str, Any, Callable[[Any], Awaitable[object]]]


async def run_compensators(compensators: list[RecordedCompensator]) -> tuple[int, int]:
    """Run compensators in reverse. Returns (run, failed)."""
    comp_run = 0
    comp_failed = 0

    for name, value, comp in reversed(compensators):
        try:
            await comp(value)
            comp_run += 1
        except Exception:
            comp_failed += 1
            logger.exception("placement_compensation_failed", step=name)

    return comp_run, comp_failed


async def run_steps(steps: Sequence[PlacementStep]) -> Result[None, AppError]:
    compensators: list[RecordedCompensator] = []

    for step in steps:
        match await guarded("Order placement", step.action):
            case Ok(value):
                if step.compensate is not None:
                    compensators.append((step.name, value, step.compensate))
            case Error(e):
                comp_run, comp_failed = await run_compensators(compensators)
                logger.error(
                    "placement_rolled_back",
                    step=step.name,
                    compensators_run=comp_run,
                    compensators_failed=comp_failed,
                )
                return Error(e)

    return Ok(None)


# ═══════════════════════════════════════════════════════════════════════════════
# OrderPlacement
# ═══════════════════════════════════════════════════════════════════════════════


class OrderPlacement:
    def __init__(
        self,
        orders: OrderStore,
        carts: CartStore,
        sessions: CheckoutSessionStore,
        clock: Clock = utc_now,
        rng: random.Random | None = None,
    ) -> None:
        self._orders = orders
        self._carts = carts
        self._sessions = sessions
        self._clock = clock
        self._rng = rng or random.Random()

    async def place(
        self, session: CheckoutSession, notes: str | None
    ) -> Result[OrderConfirmation, AppError]:
        """Place an order from a priced session. Caller holds the session lock."""
        now = self._clock()
        owner = session.owner_id
        order = Order(
            id=uuid.uuid4(),
            number=order_number(now, self._rng),
            owner_id=owner,
            lines=session.cart,
            totals=session.totals,
            billing_address=session.billing_address,
            shipping_address=session.destination,
            shipping_method=session.selected_shipping_method,
            payment_method=session.selected_payment_method,
            created_at=now,
            notes=notes,
            status=ORDER_STATUS_PENDING,
            payment_status=PAYMENT_STATUS_PENDING,
        )

        async def delete_order(saved: Order) -> None:
            await self._orders.delete(saved.id)

        async def restore_cart(removed: tuple[CartItem, ...]) -> None:
            for item in removed:
                await self._carts.put(owner, item)

        steps = (
            PlacementStep("save_order", lambda: self._orders.save(order), delete_order),
            PlacementStep("clear_cart", lambda: self._carts.clear(owner), restore_cart),
            PlacementStep("close_session", lambda: self._sessions.discard(owner)),
        )

        match await run_steps(steps):
            case Ok(_):
                pass
            case Error(e):
                return Error(e)

        logger.info(
            "order_placed",
            order_number=order.number,
            total=str(order.totals.total),
            guest=session.is_guest_checkout,
        )

        return Ok(OrderConfirmation(
            order_id=order.id,
            order_number=order.number,
            order_total=order.totals.total,
            currency=order.totals.currency,
            order_status=order.status,
            payment_status=order.payment_status,
            order_date=now,
            estimated_delivery_date=now + ESTIMATED_DELIVERY,
            requires_payment=order.totals.total > 0,
            message=PLACED_MESSAGE,
            totals=order.totals,
        ))


__all__ = (
    "ORDER_STATUS_PENDING",
    "PAYMENT_STATUS_PENDING",
    "ESTIMATED_DELIVERY",
    "PLACED_MESSAGE",
    "order_number",
    "PlacementStep",
    "run_compensators",
    "run_steps",
    "OrderPlacement",
)
