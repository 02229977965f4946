"""
Composition root — services and the FastAPI app.

    uvicorn storefront.app:create_app --factory

Every collaborator defaults to its in-memory implementation; pass your own
stores and providers to build_services for anything durable.
"""

from __future__ import annotations

import random

import fastapi

from storefront._config import StorefrontConfig
from storefront._logging import configure_logging
from storefront._types import Clock, utc_now
from storefront.checkout import (
    CartService,
    CartStore,
    CartTotalsCalculator,
    Catalog,
    CheckoutOrchestrator,
    CheckoutSessionStore,
    DiscountProvider,
    MemoryCartStore,
    MemoryCatalog,
    MemoryCheckoutSessionStore,
    MemoryOrderStore,
    OrderPlacement,
    OrderStore,
    PaymentMethodProvider,
    ShippingMethodProvider,
    TaxProvider,
)
from storefront.http import Services, build_application
from storefront.identity import (
    AuthService,
    CustomerManager,
    CustomerStore,
    EventPublisher,
    MemoryCustomerStore,
)
from storefront.wire.contrib import fastapi as wire_fastapi


def build_services(
    config: StorefrontConfig,
    *,
    customers: CustomerStore | None = None,
    carts: CartStore | None = None,
    catalog: Catalog | None = None,
    sessions: CheckoutSessionStore | None = None,
    orders: OrderStore | None = None,
    manager: CustomerManager | None = None,
    events: EventPublisher | None = None,
    shipping: ShippingMethodProvider | None = None,
    payment: PaymentMethodProvider | None = None,
    taxes: TaxProvider | None = None,
    discounts: DiscountProvider | None = None,
    clock: Clock = utc_now,
    rng: random.Random | None = None,
) -> Services:
    customers = customers or MemoryCustomerStore()
    carts = carts or MemoryCartStore()
    sessions = sessions or MemoryCheckoutSessionStore()
    calculator = CartTotalsCalculator(config.currency)

    auth = AuthService(config, customers, manager=manager, events=events, clock=clock)
    cart = CartService(
        carts,
        catalog or MemoryCatalog(),
        calculator,
        discounts=discounts,
        taxes=taxes,
    )
    checkout = CheckoutOrchestrator(
        cart,
        sessions,
        OrderPlacement(orders or MemoryOrderStore(), carts, sessions, clock=clock, rng=rng),
        calculator,
        shipping=shipping,
        payment=payment,
        taxes=taxes,
        discounts=discounts,
    )
    return Services(auth=auth, cart=cart, checkout=checkout)


def create_app(
    config: StorefrontConfig | None = None,
    services: Services | None = None,
    clock: Clock = utc_now,
) -> fastapi.FastAPI:
    config = config or StorefrontConfig()
    configure_logging(config.log_level, json=config.log_json)

    services = services or build_services(config, clock=clock)
    app = build_application(services, prefix=config.api_prefix)
    return wire_fastapi.from_application(app, config, services.auth.resolver, clock=clock)


__all__ = (
    "build_services",
    "create_app",
)
