"""
Checkout — cart, totals, and the checkout state machine.

    from storefront import checkout as C

    calculator = C.CartTotalsCalculator("USD")
    cart = C.CartService(C.MemoryCartStore(), catalog, calculator)
    sessions = C.MemoryCheckoutSessionStore()
    checkout = C.CheckoutOrchestrator(
        cart,
        sessions,
        C.OrderPlacement(C.MemoryOrderStore(), carts, sessions),
        calculator,
    )

    await checkout.start(identity)
    await checkout.set_billing_address(identity, address)
    await checkout.set_shipping_address(identity, None, same_as_billing=True)
    await checkout.select_shipping_method(identity, "standard")
    await checkout.select_payment_method(identity, "creditcard")
    confirmation = await checkout.place_order(identity, accepted_terms=True)
"""

from storefront.checkout._types import (
    Product,
    CartItem,
    CartLine,
    Totals,
    Address,
    ShippingMethod,
    PaymentMethod,
    CheckoutStage,
    CheckoutSession,
    CartView,
    Order,
    OrderConfirmation,
)
from storefront.checkout._totals import (
    subtotal_of,
    compute_totals,
    CartTotalsCalculator,
)
from storefront.checkout._providers import (
    ShippingMethodProvider,
    PaymentMethodProvider,
    TaxProvider,
    DiscountProvider,
    Catalog,
    DEFAULT_SHIPPING_METHODS,
    DEFAULT_PAYMENT_METHODS,
    StaticShippingMethods,
    StaticPaymentMethods,
    NoTax,
    NoDiscount,
    MemoryCatalog,
)
from storefront.checkout._store import (
    CartStore,
    CheckoutSessionStore,
    OrderStore,
    MemoryCartStore,
    MemoryCheckoutSessionStore,
    MemoryOrderStore,
)
from storefront.checkout._cart import CartService
from storefront.checkout._placement import OrderPlacement, PLACED_MESSAGE
from storefront.checkout._orchestrator import (
    CheckoutOrchestrator,
    CART_EMPTY,
    NOT_STARTED,
    TERMS_NOT_ACCEPTED,
)

__all__ = (
    # Types
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
    # Totals
    "subtotal_of",
    "compute_totals",
    "CartTotalsCalculator",
    # Providers
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
    # Stores
    "CartStore",
    "CheckoutSessionStore",
    "OrderStore",
    "MemoryCartStore",
    "MemoryCheckoutSessionStore",
    "MemoryOrderStore",
    # Services
    "CartService",
    "OrderPlacement",
    "PLACED_MESSAGE",
    "CheckoutOrchestrator",
    "CART_EMPTY",
    "NOT_STARTED",
    "TERMS_NOT_ACCEPTED",
)
