"""
Routes — every service operation bound to an HTTP trigger and codec.

    app = build_application(services)        # wire.Application
    fastapi_app = W.contrib.fastapi.from_application(app, config, resolver)
"""

from __future__ import annotations

from dataclasses import dataclass

from kungfu import Result

from storefront._types import AppError
from storefront.checkout import (
    Address,
    CartService,
    CartView,
    CheckoutOrchestrator,
    CheckoutSession,
    OrderConfirmation,
    PaymentMethod,
    ShippingMethod,
    Totals,
)
from storefront.identity import AuthService, TokenGrant
from storefront.http._models import (
    AddToCart,
    AddToCartIn,
    AddressDto,
    CartItemRefIn,
    CartOut,
    CheckoutSessionOut,
    Login,
    LoginIn,
    MethodChoiceIn,
    NoInput,
    OrderConfirmationOut,
    PaymentMethodsOut,
    PlaceOrder,
    PlaceOrderIn,
    Refresh,
    RefreshIn,
    Register,
    RegisterIn,
    ShippingAddressChoice,
    ShippingAddressIn,
    ShippingMethodsOut,
    TokenGrantOut,
    TotalsOut,
    UpdateCartItem,
    UpdateCartItemIn,
)
from storefront.wire import (
    Application,
    Auth,
    Caller,
    Endpoint,
    HTTPRouteTrigger,
    RequestResponseCodec,
    application,
    endpoint,
)


@dataclass(frozen=True, slots=True)
class Services:
    auth: AuthService
    cart: CartService
    checkout: CheckoutOrchestrator


# ═══════════════════════════════════════════════════════════════════════════════
# Auth
# ═══════════════════════════════════════════════════════════════════════════════


def auth_endpoints(auth: AuthService) -> list[Endpoint]:
    async def create_guest(_: None, caller: Caller) -> Result[TokenGrant, AppError]:
        return await auth.create_guest()

    async def login(cmd: Login, caller: Caller) -> Result[TokenGrant, AppError]:
        return await auth.login(cmd.email, cmd.password)

    async def register(cmd: Register, caller: Caller) -> Result[TokenGrant, AppError]:
        return await auth.register(
            cmd.email,
            cmd.password,
            cmd.confirm_password,
            first_name=cmd.first_name,
            last_name=cmd.last_name,
            bearer_token=caller.bearer_token,
        )

    async def refresh(cmd: Refresh, caller: Caller) -> Result[TokenGrant, AppError]:
        return await auth.refresh(cmd.access_token, cmd.refresh_token)

    async def logout(_: None, caller: Caller) -> Result[None, AppError]:
        return await auth.logout(caller.require())

    return [
        endpoint(create_guest).expose(
            HTTPRouteTrigger("POST", "/auth/guest", summary="Create guest session"),
            RequestResponseCodec(NoInput, TokenGrantOut, message="Guest session created"),
        ),
        endpoint(login).expose(
            HTTPRouteTrigger("POST", "/auth/login", summary="Log in"),
            RequestResponseCodec(LoginIn, TokenGrantOut, message="Login successful"),
        ),
        endpoint(register).expose(
            HTTPRouteTrigger("POST", "/auth/register", auth=Auth.OPTIONAL, summary="Register"),
            RequestResponseCodec(RegisterIn, TokenGrantOut, message="Registration successful"),
        ),
        endpoint(refresh).expose(
            HTTPRouteTrigger("POST", "/auth/refresh", summary="Refresh tokens"),
            RequestResponseCodec(RefreshIn, TokenGrantOut, message="Token refreshed successfully"),
        ),
        endpoint(logout).expose(
            HTTPRouteTrigger("POST", "/auth/logout", auth=Auth.REQUIRED, summary="Log out"),
            RequestResponseCodec(NoInput, None, message="Logged out successfully"),
        ),
    ]


# ═══════════════════════════════════════════════════════════════════════════════
# Cart
# ═══════════════════════════════════════════════════════════════════════════════


def cart_endpoints(cart: CartService) -> list[Endpoint]:
    async def get_cart(_: None, caller: Caller) -> Result[CartView, AppError]:
        return await cart.get_cart(caller.require())

    async def add(cmd: AddToCart, caller: Caller) -> Result[CartView, AppError]:
        return await cart.add_item(
            caller.require(), cmd.product_id, cmd.quantity, cmd.entered_price
        )

    async def update(cmd: UpdateCartItem, caller: Caller) -> Result[CartView, AppError]:
        return await cart.update_item(caller.require(), cmd.item_id, cmd.quantity)

    async def remove(item_id: str, caller: Caller) -> Result[CartView, AppError]:
        return await cart.remove_item(caller.require(), item_id)

    async def clear(_: None, caller: Caller) -> Result[CartView, AppError]:
        return await cart.clear(caller.require())

    async def totals(_: None, caller: Caller) -> Result[Totals, AppError]:
        return await cart.totals(caller.require())

    required = Auth.REQUIRED
    return [
        endpoint(get_cart).expose(
            HTTPRouteTrigger("GET", "/cart", auth=required),
            RequestResponseCodec(NoInput, CartOut),
        ),
        endpoint(add).expose(
            HTTPRouteTrigger("POST", "/cart/add", auth=required),
            RequestResponseCodec(AddToCartIn, CartOut, message="Item added to cart"),
        ),
        endpoint(update).expose(
            HTTPRouteTrigger("PUT", "/cart/items/{itemId}", auth=required),
            RequestResponseCodec(UpdateCartItemIn, CartOut, message="Cart item updated"),
        ),
        endpoint(remove).expose(
            HTTPRouteTrigger("DELETE", "/cart/items/{itemId}", auth=required),
            RequestResponseCodec(CartItemRefIn, CartOut, message="Item removed from cart"),
        ),
        endpoint(clear).expose(
            HTTPRouteTrigger("DELETE", "/cart/clear", auth=required),
            RequestResponseCodec(NoInput, CartOut, message="Cart cleared"),
        ),
        endpoint(totals).expose(
            HTTPRouteTrigger("GET", "/cart/totals", auth=required),
            RequestResponseCodec(NoInput, TotalsOut),
        ),
    ]


# ═══════════════════════════════════════════════════════════════════════════════
# Checkout
# ═══════════════════════════════════════════════════════════════════════════════


def checkout_endpoints(checkout: CheckoutOrchestrator) -> list[Endpoint]:
    async def start(_: None, caller: Caller) -> Result[CheckoutSession, AppError]:
        return await checkout.start(caller.require())

    async def billing(address: Address, caller: Caller) -> Result[CheckoutSession, AppError]:
        return await checkout.set_billing_address(caller.require(), address)

    async def shipping_address(
        cmd: ShippingAddressChoice, caller: Caller
    ) -> Result[CheckoutSession, AppError]:
        return await checkout.set_shipping_address(
            caller.require(), cmd.address, same_as_billing=cmd.same_as_billing
        )

    async def shipping_methods(
        _: None, caller: Caller
    ) -> Result[tuple[ShippingMethod, ...], AppError]:
        return await checkout.shipping_methods(caller.require())

    async def select_shipping(method_id: str, caller: Caller) -> Result[CheckoutSession, AppError]:
        return await checkout.select_shipping_method(caller.require(), method_id)

    async def payment_methods(
        _: None, caller: Caller
    ) -> Result[tuple[PaymentMethod, ...], AppError]:
        return await checkout.payment_methods(caller.require())

    async def select_payment(method_id: str, caller: Caller) -> Result[CheckoutSession, AppError]:
        return await checkout.select_payment_method(caller.require(), method_id)

    async def place(cmd: PlaceOrder, caller: Caller) -> Result[OrderConfirmation, AppError]:
        return await checkout.place_order(
            caller.require(), cmd.accepted_terms, order_notes=cmd.order_notes
        )

    required = Auth.REQUIRED
    return [
        endpoint(start).expose(
            HTTPRouteTrigger("GET", "/checkout/start", auth=required),
            RequestResponseCodec(NoInput, CheckoutSessionOut),
        ),
        endpoint(billing).expose(
            HTTPRouteTrigger("POST", "/checkout/billing-address", auth=required),
            RequestResponseCodec(AddressDto, CheckoutSessionOut, message="Billing address saved"),
        ),
        endpoint(shipping_address).expose(
            HTTPRouteTrigger("POST", "/checkout/shipping-address", auth=required),
            RequestResponseCodec(
                ShippingAddressIn, CheckoutSessionOut, message="Shipping address saved"
            ),
        ),
        endpoint(shipping_methods).expose(
            HTTPRouteTrigger("GET", "/checkout/shipping-methods", auth=required),
            RequestResponseCodec(NoInput, ShippingMethodsOut),
        ),
        endpoint(select_shipping).expose(
            HTTPRouteTrigger("POST", "/checkout/shipping-method", auth=required),
            RequestResponseCodec(
                MethodChoiceIn, CheckoutSessionOut, message="Shipping method selected"
            ),
        ),
        endpoint(payment_methods).expose(
            HTTPRouteTrigger("GET", "/checkout/payment-methods", auth=required),
            RequestResponseCodec(NoInput, PaymentMethodsOut),
        ),
        endpoint(select_payment).expose(
            HTTPRouteTrigger("POST", "/checkout/payment-method", auth=required),
            RequestResponseCodec(
                MethodChoiceIn, CheckoutSessionOut, message="Payment method selected"
            ),
        ),
        endpoint(place).expose(
            HTTPRouteTrigger("POST", "/checkout/place-order", auth=required),
            RequestResponseCodec(
                PlaceOrderIn, OrderConfirmationOut, message="Order placed successfully"
            ),
        ),
    ]


def build_application(services: Services, prefix: str = "") -> Application:
    return application(prefix).mount(
        *auth_endpoints(services.auth),
        *cart_endpoints(services.cart),
        *checkout_endpoints(services.checkout),
    )


__all__ = (
    "Services",
    "auth_endpoints",
    "cart_endpoints",
    "checkout_endpoints",
    "build_application",
)
