"""
Guest Checkout Example

A guest fills a cart, registers (keeping the same Guid and cart), and
walks the checkout to a placed order.

Run: uv run python examples/guest_checkout.py
"""

from kungfu import Ok, Error

from examples._infra import banner, run, sample_address, sample_catalog
from storefront import StorefrontConfig, build_services
from storefront.identity import SessionIdentity


async def main() -> None:
    banner("Guest Checkout")

    config = StorefrontConfig(_env_file=None)
    services = build_services(config, catalog=sample_catalog())
    auth, cart, checkout = services.auth, services.cart, services.checkout

    # 1. Guest session
    print("1. Guest session:")
    match await auth.create_guest():
        case Ok(guest):
            print(f"   Guid: {guest.customer_guid} ({guest.user_type.value})")
        case Error(e):
            print(f"   Error: {e.message}")
            return

    identity = SessionIdentity.guest(guest.customer_guid)

    # 2. Cart
    print("\n2. Cart:")
    await cart.add_item(identity, "p-mug", 2)
    match await cart.add_item(identity, "p-beans", 1):
        case Ok(view):
            for line in view.lines:
                print(f"   {line.quantity} x {line.name} @ {line.unit_price}")
            print(f"   Subtotal: {view.totals.subtotal}")
        case Error(e):
            print(f"   Error: {e.message}")

    # 3. Register with the guest token
    print("\n3. Register:")
    match await auth.register(
        "alice@example.com",
        "correct-horse",
        "correct-horse",
        first_name="Alice",
        last_name="Smith",
        bearer_token=guest.access_token,
    ):
        case Ok(registered):
            same = registered.customer_guid == guest.customer_guid
            print(f"   Guid kept: {same}, user type: {registered.user_type.value}")
        case Error(e):
            print(f"   Error: {e.message}")
            return

    identity = SessionIdentity.registered(registered.customer_guid, "alice@example.com")

    # 4. Checkout
    print("\n4. Checkout:")
    address = sample_address()
    await checkout.start(identity)
    await checkout.set_billing_address(identity, address)
    await checkout.set_shipping_address(identity, None, same_as_billing=True)
    await checkout.select_shipping_method(identity, "express")

    match await checkout.select_payment_method(identity, "cashondelivery"):
        case Ok(session):
            t = session.totals
            print(f"   Stage: {session.stage.name}")
            print(f"   {t.subtotal} + shipping {t.shipping_cost} + fee {t.payment_fee} = {t.total}")
        case Error(e):
            print(f"   Error: {e.message}")
            return

    # 5. Place
    print("\n5. Place order:")
    match await checkout.place_order(identity, accepted_terms=True, order_notes="Leave at door"):
        case Ok(confirmation):
            print(f"   {confirmation.order_number}: {confirmation.order_total} {confirmation.currency}")
            print(f"   Estimated delivery: {confirmation.estimated_delivery_date:%Y-%m-%d}")
        case Error(e):
            print(f"   Error: {e.message}")

    match await cart.get_cart(identity):
        case Ok(view):
            print(f"   Cart empty afterwards: {view.is_empty}")
        case Error(e):
            print(f"   Error: {e.message}")


if __name__ == "__main__":
    run(main)
