"""CartService: per-identity carts priced against the catalog."""

import uuid
from decimal import Decimal

import pytest

from storefront import ErrorKind
from storefront.checkout import Product
from storefront.identity import SessionIdentity

from tests.conftest import err, ok


@pytest.fixture
def guest() -> SessionIdentity:
    return SessionIdentity.guest(uuid.uuid4())


class TestAddItem:
    @pytest.mark.asyncio
    async def test_add_prices_from_catalog(self, cart, guest):
        view = ok(await cart.add_item(guest, "p-book", 2))

        [line] = view.lines
        assert line.name == "Book"
        assert line.unit_price == Decimal("10.00")
        assert view.totals.subtotal == Decimal("20.00")
        assert view.total_items == 2

    @pytest.mark.asyncio
    async def test_same_product_merges(self, cart, guest):
        ok(await cart.add_item(guest, "p-pen", 1))
        view = ok(await cart.add_item(guest, "p-pen", 3))

        [line] = view.lines
        assert line.quantity == 4

    @pytest.mark.asyncio
    async def test_entered_price_ignored_for_fixed_price_product(self, cart, guest):
        view = ok(await cart.add_item(guest, "p-book", 1, entered_price=Decimal("0.01")))

        [line] = view.lines
        assert line.entered_price is None
        assert line.unit_price == Decimal("10.00")
        assert view.totals.subtotal == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_entered_price_kept_when_product_allows_it(self, cart, guest):
        view = ok(await cart.add_item(guest, "p-gift", 2, entered_price=Decimal("40.00")))

        assert view.totals.subtotal == Decimal("80.00")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("price", ["4.99", "100.01"])
    async def test_entered_price_outside_bounds(self, cart, guest, price):
        error = err(await cart.add_item(guest, "p-gift", 1, entered_price=Decimal(price)))

        assert error.kind is ErrorKind.VALIDATION
        assert error.message == "Price must be between 5.00 and 100.00"
        assert ok(await cart.get_cart(guest)).is_empty

    @pytest.mark.asyncio
    async def test_carts_are_per_identity(self, cart, guest):
        other = SessionIdentity.guest(uuid.uuid4())
        ok(await cart.add_item(guest, "p-book", 1))

        assert ok(await cart.get_cart(other)).is_empty

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("product_id", "quantity", "kind", "message"),
        [
            ("p-book", 0, ErrorKind.VALIDATION, "Quantity must be greater than 0"),
            ("p-missing", 1, ErrorKind.NOT_FOUND, "Product not found"),
            ("p-hidden", 1, ErrorKind.BAD_REQUEST, "Product not available"),
            ("p-book", 11, ErrorKind.VALIDATION, "Requested quantity exceeds available stock"),
        ],
    )
    async def test_rejections(self, cart, guest, product_id, quantity, kind, message):
        error = err(await cart.add_item(guest, product_id, quantity))

        assert error.kind is kind
        assert error.message == message

    @pytest.mark.asyncio
    async def test_stock_applies_to_merged_quantity(self, cart, guest):
        ok(await cart.add_item(guest, "p-book", 8))

        error = err(await cart.add_item(guest, "p-book", 3))

        assert error.message == "Requested quantity exceeds available stock"


class TestUpdateAndRemove:
    @pytest.mark.asyncio
    async def test_update_quantity(self, cart, guest):
        [line] = ok(await cart.add_item(guest, "p-book", 1)).lines

        view = ok(await cart.update_item(guest, line.id, 5))

        assert view.lines[0].quantity == 5
        assert view.totals.subtotal == Decimal("50.00")

    @pytest.mark.asyncio
    async def test_update_to_zero_removes(self, cart, guest):
        [line] = ok(await cart.add_item(guest, "p-book", 1)).lines

        assert ok(await cart.update_item(guest, line.id, 0)).is_empty

    @pytest.mark.asyncio
    async def test_update_unknown_item(self, cart, guest):
        error = err(await cart.update_item(guest, "nope", 1))

        assert error.kind is ErrorKind.NOT_FOUND
        assert error.message == "Cart item not found"

    @pytest.mark.asyncio
    async def test_remove(self, cart, guest):
        ok(await cart.add_item(guest, "p-pen", 1))
        [line, *_] = ok(await cart.add_item(guest, "p-book", 1)).lines

        view = ok(await cart.remove_item(guest, line.id))

        assert len(view.lines) == 1

    @pytest.mark.asyncio
    async def test_remove_unknown_item(self, cart, guest):
        assert err(await cart.remove_item(guest, "nope")).kind is ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_clear(self, cart, guest):
        ok(await cart.add_item(guest, "p-pen", 1))
        ok(await cart.add_item(guest, "p-book", 1))

        view = ok(await cart.clear(guest))

        assert view.is_empty
        assert view.totals.total == Decimal("0.00")


class TestCatalogDrift:
    @pytest.mark.asyncio
    async def test_prices_follow_catalog(self, cart, catalog, guest):
        ok(await cart.add_item(guest, "p-pen", 2))
        catalog.add(Product(id="p-pen", name="Pen", price=Decimal("3.00")))

        assert ok(await cart.totals(guest)).subtotal == Decimal("6.00")
