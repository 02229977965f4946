"""
CartService — the active identity's cart.

Items are stored by owner id (the session's Guid), which is why a guest's
cart survives an in-place upgrade to a registered account.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from decimal import Decimal

import structlog
from kungfu import Result, Ok, Error

from storefront._types import AppError, Errors
from storefront.checkout._providers import (
    Catalog,
    DiscountProvider,
    NoDiscount,
    NoTax,
    TaxProvider,
)
from storefront.checkout._store import CartStore
from storefront.checkout._totals import CartTotalsCalculator
from storefront.checkout._types import CartItem, CartLine, CartView, Product, Totals
from storefront.identity import SessionIdentity
from storefront.lift import catching, guarded


logger = structlog.get_logger(__name__)


class CartService:
    def __init__(
        self,
        carts: CartStore,
        catalog: Catalog,
        calculator: CartTotalsCalculator,
        *,
        discounts: DiscountProvider | None = None,
        taxes: TaxProvider | None = None,
    ) -> None:
        self._carts = carts
        self._catalog = catalog
        self._calculator = calculator
        self._discounts = discounts or NoDiscount()
        self._taxes = taxes or NoTax()

    # ═══════════════════════════════════════════════════════════════════════════
    # Reads
    # ═══════════════════════════════════════════════════════════════════════════

    async def lines(self, identity: SessionIdentity) -> Result[tuple[CartLine, ...], AppError]:
        """Price every stored item against the catalog."""
        owner = identity.subject_id
        match await guarded("Cart", lambda: self._carts.items(owner)):
            case Ok(items):
                pass
            case Error(e):
                return Error(e)

        priced: list[CartLine] = []
        for item in items:
            match await guarded("Cart", lambda: self._catalog.get_product(item.product_id)):
                case Ok(None):
                    logger.warning("cart_item_product_missing", product_id=item.product_id)
                case Ok(product):
                    priced.append(_line(item, product))
                case Error(e):
                    return Error(e)

        return Ok(tuple(priced))

    async def get_cart(self, identity: SessionIdentity) -> Result[CartView, AppError]:
        match await self.lines(identity):
            case Ok(lines):
                pass
            case Error(e):
                return Error(e)

        match await self._totals(identity, lines):
            case Ok(totals):
                return Ok(CartView(lines=lines, totals=totals))
            case Error(e):
                return Error(e)

    async def totals(self, identity: SessionIdentity) -> Result[Totals, AppError]:
        match await self.get_cart(identity):
            case Ok(view):
                return Ok(view.totals)
            case Error(e):
                return Error(e)

    # ═══════════════════════════════════════════════════════════════════════════
    # Mutations
    # ═══════════════════════════════════════════════════════════════════════════

    async def add_item(
        self,
        identity: SessionIdentity,
        product_id: str,
        quantity: int,
        entered_price: Decimal | None = None,
    ) -> Result[CartView, AppError]:
        """
        Add a product. An existing line for the same product grows instead.

        `entered_price` only counts for products flagged customer_enters_price
        and must sit within the product's bounds; for any other product it is
        dropped and the catalog price applies.
        """
        if quantity <= 0:
            return Error(Errors.validation("Quantity must be greater than 0"))

        match await self._product(product_id):
            case Ok(product):
                pass
            case Error(e):
                return Error(e)

        if entered_price is not None and not product.customer_enters_price:
            logger.info("cart_entered_price_ignored", product_id=product_id)
            entered_price = None
        if entered_price is not None and not _within_bounds(product, entered_price):
            return Error(Errors.validation(_bounds_message(product)))

        owner = identity.subject_id
        match await guarded("Add to cart", lambda: self._carts.items(owner)):
            case Ok(items):
                pass
            case Error(e):
                return Error(e)

        existing = next((i for i in items if i.product_id == product_id), None)
        if existing is not None:
            item = CartItem(
                id=existing.id,
                product_id=product_id,
                quantity=existing.quantity + quantity,
                entered_price=entered_price if entered_price is not None else existing.entered_price,
            )
        else:
            item = CartItem(
                id=uuid.uuid4().hex,
                product_id=product_id,
                quantity=quantity,
                entered_price=entered_price,
            )

        if not _in_stock(product, item.quantity):
            return Error(Errors.validation("Requested quantity exceeds available stock"))

        match await guarded("Add to cart", lambda: self._carts.put(owner, item)):
            case Ok(_):
                logger.info("cart_item_added", product_id=product_id, quantity=item.quantity)
                return await self.get_cart(identity)
            case Error(e):
                return Error(e)

    async def update_item(
        self, identity: SessionIdentity, item_id: str, quantity: int
    ) -> Result[CartView, AppError]:
        """Set a line's quantity. Zero or less removes the line."""
        owner = identity.subject_id
        match await guarded("Update cart", lambda: self._carts.items(owner)):
            case Ok(items):
                pass
            case Error(e):
                return Error(e)

        existing = next((i for i in items if i.id == item_id), None)
        if existing is None:
            return Error(Errors.not_found("Cart item not found"))

        if quantity <= 0:
            return await self.remove_item(identity, item_id)

        match await self._product(existing.product_id):
            case Ok(product):
                pass
            case Error(e):
                return Error(e)

        if not _in_stock(product, quantity):
            return Error(Errors.validation("Requested quantity exceeds available stock"))

        item = CartItem(
            id=existing.id,
            product_id=existing.product_id,
            quantity=quantity,
            entered_price=existing.entered_price,
        )
        match await guarded("Update cart", lambda: self._carts.put(owner, item)):
            case Ok(_):
                return await self.get_cart(identity)
            case Error(e):
                return Error(e)

    async def remove_item(
        self, identity: SessionIdentity, item_id: str
    ) -> Result[CartView, AppError]:
        owner = identity.subject_id
        match await guarded("Remove from cart", lambda: self._carts.remove(owner, item_id)):
            case Ok(True):
                logger.info("cart_item_removed", item_id=item_id)
                return await self.get_cart(identity)
            case Ok(False):
                return Error(Errors.not_found("Cart item not found"))
            case Error(e):
                return Error(e)

    async def clear(self, identity: SessionIdentity) -> Result[CartView, AppError]:
        owner = identity.subject_id
        match await guarded("Clear cart", lambda: self._carts.clear(owner)):
            case Ok(_):
                return await self.get_cart(identity)
            case Error(e):
                return Error(e)

    # ═══════════════════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════════════════

    async def _product(self, product_id: str) -> Result[Product, AppError]:
        match await guarded("Catalog", lambda: self._catalog.get_product(product_id)):
            case Ok(None):
                return Error(Errors.not_found("Product not found"))
            case Ok(product) if not product.published:
                return Error(Errors.bad_request("Product not available"))
            case Ok(product):
                return Ok(product)
            case Error(e):
                return Error(e)

    async def _totals(
        self, identity: SessionIdentity, lines: Sequence[CartLine]
    ) -> Result[Totals, AppError]:
        owner = identity.subject_id
        match await catching("Cart totals", lambda: self._discounts.discount(owner, lines)):
            case Ok(discount):
                pass
            case Error(e):
                return Error(e)

        match await catching("Cart totals", lambda: self._taxes.tax(lines, None, None)):
            case Ok(tax):
                return Ok(self._calculator(lines, discount=discount, tax=tax))
            case Error(e):
                return Error(e)


def _line(item: CartItem, product: Product) -> CartLine:
    return CartLine(
        id=item.id,
        product_id=item.product_id,
        name=product.name,
        quantity=item.quantity,
        catalog_price=product.price,
        entered_price=item.entered_price if product.customer_enters_price else None,
        sku=product.sku,
    )


def _in_stock(product: Product, quantity: int) -> bool:
    return product.stock_quantity is None or quantity <= product.stock_quantity


def _within_bounds(product: Product, price: Decimal) -> bool:
    if price < product.min_entered_price:
        return False
    return product.max_entered_price is None or price <= product.max_entered_price


def _bounds_message(product: Product) -> str:
    if product.max_entered_price is None:
        return f"Price must be at least {product.min_entered_price}"
    return f"Price must be between {product.min_entered_price} and {product.max_entered_price}"


__all__ = ("CartService",)
