"""Shared infrastructure for examples."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Coroutine
from decimal import Decimal

from storefront.checkout import Address, MemoryCatalog, Product


# Catalog
def sample_catalog() -> MemoryCatalog:
    return MemoryCatalog([
        Product(id="p-mug", name="Coffee Mug", price=Decimal("12.50"), sku="MUG-1", stock_quantity=25),
        Product(id="p-beans", name="Espresso Beans 1kg", price=Decimal("24.90"), sku="BEAN-1"),
        Product(id="p-grinder", name="Hand Grinder", price=Decimal("79.00"), sku="GRD-1", stock_quantity=2),
    ])


def sample_address() -> Address:
    return Address(
        first_name="Alice",
        last_name="Smith",
        email="alice@example.com",
        address1="10 Market St",
        city="Portland",
        zip_postal_code="97201",
        country_id="US",
    )


# Helpers
def banner(title: str) -> None:
    print(f"\n{'─' * 50}\n{title}\n{'─' * 50}")


def run(main: Callable[[], Coroutine[object, object, None]]) -> None:
    asyncio.run(main())
