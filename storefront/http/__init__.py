"""
HTTP — the storefront's routes and wire models.

    from storefront.http import Services, build_application
"""

from storefront.http._routes import (
    Services,
    auth_endpoints,
    cart_endpoints,
    checkout_endpoints,
    build_application,
)
from storefront.http import _models as models

__all__ = (
    "Services",
    "auth_endpoints",
    "cart_endpoints",
    "checkout_endpoints",
    "build_application",
    "models",
)
