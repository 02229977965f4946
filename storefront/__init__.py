"""
storefront — guest/registered sessions and checkout orchestration.

Modules:
    identity    — tokens, refresh slots, identity resolution, AuthService
    checkout    — cart, totals, CheckoutOrchestrator, order placement
    wire        — expose operations via HTTP triggers and codecs
    http        — the storefront's routes and wire models
    lift        — lift collaborator calls into Result[T, AppError]

Example:
    from storefront import StorefrontConfig, create_app

    app = create_app(StorefrontConfig())  # STOREFRONT_* env / .env
"""

# Core types
from storefront._types import (
    Result,
    Ok,
    Error,
    ErrorKind,
    AppError,
    Errors,
    StoreError,
    money,
    Clock,
    utc_now,
)
from storefront._config import StorefrontConfig
from storefront._logging import configure_logging

# Modules
from storefront import identity
from storefront import checkout
from storefront import wire
from storefront import http
from storefront import lift

from storefront.app import build_services, create_app

__all__ = (
    # Core types
    "Result",
    "Ok",
    "Error",
    "ErrorKind",
    "AppError",
    "Errors",
    "StoreError",
    "money",
    "Clock",
    "utc_now",
    # Config & logging
    "StorefrontConfig",
    "configure_logging",
    # Modules
    "identity",
    "checkout",
    "wire",
    "http",
    "lift",
    # App
    "build_services",
    "create_app",
)
