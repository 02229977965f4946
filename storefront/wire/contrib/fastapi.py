"""
FastAPI integration for storefront.wire.

    from storefront.wire.contrib import fastapi
    # fapp = fastapi.from_application(app, config, resolver)
"""

from storefront.wire.contrib._fastapi import (
    add_routes_to_app,
    compile_route,
    from_application,
    render_error,
)

__all__ = (
    "add_routes_to_app",
    "compile_route",
    "from_application",
    "render_error",
)
