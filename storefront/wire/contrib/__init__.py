"""
Contrib — framework integrations. Access integrations via submodules.

    from storefront.wire.contrib import fastapi
    # app = fastapi.from_application(Application(), config, resolver)
"""

from . import fastapi

__all__ = ("fastapi",)
