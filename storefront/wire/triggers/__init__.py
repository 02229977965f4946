"""
Triggers — describe how endpoints are exposed (e.g., HTTP routes).

    from storefront.wire.triggers.http import HTTPRouteTrigger, Auth

    http = HTTPRouteTrigger("GET", "/cart", auth=Auth.REQUIRED)
"""

from storefront.wire.triggers import http


__all__ = ("http",)
