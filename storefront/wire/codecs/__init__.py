"""
Codecs — convert transport payloads to domain inputs and back.

    from storefront.wire.codecs import RequestResponseCodec

    # class Request(WireModel): implements to_domain()
    # class Response(WireModel): implements from_domain()
    # codec = RequestResponseCodec(Request, Response)
"""

from storefront.wire.codecs.rrc import (
    RequestResponseCodec,
    ToDomain,
    FromDomain,
)

__all__ = (
    "RequestResponseCodec",
    "ToDomain",
    "FromDomain",
)
