"""
Wire — expose service operations via triggers and codecs.

    from storefront import wire as W

    endp = W.endpoint(login_handler).expose(
        W.HTTPRouteTrigger("POST", "/auth/login"),
        W.RequestResponseCodec(LoginIn, TokenGrantOut, message="Login successful"),
    )
    app = W.application().mount(endp)
    fastapi_app = W.contrib.fastapi.from_application(app, config, resolver)
"""

from storefront.wire._endpoint import (
    Endpoint,
    endpoint,
)
from storefront.wire._app import Route, Application, application
from storefront.wire._types import (
    Caller,
    Handler,
    Trigger,
    Codec,
    Exposure,
)
from storefront.wire._envelope import (
    API_VERSION,
    Money,
    WireModel,
    ErrorBody,
    Meta,
    Envelope,
)

# Common codecs and triggers
from storefront.wire.codecs.rrc import RequestResponseCodec
from storefront.wire.triggers.http import (
    HTTPRouteTrigger,
    Auth,
    Method,
    Path,
)

# Subpackages
from storefront.wire import codecs, triggers, contrib

__all__ = (
    # Core API
    "Endpoint",
    "endpoint",
    "Route",
    "Application",
    "application",
    "Caller",
    "Handler",
    "Trigger",
    "Codec",
    "Exposure",
    # Envelope
    "API_VERSION",
    "Money",
    "WireModel",
    "ErrorBody",
    "Meta",
    "Envelope",
    # Built-ins
    "RequestResponseCodec",
    "HTTPRouteTrigger",
    "Auth",
    "Method",
    "Path",
    # Subpackages
    "codecs",
    "triggers",
    "contrib",
)
