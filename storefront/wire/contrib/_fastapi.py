"""
Compile an Application into FastAPI routes.

Each route handler:
    1. rejects everything when the API is disabled
    2. authenticates per the trigger's Auth mode
    3. merges query params, path params and JSON body into one payload
    4. validates it with the codec's request model, calls to_domain()
    5. runs the endpoint handler and renders the Envelope

Anything that escapes a route handler is rendered as an INTERNAL envelope by
the exception handler from_application registers.
"""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime
from typing import Any

import fastapi
import pydantic
import structlog
from combinators import lift as L
from fastapi.responses import JSONResponse
from kungfu import Result, Ok, Error

from storefront._config import StorefrontConfig
from storefront._types import AppError, Clock, Errors, utc_now
from storefront.identity import TOKEN_EXPIRED, IdentityResolver, bearer_from_header
from storefront.wire._app import Application, Route
from storefront.wire._envelope import Envelope
from storefront.wire._types import Caller
from storefront.wire.triggers.http import Auth


logger = structlog.get_logger(__name__)

type RouteFunc = Callable[[fastapi.Request], Any]


# ═══════════════════════════════════════════════════════════════════════════════
# Rendering
# ═══════════════════════════════════════════════════════════════════════════════


def render_error(error: AppError, now: datetime) -> JSONResponse:
    headers = {"Token-Expired": "true"} if error.reason == TOKEN_EXPIRED else None
    return JSONResponse(
        status_code=error.kind.status,
        content=Envelope.fail(error, now).to_json(),
        headers=headers,
    )


def render_ok(data: Any, message: str | None, now: datetime) -> JSONResponse:
    return JSONResponse(status_code=200, content=Envelope.ok(data, message, now).to_json())


def validation_details(error: pydantic.ValidationError) -> list[dict[str, str]]:
    return [
        {"field": ".".join(str(p) for p in e["loc"]), "message": e["msg"]}
        for e in error.errors()
    ]


# ═══════════════════════════════════════════════════════════════════════════════
# Request handling
# ═══════════════════════════════════════════════════════════════════════════════


def authenticate(
    request: fastapi.Request, auth: Auth, resolver: IdentityResolver
) -> Result[Caller, AppError]:
    header = request.headers.get("Authorization")
    bearer = bearer_from_header(header)

    match auth:
        case Auth.NONE:
            return Ok(Caller())
        case Auth.OPTIONAL:
            return Ok(Caller(bearer_token=bearer))
        case Auth.REQUIRED:
            match resolver.resolve_header(header):
                case Ok(identity):
                    return Ok(Caller(identity=identity, bearer_token=bearer))
                case Error(e):
                    return Error(e)


async def read_payload(request: fastapi.Request) -> Result[dict[str, Any], AppError]:
    payload: dict[str, Any] = dict(request.query_params)

    body = await request.body()
    if body.strip():
        try:
            parsed = json.loads(body)
        except ValueError:
            return Error(Errors.validation("Malformed JSON body"))
        if not isinstance(parsed, dict):
            return Error(Errors.validation("JSON body must be an object"))
        payload.update(parsed)

    payload.update(request.path_params)
    return Ok(payload)


def compile_route(
    route: Route,
    config: StorefrontConfig,
    resolver: IdentityResolver,
    clock: Clock,
) -> RouteFunc:
    handler, trigger, codec = route.handler, route.trigger, route.codec
    req_cls: Any = codec.request
    resp_cls: Any = codec.response

    async def _route_handler(request: fastapi.Request) -> JSONResponse:
        now = clock()
        if not config.enabled:
            return render_error(Errors.bad_request("Storefront API is disabled"), now)

        match authenticate(request, trigger.auth, resolver):
            case Ok(caller):
                pass
            case Error(e):
                return render_error(e, now)

        match await read_payload(request):
            case Ok(payload):
                pass
            case Error(e):
                return render_error(e, now)

        try:
            req = req_cls.model_validate(payload)
        except pydantic.ValidationError as e:
            error = Errors.validation("Request validation failed", validation_details(e))
            return render_error(error, now)

        result = await L.catching_async(
            lambda: handler(req.to_domain(), caller),
            on_error=lambda e: e,
        )

        match result:
            case Ok(Ok(value)):
                data = resp_cls.from_domain(value).model_dump(mode="json", by_alias=True) if resp_cls else None
                return render_ok(data, codec.message, now)
            case Ok(Error(e)):
                logger.info(
                    "request_failed",
                    method=trigger.method,
                    path=trigger.path,
                    code=e.kind.code,
                    error=e.message,
                )
                return render_error(e, now)
            case Error(exc):
                logger.error(
                    "request_crashed",
                    method=trigger.method,
                    path=trigger.path,
                    exc_info=exc,
                )
                return render_error(Errors.internal("An unexpected error occurred"), now)

    _route_handler.__name__ = route.name
    return _route_handler


# ═══════════════════════════════════════════════════════════════════════════════
# Application
# ═══════════════════════════════════════════════════════════════════════════════


def add_routes_to_app(
    f_app: fastapi.FastAPI,
    app: Application,
    config: StorefrontConfig,
    resolver: IdentityResolver,
    clock: Clock = utc_now,
) -> None:
    for route in app.routes():
        f_app.add_api_route(
            route.trigger.path,
            compile_route(route, config, resolver, clock),
            methods=[route.trigger.method],
            summary=route.trigger.summary,
            operation_id=f"{route.name}_{route.trigger.method.lower()}",
        )


def from_application(
    app: Application,
    config: StorefrontConfig,
    resolver: IdentityResolver,
    clock: Clock = utc_now,
    title: str = "Storefront API",
) -> fastapi.FastAPI:
    f_app = fastapi.FastAPI(title=title)

    async def _unhandled(request: fastapi.Request, exc: Exception) -> JSONResponse:
        logger.error("request_crashed", method=request.method, path=request.url.path, exc_info=exc)
        return render_error(Errors.internal("An unexpected error occurred"), clock())

    f_app.add_exception_handler(Exception, _unhandled)
    add_routes_to_app(f_app, app, config, resolver, clock)
    return f_app


__all__ = (
    "render_error",
    "render_ok",
    "authenticate",
    "read_payload",
    "compile_route",
    "add_routes_to_app",
    "from_application",
)
