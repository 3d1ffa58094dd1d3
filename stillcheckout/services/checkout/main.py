"""Public entrypoint for Still tag checkout.

Common methods on the checkout route reach the handler; any other verb is
answered from the same error table, so every 405 advertises only POST.
"""

from functools import partial
from time import perf_counter
from uuid import uuid4

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stillcheckout.common.config import CheckoutConfig, load_checkout_config, settings
from stillcheckout.common.logging import configure_logging, logger, request_id_ctx
from stillcheckout.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
)
from stillcheckout.common.startup import log_startup_config
from stillcheckout.common.tracing import instrument_app, setup_tracing
from stillcheckout.services.checkout.errors import CheckoutFailure, error_response
from stillcheckout.services.checkout.schemas import CheckoutResponse, InboundCheckoutRequest
from stillcheckout.services.checkout.service import CheckoutService

CHECKOUT_ROUTE = "/api/create-checkout-session"
ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings.service_name,
    ["SERVICE_NAME", "STRIPE_API_BASE", "STRIPE_SECRET_KEY", "UPSTREAM_TIMEOUT_SECONDS", "TRACING_ENABLED"],
)
app = FastAPI(title="Still Tag Checkout")
instrument_app(app)


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Bind a request id and record request count and latency."""

    request_id_ctx.set(request.headers.get("x-request-id") or str(uuid4()))
    start = perf_counter()
    route = request.url.path
    method = request.method
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        elapsed = max(0.0, perf_counter() - start)
        http_request_duration_seconds.labels(
            service=settings.service_name,
            route=route,
            method=method,
        ).observe(elapsed)
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=method,
            status_code=str(status_code),
        ).inc()


@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    """Methods outside ALL_METHODS get the same 405 as the checkout handler."""

    if exc.status_code == 405 and request.url.path == CHECKOUT_ROUTE:
        return to_http_response(error_response(CheckoutFailure.METHOD_NOT_ALLOWED))
    return await http_exception_handler(request, exc)


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: unexpected failures still answer with the JSON contract."""

    logger.exception("unhandled error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error."},
        headers={"Cache-Control": "no-store"},
    )


def get_checkout_service() -> CheckoutService:
    return CheckoutService(
        api_base=settings.stripe_api_base,
        client_factory=partial(httpx.AsyncClient, timeout=settings.upstream_timeout_seconds),
        service_name=settings.service_name,
    )


def to_http_response(result: CheckoutResponse) -> JSONResponse:
    return JSONResponse(status_code=result.status_code, content=result.body, headers=result.headers)


@app.api_route(CHECKOUT_ROUTE, methods=ALL_METHODS)
async def create_checkout_session(
    request: Request,
    service: CheckoutService = Depends(get_checkout_service),
    config: CheckoutConfig = Depends(load_checkout_config),
):
    """Create a Stripe Checkout session for the email in the JSON body."""

    inbound = InboundCheckoutRequest(
        method=request.method,
        url=str(request.url),
        body=await request.body(),
    )
    result = await service.handle(inbound, config)
    return to_http_response(result)


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}
