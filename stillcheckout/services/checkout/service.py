"""Checkout request handler.

Validates the inbound request, fills the Still tag session template, creates
one Stripe Checkout session and maps the outcome onto the caller response.
"""

import json
from typing import Any, Callable

import httpx

from stillcheckout.common import state_machine as sm
from stillcheckout.common.config import CheckoutConfig
from stillcheckout.common.logging import logger
from stillcheckout.common.metrics import checkout_requests_total, checkout_upstream_latency_seconds
from stillcheckout.services.checkout.errors import CheckoutError, CheckoutFailure, error_response
from stillcheckout.services.checkout.schemas import (
    CheckoutResponse,
    CheckoutSessionRequest,
    InboundCheckoutRequest,
    build_session_request,
    response_headers,
)

CHECKOUT_SESSIONS_PATH = "/v1/checkout/sessions"


class PipelineRun:
    """Tracks the stage of one invocation and rejects backward steps."""

    def __init__(self) -> None:
        self.stage = sm.START

    def advance(self, new: str) -> None:
        sm.validate_transition(self.stage, new)
        logger.debug("checkout stage %s -> %s", self.stage, new)
        self.stage = new


class CheckoutService:
    """Turns one email address into a hosted checkout redirect URL."""

    def __init__(
        self,
        api_base: str = "https://api.stripe.com",
        client_factory: Callable[[], httpx.AsyncClient] = httpx.AsyncClient,
        service_name: str = "still-checkout",
    ) -> None:
        self.api_base = api_base.rstrip("/")
        self.client_factory = client_factory
        self.service_name = service_name

    async def handle(self, request: InboundCheckoutRequest, config: CheckoutConfig) -> CheckoutResponse:
        """Run the full pipeline; every outcome comes back as a response."""

        run = PipelineRun()
        try:
            url = await self._run(run, request, config)
        except CheckoutError as exc:
            run.advance(sm.FAILED)
            checkout_requests_total.labels(service=self.service_name, outcome=exc.failure.value).inc()
            return error_response(exc.failure, exc.message)

        run.advance(sm.SUCCEEDED)
        checkout_requests_total.labels(service=self.service_name, outcome="succeeded").inc()
        return CheckoutResponse(status_code=200, body={"url": url}, headers=response_headers())

    async def _run(self, run: PipelineRun, request: InboundCheckoutRequest, config: CheckoutConfig) -> str:
        if request.method != "POST":
            raise CheckoutError(CheckoutFailure.METHOD_NOT_ALLOWED)
        run.advance(sm.METHOD_CHECKED)

        if not config.has_credential:
            logger.error("checkout misconfigured: STRIPE_SECRET_KEY is not set")
            raise CheckoutError(CheckoutFailure.MISCONFIGURED)
        run.advance(sm.CONFIG_CHECKED)

        raw_email = self._parse_payload(request.body)
        run.advance(sm.PAYLOAD_PARSED)

        email = validate_email(raw_email)
        run.advance(sm.EMAIL_VALIDATED)

        session = build_session_request(email, request.origin)
        run.advance(sm.REQUEST_BUILT)

        response, payload = await self._create_session(session, config.stripe_secret_key.get_secret_value())
        run.advance(sm.UPSTREAM_CALLED)

        url = payload.get("url") if isinstance(payload, dict) else None
        if not response.is_success or not url:
            message = upstream_error_message(payload)
            logger.warning(
                "stripe rejected checkout session status=%s email_domain=%s",
                response.status_code,
                email.rsplit("@", 1)[-1],
            )
            raise CheckoutError(CheckoutFailure.UPSTREAM_REJECTED, message)

        logger.info("checkout session created email_domain=%s", email.rsplit("@", 1)[-1])
        return url

    @staticmethod
    def _parse_payload(body: bytes) -> Any:
        """Return the raw `email` value, or None when the body has none."""

        try:
            payload = json.loads(body)
        except (ValueError, RecursionError) as exc:
            raise CheckoutError(CheckoutFailure.INVALID_PAYLOAD) from exc

        raw_email = payload.get("email") if isinstance(payload, dict) else None
        if raw_email is not None and not isinstance(raw_email, str):
            raise CheckoutError(CheckoutFailure.INVALID_PAYLOAD)
        return raw_email

    async def _create_session(
        self, session: CheckoutSessionRequest, secret_key: str
    ) -> tuple[httpx.Response, Any]:
        """Issue the single outbound call; transport faults become UPSTREAM_UNAVAILABLE."""

        try:
            async with self.client_factory() as client:
                with checkout_upstream_latency_seconds.labels(service=self.service_name).time():
                    response = await client.post(
                        f"{self.api_base}{CHECKOUT_SESSIONS_PATH}",
                        headers={
                            "Authorization": f"Bearer {secret_key}",
                            "Content-Type": "application/x-www-form-urlencoded",
                        },
                        data=session.to_form(),
                    )
                payload = response.json()
        except Exception as exc:
            logger.exception("stripe checkout session call failed: %s", type(exc).__name__)
            raise CheckoutError(CheckoutFailure.UPSTREAM_UNAVAILABLE) from exc
        return response, payload


def validate_email(raw_email: str | None) -> str:
    """Trim and sanity-check an email; only presence of `@` is required."""

    email = (raw_email or "").strip()
    if not email or "@" not in email:
        raise CheckoutError(CheckoutFailure.INVALID_EMAIL)
    return email


def upstream_error_message(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, dict) and isinstance(error.get("message"), str) and error["message"]:
        return error["message"]
    return None
