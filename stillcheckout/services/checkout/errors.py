"""Checkout failure taxonomy and its status/message table."""

from enum import Enum

from stillcheckout.services.checkout.schemas import CheckoutResponse, response_headers


class CheckoutFailure(str, Enum):
    METHOD_NOT_ALLOWED = "method_not_allowed"
    MISCONFIGURED = "misconfigured"
    INVALID_PAYLOAD = "invalid_payload"
    INVALID_EMAIL = "invalid_email"
    UPSTREAM_UNAVAILABLE = "upstream_unavailable"
    UPSTREAM_REJECTED = "upstream_rejected"


ERROR_TABLE: dict[CheckoutFailure, tuple[int, str]] = {
    CheckoutFailure.METHOD_NOT_ALLOWED: (405, "Method Not Allowed"),
    CheckoutFailure.MISCONFIGURED: (500, "Missing STRIPE_SECRET_KEY environment binding."),
    CheckoutFailure.INVALID_PAYLOAD: (400, "Invalid request payload."),
    CheckoutFailure.INVALID_EMAIL: (400, "Please provide a valid email so we can send your receipt."),
    CheckoutFailure.UPSTREAM_UNAVAILABLE: (500, "Unexpected error creating Stripe Checkout session."),
    CheckoutFailure.UPSTREAM_REJECTED: (502, "Unable to create Stripe Checkout session."),
}


class CheckoutError(Exception):
    """Raised inside the pipeline; converted to a response at the handler boundary."""

    def __init__(self, failure: CheckoutFailure, message: str | None = None) -> None:
        self.failure = failure
        self.message = message or ERROR_TABLE[failure][1]
        super().__init__(self.message)


def error_response(failure: CheckoutFailure, message: str | None = None) -> CheckoutResponse:
    """Build the caller response for a failure, using the table's defaults."""

    status_code, default_message = ERROR_TABLE[failure]
    headers = response_headers()
    if failure is CheckoutFailure.METHOD_NOT_ALLOWED:
        headers["Allow"] = "POST"
    return CheckoutResponse(
        status_code=status_code,
        body={"error": message or default_message},
        headers=headers,
    )
