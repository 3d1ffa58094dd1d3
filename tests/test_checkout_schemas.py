"""Tests for the session template, origin derivation and form encoding."""

import pytest
from pydantic import ValidationError

from stillcheckout.services.checkout.schemas import (
    STILL_TAG_SESSION_TEMPLATE,
    InboundCheckoutRequest,
    build_session_request,
)


def test_origin_keeps_scheme_host_and_port():
    inbound = InboundCheckoutRequest(method="POST", url="http://localhost:8788/api/create-checkout-session?x=1")

    assert inbound.origin == "http://localhost:8788"


def test_build_session_request_fills_only_the_three_holes():
    session = build_session_request("buyer@example.com", "https://shop.example")

    expected = STILL_TAG_SESSION_TEMPLATE.model_copy(
        update={
            "success_url": "https://shop.example/success.html",
            "cancel_url": "https://shop.example/cancel.html",
            "customer_email": "buyer@example.com",
        }
    )
    assert session == expected
    assert session.line_items == STILL_TAG_SESSION_TEMPLATE.line_items
    assert session.shipping_options == STILL_TAG_SESSION_TEMPLATE.shipping_options


def test_redirect_urls_share_origin_and_differ_in_path():
    inbound = InboundCheckoutRequest(method="POST", url="https://still.example:8443/api/create-checkout-session")
    session = build_session_request("a@b.com", inbound.origin)

    assert session.success_url == "https://still.example:8443/success.html"
    assert session.cancel_url == "https://still.example:8443/cancel.html"


def test_receipt_email_follows_customer_email():
    session = build_session_request("buyer@example.com", "https://shop.example")

    assert session.receipt_email == "buyer@example.com"
    with pytest.raises((AttributeError, ValidationError)):
        session.receipt_email = "someone-else@example.com"


def test_session_request_is_immutable():
    session = build_session_request("buyer@example.com", "https://shop.example")

    with pytest.raises(ValidationError):
        session.customer_email = "other@example.com"


def test_to_form_uses_stripe_bracket_keys():
    session = build_session_request("buyer@example.com", "https://shop.example")

    assert session.to_form() == {
        "mode": "payment",
        "payment_method_types[0]": "card",
        "success_url": "https://shop.example/success.html",
        "cancel_url": "https://shop.example/cancel.html",
        "customer_email": "buyer@example.com",
        "payment_intent_data[receipt_email]": "buyer@example.com",
        "shipping_address_collection[allowed_countries][0]": "GB",
        "line_items[0][quantity]": "1",
        "line_items[0][price_data][currency]": "gbp",
        "line_items[0][price_data][unit_amount]": "500",
        "line_items[0][price_data][product_data][name]": "Still tag",
        "line_items[0][price_data][product_data][description]": (
            "One Still tag to help you pause and resume your routine."
        ),
        "shipping_options[0][shipping_rate_data][display_name]": "Royal Mail 2nd Class (free)",
        "shipping_options[0][shipping_rate_data][type]": "fixed_amount",
        "shipping_options[0][shipping_rate_data][fixed_amount][amount]": "0",
        "shipping_options[0][shipping_rate_data][fixed_amount][currency]": "gbp",
    }
