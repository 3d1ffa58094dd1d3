"""Startup config logging must never echo the Stripe credential."""

import logging

from stillcheckout.common.startup import _safe_env, log_startup_config


def test_secret_key_is_redacted(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_live_do_not_print")

    assert _safe_env("STRIPE_SECRET_KEY") == "<redacted>"


def test_plain_and_missing_values(monkeypatch):
    monkeypatch.setenv("STRIPE_API_BASE", "https://api.stripe.test")
    monkeypatch.delenv("TRACING_ENABLED", raising=False)

    assert _safe_env("STRIPE_API_BASE") == "https://api.stripe.test"
    assert _safe_env("TRACING_ENABLED") == "<unset>"


def test_startup_log_omits_credential(monkeypatch, caplog):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_live_do_not_print")

    with caplog.at_level(logging.INFO, logger="stillcheckout"):
        log_startup_config("still-checkout", ["STRIPE_SECRET_KEY"])

    assert "sk_live_do_not_print" not in caplog.text
    assert "<redacted>" in caplog.text
