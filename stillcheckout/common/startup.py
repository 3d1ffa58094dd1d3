"""Startup-time helpers for safe config logging."""

import os

from stillcheckout.common.logging import logger

SECRET_MARKERS = ("KEY", "SECRET", "PASSWORD", "TOKEN")


def _safe_env(name: str) -> str:
    """Return env value; secret-like names (STRIPE_SECRET_KEY) are never echoed."""

    value = os.getenv(name)
    if value is None:
        return "<unset>"
    if any(marker in name.upper() for marker in SECRET_MARKERS):
        return "<redacted>"
    return value


def log_startup_config(service_name: str, keys: list[str]) -> None:
    """Log selected startup config keys for quick troubleshooting."""

    config = {"service": service_name, **{key: _safe_env(key) for key in keys}}
    logger.info("startup_config=%s", config)
