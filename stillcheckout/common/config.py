"""Environment-driven settings for the checkout service.

`settings` is loaded once per process and covers logging, tracing and the
upstream endpoint. The Stripe credential lives in `CheckoutConfig`, which is
read fresh for every request and handed to the handler explicitly.
"""

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed view of process configuration from environment variables."""

    service_name: str = "still-checkout"
    log_level: str = "INFO"
    stripe_api_base: str = "https://api.stripe.com"
    upstream_timeout_seconds: float = 10.0
    tracing_enabled: bool = False
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


class CheckoutConfig(BaseSettings):
    """Per-invocation configuration required by the checkout handler."""

    stripe_secret_key: SecretStr | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def has_credential(self) -> bool:
        return self.stripe_secret_key is not None and bool(self.stripe_secret_key.get_secret_value().strip())


def load_checkout_config() -> CheckoutConfig:
    """Read the handler configuration from the environment."""

    return CheckoutConfig()


settings = Settings()
