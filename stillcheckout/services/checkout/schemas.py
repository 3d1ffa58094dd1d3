"""Inbound request, caller response and upstream checkout session models."""

from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

SUCCESS_PATH = "/success.html"
CANCEL_PATH = "/cancel.html"


class InboundCheckoutRequest(BaseModel):
    """Raw inbound request as handed over by the hosting layer."""

    model_config = ConfigDict(frozen=True)

    method: str
    url: str
    body: bytes = b""

    @property
    def origin(self) -> str:
        parsed = httpx.URL(self.url)
        return f"{parsed.scheme}://{parsed.netloc.decode('ascii')}"


class CheckoutResponse(BaseModel):
    """Caller-facing response: status, JSON body and headers."""

    status_code: int
    body: dict[str, Any]
    headers: dict[str, str] = Field(default_factory=dict)


def response_headers() -> dict[str, str]:
    return {"Content-Type": "application/json", "Cache-Control": "no-store"}


class ProductData(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    description: str


class PriceData(BaseModel):
    model_config = ConfigDict(frozen=True)

    currency: str
    unit_amount: int = Field(ge=0)
    product_data: ProductData


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    quantity: int = 1
    price_data: PriceData


class FixedAmount(BaseModel):
    model_config = ConfigDict(frozen=True)

    amount: int = Field(ge=0)
    currency: str


class ShippingRateData(BaseModel):
    model_config = ConfigDict(frozen=True)

    display_name: str
    type: str = "fixed_amount"
    fixed_amount: FixedAmount


class ShippingOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    shipping_rate_data: ShippingRateData


class CheckoutSessionRequest(BaseModel):
    """Parameters for `POST /v1/checkout/sessions`.

    The receipt recipient is not a field of its own: Stripe receives
    `customer_email` twice, once as the customer and once as
    `payment_intent_data[receipt_email]`.
    """

    model_config = ConfigDict(frozen=True)

    mode: str
    payment_method_types: tuple[str, ...]
    success_url: str
    cancel_url: str
    customer_email: str
    allowed_countries: tuple[str, ...]
    line_items: tuple[LineItem, ...]
    shipping_options: tuple[ShippingOption, ...]

    @property
    def receipt_email(self) -> str:
        return self.customer_email

    def to_form(self) -> dict[str, str]:
        """Flatten into Stripe's bracketed form-encoding keys."""

        form: dict[str, str] = {"mode": self.mode}
        for i, method in enumerate(self.payment_method_types):
            form[f"payment_method_types[{i}]"] = method
        form["success_url"] = self.success_url
        form["cancel_url"] = self.cancel_url
        form["customer_email"] = self.customer_email
        form["payment_intent_data[receipt_email]"] = self.receipt_email
        for i, country in enumerate(self.allowed_countries):
            form[f"shipping_address_collection[allowed_countries][{i}]"] = country

        for i, item in enumerate(self.line_items):
            prefix = f"line_items[{i}]"
            price = item.price_data
            form[f"{prefix}[quantity]"] = str(item.quantity)
            form[f"{prefix}[price_data][currency]"] = price.currency
            form[f"{prefix}[price_data][unit_amount]"] = str(price.unit_amount)
            form[f"{prefix}[price_data][product_data][name]"] = price.product_data.name
            form[f"{prefix}[price_data][product_data][description]"] = price.product_data.description

        for i, option in enumerate(self.shipping_options):
            prefix = f"shipping_options[{i}][shipping_rate_data]"
            rate = option.shipping_rate_data
            form[f"{prefix}[display_name]"] = rate.display_name
            form[f"{prefix}[type]"] = rate.type
            form[f"{prefix}[fixed_amount][amount]"] = str(rate.fixed_amount.amount)
            form[f"{prefix}[fixed_amount][currency]"] = rate.fixed_amount.currency
        return form


STILL_TAG_SESSION_TEMPLATE = CheckoutSessionRequest(
    mode="payment",
    payment_method_types=("card",),
    success_url="",
    cancel_url="",
    customer_email="",
    allowed_countries=("GB",),
    line_items=(
        LineItem(
            quantity=1,
            price_data=PriceData(
                currency="gbp",
                unit_amount=500,
                product_data=ProductData(
                    name="Still tag",
                    description="One Still tag to help you pause and resume your routine.",
                ),
            ),
        ),
    ),
    shipping_options=(
        ShippingOption(
            shipping_rate_data=ShippingRateData(
                display_name="Royal Mail 2nd Class (free)",
                fixed_amount=FixedAmount(amount=0, currency="gbp"),
            )
        ),
    ),
)


def build_session_request(email: str, origin: str) -> CheckoutSessionRequest:
    """Fill the session template for one customer arriving on `origin`."""

    return STILL_TAG_SESSION_TEMPLATE.model_copy(
        update={
            "success_url": f"{origin}{SUCCESS_PATH}",
            "cancel_url": f"{origin}{CANCEL_PATH}",
            "customer_email": email,
        }
    )
