"""
Stripe Payment Service

This module maps payment operations onto Stripe API calls:
- Checkout sessions for one-time payments and subscriptions
- Setup sessions for saving a card without charging it
- Invoices (create, add line item, finalize, charge)
- Refunds
- Status lookups for all of the above

Every operation checks its required inputs before touching the network and
returns the Stripe response body unmodified.
"""

from typing import Any, Iterable, Mapping

import structlog

from core.logging import BusinessEvents
from core.settings import Settings
from payments.stripe_client import HttpMethod, StripeClient, StripeError

log = structlog.get_logger(__name__)

THREE_D_SECURE_FIELD = "payment_method_options[card][request_three_d_secure]"

CHECKOUT_REQUIRED = ("currency", "amount", "product_name", "success_url")

# (caller key, Stripe field path)
CHECKOUT_OPTIONAL = (
    ("ref_id", "metadata[reference_id]"),
    ("quantity", "line_items[0][quantity]"),
    ("product_description", "line_items[0][price_data][product_data][description]"),
    ("cancel_url", "cancel_url"),
)

SUBSCRIPTION_OPTIONAL = (
    ("interval_count", "line_items[0][price_data][recurring][interval_count]"),
)

SETUP_OPTIONAL = (
    ("cancel_url", "cancel_url"),
    ("ref_id", "metadata[reference_id]"),
)

INVOICE_ITEM_OPTIONAL = (("ref_id", "metadata[reference_id]"),)

REFUND_OPTIONAL = (
    ("reason", "reason"),
    ("amount", "amount"),
)


class MissingParameterError(StripeError):
    """One or more required inputs were not supplied."""

    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__(f"{', '.join(missing)} parameters are required")


def require(params: Mapping[str, Any], keys: Iterable[str]) -> None:
    """Raise MissingParameterError naming every key absent from params."""
    missing = [key for key in keys if key not in params]
    if missing:
        log.warning(BusinessEvents.MISSING_PARAMETERS, missing=missing)
        raise MissingParameterError(missing)


def require_id(name: str, value: str) -> None:
    if not value:
        log.warning(BusinessEvents.MISSING_PARAMETERS, missing=[name])
        raise MissingParameterError([name])


def has_id(body: Any) -> bool:
    return isinstance(body, dict) and "id" in body


def fill_optional(
    data: dict[str, Any],
    params: Mapping[str, Any],
    fields: Iterable[tuple[str, str]],
) -> dict[str, Any]:
    """Copy each present caller key onto its Stripe field; absent keys are skipped."""
    for key, path in fields:
        if key in params:
            data[path] = params[key]
    return data


class StripeService:
    def __init__(self, client: StripeClient, enable_3d: bool = False):
        """
        Initialize StripeService.

        Args:
            client: Transport used for every Stripe call
            enable_3d: Ask Stripe to challenge card payments with 3-D Secure
        """
        self.client = client
        self.enable_3d = enable_3d

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeService":
        client = StripeClient(
            api_key=settings.STRIPE_API_KEY,
            api_base=settings.STRIPE_API_BASE,
            timeout=settings.STRIPE_TIMEOUT,
        )
        return cls(client, enable_3d=settings.STRIPE_ENABLE_3D)

    def _session_data(self, params: Mapping[str, Any], mode: str) -> dict[str, Any]:
        data = {
            "payment_method_types[]": "card",
            "mode": mode,
            "line_items[0][price_data][unit_amount]": params["amount"],
            "line_items[0][price_data][currency]": params["currency"],
            "line_items[0][price_data][product_data][name]": params["product_name"],
            "line_items[0][quantity]": 1,
            "success_url": params["success_url"],
        }
        return fill_optional(data, params, CHECKOUT_OPTIONAL)

    def _with_3d_secure(self, data: dict[str, Any]) -> dict[str, Any]:
        if self.enable_3d:
            data[THREE_D_SECURE_FIELD] = "challenge"
        return data

    def create_checkout_session(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Create a hosted checkout session for a single one-time purchase."""
        require(params, CHECKOUT_REQUIRED)
        data = self._with_3d_secure(self._session_data(params, "payment"))
        return self.client.request(HttpMethod.post, "/checkout/sessions", data)

    def create_subscription(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Create a checkout session that starts a recurring subscription."""
        require(params, CHECKOUT_REQUIRED + ("interval",))
        data = self._session_data(params, "subscription")
        data["line_items[0][price_data][recurring][interval]"] = params["interval"]
        fill_optional(data, params, SUBSCRIPTION_OPTIONAL)
        return self.client.request(
            HttpMethod.post, "/checkout/sessions", self._with_3d_secure(data)
        )

    def create_setup_intent(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Create a setup-mode session that saves a card without charging it."""
        require(params, ("success_url",))
        data = {
            "payment_method_types[]": "card",
            "mode": "setup",
            "success_url": params["success_url"],
        }
        fill_optional(data, params, SETUP_OPTIONAL)
        return self.client.request(
            HttpMethod.post, "/checkout/sessions", self._with_3d_secure(data)
        )

    def create_invoice(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """
        Create, populate and finalize an invoice for an existing customer.

        Runs three dependent calls. A step whose response has no ``id``
        ends the sequence and its response is returned as-is, so callers
        see Stripe's error body.
        """
        require(params, ("customer_id", "amount", "currency", "description"))

        # 1. Draft invoice
        invoice = self.client.request(
            HttpMethod.post,
            "/invoices",
            {
                "customer": params["customer_id"],
                "currency": params["currency"],
                "collection_method": "charge_automatically",
                "auto_advance": "false",
            },
        )
        if not has_id(invoice):
            log.warning(BusinessEvents.INVOICE_STEP_FAILED, step="create")
            return invoice

        # 2. Line item
        item_data = {
            "customer": params["customer_id"],
            "invoice": invoice["id"],
            "amount": params["amount"],
            "currency": params["currency"],
            "description": params["description"],
        }
        fill_optional(item_data, params, INVOICE_ITEM_OPTIONAL)
        item = self.client.request(HttpMethod.post, "/invoiceitems", item_data)
        if not has_id(item):
            log.warning(
                BusinessEvents.INVOICE_STEP_FAILED,
                step="line_item",
                invoice_id=invoice["id"],
            )
            return item

        # 3. Finalize
        return self.client.request(
            HttpMethod.post, f"/invoices/{invoice['id']}/finalize"
        )

    def charge_invoice(self, invoice_id: str, payment_method_id: str) -> dict[str, Any]:
        """Pay a finalized invoice off-session with a saved payment method."""
        missing = [
            name
            for name, value in (
                ("invoice_id", invoice_id),
                ("payment_method_id", payment_method_id),
            )
            if not value
        ]
        if missing:
            log.warning(BusinessEvents.MISSING_PARAMETERS, missing=missing)
            raise MissingParameterError(missing)
        return self.client.request(
            HttpMethod.post,
            f"/invoices/{invoice_id}/pay",
            {"payment_method": payment_method_id, "off_session": "true"},
        )

    def get_checkout_session_status(self, session_id: str) -> dict[str, Any]:
        require_id("session_id", session_id)
        return self.client.request(HttpMethod.get, f"/checkout/sessions/{session_id}")

    def get_subscription_status(self, subscription_id: str) -> dict[str, Any]:
        require_id("subscription_id", subscription_id)
        return self.client.request(HttpMethod.get, f"/subscriptions/{subscription_id}")

    def get_setup_intent_status(self, intent_id: str) -> dict[str, Any]:
        require_id("intent_id", intent_id)
        return self.client.request(HttpMethod.get, f"/setup_intents/{intent_id}")

    def get_invoice_status(self, invoice_id: str) -> dict[str, Any]:
        require_id("invoice_id", invoice_id)
        return self.client.request(HttpMethod.get, f"/invoices/{invoice_id}")

    def create_refund(self, params: Mapping[str, Any]) -> dict[str, Any]:
        """Refund a payment intent, fully or by ``amount``."""
        require(params, ("payment_intent",))
        data = fill_optional(
            {"payment_intent": params["payment_intent"]}, params, REFUND_OPTIONAL
        )
        return self.client.request(HttpMethod.post, "/refunds", data)

    def get_refund(self, refund_id: str) -> dict[str, Any]:
        require_id("refund_id", refund_id)
        return self.client.request(HttpMethod.get, f"/refunds/{refund_id}")

    def cancel_refund(self, refund_id: str) -> dict[str, Any]:
        """
        POST to the refund itself with an empty body.

        Stripe treats this as an update of the refund. The documented cancel
        endpoint is ``/refunds/{id}/cancel``.
        """
        require_id("refund_id", refund_id)
        return self.client.request(HttpMethod.post, f"/refunds/{refund_id}")
