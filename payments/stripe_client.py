"""
Stripe HTTP transport

Sends form-encoded requests to the Stripe REST API with HTTP Basic Auth and
hands back the decoded JSON body as-is. Stripe reports business errors in
the body, so no status-based branching happens here.
"""

from enum import Enum
from typing import Any, Mapping

import requests
import structlog

from core.logging import BusinessEvents

STRIPE_API_BASE = "https://api.stripe.com/v1"

log = structlog.get_logger(__name__)


class StripeError(Exception):
    pass


class TransportError(StripeError):
    """The request never produced a decodable Stripe response."""


class HttpMethod(Enum):
    get = "GET"
    post = "POST"


def error_type(body: Any) -> str | None:
    """Stripe's `error.type`, or None when the body carries no error object."""
    error = body.get("error") if isinstance(body, dict) else None
    return error.get("type") if isinstance(error, dict) else None


class StripeClient:
    def __init__(
        self,
        api_key: str,
        api_base: str = STRIPE_API_BASE,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        """
        Initialize StripeClient.

        Args:
            api_key: Stripe secret key, sent as the Basic Auth username
            api_base: Base URL every endpoint path is appended to
            timeout: Per-request timeout in seconds, None for the requests default
            session: Optional requests session for connection reuse
        """
        self.api_key = api_key
        self.api_base = api_base.rstrip("/")
        self.timeout = timeout
        self.session = session

    def request(
        self,
        method: HttpMethod,
        endpoint: str,
        data: Mapping[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Send one request and return the decoded JSON body.

        GET requests carry ``data`` as query parameters, POST requests as a
        URL-form-encoded body.

        Raises:
            TransportError: on connection failures, timeouts or a body that
                is not JSON
        """
        url = f"{self.api_base}{endpoint}"
        payload = dict(data or {})
        kwargs: dict[str, Any] = {
            "auth": (self.api_key, ""),
            "timeout": self.timeout,
        }
        if method is HttpMethod.get:
            kwargs["params"] = payload
        else:
            kwargs["data"] = payload

        log.info(
            BusinessEvents.STRIPE_REQUEST,
            method=method.value,
            endpoint=endpoint,
            fields=sorted(payload),
        )

        sender = self.session.request if self.session is not None else requests.request
        try:
            response = sender(method.value, url, **kwargs)
            body = response.json()
        except (requests.RequestException, ValueError) as e:
            log.error(
                BusinessEvents.STRIPE_TRANSPORT_ERROR,
                method=method.value,
                endpoint=endpoint,
                error=str(e),
            )
            raise TransportError(f"{method.value} {endpoint} failed: {e}") from e

        if response.status_code >= 400:
            log.warning(
                BusinessEvents.STRIPE_RESPONSE,
                method=method.value,
                endpoint=endpoint,
                status_code=response.status_code,
                error_type=error_type(body),
            )
        else:
            log.info(
                BusinessEvents.STRIPE_RESPONSE,
                method=method.value,
                endpoint=endpoint,
                status_code=response.status_code,
                object_id=body.get("id") if isinstance(body, dict) else None,
            )
        return body
