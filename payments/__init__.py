from payments.stripe_client import HttpMethod, StripeClient, StripeError, TransportError
from payments.stripe_service import MissingParameterError, StripeService

__all__ = [
    "HttpMethod",
    "MissingParameterError",
    "StripeClient",
    "StripeError",
    "StripeService",
    "TransportError",
]
