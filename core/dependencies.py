from core.settings import Settings
from payments.stripe_service import StripeService


def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings()


def get_stripe_service(settings: Settings | None = None) -> StripeService:
    """Build a StripeService from the given settings, or from the environment."""
    return StripeService.from_settings(settings or get_settings())
