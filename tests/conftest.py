"""Test configuration and fixtures."""

import os
from unittest.mock import patch

import pytest

from core.settings import Settings
from helpers import MockResponse
from payments.stripe_client import StripeClient
from payments.stripe_service import StripeService


@pytest.fixture(autouse=True)
def setup_test_environment():
    """Setup test environment variables before each test."""
    original_env = dict(os.environ)

    os.environ.update(
        {
            "STRIPE_API_KEY": "sk_test_dummy",
            "STRIPE_ENABLE_3D": "false",
            "ENVIRONMENT": "test",
        }
    )

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_settings():
    return Settings(
        STRIPE_API_KEY="sk_test_mock",
        STRIPE_ENABLE_3D=False,
        ENVIRONMENT="test",
    )


@pytest.fixture
def mock_request():
    """Patch the outbound HTTP call; defaults to a 200 with an object id."""
    with patch("payments.stripe_client.requests.request") as mock:
        mock.return_value = MockResponse(200, {"id": "obj_mock"})
        yield mock


@pytest.fixture
def stripe_client():
    return StripeClient(api_key="sk_test_mock")


@pytest.fixture
def service(stripe_client):
    return StripeService(stripe_client, enable_3d=False)


@pytest.fixture
def service_3d(stripe_client):
    return StripeService(stripe_client, enable_3d=True)


@pytest.fixture
def checkout_params():
    return {
        "currency": "usd",
        "amount": 1000,
        "product_name": "Widget",
        "success_url": "https://x",
    }
