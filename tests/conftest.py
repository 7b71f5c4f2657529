"""Pytest fixtures for payment flow, ledger and image proxy tests."""

import pytest
from fastapi.testclient import TestClient

from src.api.main import create_app
from src.database.order_ledger import InMemoryOrderLedger
from src.integrations.clients.mocks.sslcommerz import MockSSLCommerzClient
from src.integrations.contracts.interfaces import GeneratedImage, ImageProvider
from src.error_handler import ImageProviderError
from src.integrations.services.payment_flow_service import PaymentFlowService
from src.utils.settings import RelaySettings


class FakeImageProvider(ImageProvider):
    """Returns canned images; `failures` maps a call index to a status code (None = network error)."""

    def __init__(self, content_type="image/png", failures=None):
        self.content_type = content_type
        self.failures = failures or {}
        self.calls = []

    async def fetch_image(self, prompt, seed, width=None, height=None):
        index = len(self.calls)
        self.calls.append({"prompt": prompt, "seed": seed, "width": width, "height": height})
        if index in self.failures:
            status = self.failures[index]
            if status is None:
                raise ImageProviderError("No response received from Pollinations.AI")
            raise ImageProviderError(f"status {status}", status_code=status)
        return GeneratedImage(content=f"img-{seed}".encode(), content_type=self.content_type, seed=seed)


@pytest.fixture
def settings():
    return RelaySettings(
        sslc_sandbox=True,
        sslc_store_id="teststore",
        sslc_store_password="teststore@ssl",
        success_url="https://relay.test/api/payments/success",
        fail_url="https://relay.test/api/payments/fail",
        cancel_url="https://relay.test/api/payments/cancel",
        image_request_delay=0.0,
    )


@pytest.fixture
def ledger():
    return InMemoryOrderLedger()


@pytest.fixture
def gateway():
    return MockSSLCommerzClient()


@pytest.fixture
def image_provider():
    return FakeImageProvider()


@pytest.fixture
def flow(gateway, ledger, settings):
    return PaymentFlowService(gateway=gateway, ledger=ledger, settings=settings)


@pytest.fixture
def app(settings, ledger, gateway, image_provider):
    return create_app(settings=settings, ledger=ledger, gateway=gateway, image_provider=image_provider)


@pytest.fixture
def client(app):
    return TestClient(app)
