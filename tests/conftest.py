"""Shared pytest fixtures for chat studio tests."""

import pytest
from fastapi.testclient import TestClient

from chat_studio.main import create_app
from chat_studio.services import GenerationGateway
from tests.helpers.provider_mocks import FakeGenaiClient

TEXT_MODEL = "test-text-model"
IMAGE_MODEL = "test-image-model"


@pytest.fixture
def fake_client() -> FakeGenaiClient:
    return FakeGenaiClient()


@pytest.fixture
def gateway(fake_client) -> GenerationGateway:
    return GenerationGateway(fake_client, text_model=TEXT_MODEL, image_model=IMAGE_MODEL)


@pytest.fixture
def client(gateway):
    """FastAPI test client wired to the fake provider."""
    with TestClient(create_app(gateway=gateway)) as test_client:
        yield test_client
