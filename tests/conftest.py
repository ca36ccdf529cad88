import pytest
from fastapi.testclient import TestClient

from imagestudio.dependencies import get_session_registry
from imagestudio.main import app
from imagestudio.schemas import AspectRatio
from imagestudio.services.sessions import SessionRegistry
from tests.fakes import FakeImageGenerator


@pytest.fixture
def fake_generator() -> FakeImageGenerator:
    return FakeImageGenerator()


@pytest.fixture
def registry(fake_generator) -> SessionRegistry:
    return SessionRegistry(
        fake_generator,
        default_prompt="A red fox in fresh snow",
        default_aspect_ratio=AspectRatio.PORTRAIT_9_16,
    )


@pytest.fixture
def client(registry):
    app.dependency_overrides[get_session_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
