import pytest
from fastapi.testclient import TestClient

from main import app
from shared.config import Settings
from shared.db import ConnectionProvider, get_provider


@pytest.fixture
def sqlite_settings(tmp_path):
    return Settings(database_url=f"sqlite+aiosqlite:///{tmp_path / 'schools.db'}")


@pytest.fixture
def provider(sqlite_settings):
    return ConnectionProvider(sqlite_settings)


@pytest.fixture
def client(provider):
    app.dependency_overrides[get_provider] = lambda: provider
    with TestClient(app) as test_client:
        yield test_client
        # Dispose the pool on the loop that created it
        test_client.portal.call(provider.release)
    app.dependency_overrides.clear()


@pytest.fixture
def lincoln_high():
    return {
        "name": "Lincoln High",
        "address": "1 Main St",
        "city": "Springfield",
        "state": "IL",
        "contact_number": "5551234567",
        "email": "info@lincoln.edu",
    }
