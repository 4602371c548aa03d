"""Shared test fixtures: sample CSV tracks and an API client."""
import pytest
from fastapi.testclient import TestClient

from navtrack.main import app
from navtrack.api.routes import get_catalog
from navtrack.modules.port_catalog import PortCatalog

from tests.csv_samples import ALGECIRAS_SCENARIO, DENSE_TRACK


@pytest.fixture
def catalog():
    return PortCatalog.default()


@pytest.fixture
def algeciras_csv():
    return ALGECIRAS_SCENARIO


@pytest.fixture
def dense_csv():
    return DENSE_TRACK


@pytest.fixture
def api_client(catalog):
    """TestClient with the port catalog pinned to the built-in ports."""
    app.dependency_overrides[get_catalog] = lambda: catalog
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
