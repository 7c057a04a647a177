from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

from conventory.core.dal import shutdown_data_access
from conventory.main import app


@pytest.fixture(scope="module")
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def reset_data_access() -> Generator[None, None, None]:
    """Drop the process-wide data access singleton before and after the test."""
    shutdown_data_access()
    yield
    shutdown_data_access()
