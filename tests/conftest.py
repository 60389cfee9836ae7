import os
import sys
from pathlib import Path

import httpx
import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("ACN_ENVIRONMENT", "test")
os.environ.setdefault("ACN_LOG_JSON", "false")
os.environ.setdefault("ACN_CONTENT_API_URL", "http://content.test")
os.environ.setdefault("ACN_CONTENT_API_TOKEN", "service-token")
os.environ.setdefault("ACN_ORGANIZATION_ID", "org-1")

PROJECT_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(PROJECT_ROOT))

from admin_console.core.config import get_settings

get_settings.cache_clear()

from admin_console.main import create_app  # noqa: E402
from admin_console.services.content_api import ContentApiClient  # noqa: E402
from tests.content_stub import ContentApiStub  # noqa: E402


@pytest.fixture()
def content_stub() -> ContentApiStub:
    return ContentApiStub()


@pytest.fixture()
def content_api(content_stub: ContentApiStub) -> ContentApiClient:
    return ContentApiClient.from_settings(transport=httpx.MockTransport(content_stub.handler))


@pytest.fixture()
def client(content_api: ContentApiClient) -> TestClient:  # noqa: ANN001
    app = create_app(content_api=content_api)
    with TestClient(app) as test_client:
        yield test_client
