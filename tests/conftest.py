import pytest

from expense_tracker.core.config import Settings
from expense_tracker.services.http_client import JsonClient
from tests.base import BASE_URL, FakeMockApi


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def fake_api() -> FakeMockApi:
    return FakeMockApi()


@pytest.fixture
def json_client(fake_api):
    return JsonClient(BASE_URL, retries=2, backoff=0, transport=fake_api.transport())


@pytest.fixture
def settings() -> Settings:
    return Settings(
        api_base_url=BASE_URL,
        http_retries=1,
        http_backoff_seconds=0,
        page_size=10,
        expense_store="http",
    )
