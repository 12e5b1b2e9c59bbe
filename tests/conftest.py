import httpx
import pytest

from container_gateway.api import build_service
from container_gateway.services.container_service import ContainerService
from container_gateway.settings import Settings
from upstream_fakes import ADS_URL, IMAGES_URL, VIDEOS_URL, FakeUpstreams


@pytest.fixture
def upstreams() -> FakeUpstreams:
    return FakeUpstreams()


@pytest.fixture
def settings() -> Settings:
    return Settings(
        ads_base_url=ADS_URL,
        images_base_url=IMAGES_URL,
        videos_base_url=VIDEOS_URL,
        max_attempts=3,
        cache_capacity=10,
        log_file="",
    )


@pytest.fixture
def service(upstreams: FakeUpstreams, settings: Settings) -> ContainerService:
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(upstreams.handle))
    return build_service(settings, http_client=http_client)
