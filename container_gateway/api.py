"""FastAPI application exposing assembled containers."""

import uuid
from contextlib import asynccontextmanager
from typing import Any, Callable

import httpx
from fastapi import FastAPI, Request
from loguru import logger

from container_gateway.datasource import AdvertisementSource, ImageSource, VideoSource
from container_gateway.exceptions import InternalServiceError
from container_gateway.models import Advertisement, Container, Image, Video
from container_gateway.services.cache import ContainerCache
from container_gateway.services.client import RetryPolicy, ServiceClient
from container_gateway.services.container_service import ContainerService
from container_gateway.services.result import Result
from container_gateway.settings import Settings

REQUEST_ID_HEADER = "X-Request-ID"


def build_service(
    settings: Settings, http_client: httpx.AsyncClient | None = None
) -> ContainerService:
    """Wire one ServiceClient, the three upstream sources and the cache."""
    client = ServiceClient(
        http_client=http_client,
        timeout=settings.request_timeout,
        retry_policy=RetryPolicy(
            max_attempts=settings.max_attempts,
            max_backoff_ms=settings.max_backoff_ms,
            jitter_ms=settings.backoff_jitter_ms,
        ),
    )
    return ContainerService(
        advertisements=AdvertisementSource(client, settings.ads_base_url),
        images=ImageSource(client, settings.images_base_url),
        videos=VideoSource(client, settings.videos_base_url),
        cache=ContainerCache(capacity=settings.cache_capacity),
        asset_concurrency=settings.asset_concurrency,
    )


class ContainerServer:
    """HTTP routes over a ContainerService."""

    def __init__(
        self,
        settings: Settings,
        service: ContainerService | None = None,
    ):
        self.settings = settings
        self.service = service
        self.app = FastAPI(title="Container Gateway", lifespan=self.lifespan)

        self.app.middleware("http")(self.bind_request_id)

        # Register routes
        self.app.get("/containers")(self.list_containers)
        self.app.get("/containers/{container_id}")(self.get_container)
        self.app.get("/containers/{container_id}/ads")(self.get_advertisements)
        self.app.get("/containers/{container_id}/images")(self.get_images)
        self.app.get("/containers/{container_id}/videos")(self.get_videos)
        self.app.get("/videos/{video_id}")(self.get_video)
        self.app.get("/health")(self.health_check)

    @asynccontextmanager
    async def lifespan(self, app: FastAPI):
        """Build the service on startup unless one was injected; close it on shutdown."""
        owns_service = self.service is None
        if owns_service:
            self.service = build_service(self.settings)
            logger.info("Container service started")
        try:
            yield
        finally:
            if owns_service and self.service is not None:
                await self.service.close()
                self.service = None
                logger.info("Container service stopped")

    async def bind_request_id(self, request: Request, call_next: Callable):
        """Tag every log line emitted while serving a request with its id."""
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        with logger.contextualize(request_id=request_id):
            logger.debug(f"{request.method} {request.url.path}")
            response = await call_next(request)
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    async def list_containers(self) -> list[Container]:
        result = await self._service().list_containers()
        return self._unwrap(result, "Error while listing containers", "No containers found")

    async def get_container(self, container_id: int) -> Container:
        result = await self._service().get_container(container_id)
        return self._unwrap(
            result,
            f"Error while getting container {container_id}",
            "No container found with this id",
        )

    async def get_advertisements(self, container_id: int) -> list[Advertisement]:
        result = await self._service().list_advertisements_for_container(container_id)
        return self._unwrap(
            result,
            f"Error while listing advertisements by container {container_id}",
            "No advertisements found for this container",
        )

    async def get_images(self, container_id: int) -> list[Image]:
        result = await self._service().list_images_for_container(container_id)
        return self._unwrap(
            result,
            f"Error while listing images by container {container_id}",
            "No images found for this container",
        )

    async def get_videos(self, container_id: int) -> list[Video]:
        result = await self._service().list_videos_for_container(container_id)
        return self._unwrap(
            result,
            f"Error while listing videos by container {container_id}",
            "No videos found for this container",
        )

    async def get_video(self, video_id: int) -> Video:
        result = await self._service().get_video(video_id)
        return self._unwrap(
            result, f"Error while getting video {video_id}", "No video found with this id"
        )

    async def health_check(self) -> dict[str, Any]:
        """Health check endpoint."""
        return {
            "status": "ok",
            "service": "container-gateway",
            "cache": self._service().cache.get_stats().to_dict(),
        }

    def _service(self) -> ContainerService:
        if self.service is None:
            raise InternalServiceError("Service is not running")
        return self.service

    @staticmethod
    def _unwrap(result: Result[Any], log_message: str, client_message: str) -> Any:
        if not result.ok:
            logger.error(f"{log_message} {result.error}")
            raise InternalServiceError(client_message)
        return result.data


def create_app(settings: Settings, service: ContainerService | None = None) -> FastAPI:
    """Create the FastAPI app.

    Args:
        settings: Application settings
        service: Pre-built service; when omitted the app builds and owns one

    Returns:
        FastAPI app
    """
    server = ContainerServer(settings, service)
    return server.app
