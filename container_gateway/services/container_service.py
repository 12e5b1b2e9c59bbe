"""
Container assembly service.

Joins the advertisement, image and video upstreams into per-container
aggregates. Every upstream call within one assembly is issued concurrently;
the first failure aborts the assembly and nothing partial is returned or
cached.
"""

from loguru import logger

from container_gateway.datasource.advertisements import AdvertisementSource
from container_gateway.datasource.images import ImageSource
from container_gateway.datasource.videos import VideoSource
from container_gateway.models import (
    Advertisement,
    Container,
    Image,
    Video,
    VideoDto,
    VideoType,
)
from container_gateway.services.cache import ContainerCache
from container_gateway.services.fanout import FanOut
from container_gateway.services.grouping import GroupMap, group
from container_gateway.services.result import Result


class ContainerService:
    """
    Cache-backed access to assembled containers.

    Usage:
        service = ContainerService(
            advertisements=AdvertisementSource(client, settings.ads_base_url),
            images=ImageSource(client, settings.images_base_url),
            videos=VideoSource(client, settings.videos_base_url),
            cache=ContainerCache(capacity=settings.cache_capacity),
        )

        result = await service.get_container(5)
    """

    def __init__(
        self,
        advertisements: AdvertisementSource,
        images: ImageSource,
        videos: VideoSource,
        cache: ContainerCache[int, Container],
        asset_concurrency: int = 8,
        fanout: FanOut | None = None,
    ):
        self.advertisements = advertisements
        self.images = images
        self.videos = videos
        self.cache = cache
        self._asset_concurrency = asset_concurrency
        self._fanout = fanout or FanOut()

    # Exposed operations

    async def get_container(self, container_id: int) -> Result[Container]:
        """Single container, served from cache when possible."""
        logger.debug(f"get_container: {container_id}")
        return await self.cache.get_or_load(
            container_id, lambda: self.assemble_one(container_id)
        )

    async def list_containers(self) -> Result[list[Container]]:
        """Full catalog; every assembled container is written to the cache."""
        logger.debug("list_containers")
        result = await self.assemble_all()
        if result.ok:
            await self.cache.put_many(
                (container.id, container) for container in result.data
            )
        return result

    async def list_advertisements_for_container(
        self, container_id: int
    ) -> Result[list[Advertisement]]:
        result = await self.get_container(container_id)
        return result.map(lambda container: list(container.ads))

    async def list_images_for_container(
        self, container_id: int
    ) -> Result[list[Image]]:
        result = await self.get_container(container_id)
        return result.map(lambda container: list(container.images))

    async def list_videos_for_container(
        self, container_id: int
    ) -> Result[list[Video]]:
        result = await self.get_container(container_id)
        return result.map(lambda container: list(container.videos))

    async def get_video(self, video_id: int) -> Result[Video]:
        """Single video with its asset references, bypassing the cache."""
        logger.debug(f"get_video: {video_id}")
        result = await self.videos.get_video(video_id)
        if not result.ok:
            return Result.failure(result.error)
        return await self._resolve_video(result.data)

    async def list_videos_by_type(
        self, video_type: VideoType
    ) -> Result[GroupMap[int, Video]]:
        """Videos of one type, resolved and bucketed by container id."""
        logger.debug(f"list_videos_by_type: {video_type.value}")
        listed = await self.videos.list_by_type(video_type)
        if not listed.ok:
            return Result.failure(listed.error)

        resolved = await self._resolve_videos(listed.data)
        return resolved.map(
            lambda videos: group(
                (dto.container_key(), video)
                for dto, video in zip(listed.data, videos)
            )
        )

    # Assembly

    async def assemble_one(self, container_id: int) -> Result[Container]:
        """
        Build one container from the upstreams, filtered to ``container_id``.

        Empty lists are valid; any failed call fails the whole assembly.
        """
        logger.debug(f"assemble_one: {container_id}")

        fetched = await self._fanout.gather(
            [
                self.advertisements.list_by_container(container_id),
                self.images.list_by_container(container_id),
                self._list_resolved_videos(container_id),
            ]
        )
        if not fetched.ok:
            logger.error(f"Failed to assemble container {container_id}: {fetched.error}")
            return Result.failure(fetched.error)

        ads, images, videos = fetched.data
        container = Container.build(container_id, ads, images, videos)
        logger.info(
            f"Assembled {container} with {len(ads)} ads, "
            f"{len(images)} images, {len(videos)} videos"
        )
        return Result.success(container)

    async def assemble_all(self) -> Result[list[Container]]:
        """
        Build every container from the unfiltered upstream lists.

        Videos define which containers exist: ids seen only among ads or
        images are dropped. Output order follows first appearance in the
        video list.
        """
        logger.debug("assemble_all")

        fetched = await self._fanout.gather(
            [
                self.advertisements.list_all(),
                self.images.list_all(),
                self._list_all_resolved_videos(),
            ]
        )
        if not fetched.ok:
            logger.error(f"Failed to assemble containers: {fetched.error}")
            return Result.failure(fetched.error)

        ads_by_container, images_by_container, videos_by_container = fetched.data
        containers = [
            Container.build(
                container_id,
                ads_by_container.get(container_id, []),
                images_by_container.get(container_id, []),
                videos,
            )
            for container_id, videos in videos_by_container.items()
        ]
        logger.info(f"Assembled {len(containers)} containers")
        return Result.success(containers)

    async def _list_resolved_videos(self, container_id: int) -> Result[list[Video]]:
        listed = await self.videos.list_by_container(container_id)
        if not listed.ok:
            return Result.failure(listed.error)
        return await self._resolve_videos(listed.data)

    async def _list_all_resolved_videos(self) -> Result[GroupMap[int, Video]]:
        listed = await self.videos.list_all()
        if not listed.ok:
            return Result.failure(listed.error)

        resolved = await self._resolve_videos(listed.data)
        return resolved.map(
            lambda videos: group(
                (dto.container_key(), video)
                for dto, video in zip(listed.data, videos)
            )
        )

    async def _resolve_videos(self, dtos: list[VideoDto]) -> Result[list[Video]]:
        """Attach asset references to every video, with bounded concurrency."""
        return await self._fanout.gather(
            [self._resolve_video(dto) for dto in dtos],
            limit=self._asset_concurrency,
        )

    async def _resolve_video(self, dto: VideoDto) -> Result[Video]:
        assets = await self.videos.list_asset_references(dto.video_id())
        return assets.map(dto.to_domain)

    async def close(self) -> None:
        """Wait for abandoned fan-out calls, then release the HTTP client."""
        await self._fanout.drain()
        sources = (self.advertisements, self.images, self.videos)
        for client in {source.client for source in sources}:
            await client.close()
        logger.debug("ContainerService closed")
