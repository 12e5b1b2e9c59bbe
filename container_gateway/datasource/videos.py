"""
Video upstream.

Videos are returned in their upstream form (VideoDto); completing them into
domain Videos needs one extra asset-reference call per video, which the
ContainerService schedules.
"""

from typing import Any

from container_gateway.datasource.base import BaseDataSource
from container_gateway.models import (
    AssetReference,
    AssetReferenceDto,
    AssetType,
    Video,
    VideoDto,
    VideoType,
)
from container_gateway.services.envelope import decode_record
from container_gateway.services.result import Result


class VideoSource(BaseDataSource[Video]):
    """
    Video upstream.

    Endpoints:
        GET {base}[?containerId=&type=]          -> {"videos": [...]}
        GET {base}/{id}                          -> bare video object
        GET {base}/{id}/asset-references[?assetType=] -> {"videoAssets": [...]}
    """

    SERVICE_ID = "videos"

    ASSET_REFERENCES = "asset-references"
    ASSET_TYPE = "assetType"
    CONTAINER_ID = "containerId"
    VIDEO_TYPE = "type"

    @property
    def service_id(self) -> str:
        return self.SERVICE_ID

    async def list_all(self) -> Result[list[VideoDto]]:
        """Fetch every video."""
        return await self._list_videos()

    async def list_by_container(self, container_id: int) -> Result[list[VideoDto]]:
        """Fetch the videos of one container."""
        return await self._list_videos([(self.CONTAINER_ID, container_id)])

    async def list_by_type(self, video_type: VideoType) -> Result[list[VideoDto]]:
        """Fetch every video of one type."""
        return await self._list_videos([(self.VIDEO_TYPE, video_type.value)])

    async def list_by_container_and_type(
        self, container_id: int, video_type: VideoType
    ) -> Result[list[VideoDto]]:
        """Fetch the videos of one type within one container."""
        return await self._list_videos(
            [(self.CONTAINER_ID, container_id), (self.VIDEO_TYPE, video_type.value)]
        )

    async def get_video(self, video_id: int) -> Result[VideoDto]:
        """Fetch a single video; this endpoint has no envelope."""

        def decode(body: Any) -> VideoDto:
            return _checked(decode_record(body, VideoDto))

        return await self.client.fetch(
            service_id=self.service_id,
            url=f"{self.base_url}/{video_id}",
            decode=decode,
        )

    async def list_asset_references(
        self,
        video_id: int,
        asset_type: AssetType | None = None,
    ) -> Result[list[AssetReference]]:
        """Fetch the ads/images a video references, optionally of one type."""
        params = [(self.ASSET_TYPE, asset_type.value)] if asset_type else None
        return await self._fetch_list(
            "videoAssets",
            AssetReferenceDto,
            lambda dto: dto.to_domain(),
            url=f"{self.base_url}/{video_id}/{self.ASSET_REFERENCES}",
            params=params,
        )

    async def _list_videos(
        self, params: list[tuple[str, str | int]] | None = None
    ) -> Result[list[VideoDto]]:
        return await self._fetch_list(
            "videos", VideoDto, _checked, params=params
        )


def _checked(dto: VideoDto) -> VideoDto:
    # Surface malformed identifiers while still inside the fetch
    dto.container_key()
    dto.video_id()
    return dto
