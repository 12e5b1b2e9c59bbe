"""
Upstream (DTO) and domain record types.

Upstream records carry every identifier as a numeric string. Domain records
carry integers, drop ``containerId`` (it becomes the grouping key) and
serialize with camelCase field names.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from container_gateway.services.errors import DecodeError


class AssetType(str, Enum):
    """Kind of asset a video references."""

    AD = "AD"
    IMAGE = "IMAGE"


class VideoType(str, Enum):
    """Kind of video."""

    CLIP = "CLIP"
    EPISODE = "EPISODE"
    MOVIE = "MOVIE"


def parse_id(value: str, field: str = "id") -> int:
    """Parse a numeric-string identifier, raising DecodeError if it is not one."""
    if not (value.isascii() and value.isdigit()):
        raise DecodeError(f"Field '{field}' is not a numeric identifier: {value!r}")
    return int(value)


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


# ---------------------------------------------------------------------------
# Domain records
# ---------------------------------------------------------------------------


class Advertisement(_Record):
    """Advertisement belonging to a container."""

    id: int
    name: str
    url: str


class Image(_Record):
    """Image belonging to a container."""

    id: int
    name: str
    url: str


class AssetReference(_Record):
    """Pointer from a video to an ad or image, by id."""

    asset_id: int = Field(alias="assetId")
    asset_type: AssetType = Field(alias="assetType")


class Video(_Record):
    """Video with its resolved asset references."""

    id: int
    assets: tuple[AssetReference, ...] = ()
    description: str
    expiration_date: str = Field(alias="expirationDate")
    playback_url: str = Field(alias="playbackUrl")
    title: str
    type: VideoType


class Container(_Record):
    """Aggregate of one container's ads, images and videos."""

    id: int
    title: str
    ads: tuple[Advertisement, ...] = ()
    images: tuple[Image, ...] = ()
    videos: tuple[Video, ...] = ()

    @classmethod
    def build(
        cls,
        container_id: int,
        ads: list[Advertisement],
        images: list[Image],
        videos: list[Video],
    ) -> "Container":
        """Assemble a container, deriving its title from which lists are present."""
        return cls(
            id=container_id,
            title=container_title(container_id, bool(ads), bool(images)),
            ads=tuple(ads),
            images=tuple(images),
            videos=tuple(videos),
        )

    def __str__(self) -> str:
        return f"Container {{ id: {self.id}, title: {self.title} }}"


def container_title(container_id: int, has_ads: bool, has_images: bool) -> str:
    """``container-<id>[_ads][_images]_videos``"""
    ads = "_ads" if has_ads else ""
    images = "_images" if has_images else ""
    return f"container-{container_id}{ads}{images}_videos"


# ---------------------------------------------------------------------------
# Upstream records
# ---------------------------------------------------------------------------


class AdvertisementDto(_Record):
    container_id: str = Field(alias="containerId")
    id: str
    name: str
    url: str

    def container_key(self) -> int:
        return parse_id(self.container_id, "containerId")

    def to_domain(self) -> Advertisement:
        return Advertisement(id=parse_id(self.id), name=self.name, url=self.url)


class ImageDto(_Record):
    container_id: str = Field(alias="containerId")
    id: str
    name: str
    url: str

    def container_key(self) -> int:
        return parse_id(self.container_id, "containerId")

    def to_domain(self) -> Image:
        return Image(id=parse_id(self.id), name=self.name, url=self.url)


class AssetReferenceDto(_Record):
    asset_id: str = Field(alias="assetId")
    asset_type: AssetType = Field(alias="assetType")
    video_id: str | None = Field(default=None, alias="videoId")

    def to_domain(self) -> AssetReference:
        return AssetReference(
            asset_id=parse_id(self.asset_id, "assetId"),
            asset_type=self.asset_type,
        )


class VideoDto(_Record):
    """
    Video as received from upstream.

    Serves as the partial form of a Video until its asset references have
    been fetched; ``to_domain`` completes it.
    """

    container_id: str = Field(alias="containerId")
    id: str
    description: str
    expiration_date: str = Field(alias="expirationDate")
    playback_url: str = Field(alias="playbackUrl")
    title: str
    type: VideoType

    def container_key(self) -> int:
        return parse_id(self.container_id, "containerId")

    def video_id(self) -> int:
        return parse_id(self.id)

    def to_domain(self, assets: list[AssetReference]) -> Video:
        return Video(
            id=self.video_id(),
            assets=tuple(assets),
            description=self.description,
            expiration_date=self.expiration_date,
            playback_url=self.playback_url,
            title=self.title,
            type=self.type,
        )
