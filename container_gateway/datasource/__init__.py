from container_gateway.datasource.advertisements import AdvertisementSource
from container_gateway.datasource.base import BaseDataSource, ContainerScopedSource
from container_gateway.datasource.images import ImageSource
from container_gateway.datasource.videos import VideoSource

__all__ = [
    "AdvertisementSource",
    "BaseDataSource",
    "ContainerScopedSource",
    "ImageSource",
    "VideoSource",
]
