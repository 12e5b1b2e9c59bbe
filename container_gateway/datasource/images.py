"""
Image upstream.
"""

from container_gateway.datasource.base import ContainerScopedSource
from container_gateway.models import Image, ImageDto


class ImageSource(ContainerScopedSource[Image]):
    """``GET {base}[?containerId=]`` returning ``{"images": [...]}``."""

    SERVICE_ID = "images"

    envelope_field = "images"
    raw_model = ImageDto

    @property
    def service_id(self) -> str:
        return self.SERVICE_ID
