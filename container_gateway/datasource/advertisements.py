"""
Advertisement upstream.
"""

from container_gateway.datasource.base import ContainerScopedSource
from container_gateway.models import Advertisement, AdvertisementDto


class AdvertisementSource(ContainerScopedSource[Advertisement]):
    """``GET {base}[?containerId=]`` returning ``{"advertisements": [...]}``."""

    SERVICE_ID = "advertisements"

    envelope_field = "advertisements"
    raw_model = AdvertisementDto

    @property
    def service_id(self) -> str:
        return self.SERVICE_ID
