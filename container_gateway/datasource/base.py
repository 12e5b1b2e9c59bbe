"""
Base data source interface.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Generic, TypeVar

from pydantic import BaseModel

from container_gateway.services.client import QueryParams, ServiceClient
from container_gateway.services.envelope import unwrapper
from container_gateway.services.grouping import GroupMap, group
from container_gateway.services.result import Result

T = TypeVar("T", bound=BaseModel)
RawT = TypeVar("RawT", bound=BaseModel)
D = TypeVar("D")


class BaseDataSource(ABC, Generic[T]):
    """
    Abstract base class for all upstream sources.

    All sources:
    - Use an injected ServiceClient for HTTP requests (retry, classification)
    - Unwrap their upstream's list envelope into Pydantic models
    - Return Results, never raise
    """

    def __init__(self, client: ServiceClient, base_url: str):
        self.client = client
        self.base_url = base_url.rstrip("/")

    @property
    @abstractmethod
    def service_id(self) -> str:
        """Unique identifier for this upstream."""
        ...

    @abstractmethod
    async def list_all(self) -> Result[Any]:
        """Fetch the entire unfiltered list from the upstream."""
        ...

    async def _fetch_list(
        self,
        envelope_field: str,
        raw_model: type[RawT],
        mapper: Callable[[RawT], D],
        url: str | None = None,
        params: QueryParams | None = None,
    ) -> Result[list[D]]:
        return await self.client.fetch(
            service_id=self.service_id,
            url=url or self.base_url,
            params=params,
            decode=unwrapper(envelope_field, raw_model, mapper),
        )


class ContainerScopedSource(BaseDataSource[T]):
    """
    Source whose records belong to a container and carry no nested lookups.

    Subclasses name their envelope field and upstream record model; the
    record model must provide ``container_key()`` and ``to_domain()``.
    """

    CONTAINER_ID = "containerId"

    envelope_field: str
    raw_model: type[BaseModel]

    async def list_all(self) -> Result[GroupMap[int, T]]:
        """Fetch every record and bucket it by container id."""
        result = await self._fetch_list(
            self.envelope_field,
            self.raw_model,
            lambda dto: (dto.container_key(), dto.to_domain()),
        )
        return result.map(group)

    async def list_by_container(self, container_id: int) -> Result[list[T]]:
        """Fetch the records of one container."""
        return await self._fetch_list(
            self.envelope_field,
            self.raw_model,
            lambda dto: dto.to_domain(),
            params=[(self.CONTAINER_ID, container_id)],
        )
