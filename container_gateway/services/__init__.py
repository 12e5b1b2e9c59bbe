"""
Service layer - resilient fetching and caching for upstream calls.

Provides:
- ServiceClient: GET client with status classification, retry and backoff
- Result: explicit success/failure value returned by every core operation
- unwrap_and_map / group: envelope decoding and container-id bucketing
- FanOut: concurrent gather over Results
- ContainerCache: bounded LRU cache of assembled containers
"""

from container_gateway.services.errors import (
    ErrorKind,
    ServiceError,
    ResourceNotFoundError,
    UpstreamServerError,
    UnexpectedStatusError,
    RequestTimeoutError,
    TransportError,
    DecodeError,
)
from container_gateway.services.result import Result
from container_gateway.services.client import (
    ServiceClient,
    RetryPolicy,
    compute_backoff,
    classify_status,
)
from container_gateway.services.envelope import unwrap_and_map, unwrapper
from container_gateway.services.grouping import GroupMap, group, flatten
from container_gateway.services.fanout import FanOut
from container_gateway.services.cache import ContainerCache, CacheStats

__all__ = [
    # Errors
    "ErrorKind",
    "ServiceError",
    "ResourceNotFoundError",
    "UpstreamServerError",
    "UnexpectedStatusError",
    "RequestTimeoutError",
    "TransportError",
    "DecodeError",
    # Result
    "Result",
    # Client
    "ServiceClient",
    "RetryPolicy",
    "compute_backoff",
    "classify_status",
    # Decoding and grouping
    "unwrap_and_map",
    "unwrapper",
    "GroupMap",
    "group",
    "flatten",
    # Fan-out
    "FanOut",
    # Cache
    "ContainerCache",
    "CacheStats",
]
