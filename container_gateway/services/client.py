"""
ServiceClient - async HTTP GET client with retry and exponential backoff.

Retries run on tenacity: only transient failures are retried, and when the
attempts run out the last Result is returned as-is.

Status classification:
- 200: success, body decoded and returned
- 404: permanent failure ("Resource not found")
- 500: transient failure ("Internal server error"), retried
- anything else, transport failures and undecodable bodies: permanent
"""

import asyncio
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Sequence, TypeVar

import httpx
from loguru import logger
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
)
from tenacity.wait import wait_base

from container_gateway.services.errors import (
    DecodeError,
    RequestTimeoutError,
    ResourceNotFoundError,
    ServiceError,
    TransportError,
    UnexpectedStatusError,
    UpstreamServerError,
)
from container_gateway.services.result import Result

T = TypeVar("T")

MAX_ATTEMPTS = 10
MAX_BACKOFF_MS = 1_000
BACKOFF_JITTER_MS = 100

QueryParams = Sequence[tuple[str, str | int]] | dict[str, str | int]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration shared by every call made through a client."""

    max_attempts: int = MAX_ATTEMPTS
    max_backoff_ms: int = MAX_BACKOFF_MS
    jitter_ms: int = BACKOFF_JITTER_MS


def compute_backoff(attempt: int, policy: RetryPolicy = RetryPolicy()) -> float:
    """
    Delay in milliseconds to wait before ``attempt`` (1-indexed).

    ``min(2^(attempt - 1) + uniform(0, jitter), max_backoff)``; the first
    attempt is never delayed.
    """
    if attempt <= 1:
        return 0.0
    exponential = 2 ** (attempt - 1)
    jitter = random.uniform(0, policy.jitter_ms)
    return min(exponential + jitter, policy.max_backoff_ms)


class _ExponentialJitterWait(wait_base):
    """Tenacity wait before the next attempt, in seconds."""

    def __init__(self, policy: RetryPolicy) -> None:
        self._policy = policy

    def __call__(self, retry_state: RetryCallState) -> float:
        next_attempt = retry_state.attempt_number + 1
        return compute_backoff(next_attempt, self._policy) / 1000


def _is_transient_failure(result: Result[Any]) -> bool:
    return not result.ok and result.error.is_transient


def _last_result(retry_state: RetryCallState) -> Result[Any]:
    """Hand back the final attempt's Result instead of raising RetryError."""
    return retry_state.outcome.result()


def _identity(body: Any) -> Any:
    return body


class ServiceClient:
    """
    GET-only upstream client returning explicit Results.

    Usage:
        client = ServiceClient(timeout=10.0)

        result = await client.fetch(
            service_id="advertisements",
            url="http://ads.example.com/advertisements",
            params=[("containerId", 5)],
            decode=lambda body: body["advertisements"],
        )
        if result.ok:
            ads = result.data
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 30.0,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        self._timeout = timeout
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep

        # An injected client belongs to the caller and is not closed here
        self._http_client = http_client
        self._owns_http_client = http_client is None

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(self._timeout),
                follow_redirects=True,
            )
        return self._http_client

    async def fetch(
        self,
        service_id: str,
        url: str,
        params: QueryParams | None = None,
        decode: Callable[[Any], T] = _identity,
    ) -> Result[T]:
        """
        GET ``url`` and decode the JSON body, retrying transient failures.

        Args:
            service_id: Name of the upstream, used in errors and logs
            url: Absolute endpoint URL
            params: Query parameters appended to the URL, in order
            decode: Converts the parsed JSON body; may raise DecodeError

        Returns:
            Result with the decoded body, or the last attempt's error
        """
        policy = self._retry_policy
        logger.debug(f"Getting {url} params={params}")

        retrying = AsyncRetrying(
            stop=stop_after_attempt(policy.max_attempts),
            wait=_ExponentialJitterWait(policy),
            retry=retry_if_result(_is_transient_failure),
            before_sleep=self._log_retry(service_id),
            retry_error_callback=_last_result,
            sleep=self._sleep,
        )
        result = await retrying(self._attempt, service_id, url, params, decode)

        if not result.ok:
            if result.error.is_transient:
                logger.error(
                    f"[{service_id}] Giving up on {url} after "
                    f"{policy.max_attempts} attempts: {result.error}"
                )
            else:
                logger.error(
                    f"[{service_id}] GET {url} returned with un-retryable error {result.error}"
                )
        return result

    @staticmethod
    def _log_retry(service_id: str) -> Callable[[RetryCallState], None]:
        def log(retry_state: RetryCallState) -> None:
            logger.warning(
                f"[{service_id}] Attempt #{retry_state.attempt_number} returned with "
                f"retryable error {retry_state.outcome.result().error}"
            )

        return log

    async def _attempt(
        self,
        service_id: str,
        url: str,
        params: QueryParams | None,
        decode: Callable[[Any], T],
    ) -> Result[T]:
        """Execute one GET request and classify the outcome."""
        client = await self._get_http_client()

        try:
            response = await client.get(url, params=params)
        except httpx.TimeoutException:
            return Result.failure(RequestTimeoutError(service_id, self._timeout))
        except httpx.RequestError as e:
            return Result.failure(TransportError(str(e), service_id=service_id))

        error = classify_status(response.status_code, service_id)
        if error is not None:
            return Result.failure(error)

        try:
            return Result.success(decode(response.json()))
        except DecodeError as e:
            e.service_id = e.service_id or service_id
            return Result.failure(e)
        except ValueError as e:
            # Body was not JSON at all
            return Result.failure(DecodeError(str(e), service_id=service_id))

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._http_client and self._owns_http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("ServiceClient closed")

    async def __aenter__(self) -> "ServiceClient":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()


def classify_status(status_code: int, service_id: str | None = None) -> ServiceError | None:
    """Map an HTTP status to the error it represents, or None for 200."""
    if status_code == httpx.codes.OK:
        return None
    if status_code == httpx.codes.NOT_FOUND:
        return ResourceNotFoundError(service_id)
    if status_code == httpx.codes.INTERNAL_SERVER_ERROR:
        return UpstreamServerError(service_id)
    return UnexpectedStatusError(status_code, service_id)
