"""HTTP client with built-in error handling.

Every failed request is normalized through the error manager, optionally
published to the global register and reported. Callers always get an
ApiResponse back; the client itself never raises for request failures.
"""

import logging
from typing import Any, Generic, Optional, TypeVar

import httpx

from errguard.errors.reporting import report_if_needed
from errguard.errors.taxonomy import NormalizedError
from errguard.features.flags import ENABLE_AUTOMATIC_RETRY
from errguard.runtime import Runtime
from errguard.utils.decorators import ApiResponse
from errguard.utils.retry import retry_with_backoff

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ApiClient(Generic[T]):
    """Client for JSON APIs that funnels failures through errguard.

    Tracks ``loading``, ``data`` and ``error`` for the most recent request.
    """

    def __init__(
        self,
        runtime: Runtime,
        client: Optional[httpx.AsyncClient] = None,
        base_url: str = "",
        timeout: float = 30.0,
    ):
        """Initialize the client.

        Args:
            runtime: Shared manager, register, reporter and settings
            client: Preconfigured httpx client (created lazily if omitted)
            base_url: Base URL for a lazily created client
            timeout: Request timeout for a lazily created client
        """
        self.runtime = runtime
        self._client = client
        self._owns_client = client is None
        self._base_url = base_url
        self._timeout = timeout

        self.loading = False
        self.data: Optional[T] = None
        self.error: Optional[NormalizedError] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout)
        return self._client

    async def close(self) -> None:
        """Close the HTTP client if this instance created it."""
        if self._client and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ApiClient[T]":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(self, method: str, url: str, **request_kwargs: Any) -> httpx.Response:
        client = await self._get_client()
        response = await client.request(method, url, **request_kwargs)
        response.raise_for_status()
        return response

    def _normalize(self, error: Exception) -> NormalizedError:
        manager = self.runtime.manager
        if isinstance(error, httpx.HTTPStatusError):
            return manager.handle(manager.from_http_error(error))
        return manager.handle(error)

    def _should_retry(self, error: BaseException, attempt: int) -> bool:
        # Status errors are typed first so a 404 or 403 is never retried
        if isinstance(error, httpx.HTTPStatusError):
            error = self.runtime.manager.from_http_error(error)
        return self.runtime.manager.retry_predicate()(error, attempt)

    async def execute(
        self,
        url: str,
        method: str = "GET",
        *,
        show_global_error: bool = True,
        retry: bool = False,
        **request_kwargs: Any,
    ) -> ApiResponse[T]:
        """Perform a request and return its JSON body or a normalized error.

        Args:
            url: Request URL (relative to the base URL if one is set)
            method: HTTP method
            show_global_error: Publish failures to the global register
            retry: Retry transient failures with backoff when automatic
                retry is enabled
            **request_kwargs: Passed through to ``httpx.AsyncClient.request``

        Returns:
            ApiResponse with ``data`` on success, ``error`` on failure
        """
        self.loading = True
        self.error = None

        async def attempt() -> httpx.Response:
            return await self._request(method, url, **request_kwargs)

        try:
            if retry and self.runtime.policy.enabled(ENABLE_AUTOMATIC_RETRY):
                retry_settings = self.runtime.settings.retry
                response = await retry_with_backoff(
                    attempt,
                    max_retries=retry_settings.max_retries,
                    initial_delay_ms=retry_settings.initial_delay_ms,
                    max_delay_ms=retry_settings.max_delay_ms,
                    backoff_factor=retry_settings.backoff_factor,
                    should_retry=self._should_retry,
                )
            else:
                response = await attempt()

            self.data = response.json() if response.content else None
            return ApiResponse(data=self.data, status=response.status_code)

        except Exception as e:
            processed = self._normalize(e)
            self.error = processed
            logger.warning(
                f"{method} {url} failed: {processed.category.value} - {processed.message}"
            )

            if show_global_error:
                self.runtime.register.set_error(processed)

            report_if_needed(
                self.runtime.manager,
                self.runtime.reporter,
                processed,
                {"url": url, "method": method},
            )

            status = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else 500
            return ApiResponse(error=processed, status=status)

        finally:
            self.loading = False

    def reset(self) -> None:
        """Reset the tracked request state."""
        self.data = None
        self.error = None
        self.loading = False
