"""
Async HTTP Client Wrapper

Provides async HTTP methods with enforced timeouts and connection pooling.
Built on httpx so that every per-project metric request can be in flight on
one event loop at the same time.

Usage:
    from defect_metrics.async_http_client import AsyncSecureHTTPClient

    async with AsyncSecureHTTPClient() as client:
        response = await client.get(url)

Features:
    - TLS verification always enabled for https URLs
    - Default 30-second timeout on all requests
    - Connection pooling for concurrent requests
    - HTTP/2 support for multiplexing
"""

import httpx


class AsyncSecureHTTPClient:
    """
    Async HTTP client with enforced certificate verification and connection pooling.

    Must be used as an async context manager; calling a request method outside
    of ``async with`` raises RuntimeError.
    """

    DEFAULT_TIMEOUT = 30  # seconds
    DEFAULT_MAX_CONNECTIONS = 20
    DEFAULT_MAX_KEEPALIVE = 10

    def __init__(
        self,
        max_connections: int = DEFAULT_MAX_CONNECTIONS,
        max_keepalive_connections: int = DEFAULT_MAX_KEEPALIVE,
        timeout: float = DEFAULT_TIMEOUT,
        http2: bool = True,
    ):
        """
        Initialize async HTTP client.

        Args:
            max_connections: Maximum number of concurrent connections
            max_keepalive_connections: Max persistent connections
            timeout: Default timeout in seconds
            http2: Enable HTTP/2 support
        """
        self.limits = httpx.Limits(max_connections=max_connections, max_keepalive_connections=max_keepalive_connections)
        self.timeout = httpx.Timeout(timeout)
        self.http2 = http2
        self.client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "AsyncSecureHTTPClient":
        self.client = httpx.AsyncClient(
            limits=self.limits,
            timeout=self.timeout,
            verify=True,
            http2=self.http2,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, *args):
        if self.client:
            await self.client.aclose()
            self.client = None

    async def get(self, url: str, **kwargs) -> httpx.Response:
        """
        Async GET request.

        Args:
            url: URL to fetch
            **kwargs: Additional arguments passed to httpx.AsyncClient.get()

        Returns:
            httpx.Response: HTTP response
        """
        if not self.client:
            raise RuntimeError("Client not initialized. Use 'async with AsyncSecureHTTPClient()' context manager")

        kwargs.setdefault("timeout", self.timeout)
        return await self.client.get(url, **kwargs)
