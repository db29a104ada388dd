"""
Tests for AsyncSecureHTTPClient
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from defect_metrics.async_http_client import AsyncSecureHTTPClient


class TestAsyncSecureHTTPClient:
    """Test lifecycle and request forwarding"""

    @pytest.mark.asyncio
    async def test_get_outside_context_raises(self):
        with pytest.raises(RuntimeError, match="Client not initialized"):
            await AsyncSecureHTTPClient().get("https://tracker.internal/api/v1/projects")

    @pytest.mark.asyncio
    async def test_context_creates_verified_http2_client(self):
        with patch("defect_metrics.async_http_client.httpx.AsyncClient") as client_cls:
            client_cls.return_value.aclose = AsyncMock()
            async with AsyncSecureHTTPClient(timeout=5) as client:
                assert client.client is client_cls.return_value

        kwargs = client_cls.call_args.kwargs
        assert kwargs["verify"] is True
        assert kwargs["http2"] is True
        assert client.client is None

    @pytest.mark.asyncio
    async def test_get_applies_default_timeout(self):
        with patch("defect_metrics.async_http_client.httpx.AsyncClient") as client_cls:
            client_cls.return_value.aclose = AsyncMock()
            client_cls.return_value.get = AsyncMock(return_value=httpx.Response(200))
            async with AsyncSecureHTTPClient(timeout=5) as client:
                response = await client.get("https://tracker.internal/api/v1/projects")

        assert response.status_code == 200
        assert client_cls.return_value.get.call_args.kwargs["timeout"] == httpx.Timeout(5)
