"""
Unit Tests for Defect Tracker REST Client

Test Coverage:
- Initialization and URL construction
- Endpoint paths for every client method
- Error handling (401, 404 "No data found", 429, 503, network errors)
- Retry logic and backoff
- Shared connection pool when used as a context manager
"""

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from defect_metrics.collectors.defect_rest_client import (
    DefectTrackerRESTClient,
    get_defect_rest_client,
    is_empty_result_message,
)
from defect_metrics.domain.errors import TransportError

BASE_URL = "https://tracker.test:8087"
PATCH_HTTP = "defect_metrics.collectors.defect_rest_client.AsyncSecureHTTPClient"


def make_response(status_code: int, url: str = f"{BASE_URL}/api/v1/x", **kwargs) -> httpx.Response:
    return httpx.Response(status_code, request=httpx.Request("GET", url), **kwargs)


def mock_http(*responses) -> AsyncMock:
    """AsyncSecureHTTPClient stand-in answering GETs with ``responses`` in order"""
    mock_http_client = AsyncMock()
    mock_http_client.get = AsyncMock(side_effect=list(responses))
    mock_http_client.__aenter__ = AsyncMock(return_value=mock_http_client)
    mock_http_client.__aexit__ = AsyncMock(return_value=None)
    return mock_http_client


@pytest.fixture
def client():
    return DefectTrackerRESTClient(base_url=BASE_URL, max_retries=3, backoff_seconds=1.0)


class TestClientInitialization:
    """Test client initialization and configuration"""

    def test_strips_trailing_slash(self):
        assert DefectTrackerRESTClient(base_url=f"{BASE_URL}/").base_url == BASE_URL

    def test_empty_url_raises(self):
        with pytest.raises(ValueError, match="base_url is required"):
            DefectTrackerRESTClient(base_url="")

    def test_zero_retries_raises(self):
        with pytest.raises(ValueError, match="max_retries"):
            DefectTrackerRESTClient(base_url=BASE_URL, max_retries=0)

    def test_build_url(self, client):
        assert client._build_url("dashboard/defect-density/7") == f"{BASE_URL}/api/v1/dashboard/defect-density/7"


class TestEmptyResultMessage:
    """Test sentinel detection"""

    @pytest.mark.parametrize("message", ["No data found", "no records found for project 7", "Project NOT FOUND"])
    def test_sentinels(self, message):
        assert is_empty_result_message(message)

    @pytest.mark.parametrize("message", [None, "", "Success", 404])
    def test_non_sentinels(self, message):
        assert not is_empty_result_message(message)


class TestEndpoints:
    """Test each method hits the right resource"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,args,path",
        [
            ("get_projects", (), "projects"),
            ("get_all_defect_statuses", (), "defectStatus"),
            ("get_project_card_color", (7,), "dashboard/project-card-color/7"),
            ("get_defect_statistics", (7,), "defect-statistics/7"),
            ("get_defects_by_project", (7,), "defects/project/7"),
            ("get_severity_summary", (7,), "dashboard/defect_severity_summary/7"),
            ("get_severity_index", (7,), "dashboard/dsi/7"),
            ("get_defect_density", (7,), "dashboard/defect-density/7"),
            ("get_remark_ratio", (7,), "dashboard/defect-remark-ratio/7"),
            ("get_reopen_summary", (7,), "dashboard/reopen-count-summary/7"),
            ("get_defect_type_distribution", (7,), "dashboard/defect-type/7"),
            ("get_defects_by_module", (7,), "dashboard/defects-by-module/7"),
        ],
    )
    async def test_resource_paths(self, client, method, args, path):
        http = mock_http(make_response(200, json={"data": []}))

        with patch(PATCH_HTTP, return_value=http):
            await getattr(client, method)(*args)

        assert http.get.call_args.args[0] == f"{BASE_URL}/api/v1/{path}"

    @pytest.mark.asyncio
    async def test_returns_envelope(self, client):
        http = mock_http(make_response(200, json={"data": {"defectDensity": 10.12}, "message": "Success"}))

        with patch(PATCH_HTTP, return_value=http):
            envelope = await client.get_defect_density(7)

        assert envelope == {"data": {"defectDensity": 10.12}, "message": "Success"}

    @pytest.mark.asyncio
    async def test_bare_list_body_wrapped_as_data(self, client):
        http = mock_http(make_response(200, json=[{"id": 7}]))

        with patch(PATCH_HTTP, return_value=http):
            envelope = await client.get_projects()

        assert envelope == {"data": [{"id": 7}]}


class TestErrorHandling:
    """Test error handling and retry logic"""

    @pytest.mark.asyncio
    async def test_authentication_error_fails_fast(self, client):
        http = mock_http(make_response(401, json={"message": "Unauthorized"}))

        with patch(PATCH_HTTP, return_value=http):
            with pytest.raises(TransportError, match="HTTP 401"):
                await client.get_projects()

        assert http.get.call_count == 1

    @pytest.mark.asyncio
    async def test_not_found_with_sentinel_is_empty_envelope(self, client):
        http = mock_http(make_response(404, json={"message": "No data found", "data": None}))

        with patch(PATCH_HTTP, return_value=http):
            envelope = await client.get_remark_ratio(7)

        assert envelope == {"data": None, "message": "No data found"}
        assert http.get.call_count == 1

    @pytest.mark.asyncio
    async def test_not_found_without_sentinel_raises(self, client):
        http = mock_http(make_response(404, text="missing"))

        with patch(PATCH_HTTP, return_value=http):
            with pytest.raises(TransportError, match="HTTP 404"):
                await client.get_remark_ratio(7)

    @pytest.mark.asyncio
    async def test_rate_limit_honors_retry_after(self, client):
        http = mock_http(
            make_response(429, headers={"Retry-After": "2"}),
            make_response(200, json={"data": []}),
        )

        with patch(PATCH_HTTP, return_value=http):
            with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
                envelope = await client.get_projects()

        assert envelope == {"data": []}
        assert http.get.call_count == 2
        mock_sleep.assert_called_once_with(2.0)

    @pytest.mark.asyncio
    async def test_server_error_exponential_backoff_then_raises(self, client):
        http = mock_http(make_response(503), make_response(503), make_response(503))

        with patch(PATCH_HTTP, return_value=http):
            with patch("asyncio.sleep", new_callable=AsyncMock) as mock_sleep:
                with pytest.raises(TransportError, match="after 3 attempts"):
                    await client.get_defect_density(7)

        assert http.get.call_count == 3
        assert [call.args[0] for call in mock_sleep.call_args_list] == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_network_error_retried(self, client):
        http = mock_http(httpx.ConnectError("connection refused"), make_response(200, json={"data": []}))

        with patch(PATCH_HTTP, return_value=http):
            with patch("asyncio.sleep", new_callable=AsyncMock):
                envelope = await client.get_projects()

        assert envelope == {"data": []}
        assert http.get.call_count == 2

    @pytest.mark.asyncio
    async def test_undecodable_body_raises(self, client):
        http = mock_http(make_response(200, content=b"<html>maintenance</html>"))

        with patch(PATCH_HTTP, return_value=http):
            with pytest.raises(TransportError, match="Undecodable"):
                await client.get_projects()


class TestSharedPool:
    """Test context manager usage"""

    @pytest.mark.asyncio
    async def test_context_manager_shares_one_http_client(self):
        http = mock_http(make_response(200, json={"data": []}), make_response(200, json={"data": []}))

        with patch(PATCH_HTTP, return_value=http) as factory:
            async with DefectTrackerRESTClient(base_url=BASE_URL) as client:
                await client.get_projects()
                await client.get_all_defect_statuses()

        assert factory.call_count == 1
        assert http.get.call_count == 2
        http.__aexit__.assert_awaited_once()


class TestFactoryFunction:
    """Test get_defect_rest_client"""

    def test_builds_from_config(self):
        with patch("defect_metrics.collectors.defect_rest_client.get_config") as mock_get_config:
            tracker_config = mock_get_config.return_value.get_defect_tracker_config.return_value
            tracker_config.base_url = BASE_URL
            tracker_config.timeout_seconds = 12.0
            tracker_config.max_retries = 5

            client = get_defect_rest_client()

        assert client.base_url == BASE_URL
        assert client.timeout == 12.0
        assert client.max_retries == 5
