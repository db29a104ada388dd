"""
Defect Tracker REST API Client

Direct async access to the defect tracker service. Every method returns the
raw response envelope ``{"data": ..., "message": ...}``; adapting the payload
is left to ``rest_transformers``.

Usage:
    from defect_metrics.collectors.defect_rest_client import get_defect_rest_client

    async with get_defect_rest_client() as client:
        envelope = await client.get_severity_summary(project_id=7)

Errors:
    Transient failures (429, 5xx, network) are retried with exponential
    backoff; 401/403 and other client errors fail fast. Anything that still
    fails is raised as TransportError. A 4xx whose body carries an empty-result
    message is returned as an envelope so it reads as "no data", not failure.
"""

import asyncio
import json
from typing import Any

import httpx

from defect_metrics.async_http_client import AsyncSecureHTTPClient
from defect_metrics.core import get_config, get_logger
from defect_metrics.domain.constants import EMPTY_RESULT_SENTINELS
from defect_metrics.domain.errors import TransportError
from defect_metrics.utils.error_handling import log_and_continue

logger = get_logger(__name__)

RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


def is_empty_result_message(message: Any) -> bool:
    """True when an upstream ``message`` explicitly reports that there is no data."""
    if not isinstance(message, str):
        return False
    lowered = message.lower()
    return any(sentinel in lowered for sentinel in EMPTY_RESULT_SENTINELS)


class DefectTrackerRESTClient:
    """
    Defect tracker REST client.

    Can be used directly (each call opens its own pooled HTTP client) or as an
    async context manager, in which case all calls share one connection pool.
    """

    API_PREFIX = "/api/v1"

    def __init__(
        self,
        base_url: str,
        timeout: float = AsyncSecureHTTPClient.DEFAULT_TIMEOUT,
        max_retries: int = 3,
        backoff_seconds: float = 1.0,
    ):
        """
        Initialize defect tracker REST client.

        Args:
            base_url: Service root, e.g. https://tracker.internal:8087
            timeout: Per-request timeout in seconds
            max_retries: Attempts per request for transient failures
            backoff_seconds: First retry delay; doubles each attempt

        Raises:
            ValueError: If base_url is empty or max_retries < 1
        """
        if not base_url:
            raise ValueError("base_url is required")
        if max_retries < 1:
            raise ValueError("max_retries must be at least 1")

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._shared_client: AsyncSecureHTTPClient | None = None

    async def __aenter__(self) -> "DefectTrackerRESTClient":
        self._shared_client = AsyncSecureHTTPClient(timeout=self.timeout)
        await self._shared_client.__aenter__()
        return self

    async def __aexit__(self, *args) -> None:
        if self._shared_client:
            await self._shared_client.__aexit__(*args)
            self._shared_client = None

    def _build_url(self, resource: str) -> str:
        """
        Example:
            _build_url("dashboard/defect-density/7")
            -> "https://tracker.internal:8087/api/v1/dashboard/defect-density/7"
        """
        return f"{self.base_url}{self.API_PREFIX}/{resource.lstrip('/')}"

    async def _send(self, url: str) -> httpx.Response:
        if self._shared_client is not None:
            return await self._shared_client.get(url, headers={"Accept": "application/json"})

        async with AsyncSecureHTTPClient(timeout=self.timeout) as client:
            return await client.get(url, headers={"Accept": "application/json"})

    @staticmethod
    def _decode(response: httpx.Response, url: str) -> dict[str, Any]:
        try:
            body = response.json()
        except (json.JSONDecodeError, ValueError) as e:
            raise TransportError(f"Undecodable response body from {url}: {e}") from e

        # Some endpoints answer with a bare list; treat it as the data member
        if not isinstance(body, dict):
            return {"data": body}
        return body

    async def _handle_api_call(self, resource: str) -> dict[str, Any]:
        """
        Execute a GET with retry logic and error handling.

        Returns:
            Parsed response envelope

        Raises:
            TransportError: For non-retryable HTTP errors, undecodable bodies,
                or when retries are exhausted
        """
        url = self._build_url(resource)
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                response = await self._send(url)
                response.raise_for_status()
                return self._decode(response, url)

            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code

                if status_code in RETRYABLE_STATUS_CODES:
                    backoff = self.backoff_seconds * (2**attempt)
                    if status_code == 429:
                        retry_after = e.response.headers.get("Retry-After")
                        if retry_after and retry_after.isdigit():
                            backoff = float(retry_after)
                    logger.warning(
                        f"HTTP {status_code} from defect tracker, retrying in {backoff:.1f}s "
                        f"(attempt {attempt + 1}/{self.max_retries})",
                        extra={"url": url, "status_code": status_code},
                    )
                    last_error = e
                    if attempt + 1 < self.max_retries:
                        await asyncio.sleep(backoff)
                    continue

                # A "no data" reply sent with a 4xx status is still an empty result
                if 400 <= status_code < 500 and status_code not in (401, 403):
                    try:
                        body = e.response.json()
                    except ValueError:
                        body = None
                    if isinstance(body, dict) and is_empty_result_message(body.get("message")):
                        return {"data": body.get("data"), "message": body["message"]}

                logger.error(f"HTTP error {status_code} from defect tracker", extra={"url": url})
                raise TransportError(f"HTTP {status_code} for {url}") from e

            except (httpx.TimeoutException, httpx.RequestError) as e:
                backoff = self.backoff_seconds * (2**attempt)
                logger.warning(
                    f"Network error, retrying in {backoff:.1f}s (attempt {attempt + 1}/{self.max_retries}): {e}",
                    extra={"url": url},
                )
                last_error = e
                if attempt + 1 < self.max_retries:
                    await asyncio.sleep(backoff)
                continue

        if last_error is None:
            raise TransportError(f"No attempt was made for {url}")

        log_and_continue(logger, last_error, {"url": url, "max_retries": self.max_retries}, "Defect tracker API call")
        raise TransportError(f"Request to {url} failed after {self.max_retries} attempts: {last_error}") from last_error

    # ==============================
    # Portfolio APIs
    # ==============================

    async def get_projects(self) -> dict[str, Any]:
        """
        List all projects.

        REST Endpoint: GET /api/v1/projects

        Returns:
            {"data": [{"id": 7, "projectName": "Billing Portal"}, ...]}
        """
        return await self._handle_api_call("projects")

    async def get_all_defect_statuses(self) -> dict[str, Any]:
        """
        Defect status records across all projects.

        REST Endpoint: GET /api/v1/defectStatus

        Returns:
            {"data": [{"projectId": 7, "defectStatusName": "NEW"}, ...]}
        """
        return await self._handle_api_call("defectStatus")

    async def get_project_card_color(self, project_id: int) -> dict[str, Any]:
        """
        Risk color signal for a project card.

        REST Endpoint: GET /api/v1/dashboard/project-card-color/{project_id}

        Returns:
            {"data": {"projectCardColor": "bg-gradient-to-r from-red-600 to-red-800"}}
            or {"data": {"availableRiskLevels": ["High", "Low"]}}
        """
        return await self._handle_api_call(f"dashboard/project-card-color/{project_id}")

    # ==============================
    # Per-project metric APIs
    # ==============================

    async def get_defect_statistics(self, project_id: int) -> dict[str, Any]:
        """REST Endpoint: GET /api/v1/defect-statistics/{project_id}"""
        return await self._handle_api_call(f"defect-statistics/{project_id}")

    async def get_defects_by_project(self, project_id: int) -> dict[str, Any]:
        """REST Endpoint: GET /api/v1/defects/project/{project_id}"""
        return await self._handle_api_call(f"defects/project/{project_id}")

    async def get_severity_summary(self, project_id: int) -> dict[str, Any]:
        """
        Defect counts per severity level and status.

        REST Endpoint: GET /api/v1/dashboard/defect_severity_summary/{project_id}

        Returns:
            {"data": {"defectSummary": [{"severity": "High", "total": 5, ...}], "totalDefects": 9}}
        """
        return await self._handle_api_call(f"dashboard/defect_severity_summary/{project_id}")

    async def get_severity_index(self, project_id: int) -> dict[str, Any]:
        """
        REST Endpoint: GET /api/v1/dashboard/dsi/{project_id}

        Returns:
            {"data": {"dsiPercentage": 43.6}} or {"data": 0}
        """
        return await self._handle_api_call(f"dashboard/dsi/{project_id}")

    async def get_defect_density(self, project_id: int) -> dict[str, Any]:
        """
        REST Endpoint: GET /api/v1/dashboard/defect-density/{project_id}

        Returns:
            {"data": {"defectDensity": 10.12}} or {"data": 0}
        """
        return await self._handle_api_call(f"dashboard/defect-density/{project_id}")

    async def get_remark_ratio(self, project_id: int) -> dict[str, Any]:
        """
        REST Endpoint: GET /api/v1/dashboard/defect-remark-ratio/{project_id}

        Returns:
            {"data": {"ratio": "97.75%", "category": "Medium", "color": "#f59e0b"}}
        """
        return await self._handle_api_call(f"dashboard/defect-remark-ratio/{project_id}")

    async def get_reopen_summary(self, project_id: int) -> dict[str, Any]:
        """
        REST Endpoint: GET /api/v1/dashboard/reopen-count-summary/{project_id}

        Returns:
            {"data": [{"reopenCount": 2, "count": 4}, {"reopenCount": 3, "count": 1}]}
        """
        return await self._handle_api_call(f"dashboard/reopen-count-summary/{project_id}")

    async def get_defect_type_distribution(self, project_id: int) -> dict[str, Any]:
        """
        REST Endpoint: GET /api/v1/dashboard/defect-type/{project_id}

        Returns:
            {"data": {"defectTypes": [...], "totalDefectCount": 447,
                      "mostCommonDefectType": "Functionality", "mostCommonDefectCount": 236}}
        """
        return await self._handle_api_call(f"dashboard/defect-type/{project_id}")

    async def get_defects_by_module(self, project_id: int) -> dict[str, Any]:
        """
        REST Endpoint: GET /api/v1/dashboard/defects-by-module/{project_id}

        Returns:
            {"data": [{"moduleName": "Bench", "defectCount": 56}, ...]}
        """
        return await self._handle_api_call(f"dashboard/defects-by-module/{project_id}")


def get_defect_rest_client() -> DefectTrackerRESTClient:
    """
    Get defect tracker REST client configured from the environment.

    Raises:
        ConfigurationError: If DEFECT_TRACKER_* settings are missing or invalid
    """
    tracker_config = get_config().get_defect_tracker_config()
    return DefectTrackerRESTClient(
        base_url=tracker_config.base_url,
        timeout=tracker_config.timeout_seconds,
        max_retries=tracker_config.max_retries,
    )
