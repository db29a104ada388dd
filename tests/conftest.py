"""
Pytest configuration and shared fixtures

Provides sample upstream envelopes and a stub defect tracker client whose
endpoints can be made to fail, return empty results, or wait on an event.
"""

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest

from defect_metrics.domain.errors import TransportError

# ===== Upstream Envelopes =====


def sample_envelopes(project_id: int = 7) -> dict[str, Any]:
    """One realistic envelope per client method."""
    return {
        "get_projects": {
            "data": [
                {"id": 7, "projectName": "Billing Portal"},
                {"id": 8, "projectName": "Field App"},
                {"id": 9, "name": "Warehouse Scanner"},
            ]
        },
        "get_all_defect_statuses": {
            "data": [
                {"projectId": 8, "defectStatusName": "OPEN"},
                {"projectId": 9, "defectStatusName": "FIXED"},
            ]
        },
        "get_project_card_color": {"data": {"projectCardColor": "bg-gradient-to-r from-red-600 to-red-800"}},
        "get_defect_statistics": {"data": {"projectId": project_id, "totalDefects": 9, "openDefects": 4}},
        "get_defects_by_project": {
            "data": [
                {"projectId": project_id, "defectStatusName": "OPEN"},
                {"projectId": project_id, "defectStatusName": "FIXED"},
            ]
        },
        "get_severity_summary": {
            "data": {
                "defectSummary": [
                    {"severity": "High", "total": 5, "REOPEN": 1, "NEW": {"count": 2}, "OPEN": 2},
                    {"severity": "Medium", "total": 3, "FIXED": 3},
                    {"severity": "Low", "total": 1, "DUPLICATE": 1},
                ],
                "totalDefects": 9,
            }
        },
        "get_severity_index": {"data": {"dsiPercentage": 43.6}},
        "get_defect_density": {"data": {"defectDensity": 10.12}},
        "get_remark_ratio": {"data": {"ratio": "97.75%", "category": "Medium", "color": "#f59e0b"}},
        "get_reopen_summary": {
            "data": [
                {"reopenCount": 2, "count": 4, "percentage": 80.0},
                {"reopenCount": 3, "count": 1, "percentage": 20.0},
            ]
        },
        "get_defect_type_distribution": {
            "data": {
                "defectTypes": [
                    {"defectType": "UI", "defectCount": 6},
                    {"defectType": "Functional", "defectCount": 3},
                ],
                "totalDefectCount": 9,
                "mostCommonDefectType": "UI",
                "mostCommonDefectCount": 6,
            }
        },
        "get_defects_by_module": {
            "data": [
                {"name": "Bench", "value": 56},
                {"moduleName": "Dashboard", "count": 17},
            ]
        },
    }


class StubTrackerClient:
    """
    In-memory stand-in for DefectTrackerRESTClient.

    ``responses[method]`` may be an envelope, an exception instance (raised),
    or a callable taking the call arguments. ``gates[method]`` or
    ``gates[(method, project_id)]`` holds an asyncio.Event the call waits on
    before answering.
    """

    def __init__(self, responses: dict[str, Any] | None = None):
        self.responses: dict[str, Any] = responses if responses is not None else sample_envelopes()
        self.gates: dict[Any, asyncio.Event] = {}
        self.calls: list[tuple[str, tuple]] = []

    async def __aenter__(self) -> "StubTrackerClient":
        return self

    async def __aexit__(self, *args) -> None:
        return None

    async def _answer(self, method: str, *args: Any) -> Any:
        self.calls.append((method, args))
        gate = self.gates.get((method, *args), self.gates.get(method))
        if gate is not None:
            await gate.wait()
        response = self.responses[method]
        if isinstance(response, BaseException):
            raise response
        if isinstance(response, Callable):
            return response(*args)
        return response

    async def get_projects(self):
        return await self._answer("get_projects")

    async def get_all_defect_statuses(self):
        return await self._answer("get_all_defect_statuses")

    async def get_project_card_color(self, project_id):
        return await self._answer("get_project_card_color", project_id)

    async def get_defect_statistics(self, project_id):
        return await self._answer("get_defect_statistics", project_id)

    async def get_defects_by_project(self, project_id):
        return await self._answer("get_defects_by_project", project_id)

    async def get_severity_summary(self, project_id):
        return await self._answer("get_severity_summary", project_id)

    async def get_severity_index(self, project_id):
        return await self._answer("get_severity_index", project_id)

    async def get_defect_density(self, project_id):
        return await self._answer("get_defect_density", project_id)

    async def get_remark_ratio(self, project_id):
        return await self._answer("get_remark_ratio", project_id)

    async def get_reopen_summary(self, project_id):
        return await self._answer("get_reopen_summary", project_id)

    async def get_defect_type_distribution(self, project_id):
        return await self._answer("get_defect_type_distribution", project_id)

    async def get_defects_by_module(self, project_id):
        return await self._answer("get_defects_by_module", project_id)


# ===== Fixtures =====


@pytest.fixture
def sample_timestamp():
    """Provide a consistent timestamp for testing"""
    return datetime(2026, 2, 7, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def envelopes():
    """Fresh copy of the sample envelopes for project 7"""
    return sample_envelopes()


@pytest.fixture
def stub_client(envelopes):
    """Stub client answering every endpoint with the sample envelopes"""
    return StubTrackerClient(envelopes)


@pytest.fixture
def transport_error() -> Callable[[str], TransportError]:
    """Factory for transport failures"""
    return lambda message="HTTP 503 for /api/v1/...": TransportError(message)


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() changes to the root logger after the test"""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
