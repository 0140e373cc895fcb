"""
Shared fixtures for the report tests.

Strategy:
- The external workforce API is replaced by ``httpx.MockTransport`` serving
  an in-memory ``FakeUpstream`` (roster, leave history, balances, punches).
- The FastAPI app is exercised through ``httpx.AsyncClient`` + ``ASGITransport``
  with ``get_zenapi_client`` overridden to the mocked client.
- Bearer tokens are minted with the same secret the app decodes with.
- Sample data lives in February 2024 (leap year, starts on a Thursday).
"""

from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from hrreports.core.security import create_access_token
from hrreports.main import app
from hrreports.services.zenapi_client import ZenApiClient, get_zenapi_client

UPSTREAM_BASE = "http://zenapi.test/api"

OPS_PROJECT = "Exozen - Ops"
TOWER_PROJECT = "Prestige Tower"


# ---------------------------------------------------------------------------
# Fake external API
# ---------------------------------------------------------------------------


def _kyc(employee_id: str, name: str, designation: str, project: str) -> dict:
    return {
        "personalDetails": {
            "employeeId": employee_id,
            "fullName": name,
            "designation": designation,
            "projectName": project,
        }
    }


def _punch(employee_id: str, day: str, status: str, t_in: str | None, t_out: str | None) -> dict:
    return {
        "_id": f"{employee_id}-{day}",
        "employeeId": employee_id,
        "projectName": None,
        "date": f"{day}T00:00:00.000Z",
        "status": status,
        "punchInTime": f"{day}T{t_in}.000Z" if t_in else None,
        "punchOutTime": f"{day}T{t_out}.000Z" if t_out else None,
    }


@dataclass
class FakeUpstream:
    kyc_forms: list[dict] = field(default_factory=lambda: [
        _kyc("EMP001", "Ravi Kumar", "Technician", OPS_PROJECT),
        _kyc("EMP002", "Anita Sharma", "Supervisor", TOWER_PROJECT),
        _kyc("EMP003", "Suresh Patel", "Technician", TOWER_PROJECT),
        {"personalDetails": {"fullName": "Draft form without id"}},
    ])
    leave_history: dict[str, list[dict]] = field(default_factory=lambda: {
        "EMP001": [],
        "EMP002": [
            {
                "leaveId": "L-1",
                "leaveType": "SL",
                "startDate": "2024-02-05T00:00:00.000Z",
                "endDate": "2024-02-06T00:00:00.000Z",
                "numberOfDays": 2,
                "status": "Approved",
                "reason": "Fever",
            },
            {
                "leaveId": "L-2",
                "leaveType": "EL",
                "startDate": "2024-02-12",
                "endDate": "2024-02-13",
                "numberOfDays": 2,
                "status": "Pending",
            },
        ],
        "EMP003": [
            {
                "leaveId": "L-3",
                "leaveType": "Comp Off",
                "startDate": "2024-02-20",
                "endDate": "2024-02-20",
                "numberOfDays": 1,
                "status": "Approved",
            },
        ],
    })
    balances: dict[str, dict] = field(default_factory=lambda: {
        "EMP001": {"balances": {"EL": 4, "CompOff": {"used": 1, "total": 2}}},
        "EMP002": {
            "totalAllocated": 24,
            "totalUsed": 2,
            "totalRemaining": 22,
            "totalPending": 2,
            "balances": {
                "EL": {"allocated": 12, "used": 0, "remaining": 12, "pending": 2},
                "SL": {"allocated": 12, "used": 2, "remaining": 10, "pending": 0},
            },
        },
        "EMP003": {"balances": {"Comp Off": 1}},
    })
    attendance: list[dict] = field(default_factory=lambda: [
        # Ops employee works a Sunday and the 2nd Saturday
        _punch("EMP001", "2024-02-04", "Present", "03:30:00", "12:30:00"),
        _punch("EMP001", "2024-02-10", "Present", "03:30:00", "12:00:00"),
        _punch("EMP002", "2024-02-01", "Present", "03:30:00", "11:30:00"),
        # Outside the report month
        _punch("EMP002", "2024-01-31", "Present", "03:30:00", "11:30:00"),
    ])
    fail_paths: set[str] = field(default_factory=set)
    calls: list[httpx.Request] = field(default_factory=list)

    def add_punch(
        self, employee_id: str, day: str, status: str, t_in: str | None, t_out: str | None
    ) -> None:
        self.attendance.append(_punch(employee_id, day, status, t_in, t_out))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path.removeprefix("/api")
        if path in self.fail_paths:
            return httpx.Response(500, json={"message": "boom"})

        if path == "/kyc":
            return httpx.Response(200, json={"kycForms": self.kyc_forms})
        if path == "/attendance/all":
            return httpx.Response(200, json={"attendance": self.attendance})
        if path.startswith("/leave/history/"):
            eid = path.rsplit("/", 1)[-1]
            return httpx.Response(
                200,
                json={"employeeId": eid, "leaveHistory": self.leave_history.get(eid, [])},
            )
        if path.startswith("/leave/balance/"):
            eid = path.rsplit("/", 1)[-1]
            return httpx.Response(200, json=self.balances.get(eid, {}))
        return httpx.Response(404, json={"message": "not found"})


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest_asyncio.fixture
async def zenapi(upstream: FakeUpstream) -> ZenApiClient:
    """ZenApiClient wired to the fake upstream."""
    client = ZenApiClient(
        UPSTREAM_BASE,
        transport=httpx.MockTransport(upstream.handler),
        max_concurrency=2,
    )
    yield client
    await client.aclose()


# ---------------------------------------------------------------------------
# HTTP client fixture
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(zenapi: ZenApiClient) -> AsyncClient:
    """HTTPX async client against the app, upstream replaced by the fake."""
    app.dependency_overrides[get_zenapi_client] = lambda: zenapi
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------


def _headers(**claims: str) -> dict:
    return {"Authorization": f"Bearer {create_access_token(claims)}"}


@pytest.fixture
def admin_headers() -> dict:
    return _headers(sub="u-admin", username="admin", role="Admin")


@pytest.fixture
def ops_manager_headers() -> dict:
    return _headers(sub="u-ops", username="ops", role="Manager", project_name=OPS_PROJECT)


@pytest.fixture
def employee_headers() -> dict:
    return _headers(sub="u-emp", username="emp", role="Employee")
