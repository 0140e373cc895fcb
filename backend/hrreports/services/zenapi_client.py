"""
Client for the external workforce API (KYC roster, attendance, leave).

One ``httpx.AsyncClient`` is shared for the application lifetime; the caller's
bearer token is forwarded on every request. Per-employee lookups are fanned out
by ``fetch_all`` under a semaphore so a large roster never opens more than
``ZENAPI_MAX_CONCURRENCY`` requests at once.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

import httpx
from fastapi import Request
from pydantic import ValidationError

from hrreports.core.config import settings
from hrreports.schemas.employee import (
    Employee,
    LeaveBalanceSheet,
    LeaveInterval,
    PunchRecord,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UpstreamError(Exception):
    """The external API failed or returned data we cannot use."""


class ZenApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        *,
        timeout: float | None = None,
        retries: int | None = None,
        max_concurrency: int | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.max_concurrency = max_concurrency or settings.ZENAPI_MAX_CONCURRENCY
        if transport is None:
            transport = httpx.AsyncHTTPTransport(
                retries=settings.ZENAPI_RETRIES if retries is None else retries
            )
        self._client = httpx.AsyncClient(
            base_url=(base_url or settings.ZENAPI_BASE_URL).rstrip("/"),
            timeout=timeout or settings.ZENAPI_TIMEOUT_SEC,
            transport=transport,
            follow_redirects=True,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ZenApiClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    # --- low level ---

    async def _get_json(self, path: str, token: str | None = None) -> Any:
        headers = {"Authorization": f"Bearer {token}"} if token else None
        try:
            resp = await self._client.get(path, headers=headers)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Upstream %s returned %d", path, exc.response.status_code
            )
            raise UpstreamError(
                f"{path}: HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Upstream request %s failed: %s", path, exc)
            raise UpstreamError(f"{path}: {exc}") from exc
        except ValueError as exc:
            logger.warning("Upstream %s returned invalid JSON: %s", path, exc)
            raise UpstreamError(f"{path}: invalid JSON") from exc

    @staticmethod
    def _parse(model: type[T], items: Iterable[Any], source: str) -> list[T]:
        try:
            return [model.model_validate(item) for item in items]
        except ValidationError as exc:
            logger.warning("Malformed record in %s: %s", source, exc)
            raise UpstreamError(f"{source}: malformed record") from exc

    # --- endpoints ---

    async def get_roster(self, token: str | None = None) -> list[Employee]:
        """Employees from KYC forms; forms without an employee id are skipped."""
        data = await self._get_json("/kyc", token)
        forms = (data or {}).get("kycForms") or []
        details = [
            form["personalDetails"]
            for form in forms
            if (form.get("personalDetails") or {}).get("employeeId")
        ]
        return self._parse(Employee, details, "/kyc")

    async def get_leave_history(
        self, employee_id: str, token: str | None = None
    ) -> list[LeaveInterval]:
        path = f"/leave/history/{employee_id}"
        data = await self._get_json(path, token)
        items = (data or {}).get("leaveHistory") or []
        leaves = self._parse(LeaveInterval, items, path)
        for leave in leaves:
            if leave.employee_id is None:
                leave.employee_id = employee_id
        return leaves

    async def get_leave_balance(
        self, employee_id: str, token: str | None = None
    ) -> LeaveBalanceSheet:
        path = f"/leave/balance/{employee_id}"
        data = await self._get_json(path, token) or {}
        return self._parse(LeaveBalanceSheet, [data], path)[0]

    async def get_attendance(self, token: str | None = None) -> list[PunchRecord]:
        data = await self._get_json("/attendance/all", token)
        items = (data or {}).get("attendance") or []
        return self._parse(PunchRecord, items, "/attendance/all")

    # --- batch ---

    async def fetch_all(
        self,
        employee_ids: Iterable[str],
        fetch: Callable[[str], Awaitable[T]],
    ) -> dict[str, T]:
        """
        Run ``fetch(employee_id)`` for every id with bounded concurrency.

        Fails as a whole if any single fetch fails.
        """
        ids = list(dict.fromkeys(employee_ids))
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def _one(employee_id: str) -> T:
            async with semaphore:
                return await fetch(employee_id)

        results = await asyncio.gather(
            *[_one(eid) for eid in ids],
            return_exceptions=True,
        )

        failed = [eid for eid, res in zip(ids, results) if isinstance(res, BaseException)]
        if failed:
            for eid, res in zip(ids, results):
                if isinstance(res, BaseException):
                    logger.warning("Batch fetch failed for employee=%s: %s", eid, res)
            raise UpstreamError(
                f"fetch failed for {len(failed)} of {len(ids)} employees: "
                f"{', '.join(failed[:10])}"
            )

        logger.debug("Batch fetch complete: %d employees", len(ids))
        return dict(zip(ids, results))


def get_zenapi_client(request: Request) -> ZenApiClient:
    """FastAPI dependency: the client opened in the application lifespan."""
    return request.app.state.zenapi
