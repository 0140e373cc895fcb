"""
Roster search and filtering.

Free-text search matches employee ids and names by substring first, then by
thefuzz ``token_sort_ratio`` so misspelt or reordered names still hit.
"""

import logging
import re
from collections.abc import Iterable, Sequence

from thefuzz import fuzz

from hrreports.core.config import settings
from hrreports.schemas.employee import Employee

logger = logging.getLogger(__name__)

_ws_re = re.compile(r"\s+")


def _clean(raw: str | None) -> str:
    """Strip, collapse whitespace and lower-case."""
    return _ws_re.sub(" ", (raw or "").strip()).lower()


def name_score(query: str, employee: Employee) -> int:
    """0–100 similarity between a search query and an employee."""
    q = _clean(query)
    if not q:
        return 100
    if q in _clean(employee.employee_id) or q in _clean(employee.full_name):
        return 100
    return fuzz.token_sort_ratio(q, _clean(employee.full_name))


def filter_employees(
    employees: Sequence[Employee],
    *,
    search: str | None = None,
    project: str | None = None,
    designation: str | None = None,
    employee_ids: Iterable[str] | None = None,
    threshold: int | None = None,
) -> list[Employee]:
    """
    Apply the report filters. Project and designation match exactly; search
    results are ordered by score, best first, with roster order breaking ties.
    """
    threshold = settings.FUZZY_MATCH_THRESHOLD if threshold is None else threshold
    wanted_ids = set(employee_ids) if employee_ids else None

    selected = [
        emp for emp in employees
        if (project is None or emp.project_name == project)
        and (designation is None or emp.designation == designation)
        and (wanted_ids is None or emp.employee_id in wanted_ids)
    ]

    if not search or not search.strip():
        return selected

    scored = [(name_score(search, emp), idx, emp) for idx, emp in enumerate(selected)]
    hits = [item for item in scored if item[0] >= threshold]
    hits.sort(key=lambda item: (-item[0], item[1]))

    logger.debug(
        "Search '%s': %d of %d employees matched (threshold=%d)",
        search, len(hits), len(selected), threshold,
    )
    return [emp for _, _, emp in hits]
