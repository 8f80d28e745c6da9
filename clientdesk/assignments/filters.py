"""Search and filter pipeline over the in-memory assignment list.

Every function here is pure: no store access, no clock reads unless a ``today``
is passed in, and records come back in their input order.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Sequence, Union

from clientdesk.assignments.models import AGENTS, ClientAssignment


class AnyValue:
    """Do not filter on this dimension."""

    _instance: "AnyValue | None" = None

    def __new__(cls) -> "AnyValue":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ANY"


ANY = AnyValue()


@dataclass(frozen=True)
class Exactly:
    """Keep records whose field equals ``value`` case-insensitively."""

    value: str

    def matches(self, candidate: str) -> bool:
        return candidate.lower() == self.value.strip().lower()


@dataclass(frozen=True)
class CurrentMonth:
    def matches(self, record_date: date, today: date) -> bool:
        return (record_date.year, record_date.month) == (today.year, today.month)


@dataclass(frozen=True)
class PreviousMonth:
    def matches(self, record_date: date, today: date) -> bool:
        if today.month == 1:
            previous = (today.year - 1, 12)
        else:
            previous = (today.year, today.month - 1)
        return (record_date.year, record_date.month) == previous


@dataclass(frozen=True)
class CalendarMonth:
    """A month of any year; ``month`` is 1..12."""

    month: int

    def __post_init__(self) -> None:
        if not 1 <= self.month <= 12:
            raise ValueError(f"Month out of range: {self.month}")

    def matches(self, record_date: date, today: date) -> bool:
        return record_date.month == self.month


ValueFilter = Union[AnyValue, Exactly]
MonthFilter = Union[AnyValue, CurrentMonth, PreviousMonth, CalendarMonth]

MONTH_CODES: tuple[str, ...] = (
    "jan",
    "feb",
    "mar",
    "apr",
    "may",
    "jun",
    "jul",
    "aug",
    "sep",
    "oct",
    "nov",
    "dec",
)
ALL_LOCATIONS = "all-locations"
ALL_APPLICATIONS = "all-applications"
ALL_AGENTS = "all-agents"
ALL_MONTHS = "all-months"
ROWS_PER_PAGE_OPTIONS: tuple[int, ...] = (10, 25, 50, 100)

_SEARCH_FIELDS = ("name", "location", "work", "application", "assigned_agent")


def value_filter_from_wire(raw: str | None, sentinel: str) -> ValueFilter:
    """Map a select-box value onto ``ANY`` or ``Exactly``."""
    value = (raw or "").strip()
    if not value or value == sentinel:
        return ANY
    return Exactly(value)


def month_filter_from_wire(raw: str | None) -> MonthFilter:
    """Map ``all-months``/``current``/``previous``/``jan``..``dec``."""
    value = (raw or "").strip().lower()
    if not value or value == ALL_MONTHS:
        return ANY
    if value == "current":
        return CurrentMonth()
    if value == "previous":
        return PreviousMonth()
    if value in MONTH_CODES:
        return CalendarMonth(MONTH_CODES.index(value) + 1)
    raise ValueError(f"Unknown month filter: {raw}")


@dataclass(frozen=True)
class FilterCriteria:
    search: str = ""
    location: ValueFilter = ANY
    application: ValueFilter = ANY
    agent: ValueFilter = ANY
    month: MonthFilter = ANY

    @classmethod
    def from_query(
        cls,
        *,
        search: str | None = "",
        location: str | None = ALL_LOCATIONS,
        application: str | None = ALL_APPLICATIONS,
        agent: str | None = ALL_AGENTS,
        month: str | None = ALL_MONTHS,
    ) -> "FilterCriteria":
        """Build criteria from the dashboard's wire values."""
        return cls(
            search=(search or "").strip(),
            location=value_filter_from_wire(location, ALL_LOCATIONS),
            application=value_filter_from_wire(application, ALL_APPLICATIONS),
            agent=value_filter_from_wire(agent, ALL_AGENTS),
            month=month_filter_from_wire(month),
        )

    @property
    def is_unfiltered(self) -> bool:
        return not self.search and all(
            option is ANY
            for option in (self.location, self.application, self.agent, self.month)
        )


def _parse_record_date(raw: str) -> date | None:
    try:
        return date.fromisoformat((raw or "").strip()[:10])
    except ValueError:
        return None


def _matches_search(record: ClientAssignment, query: str) -> bool:
    return any(query in str(getattr(record, name)).lower() for name in _SEARCH_FIELDS)


def _matches_month(record: ClientAssignment, month: MonthFilter, today: date) -> bool:
    if isinstance(month, AnyValue):
        return True
    record_date = _parse_record_date(record.date)
    if record_date is None:
        return False
    return month.matches(record_date, today)


def apply_filters(
    records: Iterable[ClientAssignment],
    criteria: FilterCriteria,
    *,
    today: date | None = None,
) -> list[ClientAssignment]:
    """Return the records matching every active filter, in input order."""
    current_day = today or date.today()
    query = criteria.search.lower()
    result: list[ClientAssignment] = []
    for record in records:
        if query and not _matches_search(record, query):
            continue
        if isinstance(criteria.location, Exactly) and not criteria.location.matches(
            record.location
        ):
            continue
        if isinstance(
            criteria.application, Exactly
        ) and not criteria.application.matches(record.application):
            continue
        if isinstance(criteria.agent, Exactly) and not criteria.agent.matches(
            record.assigned_agent
        ):
            continue
        if not _matches_month(record, criteria.month, current_day):
            continue
        result.append(record)
    return result


def paginate(
    records: Sequence[ClientAssignment], rows_per_page: int
) -> list[ClientAssignment]:
    """First page of ``records``; only the dashboard's page sizes are accepted."""
    if rows_per_page not in ROWS_PER_PAGE_OPTIONS:
        raise ValueError(f"Unsupported rows per page: {rows_per_page}")
    return list(records[:rows_per_page])


def _unique_lowercase(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(value.lower() for value in values))


def unique_locations(records: Iterable[ClientAssignment]) -> list[str]:
    return _unique_lowercase(record.location for record in records)


def unique_applications(records: Iterable[ClientAssignment]) -> list[str]:
    return _unique_lowercase(record.application for record in records)


def agent_workloads(records: Iterable[ClientAssignment]) -> dict[str, int]:
    """Number of records per known agent, keyed by display name."""
    counts = {agent.lower(): 0 for agent in AGENTS}
    for record in records:
        key = record.assigned_agent.lower()
        if key in counts:
            counts[key] += 1
    return {agent: counts[agent.lower()] for agent in AGENTS}


def top_agent(records: Iterable[ClientAssignment]) -> str:
    """Agent with the most records, or ``"-"`` when no agent has any."""
    workloads = agent_workloads(records)
    best = max(AGENTS, key=lambda agent: workloads[agent])
    return best if workloads[best] > 0 else "-"
