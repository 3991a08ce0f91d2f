"""Keyword search and structured filters over visibility-filtered snapshots.

Matching never re-ranks: results keep the input order, and a document's
``score`` is metadata supplied by the indexer.
"""
from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional, TypeVar, Union

from pydantic import ValidationError as PydanticValidationError

from ..domain_errors import validation_error_from_pydantic
from ..models import DateRange, Document, Notification, Task
from ..schemas import SearchFilters
from ..services.task_rules import now_utc
from .task_transitions import department_matches

logger = logging.getLogger(__name__)

Record = Union[Document, Task, Notification]
R = TypeVar("R", Document, Task, Notification)


def parse_filters(filters: SearchFilters | Mapping[str, Any] | None) -> SearchFilters:
    if filters is None:
        return SearchFilters()
    if isinstance(filters, SearchFilters):
        return filters
    try:
        return SearchFilters.model_validate(dict(filters))
    except PydanticValidationError as error:
        raise validation_error_from_pydantic(
            error,
            code="INVALID_FILTER",
            message="Invalid search filters",
        ) from error


def date_window(date_range: DateRange, today: date) -> Optional[tuple[date, date]]:
    """Inclusive window ending today; None means unbounded."""
    match date_range:
        case DateRange.ALL:
            return None
        case DateRange.TODAY:
            return today, today
        case DateRange.WEEK:
            return today - timedelta(days=7), today
        case DateRange.MONTH:
            return today - timedelta(days=30), today
        case DateRange.QUARTER:
            return today - timedelta(days=90), today


def record_date(record: Record) -> date:
    match record:
        case Document():
            return record.upload_date
        case Task():
            return record.created_date.date()
        case Notification():
            return record.timestamp.date()
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def searchable_fields(record: Record) -> tuple[str, ...]:
    match record:
        case Document():
            return (record.title, record.summary, *sorted(record.keywords))
        case Task():
            return (record.title, record.description)
        case Notification():
            return (record.title, record.message)
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def record_status(record: Record) -> str:
    match record:
        case Document() | Task():
            return record.status.value
        case Notification():
            return "read" if record.read else "unread"
    raise TypeError(f"Unsupported record type: {type(record).__name__}")


def matches_query(record: Record, query: str) -> bool:
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return any(needle in field.lower() for field in searchable_fields(record) if field)


def matches_filters(record: Record, filters: SearchFilters, today: date) -> bool:
    if not department_matches(filters.department, record.department):
        return False
    wanted_status = (filters.status or "all").strip().lower()
    if wanted_status != "all" and record_status(record) != wanted_status:
        return False
    window = date_window(filters.date_range, today)
    if window is not None:
        start, end = window
        if not start <= record_date(record) <= end:
            return False
    return True


def search_records(
    records: Iterable[R],
    query: str,
    filters: SearchFilters | Mapping[str, Any] | None = None,
    *,
    now: Optional[datetime] = None,
) -> list[R]:
    """Narrow an already visibility-filtered collection. Stable, never re-ranked."""
    parsed = parse_filters(filters)
    today = (now or now_utc()).date()
    return [
        record
        for record in records
        if matches_filters(record, parsed, today) and matches_query(record, query)
    ]


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass(frozen=True)
class SearchOutcome:
    generation: int
    query: str
    filters: SearchFilters
    results: tuple[Record, ...]
    superseded: bool = False


class SearchCoordinator:
    """Async search where only the most recently issued call may be applied.

    Every call resolves to exactly one ``SearchOutcome``. Issuing a new search
    cancels the previous token; a call whose token was cancelled resolves as
    ``superseded`` with no results.
    """

    def __init__(
        self,
        source: Callable[[], Sequence[Record]],
        *,
        latency_seconds: float = 0.0,
        clock: Callable[[], datetime] = now_utc,
    ) -> None:
        self._source = source
        self._latency = max(0.0, latency_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        self._generation = 0
        self._token: Optional[CancellationToken] = None

    def _issue(self) -> tuple[int, CancellationToken]:
        with self._lock:
            if self._token is not None:
                self._token.cancel()
            self._generation += 1
            self._token = CancellationToken()
            return self._generation, self._token

    async def search(
        self,
        query: str,
        filters: SearchFilters | Mapping[str, Any] | None = None,
    ) -> SearchOutcome:
        parsed = parse_filters(filters)
        generation, token = self._issue()

        await asyncio.sleep(self._latency)

        if token.cancelled:
            logger.debug("Search #%s superseded before completion", generation)
            return SearchOutcome(generation=generation, query=query, filters=parsed, results=(), superseded=True)

        # Source is read after the wait so visibility reflects the current role.
        results = tuple(search_records(self._source(), query, parsed, now=self._clock()))
        logger.debug("Search #%s %r matched %s records", generation, query, len(results))
        return SearchOutcome(generation=generation, query=query, filters=parsed, results=results)

    def cancel(self) -> None:
        """Supersede the pending search, if any; it resolves with no results."""
        with self._lock:
            if self._token is not None:
                self._token.cancel()

    def is_current(self, outcome: SearchOutcome) -> bool:
        with self._lock:
            return not outcome.superseded and outcome.generation == self._generation
