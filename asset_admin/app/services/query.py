"""asset_admin.app.services.query

The filtered list query pipeline shared by every list endpoint.

A list request goes through the same steps for each entity:

1. resolve the requester (unknown or disabled -> UnauthorizedError)
2. default the paging (page 1, size 5 when either value is missing or <= 0)
3. AND together the entity's filter clauses
4. count the filtered rows
5. apply exactly one ORDER BY taken from the entity's sort table
6. take the requested page and project only those rows

Entities describe themselves with a list of ``SortField`` entries (the sort
precedence table) and a default ordering; filter clauses are built by the
entity services with the small helpers below.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Sequence

from flask import current_app, has_app_context
from sqlalchemy import and_, case, or_, true

from asset_admin.app import db
from asset_admin.app.errors import USER_IS_DISABLED, USER_NOT_LOGIN, UnauthorizedError

DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 5


class SortOption(Enum):
    ASC = "Asc"
    DESC = "Desc"

    @classmethod
    def parse(cls, value) -> Optional["SortOption"]:
        if value is None or isinstance(value, cls):
            return value
        value = str(value).strip().lower()
        for option in cls:
            if option.value.lower() == value:
                return option
        return None


@dataclass
class SortField:
    """One row of a sort precedence table: request key -> column expression."""
    key: str
    column: Any


@dataclass
class PageRequest:
    page_number: Optional[int] = None
    page_size: Optional[int] = None

    def normalized(self) -> "PageRequest":
        if (not self.page_number or not self.page_size
                or self.page_number <= 0 or self.page_size <= 0):
            return PageRequest(DEFAULT_PAGE_NUMBER, default_page_size())
        return PageRequest(self.page_number, self.page_size)

    @property
    def offset(self) -> int:
        return (self.page_number - 1) * self.page_size


@dataclass
class Page:
    items: list
    current_page: int
    page_size: int
    total_item_count: int

    @property
    def total_pages(self) -> int:
        if not self.page_size:
            return 0
        return math.ceil(self.total_item_count / self.page_size)

    def metadata(self) -> dict:
        return {
            "currentPage": self.current_page,
            "pageSize": self.page_size,
            "totalItemCount": self.total_item_count,
            "totalPages": self.total_pages,
        }

    def metadata_json(self) -> str:
        return json.dumps(self.metadata())


@dataclass
class ListFilters:
    """Fields common to every list request; entities subclass to add their own."""
    search: Optional[str] = None
    states: list = field(default_factory=list)
    sorts: dict = field(default_factory=dict)
    page: PageRequest = field(default_factory=PageRequest)

    @property
    def search_term(self) -> Optional[str]:
        if self.search is None or not self.search.strip():
            return None
        return self.search.strip().lower()


def default_page_size() -> int:
    if has_app_context():
        return current_app.config.get("DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE)
    return DEFAULT_PAGE_SIZE


# --------------------------------------------------------------------------------------
# Request parsing
# --------------------------------------------------------------------------------------

def parse_int(args: Any, key: str) -> Optional[int]:
    raw = args.get(key)
    if raw in (None, ""):
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def parse_date(args: Any, key: str) -> Optional[date]:
    raw = args.get(key)
    if raw in (None, ""):
        return None
    try:
        return datetime.fromisoformat(str(raw)).date()
    except ValueError:
        return None


def parse_list(args: Any, key: str) -> list[str]:
    """Read ``key`` as repeated params (``?states=a&states=b``) or a comma-separated value."""
    if hasattr(args, "getlist"):
        raw_values = args.getlist(key)
    else:
        raw = args.get(key)
        raw_values = raw if isinstance(raw, (list, tuple)) else ([raw] if raw else [])
    values = []
    for raw in raw_values:
        values.extend(part.strip() for part in str(raw).split(",") if part.strip())
    return values


def parse_sorts(args: Any, sort_table: Sequence[SortField]) -> dict[str, SortOption]:
    sorts = {}
    for sort_field in sort_table:
        option = SortOption.parse(args.get(sort_field.key))
        if option is not None:
            sorts[sort_field.key] = option
    return sorts


def parse_page(args: Any) -> PageRequest:
    return PageRequest(parse_int(args, "pageNumber"), parse_int(args, "pageSize"))


def match_enum_values(enum_cls, raw_values: Iterable[str]) -> list[str]:
    """Case-insensitive match of raw strings onto enum values; unknown strings are dropped."""
    lookup = {member.value.lower(): member.value for member in enum_cls}
    return [lookup[v.lower()] for v in raw_values if v.lower() in lookup]


# --------------------------------------------------------------------------------------
# Clause helpers
# --------------------------------------------------------------------------------------

def search_clause(term: Optional[str], columns: Sequence[Any]):
    """Case-insensitive substring match on any of ``columns``; None when there is no term."""
    if not term:
        return None
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return or_(*[column.ilike(pattern, escape="\\") for column in columns])


def enum_order(column: Any, enum_cls):
    """Sort key for a column holding enum values: the member's position in ``enum_cls``."""
    return case({member.value: position for position, member in enumerate(enum_cls)}, value=column)


def in_clause(column: Any, values: Sequence[Any]):
    if not values:
        return None
    return column.in_(list(values))


def same_day_clause(column: Any, day: Optional[date]):
    """Equality on the calendar day of a DateTime column, time of day ignored."""
    if day is None:
        return None
    start = datetime.combine(day, time.min)
    return and_(column >= start, column < start + timedelta(days=1))


def build_predicate(clauses: Iterable[Any]):
    """AND every non-None clause onto an always-true predicate."""
    predicate = true()
    for clause in clauses:
        if clause is not None:
            predicate = and_(predicate, clause)
    return predicate


def resolve_order(sorts: dict, sort_table: Sequence[SortField], default: Any):
    """First entry of the precedence table with a direction wins; otherwise ``default``."""
    for sort_field in sort_table:
        option = sorts.get(sort_field.key)
        if option is SortOption.ASC:
            return sort_field.column.asc()
        if option is SortOption.DESC:
            return sort_field.column.desc()
    return default


# --------------------------------------------------------------------------------------
# Requester resolution and execution
# --------------------------------------------------------------------------------------

def get_or_none(model, ident):
    if ident is None:
        return None
    return db.session.get(model, ident)


def resolve_requester(requester_id: Optional[int]):
    from asset_admin.app.models import User

    user = get_or_none(User, requester_id)
    if user is None:
        raise UnauthorizedError(USER_NOT_LOGIN)
    if user.is_disabled:
        raise UnauthorizedError(USER_IS_DISABLED)
    return user


def run_list_query(
    query,
    clauses: Iterable[Any],
    order_by: Any,
    page: PageRequest,
    project: Callable[[Any], dict],
) -> Page:
    """Filter, count, order, paginate and project ``query``."""
    page = page.normalized()
    filtered = query.filter(build_predicate(clauses))

    total = filtered.order_by(None).count()
    rows = (
        filtered.order_by(order_by)
        .offset(page.offset)
        .limit(page.page_size)
        .all()
    )
    return Page(
        items=[project(row) for row in rows],
        current_page=page.page_number,
        page_size=page.page_size,
        total_item_count=total,
    )


def iso(value) -> Optional[str]:
    return value.isoformat() if value is not None else None
