"""
List query building shared by the collection endpoints.

Each resource declares a ``ListSpec``: the query parameters it recognises,
which column each maps to and how the raw string is turned into a predicate,
the columns free-text search runs over, and the sortable fields. Unknown
query parameters are ignored; recognised ones that cannot be parsed raise
``ValidationError`` (surfaced as 400) instead of falling back to defaults.
"""
from dataclasses import dataclass, field
from enum import Enum
from math import ceil
from typing import Any, List, Mapping, Optional, Sequence, Type

from sqlalchemy import String, cast
from sqlmodel import Session, select, func, or_

from mmc_admin.core.exceptions import ValidationError

DEFAULT_PAGE = 1


class FilterKind(str, Enum):
    EQUALS = "equals"
    BOOLEAN = "boolean"
    INT_EQUALS = "int_equals"
    INT_AT_LEAST = "int_at_least"


@dataclass(frozen=True)
class FilterField:
    """One recognised query parameter and the predicate it builds."""
    param: str
    column: Any
    kind: FilterKind = FilterKind.EQUALS
    # Restricts EQUALS filters to the members of an enumeration
    enum: Optional[Type[Enum]] = None


@dataclass(frozen=True)
class ListSpec:
    model: Any
    filters: Sequence[FilterField] = ()
    search_columns: Sequence[Any] = ()
    sort_fields: Mapping[str, Any] = field(default_factory=dict)
    default_sort: str = "createdAt"
    default_limit: int = 20
    # Predicates appended after caller filters; callers cannot override them
    forced: Sequence[Any] = ()


@dataclass
class ListQuery:
    page: int
    limit: int
    conditions: List[Any]
    order_by: List[Any]

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass
class Page:
    items: List[Any]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return ceil(self.total / self.limit) if self.limit > 0 else 0


def parse_int(value: Optional[str], param: str, default: Optional[int] = None,
              minimum: Optional[int] = None) -> Optional[int]:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"'{param}' must be an integer", fields=[param])

    if minimum is not None and number < minimum:
        raise ValidationError(f"'{param}' must be at least {minimum}", fields=[param])
    return number


def parse_bool(value: str, param: str) -> bool:
    if value == "true":
        return True
    if value == "false":
        return False
    raise ValidationError(f"'{param}' must be 'true' or 'false'", fields=[param])


def parse_pagination(params: Mapping[str, str], default_limit: int) -> tuple[int, int]:
    """Return ``(page, limit)`` from raw query parameters."""
    page = parse_int(params.get("page"), "page", default=DEFAULT_PAGE, minimum=1)
    limit = parse_int(params.get("limit"), "limit", default=default_limit, minimum=1)
    return page, limit


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def build_predicate(filter_field: FilterField, raw: str):
    column = filter_field.column
    kind = filter_field.kind

    if kind == FilterKind.BOOLEAN:
        return column == parse_bool(raw, filter_field.param)
    if kind == FilterKind.INT_EQUALS:
        return column == parse_int(raw, filter_field.param)
    if kind == FilterKind.INT_AT_LEAST:
        return column >= parse_int(raw, filter_field.param)

    if filter_field.enum is not None:
        try:
            return column == filter_field.enum(raw)
        except ValueError:
            allowed = ", ".join(member.value for member in filter_field.enum)
            raise ValidationError(
                f"'{filter_field.param}' must be one of: {allowed}", fields=[filter_field.param]
            )
    return column == raw


def search_condition(columns: Sequence[Any], term: str):
    pattern = f"%{escape_like(term)}%"
    clauses = []
    for column in columns:
        # Non-text columns (JSON tag lists) are matched on their serialized form
        if not isinstance(getattr(column, "type", None), String):
            column = cast(column, String)
        clauses.append(column.ilike(pattern, escape="\\"))
    return or_(*clauses)


def build_list_query(spec: ListSpec, params: Mapping[str, str],
                     default_limit: Optional[int] = None) -> ListQuery:
    """Translate raw query parameters into conditions, ordering and a page window."""
    page, limit = parse_pagination(params, default_limit or spec.default_limit)

    conditions: List[Any] = []
    for filter_field in spec.filters:
        raw = params.get(filter_field.param)
        if raw is None or raw == "":
            continue
        conditions.append(build_predicate(filter_field, raw))

    search = (params.get("search") or "").strip()
    if search and spec.search_columns:
        conditions.append(search_condition(spec.search_columns, search))

    conditions.extend(spec.forced)

    sort_by = params.get("sortBy") or spec.default_sort
    sort_column = spec.sort_fields.get(sort_by)
    if sort_column is None:
        allowed = ", ".join(sorted(spec.sort_fields))
        raise ValidationError(f"'sortBy' must be one of: {allowed}", fields=["sortBy"])

    sort_order = params.get("sortOrder") or "desc"
    if sort_order not in ("asc", "desc"):
        raise ValidationError("'sortOrder' must be 'asc' or 'desc'", fields=["sortOrder"])

    order_by = [sort_column.desc() if sort_order == "desc" else sort_column.asc()]
    # Stable paging across equal sort keys
    order_by.append(spec.model.id.desc() if sort_order == "desc" else spec.model.id.asc())

    return ListQuery(page=page, limit=limit, conditions=conditions, order_by=order_by)


def run_list_query(db: Session, spec: ListSpec, list_query: ListQuery) -> Page:
    """Execute a built list query, returning one page plus the total match count."""
    model = spec.model
    query = select(model)
    count_query = select(func.count(model.id))

    if list_query.conditions:
        query = query.where(*list_query.conditions)
        count_query = count_query.where(*list_query.conditions)

    total = db.exec(count_query).one()
    query = query.order_by(*list_query.order_by).offset(list_query.offset).limit(list_query.limit)
    items = db.exec(query).all()

    return Page(items=list(items), total=total, page=list_query.page, limit=list_query.limit)


def list_records(db: Session, spec: ListSpec, params: Mapping[str, str],
                 default_limit: Optional[int] = None) -> Page:
    return run_list_query(db, spec, build_list_query(spec, params, default_limit))
