"""
Query builder for content listings.

A QuerySpec describes what an entity can be filtered and sorted on;
``build_plan`` turns a request (filters, sort, page/limit) into a QueryPlan
without touching the store. The same plan runs against the ORM
(``apply_plan``) or an already-fetched list of rows (``evaluate_rows``).
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from functools import reduce
from operator import or_
from typing import Any, Iterable

from django.db import connections
from django.db.models import F, Q, QuerySet

EQUALS = "equals"
SEARCH = "search"
HAS_TAG = "has_tag"

ASC = "asc"
DESC = "desc"

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100


@dataclass(frozen=True)
class QuerySpec:
    """Filterable and sortable fields of one entity collection."""

    equals: dict[str, str] = field(default_factory=dict)
    search_fields: tuple[str, ...] = ()
    tag_field: str | None = None
    sort_fields: dict[str, str] = field(default_factory=dict)
    default_sort: str = "createdAt"
    default_order: str = DESC
    # Per-sortBy default order when sortOrder is absent or invalid
    sort_defaults: dict[str, str] = field(default_factory=dict)
    # Filter values meaning "no filter", e.g. status=all
    wildcards: frozenset[str] = frozenset({"all"})


@dataclass(frozen=True)
class Predicate:
    op: str
    fields: tuple[str, ...]
    value: Any


@dataclass(frozen=True)
class QueryPlan:
    predicates: tuple[Predicate, ...]
    order_field: str
    descending: bool
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _as_int(value: Any, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


def build_plan(
    spec: QuerySpec,
    filters: Mapping[str, Any] | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    page: Any = DEFAULT_PAGE,
    limit: Any = DEFAULT_LIMIT,
) -> QueryPlan:
    """Build a query plan. Unknown filters are ignored and bad sort/paging fall back."""
    filters = filters or {}
    predicates: list[Predicate] = []

    for name, model_field in spec.equals.items():
        value = filters.get(name)
        if value is None or (isinstance(value, str) and (not value or value in spec.wildcards)):
            continue
        predicates.append(Predicate(EQUALS, (model_field,), value))

    tag = filters.get("tag")
    if spec.tag_field and isinstance(tag, str) and tag.strip():
        predicates.append(Predicate(HAS_TAG, (spec.tag_field,), tag.strip()))

    search = filters.get("search")
    if spec.search_fields and isinstance(search, str) and search.strip():
        predicates.append(Predicate(SEARCH, spec.search_fields, search.strip()))

    if sort_by in spec.sort_fields:
        order_field = spec.sort_fields[sort_by]
    else:
        order_field = spec.sort_fields[spec.default_sort]
        sort_order = spec.default_order

    order = (sort_order or "").lower()
    if order not in (ASC, DESC):
        order = spec.sort_defaults.get(sort_by, spec.default_order)

    page = max(_as_int(page, DEFAULT_PAGE), 1)
    limit = min(max(_as_int(limit, DEFAULT_LIMIT), 1), MAX_LIMIT)

    return QueryPlan(
        predicates=tuple(predicates),
        order_field=order_field,
        descending=order == DESC,
        page=page,
        limit=limit,
    )


# ==================== STORE ====================


def _predicate_to_q(queryset: QuerySet, predicate: Predicate) -> Q:
    if predicate.op == EQUALS:
        return Q(**{predicate.fields[0]: predicate.value})

    if predicate.op == SEARCH:
        return reduce(
            or_,
            (Q(**{f"{name}__icontains": predicate.value}) for name in predicate.fields),
        )

    tag_field = predicate.fields[0]
    if connections[queryset.db].features.supports_json_field_contains:
        return Q(**{f"{tag_field}__contains": [predicate.value]})

    # No JSON containment on this backend: resolve exact matches by primary key
    matching = [
        pk
        for pk, tags in queryset.model.objects.using(queryset.db).values_list("pk", tag_field)
        if isinstance(tags, list) and predicate.value in tags
    ]
    return Q(pk__in=matching)


def apply_plan(queryset: QuerySet, plan: QueryPlan) -> tuple[list[Any], int]:
    """Run a plan against a queryset; returns (rows in window, total matching)."""
    for predicate in plan.predicates:
        queryset = queryset.filter(_predicate_to_q(queryset, predicate))

    total = queryset.count()

    order = F(plan.order_field)
    order = order.desc(nulls_last=True) if plan.descending else order.asc(nulls_last=True)
    rows = list(queryset.order_by(order, "pk")[plan.offset : plan.offset + plan.limit])
    return rows, total


# ==================== IN MEMORY ====================


def _value(row: Any, name: str) -> Any:
    if isinstance(row, Mapping):
        return row.get(name)
    return getattr(row, name, None)


def _pk(row: Any) -> Any:
    pk = _value(row, "pk")
    return pk if pk is not None else _value(row, "id")


def matches(row: Any, plan: QueryPlan) -> bool:
    """True if ``row`` satisfies every predicate of ``plan``."""
    for predicate in plan.predicates:
        if predicate.op == EQUALS:
            if _value(row, predicate.fields[0]) != predicate.value:
                return False
        elif predicate.op == SEARCH:
            needle = predicate.value.casefold()
            if not any(
                needle in str(_value(row, name)).casefold()
                for name in predicate.fields
                if _value(row, name) is not None
            ):
                return False
        elif predicate.op == HAS_TAG:
            tags = _value(row, predicate.fields[0])
            if not isinstance(tags, (list, tuple)) or predicate.value not in tags:
                return False
    return True


def evaluate_rows(
    rows: Iterable[Any], plan: QueryPlan, paginate: bool = True
) -> tuple[list[Any], int]:
    """Filter, sort and window in-memory rows exactly like ``apply_plan``."""
    selected = [row for row in rows if matches(row, plan)]
    total = len(selected)

    # Ascending pk first; the stable sort below keeps it as the tie-break
    selected.sort(key=_pk)
    present = [row for row in selected if _value(row, plan.order_field) is not None]
    missing = [row for row in selected if _value(row, plan.order_field) is None]
    present.sort(key=lambda row: _value(row, plan.order_field), reverse=plan.descending)
    ordered = present + missing

    if paginate:
        ordered = ordered[plan.offset : plan.offset + plan.limit]
    return ordered, total
