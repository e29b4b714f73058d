"""
Little Application: Advanced Results (Query Builder & Paginator)
===================================================================

What:  The list pipeline shared by every collection endpoint: filter,
       select, sort, paginate, and count.
How:   parse_list_query() turns the raw query string into a ListQuery;
       QueryBuilder compiles it into a SELECT for one model (with one
       eagerly loaded relation); advanced_results() executes it and wraps
       the rows in a PageResult.
Who:   The list_* methods of the post, course, review and user services.

Processing Order:
    1. Strip reserved params (select, sort, page, limit); the rest are filters
    2. Turn each filter into a typed FilterClause (eq/gt/gte/lt/lte/in)
    3. SELECT from the model with the filters, eager-loading the relation
    4. `select=a,b` restricts columns (id always included)
    5. `sort=a,-b` orders; default is -created_at (newest first); the
       primary key breaks ties
    6. OFFSET (page-1)*limit LIMIT limit
    7. COUNT the matches (filter-scoped unless count_filtered=False)

Pagination Invariants:
    start_index = (page - 1) * limit
    end_index   = page * limit
    next present iff end_index < total
    prev present iff start_index > 0
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, Field
from sqlalchemy import asc, desc, func, inspect as sa_inspect, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import load_only, selectinload
from sqlalchemy.sql import Select

from littleapp.exceptions import ValidationError
from littleapp.query.filters import (
    FilterClause,
    compile_clauses,
    parse_filter_params,
    public_columns,
    resolve_column,
)
from littleapp.query.operators import DEFAULT_SORT, RESERVED_PARAMS
from littleapp.schemas.common import PageLink, PageResult

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# OFFSET and LIMIT are bound as signed 64-bit integers; OFFSET + LIMIT must fit too
MAX_ROW_BOUND = 2 ** 62


class SortKey(BaseModel):
    field: str = Field(min_length=1)
    descending: bool = False


class ListQuery(BaseModel):
    """A parsed list request: filters, projection, ordering, and page window."""

    filters: List[FilterClause] = Field(default_factory=list)
    select: Optional[List[str]] = None
    sort: List[SortKey] = Field(default_factory=lambda: parse_sort(DEFAULT_SORT))
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=1, ge=1)

    @property
    def start_index(self) -> int:
        return (self.page - 1) * self.limit

    @property
    def end_index(self) -> int:
        return self.page * self.limit


@dataclass(frozen=True)
class Populate:
    """
    The related collection joined into every record.

    relation: relationship attribute name on the model (e.g. "courses")
    fields:   columns to load on the related records (None = all)
    """
    relation: str
    fields: Optional[Tuple[str, ...]] = None


# ══════════════════════════════════════════════════════════════════════════
# Parsing the query string
# ══════════════════════════════════════════════════════════════════════════

def parse_positive_int(raw: Optional[str], default: int) -> int:
    """
    Leading-integer parse with a fallback.

    '3' → 3, '3abc' → 3, 'abc' → default, '0' / '-2' → default, None → default
    """
    if raw is None:
        return default
    match = _LEADING_INT.match(str(raw))
    if match is None:
        return default
    value = int(match.group(1))
    return value if value >= 1 else default


def parse_field_list(raw: Optional[str]) -> Optional[List[str]]:
    """'name, description,,name' → ['name', 'description']; blank → None."""
    if raw is None:
        return None
    fields: List[str] = []
    for part in raw.split(","):
        name = part.strip()
        if name and name not in fields:
            fields.append(name)
    return fields or None


def parse_sort(raw: Optional[str]) -> List[SortKey]:
    """'-average_cost,name' → [average_cost DESC, name ASC]."""
    keys = []
    for name in parse_field_list(raw) or []:
        descending = name.startswith("-")
        field = name.lstrip("-+").strip()
        if not field:
            raise ValidationError(message=f"Invalid sort field '{name}'", field="sort")
        keys.append(SortKey(field=field, descending=descending))
    return keys


def parse_list_query(
    items: Iterable[Tuple[str, str]],
    default_limit: int = 1,
    max_limit: Optional[int] = None,
) -> ListQuery:
    """
    Build a ListQuery from raw query string pairs.

    Reserved params use their last occurrence. `limit` is capped at
    max_limit when one is given.
    """
    items = list(items)
    reserved: Dict[str, str] = {key: value for key, value in items if key in RESERVED_PARAMS}

    limit = parse_positive_int(reserved.get("limit"), default_limit)
    if max_limit is not None:
        limit = min(limit, max_limit)

    sort = parse_sort(reserved.get("sort")) or parse_sort(DEFAULT_SORT)

    return ListQuery(
        filters=parse_filter_params(items),
        select=parse_field_list(reserved.get("select")),
        sort=sort,
        page=parse_positive_int(reserved.get("page"), 1),
        limit=limit,
    )


def build_pagination(page: int, limit: int, total: int) -> Dict[str, PageLink]:
    """next iff page*limit < total; prev iff (page-1)*limit > 0."""
    pagination: Dict[str, PageLink] = {}
    start_index = (page - 1) * limit
    end_index = page * limit
    if end_index < total:
        pagination["next"] = PageLink(page=page + 1, limit=limit)
    if start_index > 0:
        pagination["prev"] = PageLink(page=page - 1, limit=limit)
    return pagination


# ══════════════════════════════════════════════════════════════════════════
# Building the statement
# ══════════════════════════════════════════════════════════════════════════

class QueryBuilder:
    """
    Builds the filtered, projected, sorted and paginated SELECT for one model.
    """

    def __init__(self, model, query: ListQuery, populate: Optional[Populate] = None):
        self.model = model
        self.query = query
        self.populate = populate
        self._mapper = sa_inspect(model)
        if populate is not None and populate.relation not in self._mapper.relationships:
            raise ValueError(f"{model.__name__} has no relationship '{populate.relation}'")
        self.conditions = compile_clauses(model, query.filters)
        self.columns = self._selected_columns()

    @property
    def includes_relation(self) -> bool:
        """The relation is joined when there is no `select`, or `select` names it."""
        if self.populate is None:
            return False
        return self.query.select is None or self.populate.relation in self.query.select

    def _selected_columns(self) -> Optional[List[str]]:
        if self.query.select is None:
            return None
        columns = []
        for name in self.query.select:
            if self.populate is not None and name == self.populate.relation:
                continue
            resolve_column(self.model, name)
            columns.append(name)
        return columns

    def _pk_names(self) -> List[str]:
        return [column.key for column in self._mapper.primary_key]

    def document_fields(self) -> Optional[List[str]]:
        """Column names each serialized record exposes (None = every column)."""
        if self.columns is None:
            return None
        return self._pk_names() + [c for c in self.columns if c not in self._pk_names()]

    def build(self) -> Select:
        statement = select(self.model)
        if self.conditions:
            statement = statement.where(*self.conditions)

        fields = self.document_fields()
        if fields is not None:
            statement = statement.options(
                load_only(*[getattr(self.model, name) for name in fields])
            )

        if self.includes_relation:
            relationship = self._mapper.relationships[self.populate.relation]
            loader = selectinload(getattr(self.model, self.populate.relation))
            if self.populate.fields:
                target = relationship.mapper.class_
                loader = loader.load_only(*[getattr(target, name) for name in self.populate.fields])
            statement = statement.options(loader)

        for key in self.query.sort:
            column = resolve_column(self.model, key.field)
            statement = statement.order_by(desc(column) if key.descending else asc(column))
        # Primary key last so equal sort values page deterministically
        for name in self._pk_names():
            if name not in {key.field for key in self.query.sort}:
                statement = statement.order_by(asc(getattr(self.model, name)))

        # A page past MAX_ROW_BOUND is empty either way
        offset = min(self.query.start_index, MAX_ROW_BOUND)
        limit = min(self.query.limit, MAX_ROW_BOUND)
        return statement.offset(offset).limit(limit)

    def count_statement(self, filtered: bool = True) -> Select:
        statement = select(func.count()).select_from(self.model)
        if filtered and self.conditions:
            statement = statement.where(*self.conditions)
        return statement


# ══════════════════════════════════════════════════════════════════════════
# Serialization
# ══════════════════════════════════════════════════════════════════════════

def to_document(
    instance: Any,
    fields: Optional[Sequence[str]] = None,
    populate: Optional[Populate] = None,
) -> Dict[str, Any]:
    """
    Serialize an ORM instance to a plain dict.

    Only the listed column fields are read (None = every public column), so
    attributes deferred by load_only() are never touched. When `populate`
    is given, the loaded relation is nested under its own name.
    """
    mapper = sa_inspect(type(instance))
    if fields is None:
        fields = public_columns(type(instance))
    document = {name: getattr(instance, name) for name in fields}

    if populate is not None:
        related = getattr(instance, populate.relation)
        nested_fields = None
        if populate.fields:
            target = mapper.relationships[populate.relation].mapper
            nested_fields = [c.key for c in target.primary_key] + list(populate.fields)
        if related is None:
            document[populate.relation] = None
        elif isinstance(related, (list, tuple)):
            document[populate.relation] = [to_document(item, nested_fields) for item in related]
        else:
            document[populate.relation] = to_document(related, nested_fields)
    return document


# ══════════════════════════════════════════════════════════════════════════
# Execution
# ══════════════════════════════════════════════════════════════════════════

async def advanced_results(
    db: AsyncSession,
    model,
    query: ListQuery,
    populate: Optional[Populate] = None,
    count_filtered: bool = True,
) -> PageResult:
    """
    Run a ListQuery against `model` and return one page.

    Raises:
        ValidationError: unknown filter/select/sort field or bad filter value
    """
    builder = QueryBuilder(model, query, populate)

    result = await db.execute(builder.build())
    rows = list(result.scalars().all())

    total_result = await db.execute(builder.count_statement(filtered=count_filtered))
    total = total_result.scalar_one()

    fields = builder.document_fields()
    relation = populate if builder.includes_relation else None
    data = [to_document(row, fields, relation) for row in rows]

    logger.debug(
        "advanced_results %s: %d filters, page=%d limit=%d → %d of %d",
        model.__name__,
        len(query.filters),
        query.page,
        query.limit,
        len(data),
        total,
    )

    return PageResult(
        count=len(data),
        pagination=build_pagination(query.page, query.limit, total),
        data=data,
        total=total,
    )
