"""
Little Application: Typed Filter Clauses
===========================================

What:  Turns the field filters of a list request into typed FilterClause
       values and compiles them into SQLAlchemy WHERE expressions.
How:   Query string keys use bracket syntax for operators:

           ?housing=true                → FilterClause(housing, eq, "true")
           ?average_cost[lte]=10000     → FilterClause(average_cost, lte, "10000")
           ?minimum_skill[in]=beginner,advanced
                                        → FilterClause(minimum_skill, in, [...])

       The same clauses can be built from a nested mapping, e.g.
       {"tuition": {"gt": 5}}. Each raw value is coerced to the Python type
       of the target column before it reaches the database, so nothing is
       ever spliced into query text.

Errors:
    Every malformed input (unknown field, unsupported operator, bad key
    syntax, duplicated scalar filter, uncoercible value) raises
    ValidationError → HTTP 400.
"""

import re
import uuid
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Literal, Mapping, Tuple

from pydantic import BaseModel, Field, model_validator
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql.elements import ColumnElement

from littleapp.exceptions import ValidationError
from littleapp.query.operators import LIST_OPERATORS, OPERATOR_MAP, RESERVED_PARAMS

FilterOp = Literal["eq", "gt", "gte", "lt", "lte", "in"]

_FILTER_KEY = re.compile(r"^(?P<field>[A-Za-z_][A-Za-z0-9_]*)(?:\[(?P<op>[^\[\]]*)\])?$")

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


class FilterClause(BaseModel):
    """One field condition; `op` is the tag, `value` is a list only for `in`."""

    field: str = Field(min_length=1)
    op: FilterOp = "eq"
    value: Any

    @model_validator(mode="after")
    def _check_value_shape(self) -> "FilterClause":
        if self.op in LIST_OPERATORS and not isinstance(self.value, list):
            raise ValueError(f"Operator '{self.op}' requires a list of values")
        if self.op not in LIST_OPERATORS and isinstance(self.value, list):
            raise ValueError(f"Operator '{self.op}' takes a single value")
        return self


# ══════════════════════════════════════════════════════════════════════════
# Parsing
# ══════════════════════════════════════════════════════════════════════════

def parse_filter_params(items: Iterable[Tuple[str, str]]) -> List[FilterClause]:
    """
    Build filter clauses from raw query string pairs.

    Reserved params (select, sort, page, limit) are skipped. Repeated `in`
    params are merged; any other repeated field/operator pair is rejected.
    """
    triples = []
    for key, raw in items:
        if key in RESERVED_PARAMS:
            continue
        match = _FILTER_KEY.match(key)
        if match is None:
            raise ValidationError(
                message=f"Malformed filter parameter '{key}'",
                field=key,
            )
        op = match.group("op")
        triples.append((match.group("field"), "eq" if op is None else op.lower(), raw))
    return _build_clauses(triples)


def filters_from_mapping(mapping: Mapping[str, Any]) -> List[FilterClause]:
    """
    Build filter clauses from a nested mapping.

    {"tuition": {"gt": 5}, "housing": True} → tuition > 5 AND housing = True
    """
    triples = []
    for field, criteria in mapping.items():
        if field in RESERVED_PARAMS:
            continue
        if isinstance(criteria, Mapping):
            for op, raw in criteria.items():
                triples.append((field, str(op).lower(), raw))
        else:
            triples.append((field, "eq", criteria))
    return _build_clauses(triples)


def _build_clauses(triples: Iterable[Tuple[str, str, Any]]) -> List[FilterClause]:
    grouped: Dict[Tuple[str, str], List[Any]] = {}
    for field, op, raw in triples:
        if op not in OPERATOR_MAP:
            raise ValidationError(
                message=f"Unsupported filter operator '{op}' for field '{field}'",
                field=field,
                context={"operator": op, "allowed": sorted(OPERATOR_MAP)},
            )
        grouped.setdefault((field, op), []).append(raw)

    clauses = []
    for (field, op), values in grouped.items():
        if op in LIST_OPERATORS:
            members = []
            for raw in values:
                members.extend(_split_list_value(raw))
            if not members:
                raise ValidationError(
                    message=f"Filter '{field}[{op}]' needs at least one value",
                    field=field,
                )
            clauses.append(FilterClause(field=field, op=op, value=members))
            continue

        if len(values) > 1:
            raise ValidationError(
                message=f"Filter '{field}' with operator '{op}' was given more than once",
                field=field,
            )
        value = values[0]
        if isinstance(value, (list, tuple)):
            raise ValidationError(
                message=f"Operator '{op}' for field '{field}' takes a single value",
                field=field,
            )
        clauses.append(FilterClause(field=field, op=op, value=value))
    return clauses


def _split_list_value(raw: Any) -> List[Any]:
    if isinstance(raw, (list, tuple)):
        return [item for item in raw if item is not None and str(item).strip() != ""]
    if isinstance(raw, str):
        return [part.strip() for part in raw.split(",") if part.strip()]
    return [raw]


# ══════════════════════════════════════════════════════════════════════════
# Compilation
# ══════════════════════════════════════════════════════════════════════════

def public_columns(model) -> List[str]:
    """Mapped column names minus the model's PRIVATE_FIELDS (e.g. password hashes)."""
    private = getattr(model, "PRIVATE_FIELDS", frozenset())
    return [attr.key for attr in sa_inspect(model).column_attrs if attr.key not in private]


def resolve_column(model, field: str) -> InstrumentedAttribute:
    """Return the public column attribute `model.<field>` or raise ValidationError."""
    allowed = public_columns(model)
    if field not in allowed:
        raise ValidationError(
            message=f"Unknown field '{field}'",
            field=field,
            context={"allowed": sorted(allowed)},
        )
    return getattr(model, field)


def compile_clause(model, clause: FilterClause) -> ColumnElement:
    """Compile one FilterClause into a SQLAlchemy boolean expression."""
    column = resolve_column(model, clause.field)
    method = getattr(column, OPERATOR_MAP[clause.op])
    if clause.op in LIST_OPERATORS:
        return method([coerce_value(column, item) for item in clause.value])
    return method(coerce_value(column, clause.value))


def compile_clauses(model, clauses: Iterable[FilterClause]) -> List[ColumnElement]:
    return [compile_clause(model, clause) for clause in clauses]


# ══════════════════════════════════════════════════════════════════════════
# Value coercion
# ══════════════════════════════════════════════════════════════════════════

def _bad_value(field: str, kind: str, raw: Any) -> ValidationError:
    return ValidationError(
        message=f"Invalid {kind} value '{raw}' for field '{field}'",
        field=field,
        context={"expected": kind},
    )


def _column_python_type(column):
    try:
        return column.property.columns[0].type.python_type
    except NotImplementedError:
        return None


def coerce_value(column: InstrumentedAttribute, raw: Any) -> Any:
    """Convert a raw filter value (usually a query string) to the column's type."""
    field = column.key
    python_type = _column_python_type(column)
    if python_type is None or raw is None:
        return raw

    if python_type is bool:
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in _TRUE_VALUES:
            return True
        if text in _FALSE_VALUES:
            return False
        raise _bad_value(field, "boolean", raw)

    if python_type in (int, float):
        if isinstance(raw, bool):
            raise _bad_value(field, "number", raw)
        if isinstance(raw, (int, float)):
            return python_type(raw)
        try:
            return python_type(str(raw).strip())
        except ValueError:
            raise _bad_value(field, "number", raw)

    if python_type is uuid.UUID:
        if isinstance(raw, uuid.UUID):
            return raw
        try:
            return uuid.UUID(str(raw).strip())
        except ValueError:
            raise _bad_value(field, "UUID", raw)

    if python_type is datetime:
        if isinstance(raw, datetime):
            parsed = raw
        elif isinstance(raw, date):
            parsed = datetime.combine(raw, datetime.min.time())
        else:
            try:
                parsed = datetime.fromisoformat(str(raw).strip().replace("Z", "+00:00"))
            except ValueError:
                raise _bad_value(field, "datetime", raw)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    if python_type is str:
        return str(raw)

    return raw
