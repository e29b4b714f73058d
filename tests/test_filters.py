"""
Little Application: Filter Clause Unit Tests
===============================================

What:  Tests for turning query string filters into typed clauses and
       compiling them into SQLAlchemy expressions.
How:   Pure functions; no database. Compiled expressions are checked by
       their operator and bound value.
"""

import operator
import uuid
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.sql import operators as sql_operators

from littleapp.exceptions import ValidationError
from littleapp.models import Course, Post, User
from littleapp.query.filters import (
    FilterClause,
    coerce_value,
    compile_clause,
    filters_from_mapping,
    parse_filter_params,
    public_columns,
    resolve_column,
)


class TestParseFilterParams:

    def test_plain_equality(self):
        clauses = parse_filter_params([("housing", "true")])
        assert clauses == [FilterClause(field="housing", op="eq", value="true")]

    def test_bracket_operators(self):
        clauses = parse_filter_params([
            ("average_cost[gt]", "5000"),
            ("average_cost[lte]", "12000"),
        ])
        assert [(c.field, c.op, c.value) for c in clauses] == [
            ("average_cost", "gt", "5000"),
            ("average_cost", "lte", "12000"),
        ]

    def test_operator_is_case_insensitive(self):
        clauses = parse_filter_params([("tuition[GTE]", "100")])
        assert clauses[0].op == "gte"

    def test_reserved_params_are_not_filters(self):
        clauses = parse_filter_params([
            ("select", "name"),
            ("sort", "-name"),
            ("page", "2"),
            ("limit", "5"),
            ("housing", "true"),
        ])
        assert [c.field for c in clauses] == ["housing"]

    def test_in_splits_commas(self):
        clauses = parse_filter_params([("minimum_skill[in]", "beginner, advanced")])
        assert clauses[0].value == ["beginner", "advanced"]

    def test_in_merges_repeated_params(self):
        clauses = parse_filter_params([
            ("minimum_skill[in]", "beginner"),
            ("minimum_skill[in]", "intermediate,advanced"),
        ])
        assert len(clauses) == 1
        assert clauses[0].value == ["beginner", "intermediate", "advanced"]

    def test_in_without_values_rejected(self):
        with pytest.raises(ValidationError, match="at least one value"):
            parse_filter_params([("minimum_skill[in]", " , ")])

    def test_unsupported_operator_rejected(self):
        with pytest.raises(ValidationError, match="Unsupported filter operator 'ne'"):
            parse_filter_params([("average_cost[ne]", "5")])

    def test_malformed_key_rejected(self):
        with pytest.raises(ValidationError, match="Malformed filter parameter"):
            parse_filter_params([("average_cost[gt", "5")])

    def test_repeated_scalar_filter_rejected(self):
        with pytest.raises(ValidationError, match="more than once"):
            parse_filter_params([("housing", "true"), ("housing", "false")])


class TestFiltersFromMapping:

    def test_nested_operator_mapping(self):
        clauses = filters_from_mapping({"age": {"gt": 5}})
        assert clauses == [FilterClause(field="age", op="gt", value=5)]

    def test_in_mapping_takes_list(self):
        clauses = filters_from_mapping({"minimum_skill": {"in": ["beginner", "advanced"]}})
        assert clauses[0].op == "in"
        assert clauses[0].value == ["beginner", "advanced"]

    def test_scalar_mapping_is_equality(self):
        clauses = filters_from_mapping({"housing": True, "page": 2})
        assert clauses == [FilterClause(field="housing", op="eq", value=True)]


class TestFilterClauseShape:

    def test_in_requires_list(self):
        with pytest.raises(PydanticValidationError):
            FilterClause(field="minimum_skill", op="in", value="beginner")

    def test_scalar_operator_rejects_list(self):
        with pytest.raises(PydanticValidationError):
            FilterClause(field="tuition", op="gt", value=[1, 2])


class TestCompileClause:

    @pytest.mark.parametrize("op, expected", [
        ("eq", operator.eq),
        ("gt", operator.gt),
        ("gte", operator.ge),
        ("lt", operator.lt),
        ("lte", operator.le),
    ])
    def test_comparison_operators(self, op, expected):
        expression = compile_clause(Course, FilterClause(field="tuition", op=op, value="5"))
        assert expression.operator is expected
        assert expression.left.key == "tuition"
        assert expression.right.value == 5.0

    def test_in_operator(self):
        expression = compile_clause(
            Course, FilterClause(field="minimum_skill", op="in", value=["beginner", "advanced"])
        )
        assert expression.operator is sql_operators.in_op
        assert expression.right.value == ["beginner", "advanced"]

    def test_nested_mapping_compiles_to_greater_than(self):
        clause = filters_from_mapping({"tuition": {"gt": "5"}})[0]
        expression = compile_clause(Course, clause)
        assert expression.operator is operator.gt
        assert expression.right.value == 5.0

    def test_unknown_field_rejected(self):
        with pytest.raises(ValidationError, match="Unknown field 'bogus'"):
            compile_clause(Post, FilterClause(field="bogus", value="1"))

    def test_relationship_is_not_a_filterable_field(self):
        with pytest.raises(ValidationError):
            resolve_column(Post, "courses")

    def test_private_column_is_not_filterable(self):
        with pytest.raises(ValidationError, match="Unknown field 'password_hash'") as exc_info:
            resolve_column(User, "password_hash")
        assert "password_hash" not in exc_info.value.context["allowed"]

    def test_public_columns_skip_private_fields(self):
        assert "password_hash" not in public_columns(User)
        assert "email" in public_columns(User)


class TestCoerceValue:

    @pytest.mark.parametrize("raw, expected", [
        ("true", True), ("1", True), ("YES", True),
        ("false", False), ("0", False), ("off", False),
    ])
    def test_boolean(self, raw, expected):
        assert coerce_value(Post.housing, raw) is expected

    def test_boolean_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid boolean value"):
            coerce_value(Post.housing, "maybe")

    def test_number(self):
        assert coerce_value(Post.average_cost, " 10000 ") == 10000.0

    def test_number_rejects_text(self):
        with pytest.raises(ValidationError, match="Invalid number value 'abc'"):
            coerce_value(Post.average_cost, "abc")

    def test_uuid(self):
        value = uuid.uuid4()
        assert coerce_value(Course.post_id, str(value)) == value

    def test_uuid_rejects_garbage(self):
        with pytest.raises(ValidationError, match="Invalid UUID value"):
            coerce_value(Course.post_id, "5d725a1b7b292f5f8ceff788")

    def test_datetime_is_made_aware(self):
        parsed = coerce_value(Post.created_at, "2024-01-02")
        assert parsed == datetime(2024, 1, 2, tzinfo=timezone.utc)

    def test_datetime_accepts_z_suffix(self):
        parsed = coerce_value(Post.created_at, "2024-01-02T10:30:00Z")
        assert parsed == datetime(2024, 1, 2, 10, 30, tzinfo=timezone.utc)

    def test_string_passthrough(self):
        assert coerce_value(Post.name, 42) == "42"
