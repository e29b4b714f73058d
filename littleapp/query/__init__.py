"""
Little Application: Advanced Results Query Pipeline
======================================================

What:  Filtering, field selection, sorting and offset pagination shared by
       every collection list endpoint.

Public API:
    parse_list_query()  raw query string pairs → ListQuery
    advanced_results()  ListQuery + model → PageResult
    Populate            the related collection joined into each record
"""

from littleapp.query.builder import (
    ListQuery,
    Populate,
    QueryBuilder,
    SortKey,
    advanced_results,
    build_pagination,
    parse_list_query,
    parse_positive_int,
    to_document,
)
from littleapp.query.filters import FilterClause, filters_from_mapping, parse_filter_params

__all__ = [
    "FilterClause",
    "ListQuery",
    "Populate",
    "QueryBuilder",
    "SortKey",
    "advanced_results",
    "build_pagination",
    "filters_from_mapping",
    "parse_filter_params",
    "parse_list_query",
    "parse_positive_int",
    "to_document",
]
