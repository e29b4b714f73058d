# littleapp/query/operators.py

# Maps filter operators from API query params to SQLAlchemy column methods.
# For example, `?average_cost[lte]=10000` uses the 'lte' key to call
# `Column.__le__(10000)`; a bare `?housing=true` is an 'eq' filter.
OPERATOR_MAP = {
    'eq': '__eq__',      # Equal
    'gt': '__gt__',      # Greater Than
    'gte': '__ge__',     # Greater Than or Equal
    'lt': '__lt__',      # Less Than
    'lte': '__le__',     # Less Than or Equal
    'in': 'in_',         # In a list of values
}

# Operators that expect a list of values (comma-separated and/or repeated).
LIST_OPERATORS = {'in'}

# Query params that drive the pipeline itself and are never field filters.
RESERVED_PARAMS = ('select', 'sort', 'page', 'limit')

# Sort applied when the request has no `sort` param: newest first.
DEFAULT_SORT = '-created_at'
