"""
Flattening of nested records into tabular rows.

Column discovery and row building share one FlatteningRule, so every
column a row can contain is in the discovered column list.

Usage:
    from event_log_flattener.flattening import FlatteningRule, discover_columns, flatten_rows

    rule = FlatteningRule(named_variant_tag='Data')
    columns = discover_columns(records, rule)
    rows = flatten_rows(records, rule)
"""

from .rows import Row, flatten_row, flatten_rows
from .rule import (
    DEFAULT_RULE,
    FlatteningRule,
    has_usable_text,
    is_leaf,
    leaf_elements,
    sanitize_value,
)
from .schema import discover_columns, merge_columns

__all__ = [
    # Rule
    "DEFAULT_RULE",
    "FlatteningRule",
    "sanitize_value",
    "has_usable_text",
    "is_leaf",
    "leaf_elements",
    # Discovery
    "discover_columns",
    "merge_columns",
    # Rows
    "Row",
    "flatten_row",
    "flatten_rows",
]
