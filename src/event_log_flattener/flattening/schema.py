"""
Column discovery across all records.
"""

import logging
from typing import Iterable

from lxml import etree

from .rule import DEFAULT_RULE, FlatteningRule

logger = logging.getLogger(__name__)


def merge_columns(column_lists: Iterable[Iterable[str]]) -> list[str]:
    """Union column name sequences, keeping first-seen order."""
    seen: set[str] = set()
    columns: list[str] = []
    for names in column_lists:
        for name in names:
            if name not in seen:
                seen.add(name)
                columns.append(name)
    return columns


def discover_columns(
    records: Iterable[etree._Element],
    rule: FlatteningRule = DEFAULT_RULE,
) -> list[str]:
    """
    Build the ordered, de-duplicated column list over every record.

    A column's position is fixed by its first occurrence across records.

    Raises:
        SchemaError: If a disambiguating attribute is missing
    """
    columns = merge_columns(rule.column_names(record) for record in records)
    logger.debug(f"Discovered {len(columns)} columns")
    return columns
