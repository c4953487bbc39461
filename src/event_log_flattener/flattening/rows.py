"""
Row building: one flat column -> value mapping per record.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from lxml import etree

from .rule import DEFAULT_RULE, FlatteningRule

logger = logging.getLogger(__name__)


@dataclass
class Row:
    """Flattened values of a single record, keyed by column name."""

    values: dict[str, str] = field(default_factory=dict)

    def get(self, column: str) -> str:
        """Value for a column, empty when the record does not have it."""
        return self.values.get(column, "")

    def values_for(self, columns: Iterable[str]) -> list[str]:
        """Values in column order."""
        return [self.get(column) for column in columns]


def flatten_row(
    record: etree._Element,
    rule: FlatteningRule = DEFAULT_RULE,
) -> Row:
    """
    Flatten one record into a Row.

    When several pairs share a column name the later one overwrites the
    earlier one.

    Raises:
        SchemaError: If a disambiguating attribute is missing
    """
    values: dict[str, str] = {}
    for column, value in rule.flatten(record):
        if column in values:
            # TODO: reject unmarked repeated siblings with a SchemaError
            logger.debug(f"Column {column!r} repeated in record, keeping last value")
        values[column] = value
    return Row(values=values)


def flatten_rows(
    records: Iterable[etree._Element],
    rule: FlatteningRule = DEFAULT_RULE,
) -> list[Row]:
    """Flatten every record independently, preserving record order."""
    return [flatten_row(record, rule) for record in records]
