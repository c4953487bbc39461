"""
Flattening rule shared by column discovery and row building.

Turns a nested record element into ordered (column_name, value) pairs.
Only leaf elements (no child elements) produce pairs:

- A leaf without text is an attribute bag: one pair per attribute, named
  "{leaf}_{attribute}". An empty leaf without attributes contributes nothing.
- A repeated named-variant leaf (e.g. <Data Name="X">) is named by its
  Name attribute: "{parent}_{X}".
- The single child of a positional-variant parent
  (e.g. <Substitution index="0"><Int32>) is named by the parent's index:
  "{parent}_index_{0}_{leaf}".
- Anything else is "{parent}_{leaf}". Repeated siblings without a marker
  produce the same name; the last one wins when building rows.

Every value has its line breaks replaced by single spaces.
"""

import re
from dataclasses import dataclass
from typing import Iterator, Optional

from lxml import etree

from ..config.constants import (
    COLUMN_NAME_SEPARATOR,
    INDEX_ATTRIBUTE,
    NAME_ATTRIBUTE,
    NAMED_VARIANT_TAG,
    POSITIONAL_VARIANT_TAG,
)
from ..config.settings import FlatteningSettings
from ..ingestion.exceptions import SchemaError
from ..ingestion.parsers.xml_parser import is_element, local_name

# CRLF, CR, LF, form feed, NEL, line separator, paragraph separator
_LINE_BREAKS = re.compile(r"\r\n|[\r\n\x0c\x85\u2028\u2029]")


def sanitize_value(value: Optional[str]) -> str:
    """Replace every line ending (including Unicode ones) with a single space."""
    if value is None:
        return ""
    return _LINE_BREAKS.sub(" ", value)


def has_usable_text(element: etree._Element) -> bool:
    """True when the element carries text other than whitespace."""
    return any(text.strip() for text in element.itertext())


def is_leaf(element: etree._Element) -> bool:
    return not any(is_element(child) for child in element)


def leaf_elements(record: etree._Element) -> Iterator[etree._Element]:
    """Yield every descendant element without child elements, in document order."""
    for element in record.iterdescendants():
        if is_element(element) and is_leaf(element):
            yield element


def _attribute(element: etree._Element, name: str) -> Optional[str]:
    """Look up an attribute by local name, ignoring its namespace."""
    value = element.get(name)
    if value is not None:
        return value
    for key, candidate in element.attrib.items():
        if etree.QName(key).localname == name:
            return candidate
    return None


@dataclass(frozen=True)
class FlatteningRule:
    """
    Configurable column naming rule.

    Attributes:
        named_variant_tag: Leaf tag whose repeated siblings are named by
            name_attribute (compared case-insensitively)
        name_attribute: Attribute read from each named-variant sibling
        positional_variant_tag: Parent tag whose single child is named by
            the parent's index_attribute (compared case-insensitively)
        index_attribute: Attribute read from the positional-variant parent
        separator: Joins the parts of a column name
    """

    named_variant_tag: str = NAMED_VARIANT_TAG
    name_attribute: str = NAME_ATTRIBUTE
    positional_variant_tag: str = POSITIONAL_VARIANT_TAG
    index_attribute: str = INDEX_ATTRIBUTE
    separator: str = COLUMN_NAME_SEPARATOR

    @classmethod
    def from_settings(cls, settings: FlatteningSettings) -> "FlatteningRule":
        return cls(
            named_variant_tag=settings.named_variant_tag,
            name_attribute=settings.name_attribute,
            positional_variant_tag=settings.positional_variant_tag,
            index_attribute=settings.index_attribute,
            separator=settings.name_separator,
        )

    def _join(self, *parts: str) -> str:
        return self.separator.join(parts)

    def _required_attribute(
        self, element: etree._Element, name: str, reason: str
    ) -> str:
        value = _attribute(element, name)
        if value is None:
            raise SchemaError(
                f"Missing '{name}' attribute required to {reason}",
                element_tag=local_name(element),
                attribute=name,
                line_number=element.sourceline,
            )
        return value

    def _value_column(self, leaf: etree._Element) -> str:
        parent = leaf.getparent()
        leaf_tag = local_name(leaf)
        parent_tag = local_name(parent)
        sibling_count = sum(
            1 for sibling in parent if is_element(sibling) and sibling.tag == leaf.tag
        )

        if (
            sibling_count > 1
            and leaf_tag.casefold() == self.named_variant_tag.casefold()
        ):
            name = self._required_attribute(
                leaf, self.name_attribute, "tell repeated siblings apart"
            )
            return self._join(parent_tag, name)

        if (
            sibling_count == 1
            and parent_tag.casefold() == self.positional_variant_tag.casefold()
        ):
            index = self._required_attribute(
                parent, self.index_attribute, "name its child value"
            )
            return self._join(parent_tag, "index", index, leaf_tag)

        return self._join(parent_tag, leaf_tag)

    def flatten_leaf(self, leaf: etree._Element) -> Iterator[tuple[str, str]]:
        """Yield the (column, value) pairs contributed by a single leaf."""
        if not has_usable_text(leaf):
            # Attribute bag; a bare empty element contributes nothing
            leaf_tag = local_name(leaf)
            for key, value in leaf.attrib.items():
                yield self._join(leaf_tag, etree.QName(key).localname), sanitize_value(value)
            return

        yield self._value_column(leaf), sanitize_value("".join(leaf.itertext()))

    def flatten(self, record: etree._Element) -> Iterator[tuple[str, str]]:
        """
        Yield (column, value) pairs for a record in document order.

        Raises:
            SchemaError: If a disambiguating attribute is missing
        """
        for leaf in leaf_elements(record):
            yield from self.flatten_leaf(leaf)

    def column_names(self, record: etree._Element) -> Iterator[str]:
        """Yield the column names a record contributes, duplicates included."""
        for column, _ in self.flatten(record):
            yield column


DEFAULT_RULE = FlatteningRule()
