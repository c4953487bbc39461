"""
Flatten XML event logs into tabular CSV or Excel output.

Every top-level record becomes one row; the column set is the ordered
union of the flattened field names of all records.
"""

__version__ = "0.1.0"
