"""
Default values for record detection, column naming and output framing.
"""

# =============================================================================
# Record Detection
# =============================================================================

# Tag names accepted for the direct children of the document root
# (matched case-insensitively)
DEFAULT_RECORD_TAGS = ("Event",)

# =============================================================================
# Column Naming
# =============================================================================

# Repeated siblings with this tag are told apart by their NAME_ATTRIBUTE,
# e.g. <EventData><Data Name="SubjectUserSid">...</Data>...</EventData>
NAMED_VARIANT_TAG = "Data"
NAME_ATTRIBUTE = "Name"

# A parent with this tag is told apart by its INDEX_ATTRIBUTE,
# e.g. <Substitution index="0"><Int32>5</Int32></Substitution>
POSITIONAL_VARIANT_TAG = "Substitution"
INDEX_ATTRIBUTE = "index"

# Joins parent tag, attribute names and child tags into a column name
COLUMN_NAME_SEPARATOR = "_"

# =============================================================================
# Output Framing
# =============================================================================

# Header line separator
HEADER_SEPARATOR = ";"

# Each data row is one quoted field whose values are joined by this token
ROW_JOIN_SEPARATOR = '";"'
ROW_QUOTE = '"'

OUTPUT_ENCODING = "utf-8"

SUPPORTED_OUTPUT_FORMATS = ("csv", "xlsx")

# Excel limits sheet names to 31 characters
MAX_SHEET_NAME_LENGTH = 31

# Worksheet size limits (the header takes one row)
MAX_SHEET_ROWS = 1_048_576
MAX_SHEET_COLUMNS = 16_384

# =============================================================================
# Parsing
# =============================================================================

# Bytes fed to the incremental XML parser between cancellation checks
PARSE_CHUNK_SIZE = 64 * 1024
