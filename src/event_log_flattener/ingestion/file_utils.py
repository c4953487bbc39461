"""
Shared file utilities for the ingestion module.

Provides common file operations used by the parser and the validators.
"""

import gzip
from pathlib import Path
from typing import IO, Union

GZIP_MAGIC = b"\x1f\x8b"


def is_gzip_file(file_path: Union[str, Path]) -> bool:
    """Check for a .gz extension or gzip magic bytes."""
    path = Path(file_path)
    if path.suffix.lower() == ".gz":
        return True
    with open(path, "rb") as f:
        return f.read(2) == GZIP_MAGIC


def open_file_auto_decompress(file_path: Union[str, Path]) -> IO[bytes]:
    """
    Open a file in binary mode, automatically detecting gzip compression.

    Binary mode is used so the XML parser can honour the document's own
    encoding declaration.

    Gzip detection is performed by:
    1. Checking for .gz file extension
    2. Checking for gzip magic bytes (0x1f 0x8b) even without .gz extension

    Args:
        file_path: Path to the file

    Returns:
        Open file handle (binary mode)

    Raises:
        FileNotFoundError: If file doesn't exist
        PermissionError: If file cannot be read
        gzip.BadGzipFile: If file has .gz extension but is not valid gzip
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    if is_gzip_file(path):
        return gzip.open(path, "rb")

    return open(path, "rb")
