"""Configuration module."""

from .constants import (
    DEFAULT_RECORD_TAGS,
    HEADER_SEPARATOR,
    NAMED_VARIANT_TAG,
    POSITIONAL_VARIANT_TAG,
    ROW_JOIN_SEPARATOR,
    SUPPORTED_OUTPUT_FORMATS,
)
from .loader import load_config_file
from .settings import (
    FlatteningSettings,
    OutputSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Defaults
    "DEFAULT_RECORD_TAGS",
    "NAMED_VARIANT_TAG",
    "POSITIONAL_VARIANT_TAG",
    "HEADER_SEPARATOR",
    "ROW_JOIN_SEPARATOR",
    "SUPPORTED_OUTPUT_FORMATS",
    # Settings
    "Settings",
    "FlatteningSettings",
    "OutputSettings",
    "get_settings",
    "clear_settings_cache",
    # Config loading
    "load_config_file",
]
