"""Settings file handling for maplayers."""

from .loader import default_settings_path, load_settings
from .schema import DEFAULT_SETTINGS, SETTINGS_SCHEMA, merge_with_defaults, validate_settings

__all__ = [
    "DEFAULT_SETTINGS",
    "SETTINGS_SCHEMA",
    "default_settings_path",
    "load_settings",
    "merge_with_defaults",
    "validate_settings",
]
