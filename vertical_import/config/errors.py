from __future__ import annotations

"""Configuration error hierarchy.

Every error here is fatal and raised before the first row is processed.
"""

__all__ = [
    "ConfigError",
    "InvalidEntityNameError",
    "EntityResolutionError",
    "DumpPatternError",
]


class ConfigError(Exception):
    pass


class InvalidEntityNameError(ConfigError):
    """Entity type identifier is not a syntactically valid type name."""


class EntityResolutionError(ConfigError):
    """Entity type identifier is valid but names no known model."""


class DumpPatternError(ConfigError):
    """The field-line pattern built from the prefix does not compile."""
