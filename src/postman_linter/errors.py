"""Exceptions raised at the boundary of the linter."""


class LinterError(Exception):
    """Base class for errors reported to the caller."""


class CollectionParseError(LinterError):
    """The collection document could not be read or decoded."""


class ConfigError(LinterError):
    """The rule-selection configuration is malformed."""
