"""Exceptions raised by ranchwatch."""


class RanchwatchError(Exception):
    """Base class for ranchwatch errors."""


class ConfigurationError(RanchwatchError, ValueError):
    """Raised when an explicit configuration value is invalid."""
