"""Configuration error definitions."""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """A rollcall setting is present but cannot be used as given."""


class MissingConfigurationError(ConfigurationError):
    """A required setting, such as ``ROLLCALL_SOURCES_BASE_URL``, is unset or blank."""
