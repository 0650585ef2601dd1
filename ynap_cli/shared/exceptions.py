"""Project-wide custom exceptions."""

from __future__ import annotations


class YnapError(Exception):
    """Base exception for the ynap CLI suite."""


class ConfigurationError(YnapError):
    """Raised when configuration, bank descriptors or rule files are invalid."""


class ConversionError(YnapError):
    """Raised when bank CSV input cannot be converted into records."""


class MappingError(ConversionError):
    """Raised when a row does not fit the bank's column mapping."""


class DateParseError(MappingError):
    """Raised when a date cell does not match the declared date format."""


class TemplateError(YnapError):
    """Raised when a replacement template cannot be expanded."""
