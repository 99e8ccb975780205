"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class DownloadRegistryError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(DownloadRegistryError):
    """Raised for issues related to configuration loading or validation."""


class RecordDecodeError(DownloadRegistryError):
    """Raised when a stored value cannot be decoded into a download record."""


class RegistryUnavailableError(DownloadRegistryError):
    """Raised when the registry database cannot be opened."""
