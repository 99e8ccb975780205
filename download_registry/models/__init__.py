"""
Data Models Layer.

This package contains the data structures used throughout the application:
the download record with its state enum, and the pydantic configuration model.
"""

from .config import RegistryConfig
from .record import DownloadRecord, DownloadState

__all__ = ["DownloadRecord", "DownloadState", "RegistryConfig"]
