"""
Storage Layer.

This package handles all data persistence: the download registry database
and the INI configuration file.
"""

from .config_manager import ConfigManager
from .registry import DownloadRegistry

__all__ = ["ConfigManager", "DownloadRegistry"]
