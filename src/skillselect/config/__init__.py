"""
Configuration module for skillselect.

Uses pydantic-settings for environment variable loading.
"""

from skillselect.config.settings import (
    Settings,
    find_git_root,
    find_project_root,
)
from skillselect.config.sources import ConfigFileError

__all__ = ["ConfigFileError", "Settings", "find_git_root", "find_project_root"]
