"""
Shared constants for skillselect.

This module provides a single source of truth for default values
that are used across multiple modules.
"""

# Skill documents
DEFAULT_DOCUMENT_NAME = "SKILL.md"
"""File name every skill directory must contain."""

SKILL_BODY_SOFT_LIMIT = 500
"""Recommended maximum number of lines in a skill body."""

# Environment variables
ENV_SKILL_PATH = "SKILLSELECT_SKILL_PATH"
"""Colon-separated list of extra skill search roots."""

ENV_CONFIG_DIR = "SKILLSELECT_CONFIG_DIR"
"""Override for the user config directory (default: ~/.config/skillselect)."""

ENV_ENV_FILE = "SKILLSELECT_ENV_FILE"
"""Explicit .env file to load settings from."""

# Directory names
APP_DIR_NAME = "skillselect"
"""Directory name under ~/.config for user-level files."""

PROJECT_DIR_NAME = ".skillselect"
"""Directory name under the project root for project-level files."""

# Selection defaults
DEFAULT_MATCH_MODE = "substring"
"""Default keyword matching mode ("substring" or "word")."""

MIN_EXTRACTED_KEYWORD_LENGTH = 3
"""Shortest word kept when extracting keywords from a description."""
