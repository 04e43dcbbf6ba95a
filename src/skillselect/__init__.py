"""
skillselect - skill activation for coding agents

Loads a tree of SKILL.md documents into an immutable registry and picks
the skills whose trigger keywords match a free-text request.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("skillselect")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "skillselect Contributors"

from skillselect.config import Settings  # noqa: E402
from skillselect.skills import SkillRegistry, select  # noqa: E402

__all__ = ["__version__", "__version_info__", "Settings", "SkillRegistry", "select"]
