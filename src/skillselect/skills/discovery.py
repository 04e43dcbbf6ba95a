"""
Skill discovery from standard locations.

Skills are discovered from (in priority order):
1. Bundled builtin skills (optional)
2. ~/.config/skillselect/skills/ - User skills (global)
3. $SKILLSELECT_SKILL_PATH - Custom paths (colon-separated)
4. Project .skillselect/skills/ - Project-local skills

Later sources have higher priority (project overrides global).
Each immediate subdirectory of a search root is one skill.
"""

from __future__ import annotations

import dataclasses as _dataclasses
import logging as _logging
import os as _os
import pathlib as _pathlib
import typing as _typing

import skillselect.builtin_skills as builtin_skills
import skillselect.constants as constants
import skillselect.skills.skill as skill_module

_logger = _logging.getLogger(__name__)


def get_builtin_skills_path() -> _pathlib.Path:
    """Get the path to the bundled skills directory."""
    return builtin_skills.get_builtin_skills_path()


def get_global_skills_path() -> _pathlib.Path:
    """Get the path to global skills directory."""
    config_dir = _os.environ.get(constants.ENV_CONFIG_DIR)
    if config_dir:
        return _pathlib.Path(config_dir).expanduser() / "skills"
    return _pathlib.Path.home() / ".config" / constants.APP_DIR_NAME / "skills"


def get_project_skills_path(project_root: _pathlib.Path) -> _pathlib.Path:
    """Get the path to project-local skills directory."""
    return project_root / constants.PROJECT_DIR_NAME / "skills"


def get_skill_search_paths(
    project_root: _pathlib.Path | None = None,
    *,
    include_builtin: bool = True,
) -> list[_pathlib.Path]:
    """
    Get all skill search paths in priority order.

    Args:
        project_root: Project root directory. If None, the project-local
                      path is left out.
        include_builtin: Whether to include the bundled skills.

    Returns:
        List of paths to search (lowest to highest priority).
    """
    paths: list[_pathlib.Path] = []

    if include_builtin:
        paths.append(get_builtin_skills_path())

    paths.append(get_global_skills_path())

    env_path = _os.environ.get(constants.ENV_SKILL_PATH, "")
    if env_path:
        for p in env_path.split(":"):
            p = p.strip()
            if p:
                paths.append(_pathlib.Path(p).expanduser().resolve())

    if project_root is not None:
        paths.append(get_project_skills_path(project_root))

    return paths


@_dataclasses.dataclass(frozen=True)
class SkippedSkill:
    """A skill directory that could not be turned into a registry entry."""

    path: _pathlib.Path
    """Skill directory (or document) that was skipped."""

    error: Exception
    """Why it was skipped."""

    @property
    def reason(self) -> str:
        """Human-readable reason."""
        return str(self.error)

    @property
    def error_type(self) -> str:
        """Exception class name, for reports."""
        return type(self.error).__name__

    def to_dict(self) -> dict[str, _typing.Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": str(self.path),
            "error_type": self.error_type,
            "reason": self.reason,
        }


@_dataclasses.dataclass
class DiscoveryResult:
    """Skills found during discovery plus everything that was skipped."""

    skills: list[skill_module.Skill] = _dataclasses.field(default_factory=list)
    """Skills in declaration order. Same-root duplicates are kept for validation."""

    skipped: list[SkippedSkill] = _dataclasses.field(default_factory=list)
    """Directories that failed to load."""


class SkillDiscovery:
    """
    Discovers skills from standard locations.

    Later sources (project-local) have higher priority than earlier
    sources (global): a skill with the same name from a later root
    replaces the earlier one. Duplicate names within a single root are
    left in place so that registry validation can reject them.
    """

    def __init__(
        self,
        project_root: _pathlib.Path | None = None,
        search_paths: _typing.Sequence[_pathlib.Path] | None = None,
        *,
        include_builtin: bool = True,
        document_name: str = constants.DEFAULT_DOCUMENT_NAME,
    ) -> None:
        """
        Initialize skill discovery.

        Args:
            project_root: Project root for local skill discovery.
            search_paths: Custom search paths (overrides default locations).
            include_builtin: Whether default locations include bundled skills.
            document_name: File each skill directory must contain.
        """
        self._project_root = project_root
        self._search_paths = list(search_paths) if search_paths is not None else None
        self._include_builtin = include_builtin
        self._document_name = document_name

    @property
    def document_name(self) -> str:
        """File each skill directory must contain."""
        return self._document_name

    def get_search_paths(self) -> list[_pathlib.Path]:
        """Get the search paths in use."""
        if self._search_paths is not None:
            return list(self._search_paths)
        return get_skill_search_paths(
            self._project_root,
            include_builtin=self._include_builtin,
        )

    def _get_source_for_path(self, search_path: _pathlib.Path) -> str:
        """Determine the source type for a search path."""
        if search_path == get_builtin_skills_path():
            return "builtin"
        if search_path == get_global_skills_path():
            return "global"
        if self._project_root and search_path == get_project_skills_path(
            self._project_root
        ):
            return "project"
        return "custom"

    def _list_skill_dirs(self, search_path: _pathlib.Path) -> list[_pathlib.Path]:
        """Immediate subdirectories of a root, skipping dot-directories and __pycache__."""
        return [
            entry
            for entry in sorted(search_path.iterdir())
            if entry.is_dir()
            and not entry.name.startswith(".")
            and entry.name != "__pycache__"
        ]

    def scan(
        self, search_path: _pathlib.Path
    ) -> tuple[list[skill_module.Skill], list[SkippedSkill]]:
        """
        Load every skill directly under one search root.

        Args:
            search_path: Directory whose subdirectories are skills.

        Returns:
            Tuple of (skills in directory-name order, skipped entries).
        """
        skills: list[skill_module.Skill] = []
        skipped: list[SkippedSkill] = []

        if not search_path.is_dir():
            _logger.debug("Skill search path not found: %s", search_path)
            return skills, skipped

        source = self._get_source_for_path(search_path)

        try:
            skill_dirs = self._list_skill_dirs(search_path)
        except OSError as e:
            _logger.warning("Cannot read skill search path %s: %s", search_path, e)
            skipped.append(SkippedSkill(path=search_path, error=e))
            return skills, skipped

        for skill_dir in skill_dirs:
            try:
                skill = skill_module.load_skill(
                    skill_dir,
                    source=source,
                    document_name=self._document_name,
                )
            except (OSError, ValueError) as e:
                _logger.warning("Skipping skill directory %s: %s", skill_dir, e)
                skipped.append(SkippedSkill(path=skill_dir, error=e))
                continue

            _logger.debug("Loaded skill %s from %s", skill.name, skill_dir)
            skills.append(skill)

        return skills, skipped

    def discover(self) -> DiscoveryResult:
        """
        Discover all skills from search paths.

        Later roots override earlier roots by skill name; the overriding
        skill keeps the position of the one it replaces.

        Returns:
            DiscoveryResult with skills in declaration order.
        """
        by_name: dict[str, list[skill_module.Skill]] = {}
        result = DiscoveryResult()

        for search_path in self.get_search_paths():
            root_skills, root_skipped = self.scan(search_path)
            result.skipped.extend(root_skipped)

            root_groups: dict[str, list[skill_module.Skill]] = {}
            for skill in root_skills:
                root_groups.setdefault(skill.name, []).append(skill)

            for name, group in root_groups.items():
                if name in by_name:
                    _logger.debug(
                        "Skill %s from %s overrides %s",
                        name,
                        search_path,
                        by_name[name][0].path,
                    )
                by_name[name] = group

        for group in by_name.values():
            result.skills.extend(group)

        return result

    def discover_all(
        self,
        *,
        include_errors: bool = False,
    ) -> _typing.Iterator[
        skill_module.Skill | tuple[_pathlib.Path, Exception]
    ]:
        """
        Iterate over every skill in every root, without overriding.

        Args:
            include_errors: If True, yield (path, exception) for failures.

        Yields:
            Skill instances, or (path, exception) tuples if include_errors.
        """
        for search_path in self.get_search_paths():
            skills, skipped = self.scan(search_path)
            yield from skills
            if include_errors:
                for entry in skipped:
                    yield (entry.path, entry.error)
